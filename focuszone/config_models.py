from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from focuszone import ARGS_DIR
from focuszone.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# TimerConfig (args/timer.yaml)
# =============================================================================

class TimerSettingsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    completion_grace_seconds: float = Field(default=2.0, ge=0)
    default_focus_mode: str = Field(default="deepWork")


class TimerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    timer: TimerSettingsConfig = Field(default_factory=TimerSettingsConfig)


# =============================================================================
# InsightsConfig (args/insights.yaml)
# =============================================================================

class TimeOfDayThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")
    peak_margin: float = Field(default=0.15, ge=0.0, le=1.0)
    dip_margin: float = Field(default=0.20, ge=0.0, le=1.0)
    peak_weight: float = Field(default=100.0, ge=0)
    dip_weight: float = Field(default=80.0, ge=0)


class DurationThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_completion_rate: float = Field(default=0.8, ge=0.0, le=1.0)
    min_samples: int = Field(default=5, ge=1)
    weight: float = Field(default=90.0, ge=0)


class BreakThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_minutes: int = Field(default=30, ge=1)
    min_samples: int = Field(default=3, ge=1)
    min_benefit: float = Field(default=0.15, ge=0.0, le=1.0)
    weight: float = Field(default=85.0, ge=0)
    break_task_type: str = Field(default="relax")


class CompletionThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_days: int = Field(default=7, ge=1)
    min_samples: int = Field(default=5, ge=1)
    weekly_goal: float = Field(default=0.75, ge=0.0, le=1.0)
    success_weight: float = Field(default=70.0, ge=0)
    shortfall_weight: float = Field(default=60.0, ge=0)


class DayOfWeekThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_days: int = Field(default=4, ge=1, le=7)
    min_spread: float = Field(default=0.25, ge=0.0, le=1.0)
    weight: float = Field(default=75.0, ge=0)


class InsightsSettingsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    enabled: bool = Field(default=True)
    lookback_days: int = Field(default=30, ge=1)
    max_insights: int = Field(default=5, ge=1)
    time_of_day: TimeOfDayThresholds = Field(default_factory=TimeOfDayThresholds)
    duration: DurationThresholds = Field(default_factory=DurationThresholds)
    breaks: BreakThresholds = Field(default_factory=BreakThresholds)
    completion: CompletionThresholds = Field(default_factory=CompletionThresholds)
    day_of_week: DayOfWeekThresholds = Field(default_factory=DayOfWeekThresholds)


class InsightsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    insights: InsightsSettingsConfig = Field(default_factory=InsightsSettingsConfig)


# =============================================================================
# load_and_validate
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "timer": TimerConfig,
    "insights": InsightsConfig,
}


def load_and_validate(config_name: str, model_class: type[BaseModel] | None = None) -> BaseModel:
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    yaml_path = ARGS_DIR / f"{config_name}.yaml"

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw: dict[str, Any] = yaml.safe_load(f) or {}
        else:
            raw = {}

        return model_class.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {config_name}: {e}, using defaults")
        return model_class()


def load_timer_config() -> TimerConfig:
    return load_and_validate("timer")  # type: ignore[return-value]


def load_insights_config() -> InsightsConfig:
    return load_and_validate("insights")  # type: ignore[return-value]
