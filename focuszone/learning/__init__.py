"""Learning Tools - Weekly insights from task history

Philosophy:
    Learn from what actually got finished, not from what was planned.
    Only surface a pattern when the numbers clearly support it, and
    only the handful that matter most.

Components:
    insights.py: Insight record and the bucketing enums
        - TimeOfDay: six local-time bands
        - DurationCategory: short / medium / long / extended
    insight_analyzer.py: Five independent analyzers plus ranking
        - time of day: peak window and energy dip
        - task duration: completion sweet spot
        - break effectiveness: tasks shortly after a relax task
        - completion trend: this week's completion rate vs goal
        - day of week: strongest vs weakest weekday

Safety Rules:
    1. Read-only - the analyzer never writes task records
    2. Graceful degradation - no data or a failed read means no insights
    3. Every insight carries its sample size

Configuration: args/insights.yaml
"""
