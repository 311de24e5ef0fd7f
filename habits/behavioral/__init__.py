"""
Behavioral Insights Engine Package

Rule-based coaching insights computed from one week of habit progress.

No AI/ML - purely deterministic rules.
"""
from habits.behavioral.insights_engine import (
    InsightsEngine,
    InsightTag,
    Insight,
    INSIGHT_RULES,
    generate_insights,
    summarize_tags,
    get_top_insights,
    get_insights,
    get_top_insight,
)

__all__ = [
    'InsightsEngine',
    'InsightTag',
    'Insight',
    'INSIGHT_RULES',
    'generate_insights',
    'summarize_tags',
    'get_top_insights',
    'get_insights',
    'get_top_insight',
]
