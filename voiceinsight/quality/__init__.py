"""Recording quality scoring."""

from .scorer import score_quality, analyze_environment, recommend_settings, quality_tier

__all__ = [
    "score_quality",
    "analyze_environment",
    "recommend_settings",
    "quality_tier",
]
