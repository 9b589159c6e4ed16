"""PageGrade recommendations package."""

from recommendations.engine import (
    GeneratedRecommendation,
    RecommendationEngine,
    interpolate,
)
from recommendations.pairing import (
    IssueFixPair,
    classify_impact,
    group_pairs_by_impact,
    pair_component_result,
    pair_issues_with_fixes,
)
from recommendations.priority import priority_insight, top_priority_fixes, verdict
from recommendations.rules import ALL_TEMPLATES, RecommendationTemplate

__all__ = [
    "ALL_TEMPLATES",
    "GeneratedRecommendation",
    "IssueFixPair",
    "RecommendationEngine",
    "RecommendationTemplate",
    "classify_impact",
    "group_pairs_by_impact",
    "interpolate",
    "pair_component_result",
    "pair_issues_with_fixes",
    "priority_insight",
    "top_priority_fixes",
    "verdict",
]
