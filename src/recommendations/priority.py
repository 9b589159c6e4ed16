"""Verdict labels and the weakest-section priority insight."""

from dataclasses import dataclass
from typing import Mapping

from analyzers.base import ComponentResult
from recommendations.pairing import categorize_content

# Higher weight wins ties between equally weak sections
SECTION_CONFIG = (
    {"component": "cta", "name": "CTA", "weight": 25},
    {"component": "speed", "name": "Page Speed", "weight": 25},
    {"component": "social", "name": "Social Proof", "weight": 20},
    {"component": "whitespace", "name": "Whitespace", "weight": 15},
    {"component": "images", "name": "Images", "weight": 10},
    {"component": "fonts", "name": "Fonts", "weight": 5},
)

COLLAPSE_THRESHOLD = 85


@dataclass(frozen=True)
class PriorityInsight:
    component: str
    section_name: str
    section_score: int
    primary_issue: str
    impact_level: str


@dataclass(frozen=True)
class PriorityFix:
    component: str
    section_name: str
    section_score: int
    recommendation: str
    severity: str


def verdict(score: int) -> str:
    """Human-readable label for an overall score."""
    if score >= 85:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Critical"


def _impact_level(score: int) -> str:
    if score < 50:
        return "Critical"
    if score < 70:
        return "High"
    return "Medium"


def _primary(texts: list[str], as_issues: bool) -> str:
    if not texts:
        return ""
    issues, recommendations = categorize_content(texts, []) if as_issues else categorize_content([], texts)
    items = issues if as_issues else recommendations
    return items[0].text


def _ranked_sections(results: Mapping[str, ComponentResult], below: int | None = None) -> list[dict]:
    sections = []
    for config in SECTION_CONFIG:
        result = results.get(config["component"])
        if result is None or (below is not None and result.score >= below):
            continue
        issues, _ = categorize_content(result.issues, [])
        sections.append(
            {
                **config,
                "result": result,
                "has_high_impact": any(item.impact == "High" for item in issues),
            }
        )

    # Lowest score, then sections with High-impact issues, then heavier weight
    sections.sort(
        key=lambda s: (s["result"].score, not s["has_high_impact"], -s["weight"])
    )
    return sections


def priority_insight(results: Mapping[str, ComponentResult]) -> PriorityInsight | None:
    """Pick the single most important section to fix."""
    sections = _ranked_sections(results)
    if not sections:
        return None

    top = sections[0]
    result = top["result"]
    primary_issue = _primary(result.issues, as_issues=True)
    return PriorityInsight(
        component=top["component"],
        section_name=top["name"],
        section_score=result.score,
        primary_issue=primary_issue
        or f"Your {top['name'].lower()} score is {result.score}/100",
        impact_level=_impact_level(result.score),
    )


def top_priority_fixes(
    results: Mapping[str, ComponentResult],
    limit: int = 3,
) -> list[PriorityFix]:
    """Top fixes across sections scoring below the collapse threshold."""
    fixes = []
    for section in _ranked_sections(results, below=COLLAPSE_THRESHOLD)[:limit]:
        result = section["result"]
        fixes.append(
            PriorityFix(
                component=section["component"],
                section_name=section["name"],
                section_score=result.score,
                recommendation=_primary(result.recommendations, as_issues=False)
                or _primary(result.issues, as_issues=True)
                or f"Improve your {section['name'].lower()} score",
                severity=_impact_level(result.score),
            )
        )
    return fixes
