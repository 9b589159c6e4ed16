"""Impact classification and issue/fix pairing for component results.

Everything here is a read-time projection over a ComponentResult: nothing is
persisted and the same input always yields the same output.
"""

import re
from dataclasses import dataclass

from analyzers.base import ComponentResult
from recommendations.engine import IMPACT_ORDER

HIGH_IMPACT_KEYWORDS = (
    "slow", "loading", "speed", "performance", "critical", "major", "significant",
    "conversion", "cta", "call-to-action", "above fold", "above the fold", "primary",
    "user experience", "accessibility", "mobile", "responsive", "broken", "error",
    "failed", "timed out", "social proof", "trust", "credibility", "testimonial", "review",
)

MEDIUM_IMPACT_KEYWORDS = (
    "optimize", "improve", "enhance", "reduce", "compress", "minify",
    "font", "image", "alt text", "spacing", "whitespace", "layout",
    "consistency", "modern", "format", "webp", "avif",
)

# Zero states ("No CTAs detected", "0 testimonials") are always High
_ZERO_STATE = re.compile(r"\b(no|zero|none)\b|(?<![\d.])0(?![\d.%])", re.IGNORECASE)

MATCHING_KEYWORDS = (
    # CTA
    "cta", "button", "call-to-action", "action", "click", "primary", "secondary",
    # Speed
    "load", "speed", "performance", "slow", "fast", "lcp", "fcp", "cls", "ttfb",
    "cache", "compress", "server",
    # Images
    "image", "img", "alt", "webp", "avif", "jpeg", "png", "resize", "optimize", "lazy",
    # Fonts
    "font", "typeface", "typography", "family", "weight",
    # Social proof
    "testimonial", "review", "rating", "trust", "badge", "social", "proof", "customer", "logo",
    # Whitespace
    "whitespace", "spacing", "clutter", "density", "dense", "margin", "padding",
    "layout", "line-height",
    # General
    "above fold", "above the fold", "below fold", "mobile", "desktop",
    "accessibility", "contrast",
)

NO_FIX_IDENTIFIED = "No fix identified"


@dataclass(frozen=True)
class IssueFixPair:
    """An issue and the recommendation addressing it. Either side may be absent."""

    issue: str | None
    fix: str | None
    impact: str

    @property
    def display_fix(self) -> str | None:
        if self.fix is None and self.issue is not None:
            return NO_FIX_IDENTIFIED
        return self.fix

    def to_dict(self) -> dict:
        return {"issue": self.issue, "fix": self.display_fix, "impact": self.impact}


@dataclass(frozen=True)
class CategorizedItem:
    text: str
    impact: str


def classify_impact(text: str) -> str:
    """Assign an impact tier (High/Medium/Low) to an issue or recommendation."""
    lowered = text.lower()

    if _ZERO_STATE.search(lowered):
        return "High"
    if any(keyword in lowered for keyword in HIGH_IMPACT_KEYWORDS):
        return "High"
    if any(keyword in lowered for keyword in MEDIUM_IMPACT_KEYWORDS):
        return "Medium"
    return "Low"


def extract_keywords(text: str) -> frozenset[str]:
    lowered = text.lower()
    return frozenset(keyword for keyword in MATCHING_KEYWORDS if keyword in lowered)


def _by_impact(items: list, impact_of) -> list:
    # sorted() is stable, so input order survives within a tier
    return sorted(items, key=lambda item: IMPACT_ORDER[impact_of(item)])


def pair_issues_with_fixes(
    issues: list[str] | None = None,
    recommendations: list[str] | None = None,
) -> list[IssueFixPair]:
    """
    Pair each issue with the recommendation sharing the most keywords.

    A recommendation is used at most once; ties go to the earliest one.
    Unmatched issues keep ``fix=None`` and unmatched recommendations become
    tip-only pairs with ``issue=None``. The result is ordered by impact,
    preserving input order within each tier.
    """
    issues = list(issues or [])
    recommendations = list(recommendations or [])
    fix_keywords = [extract_keywords(rec) for rec in recommendations]
    used: set[int] = set()
    pairs: list[IssueFixPair] = []

    for issue in issues:
        issue_keywords = extract_keywords(issue)
        best_index = -1
        best_overlap = 0

        for index, keywords in enumerate(fix_keywords):
            if index in used:
                continue
            overlap = len(issue_keywords & keywords)
            if overlap > best_overlap:
                best_overlap = overlap
                best_index = index

        fix = None
        if best_index >= 0:
            used.add(best_index)
            fix = recommendations[best_index]

        pairs.append(IssueFixPair(issue=issue, fix=fix, impact=classify_impact(issue)))

    for index, rec in enumerate(recommendations):
        if index not in used:
            pairs.append(IssueFixPair(issue=None, fix=rec, impact=classify_impact(rec)))

    return _by_impact(pairs, lambda pair: pair.impact)


def pair_component_result(result: ComponentResult) -> list[IssueFixPair]:
    return pair_issues_with_fixes(result.issues, result.recommendations)


def group_pairs_by_impact(pairs: list[IssueFixPair]) -> dict[str, list[IssueFixPair]]:
    grouped: dict[str, list[IssueFixPair]] = {}
    for pair in pairs:
        grouped.setdefault(pair.impact, []).append(pair)
    return grouped


def categorize_content(
    issues: list[str] | None = None,
    recommendations: list[str] | None = None,
) -> tuple[list[CategorizedItem], list[CategorizedItem]]:
    """Tag issues and recommendations with impact, each list ordered by impact."""
    tagged_issues = [CategorizedItem(text, classify_impact(text)) for text in issues or []]
    tagged_recs = [CategorizedItem(text, classify_impact(text)) for text in recommendations or []]
    return (
        _by_impact(tagged_issues, lambda item: item.impact),
        _by_impact(tagged_recs, lambda item: item.impact),
    )
