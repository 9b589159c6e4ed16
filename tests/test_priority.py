import pytest

from analyzers.base import ComponentResult
from recommendations.priority import priority_insight, top_priority_fixes, verdict


@pytest.mark.parametrize(
    "score, expected",
    [(100, "Excellent"), (85, "Excellent"), (84, "Good"), (70, "Good"), (69, "Fair"), (50, "Fair"), (49, "Critical"), (0, "Critical")],
)
def test_verdict(score, expected):
    assert verdict(score) == expected


def test_lowest_score_wins():
    results = {
        "cta": ComponentResult(score=60, issues=["No CTA above the fold"]),
        "images": ComponentResult(score=30, issues=["4 of 6 images missing alt text"]),
        "fonts": ComponentResult(score=95),
    }

    insight = priority_insight(results)

    assert insight.component == "images"
    assert insight.section_name == "Images"
    assert insight.section_score == 30
    assert insight.primary_issue == "4 of 6 images missing alt text"
    assert insight.impact_level == "Critical"


def test_ties_prefer_high_impact_issues_then_weight():
    results = {
        "fonts": ComponentResult(score=65, issues=["No font issues worth noting"]),
        "whitespace": ComponentResult(score=65, issues=["Tight line spacing: line-height 1.1"]),
        "speed": ComponentResult(score=65, issues=["Slow server response"]),
    }

    insight = priority_insight(results)

    # fonts and speed both carry High issues; speed is weighted heavier
    assert insight.component == "speed"
    assert insight.impact_level == "High"


def test_section_without_issues_gets_generic_summary():
    insight = priority_insight({"social": ComponentResult(score=72)})

    assert insight.primary_issue == "Your social proof score is 72/100"
    assert insight.impact_level == "Medium"


def test_no_sections():
    assert priority_insight({}) is None


def test_top_priority_fixes_skip_strong_sections():
    results = {
        "speed": ComponentResult(score=40, recommendations=["Optimize the hero image"]),
        "cta": ComponentResult(score=55, issues=["No primary CTA with strong action language"]),
        "social": ComponentResult(score=90, recommendations=["Add testimonials"]),
        "images": ComponentResult(score=70),
        "fonts": ComponentResult(score=80, recommendations=["Use fewer fonts"]),
    }

    fixes = top_priority_fixes(results)

    assert [fix.component for fix in fixes] == ["speed", "cta", "images"]
    assert fixes[0].recommendation == "Optimize the hero image"
    assert fixes[0].severity == "Critical"
    assert fixes[1].recommendation == "No primary CTA with strong action language"
    assert fixes[2].recommendation == "Improve your images score"


def test_top_priority_fixes_limit():
    results = {name: ComponentResult(score=10) for name in ("speed", "cta", "fonts")}
    assert len(top_priority_fixes(results, limit=2)) == 2
