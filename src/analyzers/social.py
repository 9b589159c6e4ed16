"""Social proof analyzer."""

import logging
import re

from bs4 import BeautifulSoup

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from analyzers.page import document_elements, fetch_page, fold_cutoff
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)

# Matched against class/id attributes
ATTRIBUTE_HINTS = {
    "testimonial": ("testimonial", "quote", "customer-story"),
    "review": ("review",),
    "rating": ("rating", "stars", "star-rating"),
    "trust-badge": ("trust", "badge", "secure", "certified", "guarantee"),
    "partnership": ("logo-cloud", "logos", "clients", "partners", "brands", "customers"),
}

# Matched against element text
TEXT_PATTERNS = {
    "customer-count": re.compile(
        r"\b\d[\d,.]*\s*[kKmM+]*\s+(customers|users|companies|teams|businesses|clients)\b",
        re.IGNORECASE,
    ),
    "rating": re.compile(r"\b[1-5](\.\d)?\s*(/\s*5|out of 5|stars?)\b", re.IGNORECASE),
}

TYPE_WEIGHTS = {
    "testimonial": 20,
    "review": 18,
    "rating": 15,
    "customer-count": 15,
    "partnership": 12,
    "trust-badge": 10,
}


class SocialProofAnalyzer(BaseAnalyzer):
    """Detects testimonials, reviews, ratings, trust badges, client logos and customer counts."""

    ABOVE_FOLD_BONUS = 15

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "social"

    @property
    def label(self) -> str:
        return "Social proof"

    async def analyze(self, url: str) -> ComponentResult:
        page = await fetch_page(url)
        return self.evaluate(page.soup, url)

    def evaluate(self, soup: BeautifulSoup, url: str) -> ComponentResult:
        elements_in_order = document_elements(soup)
        cutoff = fold_cutoff(elements_in_order)

        found = []
        claimed: set[int] = set()
        for index, element in enumerate(elements_in_order):
            proof_type = self._classify(element)
            if proof_type is None:
                continue
            # Nested matches inside an element already counted are the same proof
            if any(id(parent) in claimed for parent in element.parents):
                continue
            claimed.add(id(element))
            found.append(
                {
                    "type": proof_type,
                    "text": element.get_text(" ", strip=True)[:120],
                    "isAboveFold": index < cutoff,
                }
            )

        summary = {"totalElements": len(found), "aboveFoldElements": 0}
        for proof_type in TYPE_WEIGHTS:
            summary[proof_type] = 0
        for item in found:
            summary[item["type"]] += 1
            if item["isAboveFold"]:
                summary["aboveFoldElements"] += 1

        score, issues = self._score(found, summary)

        recommendations = self.engine.generate_texts(
            {
                "totalElements": len(found),
                "testimonialCount": summary["testimonial"],
                "reviewCount": summary["review"],
                "ratingCount": summary["rating"],
                "trustBadgeCount": summary["trust-badge"],
                "hasAboveFoldProof": summary["aboveFoldElements"] > 0,
                "url": url,
            },
            category="social",
        )

        return ComponentResult(
            score=score,
            issues=issues,
            recommendations=recommendations,
            metrics={"summary": summary, "elements": found[:30]},
        )

    def _score(self, found: list[dict], summary: dict) -> tuple[int, list[str]]:
        if not found:
            return 0, ["No social proof elements found"]

        issues = []
        score = 0.0
        # Diversity counts more than repetition: full weight once per type, a third after
        for proof_type, weight in TYPE_WEIGHTS.items():
            count = summary[proof_type]
            if count:
                score += weight + (count - 1) * weight / 3
        if summary["aboveFoldElements"]:
            score += self.ABOVE_FOLD_BONUS
        else:
            issues.append("No social proof above the fold")
        if not summary["testimonial"]:
            issues.append("No customer testimonials found")
        return clamp_score(score), issues

    def _classify(self, element) -> str | None:
        attributes = " ".join(
            [*(element.get("class") or []), element.get("id") or ""]
        ).lower()
        if attributes.strip():
            for proof_type, hints in ATTRIBUTE_HINTS.items():
                if any(hint in attributes for hint in hints):
                    return proof_type

        if element.name in ("p", "span", "div", "li", "strong", "h2", "h3"):
            # Only leaf-ish text nodes, so a wrapper <div> does not swallow the page
            text = element.get_text(" ", strip=True)
            if text and len(text) < 160 and not element.find(["div", "section", "p"]):
                for proof_type, pattern in TEXT_PATTERNS.items():
                    if pattern.search(text):
                        return proof_type
        return None
