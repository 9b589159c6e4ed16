"""Call-to-action analyzer."""

import logging
import re

from bs4 import BeautifulSoup

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from analyzers.page import document_elements, fetch_page, fold_cutoff
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)

STRONG_ACTION_WORDS = (
    "buy", "purchase", "order", "get", "start", "begin", "join", "sign up",
    "register", "download", "grab", "claim", "unlock", "access", "try",
    "create", "book", "request", "apply", "enroll", "schedule", "subscribe",
)

WEAK_ACTION_WORDS = (
    "learn", "read", "view", "see", "browse", "explore", "submit", "send",
    "click", "more",
)

URGENCY_WORDS = (
    "now", "today", "instant", "immediately", "limited", "exclusive",
    "hurry", "deadline", "expires", "last chance", "ends soon",
)

PRIMARY_CTA_PHRASES = (
    "get started", "try free", "start free", "sign up", "start trial",
    "book demo", "request demo", "buy now", "add to cart", "order now",
    "shop now", "get access", "join now", "create account", "start now",
    "start your free trial", "schedule a demo", "book a call", "get a quote",
)

NAVIGATION_WORDS = {
    "home", "about", "about us", "contact", "help", "faq", "blog", "news",
    "terms", "privacy", "docs", "documentation", "support", "careers",
    "press", "legal", "login", "log in", "sign in", "pricing", "features",
}

_WORD = r"\b{}\b"


def _contains(text: str, words) -> list[str]:
    return [word for word in words if re.search(_WORD.format(re.escape(word)), text)]


class CTAAnalyzer(BaseAnalyzer):
    """
    Finds calls to action and grades their strength.

    Candidates are <button>, submit inputs, role="button" elements and links
    styled as buttons. Navigation items and links inside <nav>/<footer> are
    dropped.
    """

    BUTTON_CLASS_HINTS = ("btn", "button", "cta")

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "cta"

    @property
    def label(self) -> str:
        return "CTA"

    async def analyze(self, url: str) -> ComponentResult:
        page = await fetch_page(url)
        return self.evaluate(page.soup, url)

    def evaluate(self, soup: BeautifulSoup, url: str) -> ComponentResult:
        elements = document_elements(soup)
        cutoff = fold_cutoff(elements)
        position = {id(element): index for index, element in enumerate(elements)}

        ctas = []
        for element in elements:
            if not self._is_candidate(element):
                continue
            text = self._text(element)
            lowered = text.lower()
            if not text or len(text) > 60 or lowered in NAVIGATION_WORDS:
                continue
            strong = _contains(lowered, STRONG_ACTION_WORDS)
            weak = _contains(lowered, WEAK_ACTION_WORDS)
            ctas.append(
                {
                    "text": text,
                    "type": "button" if element.name in ("button", "input") else "link",
                    "isAboveFold": position[id(element)] < cutoff,
                    "actionStrength": "strong" if strong else ("weak" if weak else "medium"),
                    "urgency": "high" if _contains(lowered, URGENCY_WORDS) else "low",
                    "isPrimary": bool(_contains(lowered, PRIMARY_CTA_PHRASES)),
                }
            )

        primary = next((cta for cta in ctas if cta["isPrimary"]), None)
        if primary is None:
            primary = next((cta for cta in ctas if cta["actionStrength"] == "strong"), None)
        above_fold = [cta for cta in ctas if cta["isAboveFold"]]
        weak_words = sorted({cta["text"] for cta in ctas if cta["actionStrength"] == "weak"})
        has_urgency = any(cta["urgency"] == "high" for cta in ctas)

        score, issues = self._score(ctas, primary, above_fold, weak_words)

        recommendations = self.engine.generate_texts(
            {
                "ctaCount": len(ctas),
                "ctasAboveFold": len(above_fold),
                "primaryCtaDetected": primary is not None,
                "weakActionWords": weak_words[:3],
                "hasUrgency": has_urgency,
                "url": url,
            },
            category="cta",
        )

        return ComponentResult(
            score=score,
            issues=issues,
            recommendations=recommendations,
            metrics={
                "ctaCount": len(ctas),
                "aboveFoldCount": len(above_fold),
                "primaryCTA": primary,
                "ctas": ctas[:20],
            },
        )

    def _score(self, ctas, primary, above_fold, weak_words) -> tuple[int, list[str]]:
        if not ctas:
            return 0, ["No CTAs detected on the page"]

        issues = []
        score = 40.0
        if primary is not None:
            score += 25
        else:
            issues.append("No primary CTA with strong action language")
        if above_fold:
            score += 20
        else:
            issues.append("No CTA above the fold")
        if weak_words:
            issues.append(f"Weak CTA text: {', '.join(weak_words[:3])}")
        else:
            score += 10
        if len(ctas) > 1:
            score += 5
        return clamp_score(score), issues

    def _is_candidate(self, element) -> bool:
        if element.find_parent(["nav", "footer"]):
            return False
        if element.name == "button":
            return True
        if element.name == "input":
            return (element.get("type") or "").lower() in ("submit", "button")
        if (element.get("role") or "").lower() == "button":
            return True
        if element.name == "a" and element.get("href"):
            classes = " ".join(element.get("class") or []).lower()
            return any(hint in classes for hint in self.BUTTON_CLASS_HINTS)
        return False

    def _text(self, element) -> str:
        if element.name == "input":
            return (element.get("value") or "").strip()
        return element.get_text(" ", strip=True)
