"""Visual whitespace analyzer."""

import logging
import re

from bs4 import BeautifulSoup

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from analyzers.page import fetch_page
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)

_LINE_HEIGHT = re.compile(r"line-height\s*:\s*([\d.]+)(px|em|rem|%)?", re.IGNORECASE)

SECTION_TAGS = ["section", "header", "main", "article", "aside", "footer"]
VISIBLE_TAGS = [
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "img", "a", "button", "input",
    "li", "table", "form", "video", "svg", "select", "textarea", "label",
]


class WhitespaceAnalyzer(BaseAnalyzer):
    """
    Estimates spacing and clutter from document structure.

    Without a rendered layout the analyzer relies on proxies:
    - whitespace ratio: share of sections below the crowding threshold,
      blended with how much of the markup is visible text
    - element density per top-level section
    - declared line-height values
    """

    CROWDED_SECTION = 25  # visible elements per section
    BASE_FONT_PX = 16

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "whitespace"

    @property
    def label(self) -> str:
        return "Whitespace"

    async def analyze(self, url: str) -> ComponentResult:
        page = await fetch_page(url)
        return self.evaluate(page.soup, url)

    def evaluate(self, soup: BeautifulSoup, url: str) -> ComponentResult:
        body = soup.body or soup
        sections = body.find_all(SECTION_TAGS) or [body]
        densities = [len(section.find_all(VISIBLE_TAGS)) for section in sections]
        total_elements = len(body.find_all(VISIBLE_TAGS))
        max_density = max(densities) if densities else 0
        average_density = round(sum(densities) / len(densities), 1) if densities else 0

        crowded = [density for density in densities if density > self.CROWDED_SECTION]
        content_density = round(len(crowded) / len(densities), 2) if densities else 0
        whitespace_ratio = round(max(0.0, 1 - content_density) * self._text_share(body), 2)
        clutter_score = min(100, round(max_density * 2 + len(crowded) * 10))
        line_height = self._average_line_height(soup)

        issues = []
        score = 100.0
        if whitespace_ratio < 0.25:
            score -= 30
            issues.append(f"Low whitespace ratio ({whitespace_ratio}): layout feels cramped")
        elif whitespace_ratio < 0.5:
            score -= 10
        if crowded:
            score -= min(30, 10 * len(crowded))
            issues.append(
                f"{len(crowded)} dense sections with up to {max_density} elements each"
            )
        if line_height and line_height < 1.3:
            score -= 15
            issues.append(f"Tight line spacing: line-height {line_height}")
        if clutter_score > 50:
            score -= 10
            issues.append(f"High visual clutter score ({clutter_score})")

        recommendations = self.engine.generate_texts(
            {
                "whitespaceRatio": whitespace_ratio,
                "contentDensity": content_density,
                "maxSectionElements": max_density,
                "avgLineHeight": line_height,
                "clutterScore": clutter_score,
                "url": url,
            },
            category="whitespace",
        )

        return ComponentResult(
            score=clamp_score(score),
            issues=issues,
            recommendations=recommendations,
            metrics={
                "whitespaceRatio": whitespace_ratio,
                "elementDensityPerSection": {
                    "gridSections": len(densities),
                    "maxDensity": max_density,
                    "averageDensity": average_density,
                    "totalElements": total_elements,
                },
                "averageLineHeight": line_height,
                "clutterScore": clutter_score,
                "hasAdequateSpacing": score >= 70,
            },
        )

    def _text_share(self, body) -> float:
        """Visible text length relative to markup length, scaled into 0-1."""
        markup = len(str(body)) or 1
        text = len(body.get_text(" ", strip=True))
        # Text-heavy pages sit around 0.3; scale so that maps near 1.0
        return min(1.0, (text / markup) * 3)

    def _average_line_height(self, soup: BeautifulSoup) -> float | None:
        css = "\n".join(style.get_text() for style in soup.find_all("style"))
        css += "\n".join(tag.get("style", "") for tag in soup.find_all(style=True))

        values = []
        for number, unit in _LINE_HEIGHT.findall(css):
            try:
                value = float(number)
            except ValueError:
                continue
            if unit == "px":
                value = value / self.BASE_FONT_PX
            elif unit == "%":
                value = value / 100
            values.append(value)

        if not values:
            return None
        return round(sum(values) / len(values), 2)
