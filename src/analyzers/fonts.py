"""Typography analyzer."""

import logging
import re
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from analyzers.page import fetch_page
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)

_FONT_FACE = re.compile(r"@font-face\s*{[^}]*?font-family\s*:\s*([^;}]+)", re.IGNORECASE)
_FONT_FAMILY = re.compile(r"font-family\s*:\s*([^;}{]+)", re.IGNORECASE)

GENERIC_FAMILIES = {
    "serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui",
    "ui-sans-serif", "ui-serif", "ui-monospace", "inherit", "initial", "unset",
    "-apple-system", "blinkmacsystemfont",
}


def _clean(family: str) -> str:
    return family.strip().strip("'\"").strip()


class FontAnalyzer(BaseAnalyzer):
    """
    Counts font families declared by the page.

    Web fonts come from Google Fonts links and @font-face rules; every other
    primary family in a font-family declaration counts as a system font.
    """

    MAX_WEB_FONTS = 2
    MAX_SYSTEM_FONTS = 3

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "fonts"

    @property
    def label(self) -> str:
        return "Font"

    async def analyze(self, url: str) -> ComponentResult:
        page = await fetch_page(url)
        return self.evaluate(page.soup, url)

    def evaluate(self, soup: BeautifulSoup, url: str) -> ComponentResult:
        web_fonts = self._web_fonts(soup)
        declared = self._declared_families(soup)
        web_lower = {font.lower() for font in web_fonts}
        system_fonts = sorted(
            family for family in declared if family.lower() not in web_lower
        )

        issues = []
        score = 100.0

        if len(web_fonts) > self.MAX_WEB_FONTS:
            extra = len(web_fonts) - self.MAX_WEB_FONTS
            score -= 15 * extra
            issues.append(
                f"Too many web fonts: {len(web_fonts)} loaded (recommend {self.MAX_WEB_FONTS} or fewer)"
            )
        if len(system_fonts) > self.MAX_SYSTEM_FONTS:
            extra = len(system_fonts) - self.MAX_SYSTEM_FONTS
            score -= 5 * extra
            issues.append(
                f"Inconsistent typography: {len(system_fonts)} different font families declared"
            )

        recommendations = self.engine.generate_texts(
            {
                "webFontCount": len(web_fonts),
                "systemFontCount": len(system_fonts),
                "fontFamilies": sorted(web_fonts) + system_fonts,
                "url": url,
            },
            category="fonts",
        )

        return ComponentResult(
            score=clamp_score(score),
            issues=issues,
            recommendations=recommendations,
            metrics={
                "fontFamilies": sorted(web_fonts) + system_fonts,
                "fontCount": len(web_fonts) + len(system_fonts),
                "webFontCount": len(web_fonts),
                "systemFontCount": len(system_fonts),
            },
        )

    def _style_text(self, soup: BeautifulSoup) -> str:
        blocks = [style.get_text() for style in soup.find_all("style")]
        blocks += [tag.get("style", "") for tag in soup.find_all(style=True)]
        return "\n".join(blocks)

    def _web_fonts(self, soup: BeautifulSoup) -> set[str]:
        fonts = set()

        for link in soup.find_all("link", href=True):
            href = link["href"]
            if "fonts.googleapis.com" not in href:
                continue
            query = parse_qs(urlparse(href).query)
            for family_param in query.get("family", []):
                # css2 uses one family per param, css v1 joins with "|"
                for family in family_param.split("|"):
                    name = _clean(family.split(":")[0].replace("+", " "))
                    if name:
                        fonts.add(name)

        for match in _FONT_FACE.finditer(self._style_text(soup)):
            name = _clean(match.group(1))
            if name:
                fonts.add(name)

        return fonts

    def _declared_families(self, soup: BeautifulSoup) -> set[str]:
        families = set()
        for match in _FONT_FAMILY.finditer(self._style_text(soup)):
            primary = _clean(match.group(1).split(",")[0])
            if primary and primary.lower() not in GENERIC_FAMILIES and not primary.startswith("var("):
                families.add(primary)
        return families
