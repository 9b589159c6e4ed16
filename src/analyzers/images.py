"""Image optimization analyzer."""

import logging
from pathlib import PurePosixPath
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from analyzers.page import fetch_page
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)


class ImageAnalyzer(BaseAnalyzer):
    """
    Inspects <img> tags for optimization problems.

    Checks:
    - Alt text presence
    - Modern formats (WebP/AVIF/SVG)
    - Explicit width/height (unsized images cause layout shift and are
      usually served at source resolution)
    - Lazy loading
    """

    MODERN_FORMATS = {"webp", "avif", "svg"}
    LEGACY_FORMATS = {"jpg", "jpeg", "png", "gif", "bmp", "tiff"}

    # Penalties per image (capped per category)
    PENALTIES = {
        "missing_alt": (5, 30),
        "legacy_format": (4, 30),
        "unsized": (3, 25),
    }

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "images"

    @property
    def label(self) -> str:
        return "Image optimization"

    async def analyze(self, url: str) -> ComponentResult:
        page = await fetch_page(url)
        return self.evaluate(page.soup, page.url)

    def evaluate(self, soup: BeautifulSoup, url: str) -> ComponentResult:
        images = [self._inspect(img, url) for img in soup.find_all("img")]
        # Tracking pixels and data URIs are not content images
        images = [img for img in images if img["src"]]

        missing_alt = [img for img in images if not img["has_alt"]]
        legacy = [img for img in images if img["format"] in self.LEGACY_FORMATS]
        unsized = [img for img in images if not img["sized"]]
        lazy = [img for img in images if img["lazy"]]

        score = 100.0
        for key, offenders in (
            ("missing_alt", missing_alt),
            ("legacy_format", legacy),
            ("unsized", unsized),
        ):
            per_image, cap = self.PENALTIES[key]
            score -= min(cap, per_image * len(offenders))

        issues = []
        if missing_alt:
            issues.append(f"{len(missing_alt)} of {len(images)} images missing alt text")
        if legacy:
            issues.append(
                f"{len(legacy)} images use legacy formats instead of WebP/AVIF"
            )
        if unsized:
            issues.append(f"{len(unsized)} images have no explicit width and height")

        recommendations = self.engine.generate_texts(
            {
                "totalImages": len(images),
                "imagesWithoutAlt": len(missing_alt),
                "oversizedImages": len(unsized),
                "nonModernFormatCount": len(legacy),
                "lazyLoadedImages": len(lazy),
                "url": url,
            },
            category="images",
        )

        return ComponentResult(
            score=clamp_score(score),
            issues=issues,
            recommendations=recommendations,
            metrics={
                "totalImages": len(images),
                "modernFormats": sum(1 for img in images if img["format"] in self.MODERN_FORMATS),
                "withAltText": len(images) - len(missing_alt),
                "appropriatelySized": len(images) - len(unsized),
                "lazyLoaded": len(lazy),
                "images": images[:50],
            },
        )

    def _inspect(self, img, page_url: str) -> dict:
        src = img.get("src") or img.get("data-src") or ""
        if src.startswith("data:"):
            src = ""
        full_src = urljoin(page_url, src) if src else ""
        suffix = PurePosixPath(urlparse(full_src).path).suffix.lower().lstrip(".")
        alt = img.get("alt")
        return {
            "src": full_src[:300],
            "format": suffix or "unknown",
            "has_alt": alt is not None and alt.strip() != "",
            "sized": bool(img.get("width")) and bool(img.get("height")),
            "lazy": (img.get("loading") or "").lower() == "lazy",
        }
