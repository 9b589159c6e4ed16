"""Page title, description and structured data used to decorate reports."""

import json
import logging
from dataclasses import asdict, dataclass

from bs4 import BeautifulSoup

from analyzers.page import fetch_page

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Page Title Unavailable"
FALLBACK_DESCRIPTION = "Description not available"


@dataclass(frozen=True)
class PageMetadata:
    title: str
    description: str
    url: str
    schema: dict | None = None

    @classmethod
    def fallback(cls, url: str) -> "PageMetadata":
        return cls(title=FALLBACK_TITLE, description=FALLBACK_DESCRIPTION, url=url, schema=None)

    def to_dict(self) -> dict:
        return asdict(self)


def _schema_entry(item: dict) -> dict:
    return {
        "name": item.get("name"),
        "description": item.get("description"),
        "organization": item,
    }


def extract_schema(soup: BeautifulSoup) -> dict | None:
    """
    First JSON-LD Organization, or failing that the first named WebSite.

    Scripts are scanned in document order and scanning stops at the first
    script that yields a match. Unparseable scripts are skipped.
    """
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or script.get_text() or "")
        except (TypeError, ValueError):
            logger.debug("Skipping unparseable JSON-LD block")
            continue

        items = data if isinstance(data, list) else [data]
        found = None
        for item in items:
            if not isinstance(item, dict):
                continue
            if item.get("@type") == "Organization":
                found = _schema_entry(item)
                break
            if item.get("@type") == "WebSite" and item.get("name") and found is None:
                found = _schema_entry(item)

        if found:
            return found
    return None


def extract_metadata(soup: BeautifulSoup, url: str) -> PageMetadata:
    title = soup.title.get_text() if soup.title else ""
    meta = soup.find("meta", attrs={"name": "description"})
    description = meta.get("content", "") if meta else ""

    return PageMetadata(
        title=title.strip(),
        description=(description or "").strip(),
        url=url,
        schema=extract_schema(soup),
    )


class PageMetadataProvider:
    """Fetches auxiliary page metadata. Never raises."""

    async def fetch(self, url: str) -> PageMetadata:
        try:
            page = await fetch_page(url)
            return extract_metadata(page.soup, page.url)
        except Exception as e:
            logger.warning(f"Metadata extraction failed for {url}: {e}")
            return PageMetadata.fallback(url)
