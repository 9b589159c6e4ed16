"""Shared HTML fetching for the DOM-based analyzers."""

from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from config import settings


@dataclass
class FetchedPage:
    url: str  # final URL after redirects
    html: str
    headers: dict
    elapsed_ms: float

    @property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "lxml")


async def fetch_page(url: str) -> FetchedPage:
    """Fetch page HTML and headers. Raises httpx errors on failure."""
    async with httpx.AsyncClient(
        timeout=settings.http_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return FetchedPage(
            url=str(response.url),
            html=response.text,
            headers=dict(response.headers),
            elapsed_ms=response.elapsed.total_seconds() * 1000,
        )


def document_elements(soup: BeautifulSoup) -> list:
    """All elements inside <body>, in document order."""
    body = soup.body or soup
    return body.find_all(True)


def fold_cutoff(elements: list, fraction: float = 0.25) -> int:
    """
    Approximate "above the fold" as the first quarter of the document.

    Static HTML carries no layout, so document position stands in for
    viewport position.
    """
    return max(1, int(len(elements) * fraction))
