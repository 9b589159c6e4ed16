import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from bs4 import BeautifulSoup

from analyzers.page import FetchedPage
from pipeline.metadata import (
    FALLBACK_DESCRIPTION,
    FALLBACK_TITLE,
    PageMetadataProvider,
    extract_schema,
)

URL = "https://example.com/"


def _ld(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


def _soup(*scripts: str) -> BeautifulSoup:
    return BeautifulSoup(f"<html><head>{''.join(scripts)}</head><body></body></html>", "lxml")


def test_organization_preferred_over_website():
    soup = _soup(
        _ld(
            [
                {"@type": "WebSite", "name": "Example Site"},
                {"@type": "Organization", "name": "Example Inc", "description": "Makers"},
            ]
        )
    )

    schema = extract_schema(soup)

    assert schema["name"] == "Example Inc"
    assert schema["description"] == "Makers"
    assert schema["organization"]["@type"] == "Organization"


def test_named_website_used_when_no_organization():
    soup = _soup(_ld({"@type": "WebSite"}), _ld({"@type": "WebSite", "name": "Docs"}))

    assert extract_schema(soup)["name"] == "Docs"


def test_broken_json_is_skipped():
    soup = _soup(
        '<script type="application/ld+json">{not json</script>',
        _ld({"@type": "Organization", "name": "Fallback Co"}),
    )

    assert extract_schema(soup)["name"] == "Fallback Co"


def test_no_schema():
    assert extract_schema(_soup()) is None


@pytest.mark.asyncio
async def test_fetch_extracts_title_and_description():
    html = (
        "<html><head><title> Example Domain </title>"
        '<meta name="description" content="An example page.">'
        "</head><body></body></html>"
    )
    page = FetchedPage(url=URL, html=html, headers={}, elapsed_ms=5.0)

    with patch("pipeline.metadata.fetch_page", AsyncMock(return_value=page)):
        metadata = await PageMetadataProvider().fetch(URL)

    assert metadata.title == "Example Domain"
    assert metadata.description == "An example page."
    assert metadata.url == URL
    assert metadata.schema is None


@pytest.mark.asyncio
async def test_fetch_failure_returns_fallback():
    with patch(
        "pipeline.metadata.fetch_page",
        AsyncMock(side_effect=httpx.ConnectError("connection refused")),
    ):
        metadata = await PageMetadataProvider().fetch(URL)

    assert metadata.title == FALLBACK_TITLE
    assert metadata.description == FALLBACK_DESCRIPTION
    assert metadata.url == URL
    assert metadata.schema is None
