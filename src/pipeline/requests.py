"""Analysis request construction and validation."""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from analyzers.registry import resolve_components
from config import settings
from pipeline.exceptions import AnalysisValidationError

URL_REQUIRED = "URL is required"
INVALID_URL = "Invalid URL format. Please provide a complete URL with a valid domain."
INVALID_EMAIL = "Invalid email format"

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_HOST_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$", re.IGNORECASE)


@dataclass(frozen=True)
class AnalysisRequest:
    """A validated request. Built per call, never persisted."""

    url: str
    components: tuple[str, ...]  # canonical names, already resolved
    owner_identity: str
    force_rescan: bool = False


def _ascii_hostname(hostname: str) -> str:
    """Punycode form of an internationalized hostname ("bücher.de" -> "xn--bcher-kva.de")."""
    try:
        return hostname.encode("idna").decode("ascii")
    except UnicodeError:
        raise AnalysisValidationError(INVALID_URL)


def _valid_hostname(hostname: str) -> bool:
    if not hostname or hostname.endswith(".") or "." not in hostname:
        return False
    return all(_HOST_LABEL.match(label) for label in hostname.split("."))


def normalize_url(raw_url: str) -> str:
    """
    Validate and normalize an absolute http(s) URL.

    The scheme and host are lowercased, internationalized hosts are stored in
    their punycode form and an empty path becomes "/", so
    "https://Example.com" and "https://example.com/" share cache entries.

    Raises:
        AnalysisValidationError: on a malformed URL, an unsupported protocol
            or a hostname without a dot (or with a trailing one)
    """
    try:
        parts = urlsplit(raw_url.strip())
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        raise AnalysisValidationError(INVALID_URL)

    if parts.scheme.lower() not in ("http", "https") or not hostname:
        raise AnalysisValidationError(INVALID_URL)
    hostname = _ascii_hostname(hostname)
    if not _valid_hostname(hostname):
        raise AnalysisValidationError(INVALID_URL)

    netloc = hostname if port is None else f"{hostname}:{port}"
    if parts.username:
        raise AnalysisValidationError(INVALID_URL)
    return urlunsplit(
        (parts.scheme.lower(), netloc, parts.path or "/", parts.query, "")
    )


def build_request(
    url: str | None,
    component: str | None = None,
    email: str | None = None,
    force_rescan: bool = False,
) -> AnalysisRequest:
    """
    Validate raw input and build an AnalysisRequest.

    Validation order is URL, email, then component; nothing is executed or
    stored before all three pass.
    """
    if url is None or not str(url).strip():
        raise AnalysisValidationError(URL_REQUIRED)
    normalized = normalize_url(str(url))

    owner = (email or "").strip()
    if owner and not _EMAIL.match(owner):
        raise AnalysisValidationError(INVALID_EMAIL)

    components = resolve_components(component)

    return AnalysisRequest(
        url=normalized,
        components=tuple(components),
        owner_identity=owner.lower() or settings.anonymous_owner,
        force_rescan=bool(force_rescan),
    )
