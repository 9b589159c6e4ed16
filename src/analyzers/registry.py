"""Component names, aliases and the analyzer lookup table."""

import logging
import random

from analyzers.base import BaseAnalyzer
from pipeline.exceptions import ComponentMappingError

logger = logging.getLogger(__name__)

ALL_COMPONENTS = "all"

# Order matters: it is the order analyzers are dispatched and reported in.
CANONICAL_COMPONENT_NAMES: tuple[str, ...] = (
    "speed",
    "fonts",
    "images",
    "cta",
    "whitespace",
    "social",
)

COMPONENT_ALIASES: dict[str, str] = {
    "pageSpeed": "speed",
    "font": "fonts",
    "image": "images",
    "spacing": "whitespace",
    "socialProof": "social",
}

# Lowercased lookup so "PageSpeed" and "IMAGES" resolve as well
_LOOKUP: dict[str, str] = {
    **{name: name for name in CANONICAL_COMPONENT_NAMES},
    **{alias.lower(): canonical for alias, canonical in COMPONENT_ALIASES.items()},
}


def valid_component_names_help() -> str:
    """Readable list of accepted component names for error messages."""
    return (
        f"Valid options: {', '.join(CANONICAL_COMPONENT_NAMES)}, {ALL_COMPONENTS}"
        f" (aliases: {', '.join(COMPONENT_ALIASES)})"
    )


def map_component_name(component: str) -> str:
    """
    Map a canonical name, alias or "all" to its canonical form.

    Raises:
        ComponentMappingError: if the name is not recognized
    """
    normalized = (component or "").strip().lower()
    if not normalized:
        raise ComponentMappingError(
            f"Component name cannot be empty. {valid_component_names_help()}"
        )
    if normalized == ALL_COMPONENTS:
        return ALL_COMPONENTS
    canonical = _LOOKUP.get(normalized)
    if canonical is None:
        raise ComponentMappingError(
            f"Unknown component: '{component}'. {valid_component_names_help()}"
        )
    return canonical


def resolve_components(selector: str | None) -> list[str]:
    """Resolve a request's component selector to canonical names."""
    if selector is None or selector.strip().lower() in ("", ALL_COMPONENTS):
        return list(CANONICAL_COMPONENT_NAMES)
    canonical = map_component_name(selector)
    if canonical == ALL_COMPONENTS:
        return list(CANONICAL_COMPONENT_NAMES)
    return [canonical]


def build_default_registry(rng: random.Random | None = None) -> dict[str, BaseAnalyzer]:
    """
    Build the canonical-name → analyzer lookup table.

    ``rng`` drives recommendation template selection; pass a seeded
    ``random.Random`` to make analyzer output reproducible.
    """
    from analyzers.cta import CTAAnalyzer
    from analyzers.fonts import FontAnalyzer
    from analyzers.images import ImageAnalyzer
    from analyzers.social import SocialProofAnalyzer
    from analyzers.speed import SpeedAnalyzer
    from analyzers.whitespace import WhitespaceAnalyzer
    from recommendations.engine import RecommendationEngine

    engine = RecommendationEngine(rng=rng)
    analyzers: list[BaseAnalyzer] = [
        SpeedAnalyzer(engine),
        FontAnalyzer(engine),
        ImageAnalyzer(engine),
        CTAAnalyzer(engine),
        WhitespaceAnalyzer(engine),
        SocialProofAnalyzer(engine),
    ]
    registry = {analyzer.name: analyzer for analyzer in analyzers}
    logger.debug(f"Registered analyzers: {', '.join(registry)}")
    return registry
