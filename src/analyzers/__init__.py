"""PageGrade analyzers package."""

from analyzers.base import BaseAnalyzer, ComponentResult
from analyzers.registry import (
    CANONICAL_COMPONENT_NAMES,
    COMPONENT_ALIASES,
    build_default_registry,
    map_component_name,
    resolve_components,
)

__all__ = [
    "BaseAnalyzer",
    "CANONICAL_COMPONENT_NAMES",
    "COMPONENT_ALIASES",
    "ComponentResult",
    "build_default_registry",
    "map_component_name",
    "resolve_components",
]
