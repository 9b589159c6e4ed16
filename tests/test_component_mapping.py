import pytest

from analyzers.registry import (
    CANONICAL_COMPONENT_NAMES,
    build_default_registry,
    map_component_name,
    resolve_components,
)
from pipeline.exceptions import AnalysisValidationError, ComponentMappingError


@pytest.mark.parametrize(
    "component, expected",
    [
        ("speed", "speed"),
        ("pageSpeed", "speed"),
        ("PageSpeed", "speed"),
        ("font", "fonts"),
        ("fonts", "fonts"),
        ("image", "images"),
        ("spacing", "whitespace"),
        ("socialProof", "social"),
        ("CTA", "cta"),
        ("all", "all"),
    ],
)
def test_map_component_name(component, expected):
    assert map_component_name(component) == expected


def test_unknown_component_lists_valid_names():
    with pytest.raises(ComponentMappingError) as exc_info:
        map_component_name("bogus")

    message = str(exc_info.value)
    assert "'bogus'" in message
    for name in CANONICAL_COMPONENT_NAMES:
        assert name in message


def test_component_mapping_error_is_a_validation_error():
    with pytest.raises(AnalysisValidationError):
        map_component_name("bogus")


@pytest.mark.parametrize("selector", [None, "", "all", "ALL"])
def test_resolve_all(selector):
    assert resolve_components(selector) == list(CANONICAL_COMPONENT_NAMES)


def test_resolve_single_alias():
    assert resolve_components("font") == ["fonts"]
    assert resolve_components("font") == resolve_components("fonts")


def test_default_registry_covers_every_component():
    registry = build_default_registry()

    assert list(registry) == list(CANONICAL_COMPONENT_NAMES)
    for name, analyzer in registry.items():
        assert analyzer.name == name
