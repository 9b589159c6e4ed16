"""FastAPI dependencies for the analysis pipeline."""

from functools import lru_cache

from fastapi import Depends

from analyzers.base import BaseAnalyzer
from analyzers.registry import build_default_registry
from pipeline.freshness import AnalysisService
from pipeline.orchestrator import AnalysisOrchestrator


@lru_cache
def get_registry() -> dict[str, BaseAnalyzer]:
    """Analyzer lookup table, built once per process."""
    return build_default_registry()


def get_orchestrator(
    registry: dict[str, BaseAnalyzer] = Depends(get_registry),
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(registry)


def get_analysis_service(
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> AnalysisService:
    """
    Dependency that provides the analysis pipeline.

    Usage in tests:
        app.dependency_overrides[get_analysis_service] = lambda: service
    """
    return AnalysisService(orchestrator)
