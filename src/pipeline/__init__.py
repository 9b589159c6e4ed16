"""PageGrade analysis pipeline package."""

from pipeline.exceptions import (
    AnalysisFailedError,
    AnalysisValidationError,
    ComponentMappingError,
    PipelineError,
    StoreError,
)

__all__ = [
    "AnalysisFailedError",
    "AnalysisValidationError",
    "ComponentMappingError",
    "PipelineError",
    "StoreError",
]
