"""Exceptions raised by the analysis pipeline."""

import uuid


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class AnalysisValidationError(PipelineError):
    """Bad request input. Raised before any analyzer or store work."""


class ComponentMappingError(AnalysisValidationError):
    """Unknown component name in a request."""


class StoreError(PipelineError):
    """The initial record could not be persisted."""


class AnalysisFailedError(PipelineError):
    """An error escaped per-analyzer isolation; the record was marked failed."""

    def __init__(self, analysis_id: uuid.UUID, message: str):
        super().__init__(message)
        self.analysis_id = analysis_id
