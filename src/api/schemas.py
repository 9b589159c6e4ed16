"""Pydantic schemas for API request/response validation."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names (fromCache, overallScore, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Request Schemas (what clients send to us)
# =============================================================================


class AnalyzeRequest(CamelModel):
    """
    Request body for analyzing a page.

    Fields are loosely typed on purpose: the pipeline validates them and
    answers with its own error messages.
    """

    url: str | None = Field(
        default=None,
        description="Absolute http(s) URL of the page to analyze",
        examples=["https://example.com"],
    )
    component: str | None = Field(
        default=None,
        description="Canonical component name, alias or 'all'",
        examples=["all", "speed", "font"],
    )
    email: str | None = Field(
        default=None,
        description="Owner identity; anonymous when omitted",
    )
    force_rescan: bool = Field(
        default=False,
        description="Ignore a fresh cached analysis and run a new one",
    )


# =============================================================================
# Response Schemas (what we send back to clients)
# =============================================================================


class PageMetadataResponse(CamelModel):
    title: str
    description: str
    url: str
    schema_: dict | None = Field(default=None, alias="schema")


class AnalyzeResponse(CamelModel):
    """Response for a synchronous analysis."""

    success: bool = True
    # {"speed": {...}, "fonts": {...}, ..., "overallScore": 65, "status": "completed"}
    analysis: dict[str, Any]
    analysis_id: uuid.UUID
    from_cache: bool
    message: str
    metadata: PageMetadataResponse | None = None


class QueuedAnalysisResponse(CamelModel):
    """Response when an analysis is queued on the worker."""

    success: bool = True
    task_id: str
    message: str = "Analysis queued successfully"


class ErrorResponse(BaseModel):
    error: str


class ReportSummary(CamelModel):
    id: uuid.UUID
    url: str
    url_title: str
    overall_score: int
    created_at: datetime
    status: str


class ReportListResponse(CamelModel):
    reports: list[ReportSummary]
    total: int
    offset: int
    limit: int
    has_more: bool


class IssueFixPairResponse(CamelModel):
    issue: str | None = None
    fix: str | None = None
    impact: str


class ComponentReport(CamelModel):
    score: int
    issues: list[str] = []
    recommendations: list[str] = []
    metrics: dict[str, Any] = {}
    pairs: list[IssueFixPairResponse] = []
    failed: bool = False


class PriorityInsightResponse(CamelModel):
    component: str
    section_name: str
    section_score: int
    primary_issue: str
    impact_level: str


class PriorityFixResponse(CamelModel):
    component: str
    section_name: str
    section_score: int
    recommendation: str
    severity: str


class ReportDetailResponse(CamelModel):
    """One completed analysis with display-time guidance."""

    id: uuid.UUID
    url: str
    url_title: str
    page_description: str | None = None
    overall_score: int
    verdict: str
    status: str
    algorithm_version: str
    created_at: datetime
    completed_at: datetime | None = None
    components: dict[str, ComponentReport]
    priority: PriorityInsightResponse | None = None
    top_fixes: list[PriorityFixResponse] = []


class HistoryEntry(CamelModel):
    id: uuid.UUID
    status: str
    overall_score: int | None
    retry_count: int
    algorithm_version: str
    error_message: str | None
    created_at: datetime
    completed_at: datetime | None


class HistoryResponse(CamelModel):
    url: str
    owner: str
    analyses: list[HistoryEntry]
    count: int


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(CamelModel):
    """Response for health check endpoint."""

    status: str = "healthy"
    service: str = "pagegrade"
    version: str = "0.1.0"
    algorithm_version: str
