"""Analysis API endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_analysis_service
from api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    PageMetadataResponse,
    QueuedAnalysisResponse,
)
from analyzers.registry import ALL_COMPONENTS
from pipeline.freshness import AnalysisService
from pipeline.orchestrator import AnalysisReport
from pipeline.requests import build_request
from worker.tasks import run_analysis

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze", tags=["Analysis"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Storage or internal failure"},
}


def report_payload(report: AnalysisReport) -> dict:
    """Merge per-component results with the overall score and status."""
    payload = {name: result.to_dict() for name, result in report.results.items()}
    payload["overallScore"] = report.overall_score
    payload["status"] = report.status
    payload["failedComponents"] = list(report.failed_components)
    return payload


@router.post(
    "",
    response_model=AnalyzeResponse,
    responses=ERROR_RESPONSES,
    summary="Analyze a page",
    description="Grade a page, reusing an analysis from the last 24 hours unless forceRescan is set.",
)
async def analyze_page(
    body: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalyzeResponse:
    """
    Run the analysis pipeline synchronously.

    Validation errors answer 400 before any analyzer runs. Individual
    analyzer failures never fail the request; they show up as zero-score
    components with a failure issue.
    """
    request = build_request(
        url=body.url,
        component=body.component,
        email=body.email,
        force_rescan=body.force_rescan,
    )
    logger.info(
        f"Analyze request for {request.url}: components={','.join(request.components)} "
        f"force_rescan={request.force_rescan}"
    )

    outcome = await service.analyze(request)

    metadata = None
    if outcome.metadata is not None:
        metadata = PageMetadataResponse(**outcome.metadata.to_dict())

    return AnalyzeResponse(
        analysis=report_payload(outcome.report),
        analysis_id=outcome.analysis_id,
        from_cache=outcome.from_cache,
        message=outcome.message,
        metadata=metadata,
    )


@router.post(
    "/queue",
    response_model=QueuedAnalysisResponse,
    responses=ERROR_RESPONSES,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a page analysis",
    description="Validate the request and run the analysis on a worker. Returns immediately with the task ID.",
)
async def queue_analysis(body: AnalyzeRequest) -> QueuedAnalysisResponse:
    """Queue the same pipeline as a Celery task."""
    request = build_request(
        url=body.url,
        component=body.component,
        email=body.email,
        force_rescan=body.force_rescan,
    )
    component = request.components[0] if len(request.components) == 1 else ALL_COMPONENTS

    task = run_analysis.delay(
        request.url,
        request.owner_identity,
        component,
        request.force_rescan,
    )
    logger.info(f"Queued analysis of {request.url} as task {task.id}")

    return QueuedAnalysisResponse(task_id=str(task.id))
