"""Report API endpoints."""

import uuid
from dataclasses import asdict
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from analyzers.base import ComponentResult
from api.schemas import (
    ComponentReport,
    ErrorResponse,
    HistoryEntry,
    HistoryResponse,
    IssueFixPairResponse,
    PriorityFixResponse,
    PriorityInsightResponse,
    ReportDetailResponse,
    ReportListResponse,
    ReportSummary,
)
from db.models import AnalysisRecord, AnalysisStatus
from db.repositories import AnalysisRepository
from db.session import get_db_session
from pipeline.freshness import report_from_record
from pipeline.requests import build_request
from recommendations.pairing import pair_component_result
from recommendations.priority import priority_insight, top_priority_fixes, verdict

router = APIRouter(prefix="/reports", tags=["Reports"])

REPORT_NOT_FOUND = "Analysis not found"


def display_title(record: AnalysisRecord) -> str:
    """Stored page title, or the hostname without "www." when there is none."""
    if record.page_title:
        return record.page_title
    try:
        hostname = urlsplit(record.url).hostname
    except ValueError:
        hostname = None
    if not hostname:
        return record.url
    return hostname.replace("www.", "", 1)


def _component_report(result: ComponentResult, failed: bool) -> ComponentReport:
    return ComponentReport(
        score=result.score,
        issues=list(result.issues),
        recommendations=list(result.recommendations),
        metrics=dict(result.metrics),
        pairs=[IssueFixPairResponse(**pair.to_dict()) for pair in pair_component_result(result)],
        failed=failed,
    )


@router.get(
    "",
    response_model=ReportListResponse,
    summary="List completed reports",
    description="Completed analyses with pagination, sorting and an optional minimum score.",
)
async def list_reports(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("created_at", alias="sortBy", pattern="^(created_at|overall_score)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    min_score: int | None = Query(None, alias="minScore", ge=0, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> ReportListResponse:
    """List completed analyses."""
    repo = AnalysisRepository(db)
    records = await repo.list_completed(
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        descending=sort_order == "desc",
        min_score=min_score,
    )
    total = await repo.count_completed(min_score=min_score)

    return ReportListResponse(
        reports=[
            ReportSummary(
                id=record.id,
                url=record.url,
                url_title=display_title(record),
                overall_score=record.overall_score or 0,
                created_at=record.created_at,
                status=record.status.value,
            )
            for record in records
        ],
        total=total,
        offset=offset,
        limit=limit,
        has_more=total > offset + limit,
    )


@router.get(
    "/history",
    response_model=HistoryResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Analysis history for a page",
    description="Every analysis of a URL for one owner, newest first. Records are never overwritten.",
)
async def get_history(
    url: str | None = None,
    email: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db_session),
) -> HistoryResponse:
    """Get the append-only history for (owner, url)."""
    request = build_request(url=url, email=email)

    repo = AnalysisRepository(db)
    records = await repo.list_history(request.owner_identity, request.url, limit=limit)

    return HistoryResponse(
        url=request.url,
        owner=request.owner_identity,
        analyses=[
            HistoryEntry(
                id=record.id,
                status=record.status.value,
                overall_score=record.overall_score,
                retry_count=record.retry_count,
                algorithm_version=record.algorithm_version,
                error_message=record.error_message,
                created_at=record.created_at,
                completed_at=record.completed_at,
            )
            for record in records
        ],
        count=len(records),
    )


@router.get(
    "/{report_id}",
    response_model=ReportDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get report details",
    description="One completed analysis with issue/fix pairs, verdict and priority insight.",
)
async def get_report(
    report_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ReportDetailResponse:
    """Get a completed analysis by ID."""
    try:
        record_id = uuid.UUID(report_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REPORT_NOT_FOUND)

    repo = AnalysisRepository(db)
    record = await repo.get_by_id(record_id)

    if not record or record.status != AnalysisStatus.COMPLETED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REPORT_NOT_FOUND)

    report = report_from_record(record)
    insight = priority_insight(report.results)

    return ReportDetailResponse(
        id=record.id,
        url=record.url,
        url_title=display_title(record),
        page_description=record.page_description,
        overall_score=report.overall_score,
        verdict=verdict(report.overall_score),
        status=record.status.value,
        algorithm_version=record.algorithm_version,
        created_at=record.created_at,
        completed_at=record.completed_at,
        components={
            name: _component_report(result, name in report.failed_components)
            for name, result in report.results.items()
        },
        priority=PriorityInsightResponse(**asdict(insight)) if insight else None,
        top_fixes=[PriorityFixResponse(**asdict(fix)) for fix in top_priority_fixes(report.results)],
    )
