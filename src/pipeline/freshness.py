"""
Freshness decisions and the analysis record lifecycle.

A request is served from the latest stored record for (owner, url) when
that record is fresh. Otherwise a new record is appended, the orchestrator
runs, and the record is completed (or failed). Completed records are never
rewritten; every re-analysis is a new row.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from analyzers.base import ComponentResult
from analyzers.registry import CANONICAL_COMPONENT_NAMES
from config import settings
from db.models import AnalysisRecord, AnalysisStatus, utcnow
from db.repositories import AnalysisRepository
from db.session import async_session_factory
from pipeline.exceptions import AnalysisFailedError, StoreError
from pipeline.metadata import PageMetadata, PageMetadataProvider
from pipeline.orchestrator import AnalysisOrchestrator, AnalysisReport
from pipeline.requests import AnalysisRequest

logger = logging.getLogger(__name__)

CACHE_HIT_MESSAGE = "Analysis retrieved from cache"
COMPLETED_MESSAGE = "Analysis completed successfully"


@dataclass(frozen=True)
class AnalysisOutcome:
    """What the pipeline hands back to its caller."""

    analysis_id: uuid.UUID
    from_cache: bool
    report: AnalysisReport
    message: str
    metadata: PageMetadata | None = None
    created_at: datetime | None = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_fresh(
    record: AnalysisRecord | None,
    now: datetime,
    force_rescan: bool = False,
    window: timedelta | None = None,
) -> bool:
    """A record is fresh iff completed, younger than the window, and not forced."""
    if record is None or force_rescan:
        return False
    if record.status != AnalysisStatus.COMPLETED:
        return False
    if window is None:
        window = timedelta(hours=settings.freshness_window_hours)
    return (_as_utc(now) - _as_utc(record.created_at)) < window


def _ordered(names) -> list[str]:
    known = [name for name in CANONICAL_COMPONENT_NAMES if name in names]
    return known + sorted(name for name in names if name not in CANONICAL_COMPONENT_NAMES)


def report_from_record(record: AnalysisRecord) -> AnalysisReport:
    """Rebuild the merged report from a stored record."""
    stored = record.component_results or {}
    results = {name: ComponentResult.from_dict(stored[name]) for name in _ordered(stored)}
    return AnalysisReport(
        url=record.url,
        results=MappingProxyType(results),
        failed_components=tuple(record.failed_components or ()),
        overall_score=record.overall_score or 0,
        status=record.status.value,
        duration_ms=record.analysis_duration_ms or 0,
    )


def metadata_from_record(record: AnalysisRecord) -> PageMetadata | None:
    if record.page_title is None and record.page_description is None:
        return None
    return PageMetadata(
        title=record.page_title or "",
        description=record.page_description or "",
        url=record.url,
        schema=record.schema_data,
    )


class AnalysisService:
    """
    Runs one analysis request end to end.

    Every step that touches the record store opens its own short-lived
    session and commits immediately, so the processing row is durable
    before any analyzer runs and concurrent requests never share a session.
    """

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        metadata_provider: PageMetadataProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
        freshness_window: timedelta | None = None,
        algorithm_version: str | None = None,
    ):
        self.orchestrator = orchestrator
        self.session_factory = session_factory or async_session_factory
        self.metadata_provider = metadata_provider or PageMetadataProvider()
        self.clock = clock
        self.freshness_window = freshness_window or timedelta(
            hours=settings.freshness_window_hours
        )
        self.algorithm_version = algorithm_version or settings.algorithm_version

    async def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        now = self.clock()
        latest = await self._find_latest(request)

        if is_fresh(latest, now, request.force_rescan, self.freshness_window):
            logger.info(f"Cache hit for {request.url} ({request.owner_identity}): {latest.id}")
            return AnalysisOutcome(
                analysis_id=latest.id,
                from_cache=True,
                report=report_from_record(latest),
                message=CACHE_HIT_MESSAGE,
                metadata=metadata_from_record(latest),
                created_at=latest.created_at,
            )

        if latest is None:
            logger.info(f"Cache miss for {request.url}: no previous analysis")
        elif request.force_rescan:
            logger.info(f"Forced rescan of {request.url}, previous analysis {latest.id}")
        else:
            logger.info(
                f"Cache miss for {request.url}: previous analysis {latest.id} "
                f"is {latest.status.value} or stale"
            )

        record_id = await self._create_processing_record(request, latest, now)
        started = time.perf_counter()

        try:
            report, metadata = await asyncio.gather(
                self.orchestrator.run(request.url, request.components),
                self.metadata_provider.fetch(request.url),
            )
        except Exception as e:
            logger.exception(f"Analysis {record_id} failed for {request.url}: {e}")
            await self._mark_failed(record_id, str(e))
            raise AnalysisFailedError(record_id, str(e)) from e

        duration_ms = int((time.perf_counter() - started) * 1000)
        await self._write_results(record_id, report, metadata, duration_ms)

        return AnalysisOutcome(
            analysis_id=record_id,
            from_cache=False,
            report=report,
            message=COMPLETED_MESSAGE,
            metadata=metadata,
            created_at=now,
        )

    async def _find_latest(self, request: AnalysisRequest) -> AnalysisRecord | None:
        try:
            async with self.session_factory() as session:
                repo = AnalysisRepository(session)
                return await repo.find_latest_by_owner_and_url(
                    request.owner_identity, request.url
                )
        except Exception as e:
            logger.exception(f"Failed to look up previous analyses for {request.url}: {e}")
            raise StoreError("Failed to store analysis") from e

    async def _create_processing_record(
        self,
        request: AnalysisRequest,
        latest: AnalysisRecord | None,
        now: datetime,
    ) -> uuid.UUID:
        retry_count = 0
        if latest is not None and latest.status == AnalysisStatus.FAILED:
            retry_count = (latest.retry_count or 0) + 1

        try:
            async with self.session_factory() as session:
                repo = AnalysisRepository(session)
                record = await repo.create(
                    owner_identity=request.owner_identity,
                    url=request.url,
                    algorithm_version=self.algorithm_version,
                    status=AnalysisStatus.PROCESSING,
                    started_at=now,
                    retry_count=retry_count,
                    created_at=now,
                )
                record_id = record.id
                await session.commit()
        except Exception as e:
            logger.exception(f"Failed to create analysis record for {request.url}: {e}")
            raise StoreError("Failed to store analysis") from e

        logger.info(f"Created analysis {record_id} for {request.url} (retry_count={retry_count})")
        return record_id

    async def _mark_failed(self, record_id: uuid.UUID, message: str) -> None:
        try:
            async with self.session_factory() as session:
                await AnalysisRepository(session).update_by_id(
                    record_id,
                    status=AnalysisStatus.FAILED,
                    error_message=message,
                    completed_at=self.clock(),
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Could not mark analysis {record_id} as failed: {e}")

    async def _write_results(
        self,
        record_id: uuid.UUID,
        report: AnalysisReport,
        metadata: PageMetadata,
        duration_ms: int,
    ) -> None:
        # The response is already computed; a failed write is logged, not raised
        try:
            async with self.session_factory() as session:
                await AnalysisRepository(session).update_by_id(
                    record_id,
                    component_results={
                        name: result.to_dict() for name, result in report.results.items()
                    },
                    failed_components=list(report.failed_components),
                    overall_score=report.overall_score,
                    page_title=metadata.title,
                    page_description=metadata.description,
                    schema_data=metadata.schema,
                    status=AnalysisStatus.COMPLETED,
                    completed_at=self.clock(),
                    analysis_duration_ms=duration_ms,
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to store results for analysis {record_id}: {e}")
            return

        logger.info(
            f"Analysis {record_id} completed with overall score {report.overall_score}"
        )
