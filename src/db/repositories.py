"""Repository pattern for database operations."""

import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import AnalysisRecord, AnalysisStatus

SORTABLE_COLUMNS = {
    "created_at": AnalysisRecord.created_at,
    "overall_score": AnalysisRecord.overall_score,
}


class AnalysisRepository:
    """Handles all AnalysisRecord database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        owner_identity: str,
        url: str,
        algorithm_version: str,
        status: AnalysisStatus = AnalysisStatus.PENDING,
        started_at: datetime | None = None,
        retry_count: int = 0,
        created_at: datetime | None = None,
    ) -> AnalysisRecord:
        """Insert a new analysis record. Never touches existing rows."""
        record = AnalysisRecord(
            owner_identity=owner_identity,
            url=url,
            status=status,
            started_at=started_at,
            retry_count=retry_count,
            algorithm_version=algorithm_version,
        )
        if created_at is not None:
            record.created_at = created_at
        self.session.add(record)
        await self.session.flush()  # Assigns the ID without committing
        return record

    async def update_by_id(self, record_id: uuid.UUID, **patch) -> int:
        """Apply a partial update to one record. Returns the number of rows changed."""
        result = await self.session.execute(
            update(AnalysisRecord)
            .where(AnalysisRecord.id == record_id)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def get_by_id(self, record_id: uuid.UUID) -> AnalysisRecord | None:
        """Retrieve a record by its ID."""
        result = await self.session.execute(
            select(AnalysisRecord).where(AnalysisRecord.id == record_id)
        )
        return result.scalar_one_or_none()

    async def find_latest_by_owner_and_url(
        self,
        owner_identity: str,
        url: str,
    ) -> AnalysisRecord | None:
        """Most recently created record for (owner, url), whatever its status."""
        result = await self.session.execute(
            select(AnalysisRecord)
            .where(
                AnalysisRecord.owner_identity == owner_identity,
                AnalysisRecord.url == url,
            )
            .order_by(AnalysisRecord.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_history(
        self,
        owner_identity: str,
        url: str,
        limit: int = 50,
    ) -> list[AnalysisRecord]:
        """All records for (owner, url), newest first."""
        result = await self.session.execute(
            select(AnalysisRecord)
            .where(
                AnalysisRecord.owner_identity == owner_identity,
                AnalysisRecord.url == url,
            )
            .order_by(AnalysisRecord.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    def _completed_query(self, min_score: int | None):
        query = select(AnalysisRecord).where(
            AnalysisRecord.status == AnalysisStatus.COMPLETED,
            AnalysisRecord.overall_score.is_not(None),
        )
        if min_score is not None:
            query = query.where(AnalysisRecord.overall_score >= min_score)
        return query

    async def list_completed(
        self,
        limit: int = 50,
        offset: int = 0,
        sort_by: str = "created_at",
        descending: bool = True,
        min_score: int | None = None,
    ) -> list[AnalysisRecord]:
        """Completed analyses for report listings."""
        column = SORTABLE_COLUMNS.get(sort_by, AnalysisRecord.created_at)
        query = (
            self._completed_query(min_score)
            .order_by(column.desc() if descending else column.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_completed(self, min_score: int | None = None) -> int:
        query = select(func.count()).select_from(self._completed_query(min_score).subquery())
        result = await self.session.execute(query)
        return result.scalar_one()
