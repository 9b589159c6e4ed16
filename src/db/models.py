"""SQLAlchemy database models for PageGrade."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Enum, Index, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AnalysisStatus(str, enum.Enum):
    """Lifecycle of an analysis record."""

    PENDING = "pending"
    PROCESSING = "processing"  # Row persisted, analyzers running
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisRecord(Base):
    """
    One analysis of a URL on behalf of an owner.

    Records are append-only history: several rows may exist for the same
    (owner_identity, url), and the latest is the one with the greatest
    ``created_at``. A completed row is never rewritten; re-analysis inserts
    a new row.
    """

    __tablename__ = "analyses"
    __table_args__ = (
        # Serves the latest-record lookup; deliberately not unique
        Index("ix_analyses_owner_url_created", "owner_identity", "url", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_identity: Mapped[str] = mapped_column(String(320), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    status: Mapped[AnalysisStatus] = mapped_column(
        Enum(AnalysisStatus),
        default=AnalysisStatus.PENDING,
        nullable=False,
        index=True,
    )

    # {"speed": {"score": 75, "issues": [...], "recommendations": [...], "metrics": {...}}, ...}
    component_results: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    # Components whose analyzer failed and hold a zero-result placeholder
    failed_components: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    overall_score: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Page metadata (decorates the report, never scored)
    page_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    page_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    schema_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    algorithm_version: Mapped[str] = mapped_column(String(32), nullable=False)
    analysis_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
