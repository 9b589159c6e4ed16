import os
import stat
from datetime import datetime, timedelta, timezone

import pytest

from conftest import test_db_path
from config import settings
from db.models import AnalysisStatus
from db.repositories import AnalysisRepository

BASE = datetime(2024, 5, 1, tzinfo=timezone.utc)


async def _seed(session_factory, rows):
    """rows: (owner, url, status, score, minutes after BASE)"""
    ids = []
    async with session_factory() as session:
        repo = AnalysisRepository(session)
        for owner, url, status, score, minutes in rows:
            record = await repo.create(
                owner_identity=owner,
                url=url,
                algorithm_version="1.0.0",
                status=status,
                created_at=BASE + timedelta(minutes=minutes),
            )
            if score is not None:
                await repo.update_by_id(record.id, overall_score=score)
            ids.append(record.id)
        await session.commit()
    return ids


@pytest.mark.asyncio
async def test_latest_is_by_created_at(session_factory):
    ids = await _seed(
        session_factory,
        [
            ("a@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 70, 0),
            ("a@example.com", "https://example.com/", AnalysisStatus.FAILED, None, 30),
            ("a@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 80, 10),
            ("b@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 90, 60),
        ],
    )

    async with session_factory() as session:
        latest = await AnalysisRepository(session).find_latest_by_owner_and_url(
            "a@example.com", "https://example.com/"
        )

    assert latest.id == ids[1]
    assert latest.status == AnalysisStatus.FAILED


@pytest.mark.asyncio
async def test_latest_missing(session_factory):
    async with session_factory() as session:
        latest = await AnalysisRepository(session).find_latest_by_owner_and_url(
            "nobody@example.com", "https://example.com/"
        )
    assert latest is None


@pytest.mark.asyncio
async def test_history_keeps_every_record(session_factory):
    ids = await _seed(
        session_factory,
        [
            ("a@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 70, 0),
            ("a@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 75, 5),
            ("a@example.com", "https://example.com/", AnalysisStatus.COMPLETED, 80, 10),
            ("a@example.com", "https://other.com/", AnalysisStatus.COMPLETED, 50, 15),
        ],
    )

    async with session_factory() as session:
        history = await AnalysisRepository(session).list_history(
            "a@example.com", "https://example.com/"
        )

    assert [record.id for record in history] == [ids[2], ids[1], ids[0]]


@pytest.mark.asyncio
async def test_update_by_id_reports_rowcount(session_factory):
    ids = await _seed(
        session_factory,
        [("a@example.com", "https://example.com/", AnalysisStatus.PROCESSING, None, 0)],
    )

    async with session_factory() as session:
        repo = AnalysisRepository(session)
        changed = await repo.update_by_id(ids[0], status=AnalysisStatus.COMPLETED, overall_score=61)
        await session.commit()

    assert changed == 1
    async with session_factory() as session:
        record = await AnalysisRepository(session).get_by_id(ids[0])
    assert record.status == AnalysisStatus.COMPLETED
    assert record.overall_score == 61


@pytest.mark.asyncio
async def test_list_completed_sorting_and_filters(session_factory):
    ids = await _seed(
        session_factory,
        [
            ("a@example.com", "https://one.com/", AnalysisStatus.COMPLETED, 55, 0),
            ("a@example.com", "https://two.com/", AnalysisStatus.COMPLETED, 92, 5),
            ("a@example.com", "https://three.com/", AnalysisStatus.COMPLETED, 71, 10),
            ("a@example.com", "https://four.com/", AnalysisStatus.PROCESSING, None, 15),
            ("a@example.com", "https://five.com/", AnalysisStatus.FAILED, None, 20),
        ],
    )

    async with session_factory() as session:
        repo = AnalysisRepository(session)
        newest_first = await repo.list_completed()
        by_score = await repo.list_completed(sort_by="overall_score", descending=False)
        high_scores = await repo.list_completed(min_score=70)
        page = await repo.list_completed(limit=1, offset=1)
        total = await repo.count_completed()
        high_total = await repo.count_completed(min_score=70)

    assert [record.id for record in newest_first] == [ids[2], ids[1], ids[0]]
    assert [record.overall_score for record in by_score] == [55, 71, 92]
    assert {record.id for record in high_scores} == {ids[1], ids[2]}
    assert [record.id for record in page] == [ids[1]]
    assert total == 3
    assert high_total == 2


def test_shared_database_file_is_private():
    assert settings.database_url.endswith(test_db_path)
    assert os.path.exists(test_db_path)
    assert stat.S_IMODE(os.stat(test_db_path).st_mode) == 0o600
