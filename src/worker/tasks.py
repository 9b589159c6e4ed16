"""Celery tasks for running page analyses."""

import asyncio

from celery.utils.log import get_task_logger

from analyzers.registry import build_default_registry
from config import settings
from db.session import make_engine, make_session_factory
from pipeline.exceptions import PipelineError
from pipeline.freshness import AnalysisService
from pipeline.orchestrator import AnalysisOrchestrator
from pipeline.requests import build_request
from worker.celery_app import celery_app

# Logger for tasks
logger = get_task_logger(__name__)


async def _run_pipeline(
    url: str,
    owner_identity: str | None,
    component: str | None,
    force_rescan: bool,
) -> dict:
    engine = make_engine(pooled=False)
    session_factory = make_session_factory(engine)

    try:
        email = None if owner_identity in (None, settings.anonymous_owner) else owner_identity
        request = build_request(
            url=url,
            component=component,
            email=email,
            force_rescan=force_rescan,
        )
        service = AnalysisService(
            orchestrator=AnalysisOrchestrator(build_default_registry()),
            session_factory=session_factory,
        )
        outcome = await service.analyze(request)
    finally:
        await engine.dispose()

    return {
        "analysis_id": str(outcome.analysis_id),
        "from_cache": outcome.from_cache,
        "overall_score": outcome.report.overall_score,
        "status": outcome.report.status,
    }


@celery_app.task(bind=True, name="worker.tasks.run_analysis")
def run_analysis(
    self,
    url: str,
    owner_identity: str | None = None,
    component: str | None = None,
    force_rescan: bool = False,
) -> dict:
    """
    Run the full analysis pipeline for one page.

    Identical to the synchronous API path: the freshness check, the
    processing record, analyzer fan-out and the final write all happen
    here. Pipeline errors are reported in the result rather than retried;
    retrying is a new request.
    """
    logger.info(f"Starting analysis of {url} for {owner_identity or settings.anonymous_owner}")

    try:
        result = asyncio.run(_run_pipeline(url, owner_identity, component, force_rescan))
    except PipelineError as e:
        logger.exception(f"Analysis of {url} failed: {e}")
        analysis_id = getattr(e, "analysis_id", None)
        return {
            "analysis_id": str(analysis_id) if analysis_id else None,
            "from_cache": False,
            "overall_score": None,
            "status": "failed",
            "error": str(e),
        }

    logger.info(
        f"Analysis {result['analysis_id']} of {url} done "
        f"(from_cache={result['from_cache']}, score={result['overall_score']})"
    )
    return result
