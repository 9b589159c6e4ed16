"""Celery application configuration."""

from celery import Celery

from config import settings

# Create Celery app
celery_app = Celery(
    "pagegrade",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Analyses go to their own queue
    task_routes={
        "worker.tasks.*": {"queue": "analyses"},
    },

    # One analysis at a time per worker process; it already fans out internally
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    # Results are only useful for the freshness window
    result_expires=settings.freshness_window_hours * 3600,

    broker_connection_retry_on_startup=True,
)

celery_app.autodiscover_tasks(["worker"])
