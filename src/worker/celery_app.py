"""
Celery wiring for the signal worker.

Jobs travel over a Redis broker. Each registered job type becomes one Celery
task named by its type string (`email:welcome`, `email:signal`), so producers
only need the name and a JSON payload.
"""

from __future__ import annotations

import logging

from celery import Celery
from celery.exceptions import Reject

from src.domain.errors import DataAccessError, TransientDeliveryError
from src.utils.settings import QueueSettings
from src.worker.dispatcher import Dispatcher
from src.worker.handlers import JobOutcome

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (TransientDeliveryError, DataAccessError)


def create_celery_app(queue: QueueSettings, name: str = "trade_signal_worker") -> Celery:
    app = Celery(name, broker=queue.broker_url)
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        # Nobody reads job results.
        task_ignore_result=True,
        task_default_queue=queue.queue_name,
        # Acknowledge after the handler finishes; re-queue if the worker dies mid-job.
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,
        worker_concurrency=queue.concurrency,
        worker_pool=queue.pool,
        broker_connection_retry_on_startup=True,
        timezone="UTC",
        enable_utc=True,
    )
    return app


def _bind_job(app: Celery, dispatcher: Dispatcher, task_type: str, queue: QueueSettings):
    @app.task(
        name=task_type,
        # Bound to this app and dispatcher only, not registered on every Celery app.
        shared=False,
        bind=True,
        autoretry_for=RETRYABLE_ERRORS,
        retry_backoff=True,
        retry_backoff_max=queue.retry_backoff_max_seconds,
        retry_jitter=True,
        max_retries=queue.max_retries,
    )
    def run_job(self, payload):
        outcome = dispatcher.dispatch(task_type, payload)
        if outcome is JobOutcome.REJECTED:
            raise Reject(f"{task_type} job rejected", requeue=False)
        return outcome.value

    return run_job


def bind_dispatcher(app: Celery, dispatcher: Dispatcher, queue: QueueSettings) -> dict:
    """Register one Celery task per job type known to the dispatcher."""
    tasks = {task_type: _bind_job(app, dispatcher, task_type, queue) for task_type in dispatcher.task_types()}
    logger.info("Registered job types: %s", ", ".join(sorted(tasks)))
    return tasks


def worker_argv(queue: QueueSettings) -> list[str]:
    return [
        "worker",
        "--loglevel=INFO",
        f"--concurrency={int(queue.concurrency)}",
        f"--pool={queue.pool}",
        "-Q",
        queue.queue_name,
    ]
