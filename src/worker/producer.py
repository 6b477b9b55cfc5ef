from __future__ import annotations

from celery import Celery

from src.domain.payloads import SignalEmailPayload, WelcomeEmailPayload
from src.worker.handlers import TYPE_SIGNAL_EMAIL, TYPE_WELCOME_EMAIL


def enqueue_welcome_email(app: Celery, user_name: str, user_email: str, confirm_url: str, *, queue: str | None = None):
    payload = WelcomeEmailPayload(user_name=user_name, user_email=user_email, confirm_url=confirm_url)
    return app.send_task(TYPE_WELCOME_EMAIL, args=[payload.to_json()], queue=queue)


def enqueue_signal_email(app: Celery, task_id: int, event_time: int, signal: str, strategy: str, *, queue: str | None = None):
    payload = SignalEmailPayload(task_id=int(task_id), event_time=int(event_time), signal=signal, strategy=strategy)
    return app.send_task(TYPE_SIGNAL_EMAIL, args=[payload.to_json()], queue=queue)
