from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable
from zoneinfo import ZoneInfo

from src.domain.errors import BadPayloadError, MissingRecordError
from src.domain.models import Task, User
from src.domain.payloads import RawPayload, SignalEmailPayload, WelcomeEmailPayload
from src.notify.compose import signal_email, welcome_email
from src.ports.mailer import MailerPort
from src.utils.settings import MailSettings

logger = logging.getLogger(__name__)

TYPE_WELCOME_EMAIL = "email:welcome"
TYPE_SIGNAL_EMAIL = "email:signal"

EVENT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class JobOutcome(str, Enum):
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    REJECTED = "rejected"


@dataclass(frozen=True)
class HandlerContext:
    """Everything a job handler needs, built once at startup and shared by all jobs."""

    mailer: MailerPort
    mail: MailSettings
    get_task: Callable[[int], Task | None]
    get_user: Callable[[str], User | None]


def format_event_time(event_time: int, tz_name: str = "UTC") -> str:
    tz = ZoneInfo(tz_name)
    try:
        moment = datetime.fromtimestamp(int(event_time), tz=tz)
    except (ValueError, OverflowError, OSError) as e:
        raise BadPayloadError(f"event time {event_time} is not a representable timestamp") from e
    return moment.strftime(EVENT_TIME_FORMAT)


def handle_welcome_email(ctx: HandlerContext, raw: RawPayload) -> JobOutcome:
    p = WelcomeEmailPayload.decode(raw)
    if not p.is_complete():
        logger.info("Dropping welcome email job with incomplete payload (name=%r, email=%r)", p.user_name, p.user_email)
        return JobOutcome.SKIPPED

    logger.info("Sending welcome email to user %s <%s>", p.user_name, p.user_email)
    ctx.mailer.send(welcome_email(ctx.mail, p.user_email, p.user_name, p.confirm_url))
    return JobOutcome.DELIVERED


def handle_signal_email(ctx: HandlerContext, raw: RawPayload) -> JobOutcome:
    p = SignalEmailPayload.decode(raw)
    if not p.is_complete():
        logger.info("Dropping signal email job with incomplete payload for task %s", p.task_id)
        return JobOutcome.SKIPPED

    event_time = format_event_time(p.event_time, ctx.mail.event_timezone)
    logger.info("Sending signal email for task %s", p.task_id)
    task = ctx.get_task(p.task_id)
    if task is None:
        raise MissingRecordError(f"task {p.task_id} not found")
    # The user row is read separately; a concurrent delete between the two reads lands here.
    user = ctx.get_user(task.user_id)
    if user is None:
        raise MissingRecordError(f"user {task.user_id} for task {task.id} not found")
    if not user.email:
        raise MissingRecordError(f"user {user.id} has no email address")

    logger.info(
        "Signal email to %s (%s): %s %s %s via %s",
        user.email,
        user.name,
        task.stock,
        event_time,
        p.signal,
        p.strategy,
    )
    ctx.mailer.send(signal_email(ctx.mail, user.email, user.name, task.stock, event_time, p.signal, p.strategy))
    return JobOutcome.DELIVERED
