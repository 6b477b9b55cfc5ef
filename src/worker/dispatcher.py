from __future__ import annotations

import logging
from typing import Callable, Mapping

from src.domain.errors import BadPayloadError, MissingRecordError, PermanentDeliveryError
from src.domain.payloads import RawPayload
from src.worker.handlers import (
    TYPE_SIGNAL_EMAIL,
    TYPE_WELCOME_EMAIL,
    HandlerContext,
    JobOutcome,
    handle_signal_email,
    handle_welcome_email,
)

logger = logging.getLogger(__name__)

Handler = Callable[[HandlerContext, RawPayload], JobOutcome]


class Dispatcher:
    """
    Routes a job to the handler registered for its type string and classifies per-job failures.

    - bad payload, missing task/user, permanent delivery failure, unknown type -> REJECTED (no retry)
    - TransientDeliveryError / DataAccessError propagate so the queue retries the job

    Nothing raised here is allowed to stop the worker process.
    """

    def __init__(self, ctx: HandlerContext):
        self.ctx = ctx
        self._handlers: dict[str, Handler] = {}

    def register(self, task_type: str, handler: Handler) -> None:
        if task_type in self._handlers:
            raise ValueError(f"handler already registered for {task_type!r}")
        self._handlers[task_type] = handler

    @property
    def handlers(self) -> Mapping[str, Handler]:
        return dict(self._handlers)

    def task_types(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, task_type: str, payload: RawPayload) -> JobOutcome:
        handler = self._handlers.get(task_type)
        if handler is None:
            logger.error("No handler registered for job type %r; rejecting", task_type)
            return JobOutcome.REJECTED

        try:
            outcome = handler(self.ctx, payload)
        except BadPayloadError as e:
            logger.warning("Rejecting %s job with bad payload: %s", task_type, e)
            return JobOutcome.REJECTED
        except MissingRecordError as e:
            logger.warning("Rejecting %s job: %s", task_type, e)
            return JobOutcome.REJECTED
        except PermanentDeliveryError as e:
            logger.error("Rejecting %s job after permanent delivery failure: %s", task_type, e)
            return JobOutcome.REJECTED

        logger.info("%s job %s", task_type, outcome.value)
        return outcome


def build_dispatcher(ctx: HandlerContext) -> Dispatcher:
    dispatcher = Dispatcher(ctx)
    dispatcher.register(TYPE_WELCOME_EMAIL, handle_welcome_email)
    dispatcher.register(TYPE_SIGNAL_EMAIL, handle_signal_email)
    return dispatcher
