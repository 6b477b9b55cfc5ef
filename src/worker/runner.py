import logging
import sys

from src.notify.mailers import build_mailer
from src.utils.config_loader import load_config
from src.utils.database import get_task_by_id, get_user_by_id, init_db
from src.utils.settings import WorkerSettings, load_settings
from src.worker.celery_app import bind_dispatcher, create_celery_app, worker_argv
from src.worker.dispatcher import Dispatcher, build_dispatcher
from src.worker.handlers import HandlerContext

logger = logging.getLogger(__name__)


def build_worker(settings: WorkerSettings) -> tuple:
    """Wire the mailer, dispatcher and Celery app from one settings object."""
    ctx = HandlerContext(
        mailer=build_mailer(settings.mail),
        mail=settings.mail,
        get_task=get_task_by_id,
        get_user=get_user_by_id,
    )
    dispatcher: Dispatcher = build_dispatcher(ctx)
    app = create_celery_app(settings.queue)
    bind_dispatcher(app, dispatcher, settings.queue)
    return app, dispatcher


def main(config_path: str | None = None):
    # Configure logging (idempotent; safe if configured elsewhere).
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Configuration and connectivity problems are fatal here, never inside a job.
    try:
        settings = load_settings(load_config(config_path))
        init_db(settings.database)
        app, _ = build_worker(settings)
    except Exception as e:
        logger.error("Worker startup failed: %s: %s", type(e).__name__, e)
        sys.exit(1)

    logger.info(
        "Starting worker on queue %r (concurrency=%s, pool=%s, mail=%s)",
        settings.queue.queue_name,
        settings.queue.concurrency,
        settings.queue.pool,
        settings.mail.provider,
    )
    app.worker_main(argv=worker_argv(settings.queue))
