#!/usr/bin/env python3
"""
Admin helper for the tasks table and the job queue.

Examples:
    python scripts/manage_tasks.py list --user u_123
    python scripts/manage_tasks.py running
    python scripts/manage_tasks.py add --user u_123 --stock AAPL --kline 1d --buy macd --sell rsi
    python scripts/manage_tasks.py delete --user u_123 --id 7
    python scripts/manage_tasks.py send-signal --task-id 7 --signal BUY --strategy macd
"""

import argparse
import sys
import time
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

# Ensure repo root is on sys.path so `import src...` works when running as a script.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from src.domain.models import TASK_COLUMNS, TASK_STATUS_RUNNING  # noqa: E402
from src.utils.config_loader import load_config  # noqa: E402
from src.utils.settings import load_database_settings, load_queue_settings  # noqa: E402


def _print_tasks(tasks) -> None:
    if not tasks:
        print("(no tasks)")
        return
    df = pd.DataFrame([t.to_dict() for t in tasks], columns=list(TASK_COLUMNS))
    print(df.to_string(index=False))


def _open_db(cfg: dict) -> None:
    from src.utils.database import configure_pool, init_task_schema

    database = load_database_settings(cfg)
    if not database.url:
        raise SystemExit("PostgreSQL URL not set. Set POSTGRES_URL (or database.url in config.yaml).")
    configure_pool(
        database.url,
        minconn=1,
        maxconn=2,
        connect_timeout_seconds=database.connect_timeout_seconds,
    )
    init_task_schema()


def _celery_app(cfg: dict):
    from src.worker.celery_app import create_celery_app

    return create_celery_app(load_queue_settings(cfg))


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect and maintain signal-worker tasks, or enqueue email jobs.")
    parser.add_argument("--config", default=None, help="Path to config.yaml (default: config/config.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List tasks (optionally for one user)")
    p_list.add_argument("--user", default=None)

    sub.add_parser("running", help=f"List tasks with status '{TASK_STATUS_RUNNING}'")

    p_add = sub.add_parser("add", help="Insert a task")
    p_add.add_argument("--user", required=True)
    p_add.add_argument("--stock", required=True)
    p_add.add_argument("--kline", required=True, help="Candle interval, e.g. 1h or 1d")
    p_add.add_argument("--buy", required=True, help="Buy strategy id")
    p_add.add_argument("--sell", required=True, help="Sell strategy id")
    p_add.add_argument("--status", default=TASK_STATUS_RUNNING)

    p_del = sub.add_parser("delete", help="Delete one task of a user")
    p_del.add_argument("--user", required=True)
    p_del.add_argument("--id", type=int, required=True)

    p_del_all = sub.add_parser("delete-all", help="Delete every task")
    p_del_all.add_argument("--yes", action="store_true", help="Confirm the bulk delete")

    p_drop = sub.add_parser("drop-table", help="Drop the tasks table")
    p_drop.add_argument("--yes", action="store_true", help="Confirm dropping the table")

    p_welcome = sub.add_parser("send-welcome", help="Enqueue a welcome email job")
    p_welcome.add_argument("--name", required=True)
    p_welcome.add_argument("--email", required=True)
    p_welcome.add_argument("--confirm-url", required=True)

    p_signal = sub.add_parser("send-signal", help="Enqueue a signal email job")
    p_signal.add_argument("--task-id", type=int, required=True)
    p_signal.add_argument("--signal", required=True)
    p_signal.add_argument("--strategy", required=True)
    p_signal.add_argument("--event-time", type=int, default=None, help="Unix seconds (default: now)")

    args = parser.parse_args()

    env_path = _REPO_ROOT / "config" / "secrets.env"
    if env_path.exists():
        load_dotenv(env_path)
    cfg = load_config(args.config, validate=False)

    if args.command in ("send-welcome", "send-signal"):
        from src.worker.producer import enqueue_signal_email, enqueue_welcome_email

        app = _celery_app(cfg)
        if args.command == "send-welcome":
            res = enqueue_welcome_email(app, args.name, args.email, args.confirm_url)
        else:
            event_time = args.event_time if args.event_time is not None else int(time.time())
            res = enqueue_signal_email(app, args.task_id, event_time, args.signal, args.strategy)
        print(f"Enqueued job {res.id}")
        return

    from src.utils import database as db

    _open_db(cfg)
    try:
        if args.command == "list":
            _print_tasks(db.get_tasks_by_user(args.user) if args.user else db.get_all_tasks())
        elif args.command == "running":
            _print_tasks(db.get_running_tasks())
        elif args.command == "add":
            task = db.insert_task(args.user, args.stock, args.kline, args.buy, args.sell, args.status)
            _print_tasks([task])
        elif args.command == "delete":
            print(f"Deleted {db.delete_task(args.user, args.id)} task(s)")
        elif args.command == "delete-all":
            if not args.yes:
                raise SystemExit("Refusing to delete every task without --yes")
            print(f"Deleted {db.delete_all_tasks()} task(s)")
        elif args.command == "drop-table":
            if not args.yes:
                raise SystemExit("Refusing to drop the tasks table without --yes")
            db.drop_tasks_table()
            print("Dropped tasks table")
    finally:
        db.close_pool()


if __name__ == "__main__":
    main()
