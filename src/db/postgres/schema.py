from __future__ import annotations

import logging

from src.db.postgres.pool import _connect_ro, _pg_write_conn, db_errors
from src.domain.errors import MissingTableError

logger = logging.getLogger(__name__)

USER_TABLE = '"User"'


@db_errors("create tasks table")
def init_task_schema() -> None:
    """Create the tasks table if it does not exist (idempotent)."""
    with _pg_write_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS tasks (
                id SERIAL PRIMARY KEY,
                user_id VARCHAR,
                stock VARCHAR,
                kline_type VARCHAR,
                buy_strategy VARCHAR,
                sell_strategy VARCHAR,
                status VARCHAR,
                timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    logger.info("tasks table ready")


@db_errors("check user table")
def ensure_user_table() -> None:
    """
    Fail fast if the "User" table is absent.

    The identity system owns that schema, so we only check for it and never create it.
    """
    conn = _connect_ro()
    try:
        cur = conn.cursor()
        cur.execute("SELECT to_regclass(%s)", (f"public.{USER_TABLE}",))
        row = cur.fetchone()
    finally:
        conn.close()
    if row is None or row[0] is None:
        raise MissingTableError(f"{USER_TABLE} table does not exist")
