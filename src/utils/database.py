"""
Database facade.

The concrete implementation is split into:
- `src/db/postgres/pool.py` (connection pool + helpers)
- `src/db/postgres/schema.py` (table provisioning / checks)
- `src/db/postgres/repositories/*` (table-focused repository functions)

This file re-exports the surface used by the worker runner and the admin script.
"""

from __future__ import annotations

from src.db.postgres.pool import close_pool, configure_pool  # noqa: F401
from src.db.postgres.schema import ensure_user_table, init_task_schema  # noqa: F401
from src.db.postgres.repositories.tasks import (  # noqa: F401
    delete_all_tasks,
    delete_task,
    drop_tasks_table,
    get_all_tasks,
    get_running_tasks,
    get_task,
    get_task_by_id,
    get_tasks_by_user,
    insert_task,
)
from src.db.postgres.repositories.users import get_user_by_id  # noqa: F401


def init_db(database) -> None:
    """Point the pool at `database` (DatabaseSettings), create the tasks table and check "User"."""
    configure_pool(
        database.url,
        minconn=database.pool_min,
        maxconn=database.pool_max,
        connect_timeout_seconds=database.connect_timeout_seconds,
    )
    init_task_schema()
    ensure_user_table()
