from __future__ import annotations

from src.db.postgres.pool import _connect_ro, _pg_write_conn, db_errors
from src.domain.models import TASK_COLUMNS, TASK_STATUS_RUNNING, Task

_SELECT = f"SELECT {', '.join(TASK_COLUMNS)} FROM tasks"


def _dict_cursor(conn):
    from psycopg2.extras import RealDictCursor  # type: ignore

    return conn.cursor(cursor_factory=RealDictCursor)


def _fetch_tasks(query: str, params: tuple = ()) -> list[Task]:
    conn = _connect_ro()
    try:
        cur = _dict_cursor(conn)
        cur.execute(query, params)
        return [Task.from_row(r) for r in cur.fetchall()]
    finally:
        conn.close()


def _fetch_task(query: str, params: tuple) -> Task | None:
    conn = _connect_ro()
    try:
        cur = _dict_cursor(conn)
        cur.execute(query, params)
        row = cur.fetchone()
        return Task.from_row(row) if row else None
    finally:
        conn.close()


@db_errors("insert task")
def insert_task(
    user_id: str,
    stock: str,
    kline_type: str,
    buy_strategy: str,
    sell_strategy: str,
    status: str,
) -> Task:
    """Insert a task and return it with the server-assigned id and timestamp."""
    with _pg_write_conn() as conn:
        cur = _dict_cursor(conn)
        cur.execute(
            f"""
            INSERT INTO tasks (user_id, stock, kline_type, buy_strategy, sell_strategy, status)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {', '.join(TASK_COLUMNS)}
            """,
            (user_id, stock, kline_type, buy_strategy, sell_strategy, status),
        )
        return Task.from_row(cur.fetchone())


@db_errors("list tasks")
def get_all_tasks() -> list[Task]:
    return _fetch_tasks(f"{_SELECT} ORDER BY id")


@db_errors("get task")
def get_task(user_id: str, task_id: int) -> Task | None:
    return _fetch_task(f"{_SELECT} WHERE user_id = %s AND id = %s", (user_id, int(task_id)))


@db_errors("get task")
def get_task_by_id(task_id: int) -> Task | None:
    return _fetch_task(f"{_SELECT} WHERE id = %s", (int(task_id),))


@db_errors("list user tasks")
def get_tasks_by_user(user_id: str) -> list[Task]:
    return _fetch_tasks(f"{_SELECT} WHERE user_id = %s ORDER BY id", (user_id,))


@db_errors("list running tasks")
def get_running_tasks() -> list[Task]:
    return _fetch_tasks(f"{_SELECT} WHERE status = %s ORDER BY id", (TASK_STATUS_RUNNING,))


@db_errors("delete tasks")
def delete_all_tasks() -> int:
    """Delete every task. Returns the number of rows removed."""
    with _pg_write_conn() as conn:
        cur = conn.cursor()
        cur.execute("DELETE FROM tasks")
        return int(cur.rowcount)


@db_errors("delete task")
def delete_task(user_id: str, task_id: int) -> int:
    with _pg_write_conn() as conn:
        cur = conn.cursor()
        cur.execute("DELETE FROM tasks WHERE user_id = %s AND id = %s", (user_id, int(task_id)))
        return int(cur.rowcount)


@db_errors("drop tasks table")
def drop_tasks_table() -> None:
    with _pg_write_conn() as conn:
        cur = conn.cursor()
        cur.execute("DROP TABLE IF EXISTS tasks")
