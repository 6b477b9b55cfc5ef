from __future__ import annotations

from src.db.postgres.pool import _connect_ro, db_errors
from src.db.postgres.schema import USER_TABLE
from src.domain.models import User


@db_errors("get user")
def get_user_by_id(user_id: str) -> User | None:
    conn = _connect_ro()
    try:
        from psycopg2.extras import RealDictCursor  # type: ignore

        cur = conn.cursor(cursor_factory=RealDictCursor)
        cur.execute(
            f'SELECT id, name, email, password, "emailVerified", image FROM {USER_TABLE} WHERE id = %s',
            (user_id,),
        )
        row = cur.fetchone()
        return User.from_row(row) if row else None
    finally:
        conn.close()
