from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from src.domain.errors import DataAccessError

logger = logging.getLogger(__name__)

# Fail fast on DB connection issues so a job never hangs on a dead database.
DEFAULT_CONNECT_TIMEOUT_SECONDS = 3

P = ParamSpec("P")
T = TypeVar("T")


def _with_connect_timeout(dsn: str, timeout_seconds: int = DEFAULT_CONNECT_TIMEOUT_SECONDS) -> str:
    """
    Ensure the DSN includes a small connect timeout so connection attempts never hang indefinitely.

    Supports both URL-style DSNs (postgresql://...) and keyword DSNs (host=... dbname=...).
    """
    dsn = (dsn or "").strip()
    if not dsn:
        return dsn

    if "://" not in dsn:
        if "connect_timeout" in dsn:
            return dsn
        return f"{dsn} connect_timeout={int(timeout_seconds)}"

    from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

    u = urlparse(dsn)
    q = dict(parse_qsl(u.query, keep_blank_values=True))
    if "connect_timeout" not in q:
        q["connect_timeout"] = str(int(timeout_seconds))
    return urlunparse(u._replace(query=urlencode(q, doseq=True)))


_pool_lock = threading.Lock()
_pool = None
_dsn: str = ""
_pool_size: tuple[int, int] = (1, 10)


def configure_pool(dsn: str, *, minconn: int = 1, maxconn: int = 10, connect_timeout_seconds: int = DEFAULT_CONNECT_TIMEOUT_SECONDS) -> None:
    """
    Record where the pool should connect. The pool itself is created lazily on first use.
    Reconfiguring closes any pool opened against the previous DSN.
    """
    global _dsn, _pool_size
    if not (dsn or "").strip():
        raise RuntimeError("Database DSN is empty; set POSTGRES_URL (or database.url).")
    close_pool()
    with _pool_lock:
        _dsn = _with_connect_timeout(dsn, connect_timeout_seconds)
        _pool_size = (int(minconn), int(maxconn))


def _require_dsn() -> str:
    if not _dsn:
        raise RuntimeError("Database pool is not configured; call configure_pool() at startup.")
    return _dsn


def _get_pool():
    """
    Lazily create a ThreadedConnectionPool.
    Sized to the worker concurrency: every job thread may hold one connection.
    """
    global _pool
    if _pool is None:
        with _pool_lock:
            if _pool is None:
                from psycopg2.pool import ThreadedConnectionPool  # type: ignore

                dsn = _require_dsn()
                minconn, maxconn = _pool_size
                _pool = ThreadedConnectionPool(minconn=minconn, maxconn=maxconn, dsn=dsn)
                logger.info("Initialised PostgreSQL connection pool (min=%s, max=%s)", minconn, maxconn)
    return _pool


def close_pool() -> None:
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None
            logger.info("Closed PostgreSQL connection pool")


class _PooledConn:
    """DBAPI-compatible wrapper whose close() returns the connection to the pool."""

    def __init__(self, conn, pool):
        self._conn = conn
        self._pool = pool

    def __getattr__(self, item):
        return getattr(self._conn, item)

    def close(self):  # noqa: D401 - DBAPI name
        """Return the connection to the pool (do not close the underlying socket)."""
        if self._conn is None:
            return
        try:
            # Reset session flags so a future borrower doesn't inherit read-only/autocommit state.
            self._conn.rollback()
            self._conn.set_session(readonly=False, autocommit=False)
        finally:
            self._pool.putconn(self._conn)
            self._conn = None


def db_errors(operation: str) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for store functions: log driver failures and re-raise them as DataAccessError.

    Callers only ever see DataAccessError for database trouble, whatever the driver raised.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            import psycopg2  # type: ignore

            try:
                return func(*args, **kwargs)
            except psycopg2.Error as e:
                logger.warning("DB %s failed in %s: %s", operation, func.__name__, e)
                raise DataAccessError(f"{operation} failed: {e}") from e

        return wrapper

    return decorator


@contextmanager
def _pg_write_conn():
    pool = _get_pool()
    conn = pool.getconn()
    try:
        # A pooled connection may have been used for read-only access previously; force writeable session.
        conn.rollback()
        conn.set_session(readonly=False, autocommit=False)
        yield conn
        conn.commit()
    except Exception:
        if not conn.closed:
            conn.rollback()
        raise
    finally:
        pool.putconn(conn)


def _connect_ro():
    """
    Obtain a pooled read-only connection. Call close() to return it to the pool.
    """
    pool = _get_pool()
    conn = pool.getconn()
    try:
        conn.rollback()
        # Read-only + autocommit to avoid long-lived transactions between jobs.
        conn.set_session(readonly=True, autocommit=True)
    except Exception:
        pool.putconn(conn)
        raise
    return _PooledConn(conn, pool)
