import pytest

from src.db.postgres import schema
from src.domain.errors import MissingTableError


class FakeCursor:
    def __init__(self, row):
        self.row = row
        self.executed = []

    def execute(self, query, params=None):
        self.executed.append((query, params))

    def fetchone(self):
        return self.row


class FakeConn:
    def __init__(self, row):
        self.cur = FakeCursor(row)
        self.closed = False

    def cursor(self):
        return self.cur

    def close(self):
        self.closed = True


def test_missing_user_table_fails_fast(monkeypatch):
    conn = FakeConn((None,))
    monkeypatch.setattr(schema, "_connect_ro", lambda: conn)

    with pytest.raises(MissingTableError):
        schema.ensure_user_table()

    assert conn.cur.executed == [("SELECT to_regclass(%s)", ('public."User"',))]
    assert conn.closed


def test_present_user_table_passes(monkeypatch):
    conn = FakeConn(('"User"',))
    monkeypatch.setattr(schema, "_connect_ro", lambda: conn)

    schema.ensure_user_table()

    assert conn.closed
