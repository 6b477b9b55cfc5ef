import pytest

from src.domain.errors import MissingTableError
from src.worker import runner


def test_startup_failure_exits_with_status_one(monkeypatch):
    started = []

    def broken_init_db(database):
        raise MissingTableError('"User" table does not exist')

    monkeypatch.setattr(runner, "load_config", lambda path=None: {})
    monkeypatch.setattr(runner, "init_db", broken_init_db)
    monkeypatch.setattr(runner, "build_worker", lambda settings: started.append(settings))

    with pytest.raises(SystemExit) as excinfo:
        runner.main()

    assert excinfo.value.code == 1
    assert started == []


def test_invalid_config_exits_with_status_one(monkeypatch):
    def bad_config(path=None):
        raise ValueError("Missing database.url in config (set POSTGRES_URL)")

    monkeypatch.setattr(runner, "load_config", bad_config)

    with pytest.raises(SystemExit) as excinfo:
        runner.main()

    assert excinfo.value.code == 1
