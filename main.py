"""Start the trade-signal email worker.

Reads `config/secrets.env` into the environment when present (local runs
keep the Postgres DSN, Redis password and mail API key there), then starts
the Celery worker from `src/worker/runner.py`.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


def main() -> None:
    secrets = Path(__file__).resolve().parent / "config" / "secrets.env"
    if secrets.exists():
        load_dotenv(secrets)

    from src.worker.runner import main as run_worker

    run_worker()


if __name__ == "__main__":
    main()
