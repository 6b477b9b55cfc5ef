"""
Job worker package.

The process entrypoint remains `main.py` at the repo root. Handler logic,
dispatch and the Celery wiring live under `src/worker/` so they can be
exercised without a broker.
"""
