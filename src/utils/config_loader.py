from __future__ import annotations

import logging
import os
import threading
from copy import deepcopy
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

logger = logging.getLogger(__name__)

_cache_lock = threading.Lock()
_cached: dict[str, Any] | None = None
_cached_path: str | None = None

MAIL_PROVIDERS = ("mailersend", "smtp")


def _project_root() -> Path:
    # src/utils/config_loader.py -> src/utils -> src -> project root
    return Path(__file__).resolve().parents[2]


def default_config_path() -> Path:
    return _project_root() / "config" / "config.yaml"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _apply_env_overrides(cfg: dict[str, Any]) -> None:
    """
    Override YAML settings with environment variables.

    The variable names are the deployment contract shared with the producers
    (POSTGRES_URL, REDIS_ADDR, MAILSERVER_APIKEY, ...).
    """
    database = cfg.setdefault("database", {}) or {}
    cfg["database"] = database
    dsn = _env("POSTGRES_URL") or _env("DATABASE_URL")
    if dsn:
        database["url"] = dsn

    queue = cfg.setdefault("queue", {}) or {}
    cfg["queue"] = queue
    if _env("REDIS_ADDR"):
        queue["redis_addr"] = os.environ["REDIS_ADDR"].strip()
    if os.getenv("REDIS_PASSWORD") is not None:
        queue["redis_password"] = os.environ["REDIS_PASSWORD"]
    if _env("REDIS_DB"):
        queue["redis_db"] = int(os.environ["REDIS_DB"])
    if _env("WORKER_CONCURRENCY"):
        queue["concurrency"] = int(os.environ["WORKER_CONCURRENCY"])

    mail = cfg.setdefault("mail", {}) or {}
    cfg["mail"] = mail
    if _env("MAIL_PROVIDER"):
        mail["provider"] = os.environ["MAIL_PROVIDER"].strip().lower()
    if _env("SENDER_NAME"):
        mail["sender_name"] = os.environ["SENDER_NAME"].strip()
    if _env("SENDER_EMAIL"):
        mail["sender_email"] = os.environ["SENDER_EMAIL"].strip()

    mailersend = mail.setdefault("mailersend", {}) or {}
    mail["mailersend"] = mailersend
    if _env("MAILSERVER_APIKEY"):
        mailersend["api_key"] = os.environ["MAILSERVER_APIKEY"].strip()
    if _env("TEMP_WELCOME_ID"):
        mailersend["welcome_template_id"] = os.environ["TEMP_WELCOME_ID"].strip()
    if _env("TEMP_SIGNAL_ID"):
        mailersend["signal_template_id"] = os.environ["TEMP_SIGNAL_ID"].strip()

    smtp = mail.setdefault("smtp", {}) or {}
    mail["smtp"] = smtp
    if _env("SMTP_HOST"):
        smtp["host"] = os.environ["SMTP_HOST"].strip()
    if _env("SMTP_PORT"):
        smtp["port"] = int(os.environ["SMTP_PORT"])
    if _env("SMTP_USERNAME"):
        smtp["username"] = os.environ["SMTP_USERNAME"].strip()
    if os.getenv("SMTP_PASSWORD") is not None:
        smtp["password"] = os.environ["SMTP_PASSWORD"]


def validate_config(cfg: dict[str, Any]) -> None:
    """
    Fail fast if the configuration cannot start a worker.
    Only checks what would otherwise blow up inside the first job.
    """
    required_top = ["database", "queue", "mail"]
    missing = [k for k in required_top if not isinstance(cfg.get(k), dict)]
    if missing:
        raise ValueError(f"Missing required config sections: {', '.join(missing)}")

    if not str(cfg["database"].get("url") or "").strip():
        raise ValueError("Missing database.url in config (set POSTGRES_URL)")

    if not str(cfg["queue"].get("redis_addr") or "").strip():
        raise ValueError("Missing queue.redis_addr in config (set REDIS_ADDR)")
    if int(cfg["queue"].get("concurrency", 10)) < 1:
        raise ValueError("queue.concurrency must be at least 1")

    mail = cfg["mail"]
    provider = str(mail.get("provider") or "").strip().lower()
    if provider not in MAIL_PROVIDERS:
        raise ValueError(f"mail.provider must be one of {', '.join(MAIL_PROVIDERS)}; got {provider!r}")
    if not str(mail.get("sender_email") or "").strip():
        raise ValueError("Missing mail.sender_email in config (set SENDER_EMAIL)")
    tz_name = str(mail.get("event_timezone") or "UTC")
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"mail.event_timezone {tz_name!r} is not a known time zone") from e

    if provider == "mailersend":
        ms = mail.get("mailersend") or {}
        for k in ["api_key", "welcome_template_id", "signal_template_id"]:
            if not str(ms.get(k) or "").strip():
                raise ValueError(f"Missing mail.mailersend.{k} in config")
    else:
        smtp = mail.get("smtp") or {}
        if not str(smtp.get("host") or "").strip():
            raise ValueError("Missing mail.smtp.host in config (set SMTP_HOST)")


def load_config(
    config_path: str | Path | None = None, *, force_reload: bool = False, validate: bool = True
) -> dict[str, Any]:
    """
    Load the YAML config once and reuse it across the process.

    - Reads `config/config.yaml` by default.
    - Applies environment overrides (secrets normally only live there).
    - Returns a deep copy so callers can safely mutate local copies.

    `validate=False` is for admin tooling that only touches part of the config;
    such loads bypass the cache.
    """
    global _cached, _cached_path

    path = Path(config_path) if config_path else default_config_path()
    path_str = str(path.resolve())

    with _cache_lock:
        if validate and not force_reload and _cached is not None and _cached_path == path_str:
            return deepcopy(_cached)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}

        if not isinstance(cfg, dict):
            raise ValueError(f"Config must be a YAML mapping (dict); got {type(cfg).__name__}")

        _apply_env_overrides(cfg)
        if not validate:
            return cfg
        validate_config(cfg)

        _cached = cfg
        _cached_path = path_str
        logger.info("Loaded config from %s", path_str)
        return deepcopy(cfg)
