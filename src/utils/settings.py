"""
Typed worker settings.

`load_settings` turns the validated config mapping into one immutable object
tree. It is built once at startup and handed to each component; nothing below
the runner reads the environment or the YAML file again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    connect_timeout_seconds: int = 3
    pool_min: int = 1
    pool_max: int = 10


@dataclass(frozen=True)
class QueueSettings:
    redis_addr: str = "127.0.0.1:6379"
    redis_password: str = ""
    redis_db: int = 0
    queue_name: str = "default"
    concurrency: int = 10
    pool: str = "threads"
    max_retries: int = 5
    retry_backoff_max_seconds: int = 600

    @property
    def broker_url(self) -> str:
        auth = f":{quote(self.redis_password, safe='')}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_addr}/{int(self.redis_db)}"


@dataclass(frozen=True)
class MailerSendSettings:
    api_url: str = "https://api.mailersend.com/v1/email"
    api_key: str = ""
    welcome_template_id: str = ""
    signal_template_id: str = ""


@dataclass(frozen=True)
class SmtpSettings:
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True


@dataclass(frozen=True)
class MailSettings:
    provider: str
    sender_name: str
    sender_email: str
    product_name: str = "TradeSignal"
    product_link: str = ""
    timeout_seconds: float = 5.0
    event_timezone: str = "UTC"
    mailersend: MailerSendSettings = field(default_factory=MailerSendSettings)
    smtp: SmtpSettings = field(default_factory=SmtpSettings)


@dataclass(frozen=True)
class WorkerSettings:
    database: DatabaseSettings
    queue: QueueSettings
    mail: MailSettings


def load_database_settings(config: dict[str, Any]) -> DatabaseSettings:
    d = config.get("database") or {}
    return DatabaseSettings(
        url=str(d.get("url") or "").strip(),
        connect_timeout_seconds=int(d.get("connect_timeout_seconds", 3)),
        pool_min=int(d.get("pool_min", 1)),
        pool_max=int(d.get("pool_max", 10)),
    )


def load_queue_settings(config: dict[str, Any]) -> QueueSettings:
    q = config.get("queue") or {}
    return QueueSettings(
        redis_addr=str(q.get("redis_addr", "127.0.0.1:6379")).strip(),
        redis_password=str(q.get("redis_password") or ""),
        redis_db=int(q.get("redis_db", 0)),
        queue_name=str(q.get("queue_name", "default")),
        concurrency=int(q.get("concurrency", 10)),
        pool=str(q.get("pool", "threads")),
        max_retries=int(q.get("max_retries", 5)),
        retry_backoff_max_seconds=int(q.get("retry_backoff_max_seconds", 600)),
    )


def load_mail_settings(config: dict[str, Any]) -> MailSettings:
    m = config.get("mail") or {}
    ms = m.get("mailersend") or {}
    smtp = m.get("smtp") or {}
    return MailSettings(
        provider=str(m.get("provider", "mailersend")).strip().lower(),
        sender_name=str(m.get("sender_name", "TradeSignal")),
        sender_email=str(m.get("sender_email") or "").strip(),
        product_name=str(m.get("product_name", "TradeSignal")),
        product_link=str(m.get("product_link") or ""),
        timeout_seconds=float(m.get("timeout_seconds", 5)),
        event_timezone=str(m.get("event_timezone") or "UTC"),
        mailersend=MailerSendSettings(
            api_url=str(ms.get("api_url", "https://api.mailersend.com/v1/email")),
            api_key=str(ms.get("api_key") or ""),
            welcome_template_id=str(ms.get("welcome_template_id") or ""),
            signal_template_id=str(ms.get("signal_template_id") or ""),
        ),
        smtp=SmtpSettings(
            host=str(smtp.get("host") or ""),
            port=int(smtp.get("port", 587)),
            username=str(smtp.get("username") or ""),
            password=str(smtp.get("password") or ""),
            use_tls=bool(smtp.get("use_tls", True)),
        ),
    )


def load_settings(config: dict[str, Any]) -> WorkerSettings:
    return WorkerSettings(
        database=load_database_settings(config),
        queue=load_queue_settings(config),
        mail=load_mail_settings(config),
    )
