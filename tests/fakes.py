# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.models import Task, User
from src.ports.mailer import OutboundEmail
from src.utils.settings import MailerSendSettings, MailSettings
from src.worker.handlers import HandlerContext


def make_mail_settings(**overrides) -> MailSettings:
    base = dict(
        provider="mailersend",
        sender_name="TradeSignal",
        sender_email="no-reply@tradesignal.test",
        product_name="TradeSignal",
        product_link="https://tradesignal.test",
        mailersend=MailerSendSettings(
            api_url="https://mail.test/v1/email",
            api_key="test-key",
            welcome_template_id="tmpl-welcome",
            signal_template_id="tmpl-signal",
        ),
    )
    base.update(overrides)
    return MailSettings(**base)


class FakeMailer:
    """
    MailerPort double: records messages, or raises `error` on every send.
    """

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[OutboundEmail] = []

    def send(self, message: OutboundEmail) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(message)


@dataclass
class InMemoryRecords:
    tasks: dict[int, Task] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    task_lookups: list[int] = field(default_factory=list)
    user_lookups: list[str] = field(default_factory=list)

    def add_task(self, task_id: int, user_id: str, stock: str = "AAPL", status: str = "running") -> Task:
        task = Task(
            id=task_id,
            user_id=user_id,
            stock=stock,
            kline_type="1d",
            buy_strategy="macd_cross",
            sell_strategy="rsi_exit",
            status=status,
            timestamp=datetime(2024, 1, 2, 3, 4, 5),
        )
        self.tasks[task_id] = task
        return task

    def add_user(self, user_id: str, name: str = "Ada", email: str = "ada@example.com") -> User:
        user = User(id=user_id, name=name, email=email, password="hash")
        self.users[user_id] = user
        return user

    def get_task(self, task_id: int) -> Task | None:
        self.task_lookups.append(task_id)
        return self.tasks.get(task_id)

    def get_user(self, user_id: str) -> User | None:
        self.user_lookups.append(user_id)
        return self.users.get(user_id)


def make_context(records: InMemoryRecords | None = None, mailer: FakeMailer | None = None, **mail_overrides) -> HandlerContext:
    records = records or InMemoryRecords()
    return HandlerContext(
        mailer=mailer or FakeMailer(),
        mail=make_mail_settings(**mail_overrides),
        get_task=records.get_task,
        get_user=records.get_user,
    )
