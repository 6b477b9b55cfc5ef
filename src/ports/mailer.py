from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class OutboundEmail:
    sender_name: str
    sender_email: str
    recipient_name: str
    recipient_email: str
    subject: str
    template_id: str = ""
    variables: dict[str, Any] = field(default_factory=dict)
    html: str = ""
    text: str = ""


class MailerPort(Protocol):
    def send(self, message: OutboundEmail) -> None: ...
