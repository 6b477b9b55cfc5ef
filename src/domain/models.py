from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

TASK_STATUS_RUNNING = "running"

TASK_COLUMNS = ("id", "user_id", "stock", "kline_type", "buy_strategy", "sell_strategy", "status", "timestamp")


@dataclass(frozen=True)
class Task:
    id: int
    user_id: str
    stock: str
    kline_type: str
    buy_strategy: str
    sell_strategy: str
    status: str
    timestamp: datetime | None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Task":
        return cls(
            id=int(row["id"]),
            user_id=row["user_id"],
            stock=row["stock"],
            kline_type=row["kline_type"],
            buy_strategy=row["buy_strategy"],
            sell_strategy=row["sell_strategy"],
            status=row["status"],
            timestamp=row.get("timestamp"),
        )

    @property
    def is_running(self) -> bool:
        return self.status == TASK_STATUS_RUNNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": int(self.id),
            "user_id": self.user_id,
            "stock": self.stock,
            "kline_type": self.kline_type,
            "buy_strategy": self.buy_strategy,
            "sell_strategy": self.sell_strategy,
            "status": self.status,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class User:
    """A row of the externally owned "User" table. Read-only from this worker."""

    id: str
    name: str
    email: str
    password: str
    email_verified: datetime | None = None
    image: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=row["id"],
            name=row["name"] or "",
            email=row["email"] or "",
            password=row["password"] or "",
            email_verified=row.get("emailVerified"),
            image=row.get("image"),
        )

    def to_dict(self) -> dict[str, Any]:
        # The password hash never leaves the store layer.
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "email_verified": self.email_verified.isoformat() if self.email_verified else None,
            "image": self.image,
        }
