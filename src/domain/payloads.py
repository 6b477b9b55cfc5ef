"""
Job payloads carried on the queue.

Producers and the worker agree on the JSON field names below (`UserName`,
`TaskID`, ...). Absent fields decode to empty values so that handlers can
decide whether an incomplete job is dropped; anything that is not a JSON
object with correctly typed values is a bad payload.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from src.domain.errors import BadPayloadError

RawPayload = str | bytes | bytearray | dict


def _decode_object(raw: RawPayload) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BadPayloadError(f"payload is not valid UTF-8: {exc}") from exc
    if not isinstance(raw, str):
        raise BadPayloadError(f"payload must be JSON text; got {type(raw).__name__}")
    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BadPayloadError(f"payload is not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise BadPayloadError(f"payload must be a JSON object; got {type(doc).__name__}")
    return doc


def _str_field(doc: dict[str, Any], key: str) -> str:
    value = doc.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BadPayloadError(f"{key} must be a string; got {type(value).__name__}")
    return value


def _int_field(doc: dict[str, Any], key: str) -> int:
    value = doc.get(key)
    if value is None:
        return 0
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadPayloadError(f"{key} must be an integer; got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class WelcomeEmailPayload:
    user_name: str
    user_email: str
    confirm_url: str

    @classmethod
    def decode(cls, raw: RawPayload) -> "WelcomeEmailPayload":
        doc = _decode_object(raw)
        return cls(
            user_name=_str_field(doc, "UserName"),
            user_email=_str_field(doc, "UserEmail"),
            confirm_url=_str_field(doc, "ConfirmURL"),
        )

    def is_complete(self) -> bool:
        return bool(self.user_name and self.user_email and self.confirm_url)

    def to_json(self) -> str:
        return json.dumps({"UserName": self.user_name, "UserEmail": self.user_email, "ConfirmURL": self.confirm_url})


@dataclass(frozen=True)
class SignalEmailPayload:
    task_id: int
    event_time: int
    signal: str
    strategy: str

    @classmethod
    def decode(cls, raw: RawPayload) -> "SignalEmailPayload":
        doc = _decode_object(raw)
        return cls(
            task_id=_int_field(doc, "TaskID"),
            event_time=_int_field(doc, "EventTime"),
            signal=_str_field(doc, "Signal"),
            strategy=_str_field(doc, "Strategy"),
        )

    def is_complete(self) -> bool:
        return bool(self.task_id and self.event_time and self.signal and self.strategy)

    def to_json(self) -> str:
        return json.dumps(
            {
                "TaskID": int(self.task_id),
                "EventTime": int(self.event_time),
                "Signal": self.signal,
                "Strategy": self.strategy,
            }
        )
