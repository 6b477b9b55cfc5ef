import json

import pytest

from src.domain.errors import BadPayloadError
from src.domain.payloads import SignalEmailPayload, WelcomeEmailPayload


def test_welcome_payload_decodes_producer_field_names():
    raw = json.dumps({"UserName": "Ada", "UserEmail": "ada@example.com", "ConfirmURL": "https://x.test/c?t=1"})
    p = WelcomeEmailPayload.decode(raw)
    assert p == WelcomeEmailPayload(user_name="Ada", user_email="ada@example.com", confirm_url="https://x.test/c?t=1")
    assert p.is_complete()


def test_welcome_payload_accepts_bytes_and_dict():
    doc = {"UserName": "Ada", "UserEmail": "ada@example.com", "ConfirmURL": "u"}
    assert WelcomeEmailPayload.decode(json.dumps(doc).encode("utf-8")) == WelcomeEmailPayload.decode(doc)


def test_missing_fields_decode_to_empty_values():
    p = WelcomeEmailPayload.decode('{"UserName": "Ada"}')
    assert p.user_email == "" and p.confirm_url == ""
    assert not p.is_complete()

    s = SignalEmailPayload.decode('{"Signal": "BUY"}')
    assert s.task_id == 0 and s.event_time == 0 and s.strategy == ""
    assert not s.is_complete()


def test_signal_payload_decodes():
    raw = '{"TaskID": 42, "EventTime": 1700000000, "Signal": "BUY", "Strategy": "macd_cross"}'
    p = SignalEmailPayload.decode(raw)
    assert p.task_id == 42
    assert p.event_time == 1700000000
    assert p.is_complete()


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '"just a string"',
        b"\xff\xfe",
        '{"TaskID": "42", "EventTime": 1, "Signal": "BUY", "Strategy": "x"}',
        '{"TaskID": true, "EventTime": 1, "Signal": "BUY", "Strategy": "x"}',
        '{"TaskID": 1, "EventTime": 1.5, "Signal": "BUY", "Strategy": "x"}',
        '{"TaskID": 1, "EventTime": 1, "Signal": 7, "Strategy": "x"}',
    ],
)
def test_signal_payload_rejects_malformed_input(raw):
    with pytest.raises(BadPayloadError):
        SignalEmailPayload.decode(raw)


def test_to_json_uses_wire_field_names():
    doc = json.loads(SignalEmailPayload(task_id=3, event_time=10, signal="SELL", strategy="rsi").to_json())
    assert doc == {"TaskID": 3, "EventTime": 10, "Signal": "SELL", "Strategy": "rsi"}

    doc = json.loads(WelcomeEmailPayload(user_name="A", user_email="a@x", confirm_url="u").to_json())
    assert set(doc) == {"UserName", "UserEmail", "ConfirmURL"}
