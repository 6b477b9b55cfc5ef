from datetime import datetime

from src.domain.models import Task, User


def test_task_from_row_and_to_dict():
    row = {
        "id": 3,
        "user_id": "u1",
        "stock": "AAPL",
        "kline_type": "1d",
        "buy_strategy": "macd_cross",
        "sell_strategy": "rsi_exit",
        "status": "running",
        "timestamp": datetime(2024, 5, 6, 7, 8, 9),
    }
    task = Task.from_row(row)
    assert task.is_running
    assert task.to_dict()["timestamp"] == "2024-05-06T07:08:09"
    assert task.to_dict()["id"] == 3


def test_user_from_row_maps_camel_case_column_and_hides_password():
    user = User.from_row(
        {"id": "u1", "name": "Ada", "email": "ada@example.com", "password": "hash", "emailVerified": None, "image": None}
    )
    assert user.email_verified is None
    assert "password" not in user.to_dict()
