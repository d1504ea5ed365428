"""Tests for the Supabase food record repository."""

import logging
from dataclasses import dataclass, field
from datetime import date

import httpx
import pytest

from macro_tracker.adapters.supabase_food_record_repository import (
    SupabaseFoodRecordRepository,
)
from macro_tracker.domain.errors import StorageUnavailableError
from macro_tracker.domain.records import FoodRecord
from tests.conftest import USER_ID

KEY = "2025-01-01#1735725600000#rec-1"


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def like(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("like", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(key: str = KEY, **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "user_id": USER_ID,
        "date_timestamp": key,
        "name": "Oatmeal",
        "calories": 150,
        "protein": 5.5,
        "carbs": 27,
        "fat": 3,
        "quantity": None,
        "created_at": "2025-01-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_put_record_inserts_row() -> None:
    client = FakeSupabaseClient()
    record = FoodRecord(
        user_id=USER_ID,
        day=date(2025, 1, 1),
        timestamp=1735725600000,
        record_id="rec-1",
        name="Oatmeal",
        calories=None,
        protein=5.5,
        carbs=27,
        fat=3,
    )

    SupabaseFoodRecordRepository(client).put_record(record)

    payload = client.table("food_records").last_payload
    assert isinstance(payload, dict)
    assert payload["date_timestamp"] == KEY
    assert payload["calories"] is None


def test_list_by_prefix_filters_owner_and_prefix() -> None:
    client = FakeSupabaseClient()
    table = client.table("food_records")
    second = _row("2025-01-01#1735729200000#rec-2", calories=None)
    table.queue("select", [_row(), second])

    repository = SupabaseFoodRecordRepository(client)
    records = repository.list_by_prefix(USER_ID, "2025-01-01#")

    assert table.last_filters == [
        ("eq", "user_id", USER_ID),
        ("like", "date_timestamp", "2025-01-01#%"),
    ]
    assert [record.record_id for record in records] == ["rec-1", "rec-2"]
    assert records[0].calories == 150
    assert records[1].calories is None
    assert records[0].created_at == "2025-01-01T10:00:00+00:00"


def test_get_record_returns_row_owned_by_anyone() -> None:
    client = FakeSupabaseClient()
    table = client.table("food_records")
    table.queue("select", [_row(user_id="user-2")])

    record = SupabaseFoodRecordRepository(client).get_record(USER_ID, KEY)

    assert record is not None
    assert record.user_id == "user-2"
    assert table.last_filters == [("eq", "date_timestamp", KEY)]


def test_get_record_missing_returns_none() -> None:
    repository = SupabaseFoodRecordRepository(FakeSupabaseClient())

    assert repository.get_record(USER_ID, KEY) is None


def test_delete_record_scopes_to_owner() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseFoodRecordRepository(client, table_name="records")

    repository.delete_record(USER_ID, KEY)

    assert client.table("records").last_filters == [
        ("eq", "user_id", USER_ID),
        ("eq", "date_timestamp", KEY),
    ]


def test_transport_errors_become_storage_unavailable() -> None:
    client = FakeSupabaseClient()
    client.table("food_records").error = httpx.ConnectError("connection refused")

    with pytest.raises(StorageUnavailableError):
        SupabaseFoodRecordRepository(client).list_by_prefix(USER_ID, "2025-01-01#")


def test_list_by_prefix_skips_malformed_keys(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("macro_tracker"), "propagate", True)
    client = FakeSupabaseClient()
    client.table("food_records").queue(
        "select", [_row("2025-01-01#1#ok", calories=100), _row("2025-01-01#legacy")]
    )

    with caplog.at_level("WARNING", logger="macro_tracker"):
        records = SupabaseFoodRecordRepository(client).list_by_prefix(
            USER_ID, "2025-01-01#"
        )

    assert [record.key for record in records] == ["2025-01-01#1#ok"]
    assert records[0].calories == 100
    assert any(
        getattr(entry, "key", None) == "2025-01-01#legacy" for entry in caplog.records
    )
