"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import uuid4

import pytest

from macro_tracker.config import Settings
from macro_tracker.containers import AppContainer, build_container
from macro_tracker.domain.errors import StorageUnavailableError
from macro_tracker.domain.records import FoodRecord
from macro_tracker.services.records import FoodRecordRepository

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@dataclass
class InMemoryFoodRecordRepository(FoodRecordRepository):
    """In-memory food record table keyed by sort key."""

    records: dict[str, FoodRecord] = field(default_factory=dict)
    failing_prefixes: set[str] = field(default_factory=set)
    failing_keys: set[str] = field(default_factory=set)
    queried_prefixes: list[str] = field(default_factory=list)

    def put_record(self, record: FoodRecord) -> None:
        self.records[record.key] = record

    def list_by_prefix(self, user_id: str, prefix: str) -> list[FoodRecord]:
        self.queried_prefixes.append(prefix)
        if prefix in self.failing_prefixes:
            raise StorageUnavailableError("simulated outage")
        return [
            record
            for key, record in self.records.items()
            if record.user_id == user_id and key.startswith(prefix)
        ]

    def get_record(self, user_id: str, key: str) -> FoodRecord | None:
        if key in self.failing_keys:
            raise StorageUnavailableError("simulated outage")
        return self.records.get(key)

    def delete_record(self, user_id: str, key: str) -> None:
        self.records.pop(key, None)


def make_record(  # noqa: PLR0913
    day: str = "2025-01-01",
    *,
    user_id: str = USER_ID,
    calories: float | None = 100,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    timestamp: int = 1735725600000,
    record_id: str | None = None,
    name: str = "Oatmeal",
) -> FoodRecord:
    return FoodRecord(
        user_id=user_id,
        day=date.fromisoformat(day),
        timestamp=timestamp,
        record_id=record_id or str(uuid4()),
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="dynamodb",
        food_records_table="food_records_test",
        aws_region="us-east-1",
        default_timezone="UTC",
    )


@pytest.fixture
def repository() -> InMemoryFoodRecordRepository:
    return InMemoryFoodRecordRepository()


@pytest.fixture
def container(
    settings: Settings, repository: InMemoryFoodRecordRepository
) -> AppContainer:
    return build_container(settings, repository=repository)
