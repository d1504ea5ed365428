"""Food logging use cases behind the HTTP surface."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import uuid4

from macro_tracker.domain.errors import FutureDateError, InvalidFoodRecordError
from macro_tracker.domain.keys import parse_date
from macro_tracker.domain.records import BulkResult, FoodRecord
from macro_tracker.services.aggregation import (
    calories_from_macros,
    sort_most_recent_first,
)
from macro_tracker.services.records import RecordStore

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class FoodLogService:
    """Creates, lists and deletes a user's food records."""

    store: RecordStore
    clock: Callable[[], datetime] = field(default=_utc_now)
    id_factory: Callable[[], str] = field(default=lambda: str(uuid4()))

    def create_record(  # noqa: PLR0913
        self,
        user_id: str,
        *,
        name: str,
        protein: float,
        carbs: float,
        fat: float,
        today: date,
        calories: float | None = None,
        quantity: float | None = None,
        day: str | None = None,
    ) -> FoodRecord:
        """Validate and persist one food record.

        Calories default to the macro-derived value and are stored unrounded.
        The record day defaults to ``today`` and may not lie after it.
        """
        cleaned_name = (name or "").strip()
        if not cleaned_name:
            raise InvalidFoodRecordError("name must not be empty")
        for label, value in (("protein", protein), ("carbs", carbs), ("fat", fat)):
            _require_non_negative(label, value)
        if calories is not None:
            _require_non_negative("calories", calories)
        if quantity is not None:
            _require_non_negative("quantity", quantity)

        record_day = parse_date(day) if day is not None else today
        if record_day > today:
            raise FutureDateError(
                f"Cannot log food for {record_day.isoformat()}, "
                f"which is after {today.isoformat()}"
            )

        now = self.clock()
        record = FoodRecord(
            user_id=user_id,
            day=record_day,
            timestamp=int(now.timestamp() * 1000),
            record_id=self.id_factory(),
            name=cleaned_name,
            calories=(
                calories
                if calories is not None
                else calories_from_macros(protein, carbs, fat)
            ),
            protein=protein,
            carbs=carbs,
            fat=fat,
            quantity=quantity,
            created_at=now.isoformat(),
        )
        self.store.put(user_id, record)
        _logger.info(
            "Food record created",
            extra={"user_id": user_id, "key": record.key},
        )
        return record

    def list_day(self, user_id: str, day: str) -> list[FoodRecord]:
        """Return a day's records, most recent first."""
        return sort_most_recent_first(self.store.get_by_date_prefix(user_id, day))

    def delete_record(self, user_id: str, key: str) -> None:
        """Delete one record owned by the user."""
        self.store.delete_by_key(user_id, key)
        _logger.info("Food record deleted", extra={"user_id": user_id, "key": key})

    def delete_records(self, user_id: str, keys: list[str]) -> BulkResult:
        """Delete several records, tolerating per-key failures."""
        return self.store.delete_bulk(user_id, keys)


def _require_non_negative(label: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidFoodRecordError(f"{label} must be a number")
    if not math.isfinite(value) or value < 0:
        raise InvalidFoodRecordError(f"{label} must be a non-negative number")
