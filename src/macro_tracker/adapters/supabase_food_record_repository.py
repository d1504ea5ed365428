"""Supabase repository for food records."""

import logging
from dataclasses import dataclass

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from macro_tracker.domain.errors import InvalidRecordKeyError, StorageUnavailableError
from macro_tracker.domain.keys import parse_record_key
from macro_tracker.domain.records import FoodRecord
from macro_tracker.services.records import FoodRecordRepository

_COLUMNS = (
    "user_id, date_timestamp, name, calories, protein, carbs, fat, "
    "quantity, created_at"
)

_BACKEND_ERRORS = (APIError, httpx.HTTPError)

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseFoodRecordRepository(FoodRecordRepository):
    """Supabase implementation of the food records table."""

    client: Client
    table_name: str = "food_records"

    def put_record(self, record: FoodRecord) -> None:
        """Insert a record row."""
        try:
            self.client.table(self.table_name).insert(
                {
                    "user_id": record.user_id,
                    "date_timestamp": record.key,
                    "name": record.name,
                    "calories": record.calories,
                    "protein": record.protein,
                    "carbs": record.carbs,
                    "fat": record.fat,
                    "quantity": record.quantity,
                    "created_at": record.created_at,
                }
            ).execute()
        except _BACKEND_ERRORS as exc:
            raise StorageUnavailableError("Failed to write food record") from exc

    def list_by_prefix(self, user_id: str, prefix: str) -> list[FoodRecord]:
        """Return the user's rows whose sort key starts with the prefix."""
        try:
            response = (
                self.client.table(self.table_name)
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .like("date_timestamp", f"{prefix}%")
                .execute()
            )
        except _BACKEND_ERRORS as exc:
            raise StorageUnavailableError("Failed to query food records") from exc
        return _parse_rows(response.data or [])

    def get_record(self, user_id: str, key: str) -> FoodRecord | None:
        """Return the row stored at the key regardless of owner."""
        try:
            response = (
                self.client.table(self.table_name)
                .select(_COLUMNS)
                .eq("date_timestamp", key)
                .limit(1)
                .execute()
            )
        except _BACKEND_ERRORS as exc:
            raise StorageUnavailableError("Failed to read food record") from exc
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def delete_record(self, user_id: str, key: str) -> None:
        """Delete the user's row at the key."""
        try:
            self.client.table(self.table_name).delete().eq("user_id", user_id).eq(
                "date_timestamp", key
            ).execute()
        except _BACKEND_ERRORS as exc:
            raise StorageUnavailableError("Failed to delete food record") from exc


def _parse_rows(rows: list[dict[str, object]]) -> list[FoodRecord]:
    records = []
    for row in rows:
        try:
            records.append(_parse_row(row))
        except InvalidRecordKeyError:
            _logger.warning(
                "Skipping food record with malformed sort key",
                extra={"user_id": row.get("user_id"), "key": row.get("date_timestamp")},
            )
    return records


def _parse_row(row: dict[str, object]) -> FoodRecord:
    key = parse_record_key(str(row.get("date_timestamp", "")))
    calories = row.get("calories")
    quantity = row.get("quantity")
    created_at = row.get("created_at")
    return FoodRecord(
        user_id=str(row.get("user_id", "")),
        day=key.day,
        timestamp=key.timestamp,
        record_id=key.record_id,
        name=str(row.get("name", "")),
        calories=float(calories) if calories is not None else None,
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        quantity=float(quantity) if quantity is not None else None,
        created_at=str(created_at) if created_at else None,
    )
