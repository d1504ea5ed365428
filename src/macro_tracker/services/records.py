"""Per-user food record store on top of a single-table repository."""

import logging
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.errors import (
    ForbiddenError,
    MacroTrackerError,
    NotFoundError,
    StorageUnavailableError,
)
from macro_tracker.domain.keys import build_day_prefix
from macro_tracker.domain.records import BulkFailure, BulkResult, FoodRecord

_logger = logging.getLogger(__name__)


class FoodRecordRepository(Protocol):
    """Persistence interface for the food records table.

    Implementations raise ``StorageUnavailableError`` for backend failures.
    """

    def put_record(self, record: FoodRecord) -> None:
        """Write a record under its composite key."""

    def list_by_prefix(self, user_id: str, prefix: str) -> list[FoodRecord]:
        """Return the user's records whose sort key starts with the prefix."""

    def get_record(self, user_id: str, key: str) -> FoodRecord | None:
        """Return the record stored at the key, if any."""

    def delete_record(self, user_id: str, key: str) -> None:
        """Delete the record at the key."""


@dataclass
class RecordStore:
    """Store for food records partitioned by user."""

    repository: FoodRecordRepository

    def put(self, user_id: str, record: FoodRecord) -> None:
        """Persist one record for the user."""
        if record.user_id != user_id:
            raise ForbiddenError(record.key)
        self.repository.put_record(record)

    def get_by_date_prefix(self, user_id: str, day: str) -> list[FoodRecord]:
        """Return all of the user's records for a day, unordered."""
        prefix = build_day_prefix(day)
        return self.repository.list_by_prefix(user_id, prefix)

    def delete_by_key(self, user_id: str, key: str) -> None:
        """Delete the record at the exact key after checking ownership."""
        existing = self.repository.get_record(user_id, key)
        if existing is None:
            raise NotFoundError(key)
        if existing.user_id != user_id:
            _logger.warning(
                "Rejected delete of foreign food record",
                extra={"user_id": user_id, "owner_id": existing.user_id, "key": key},
            )
            raise ForbiddenError(key)
        self.repository.delete_record(user_id, key)

    def delete_bulk(self, user_id: str, keys: list[str]) -> BulkResult:
        """Delete each key independently and report per-key outcomes."""
        result = BulkResult()
        for key in keys:
            try:
                self.delete_by_key(user_id, key)
            except MacroTrackerError as exc:
                result.failed.append(BulkFailure(key=key, reason=_failure_reason(exc)))
                continue
            result.succeeded.append(key)
        if result.failed:
            _logger.info(
                "Bulk delete finished with failures: deleted=%s failed=%s",
                len(result.succeeded),
                len(result.failed),
                extra={"user_id": user_id},
            )
        return result


def _failure_reason(exc: MacroTrackerError) -> str:
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, ForbiddenError):
        return "forbidden"
    if isinstance(exc, StorageUnavailableError):
        return "storage_unavailable"
    return type(exc).__name__
