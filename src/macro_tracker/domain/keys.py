"""Composite sort-key scheme for food records.

Food records share one table with a partition per user. The sort key is
``<date>#<timestamp>#<recordId>``: records of a day sort together, then by
creation time, and the record id keeps keys unique within a millisecond. A
single day is fetched with a ``<date>#`` prefix scan.
"""

import re
from dataclasses import dataclass
from datetime import date

from macro_tracker.domain.errors import InvalidDateFormatError, InvalidRecordKeyError

SEPARATOR = "#"

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class FoodRecordKey:
    """Decoded parts of a food record sort key."""

    day: date
    timestamp: int
    record_id: str

    def encode(self) -> str:
        """Return the composite sort key string."""
        return build_record_key(self.day.isoformat(), self.timestamp, self.record_id)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string into a calendar day."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidDateFormatError(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDateFormatError(value) from exc


def build_day_prefix(day: str) -> str:
    """Return the range-query prefix for a single day."""
    parse_date(day)
    return f"{day}{SEPARATOR}"


def build_record_key(day: str, timestamp: int, record_id: str) -> str:
    """Return the sort key for a record."""
    return f"{day}{SEPARATOR}{timestamp}{SEPARATOR}{record_id}"


def parse_record_date(key: str) -> date:
    """Return the calendar day stored in the first key segment."""
    day, _, _ = key.partition(SEPARATOR)
    return parse_date(day)


def parse_record_key(key: str) -> FoodRecordKey:
    """Split a sort key into its day, timestamp and record id."""
    parts = key.split(SEPARATOR, maxsplit=2)
    if len(parts) != 3 or not parts[1].isdigit() or not parts[2]:  # noqa: PLR2004
        raise InvalidRecordKeyError(key)
    try:
        day = parse_date(parts[0])
    except InvalidDateFormatError as exc:
        raise InvalidRecordKeyError(key) from exc
    return FoodRecordKey(day=day, timestamp=int(parts[1]), record_id=parts[2])
