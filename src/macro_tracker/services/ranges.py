"""Per-day totals across a bounded range of calendar days."""

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from macro_tracker.domain.errors import InvalidRangeError, RangeTooLargeError
from macro_tracker.domain.keys import parse_date
from macro_tracker.domain.records import DailyTotals
from macro_tracker.services.aggregation import aggregate_day, zero_totals
from macro_tracker.services.records import RecordStore

MAX_RANGE_DAYS = 30

_logger = logging.getLogger(__name__)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_in_range(start: date, end: date) -> int:
    """Inclusive number of days between two dates."""
    return (end - start).days + 1


def validate_range(start_date: str, end_date: str) -> tuple[date, date]:
    """Parse and bound-check a range, returning the parsed days."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start > end:
        raise InvalidRangeError("startDate must be less than or equal to endDate")
    if days_in_range(start, end) > MAX_RANGE_DAYS:
        raise RangeTooLargeError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")
    return start, end


@dataclass
class RangeAggregator:
    """Computes daily totals for every day of a range."""

    store: RecordStore

    async def aggregate_range(
        self, user_id: str, start_date: str, end_date: str
    ) -> dict[str, DailyTotals]:
        """Return a day-to-totals mapping with one entry per day in the range.

        Days are queried concurrently. A day whose query fails is reported
        with zero totals instead of failing the whole range.
        """
        start, end = validate_range(start_date, end_date)
        days = list(iter_days(start, end))
        results = await asyncio.gather(
            *(self._day_totals(user_id, day) for day in days)
        )
        return {totals.day.isoformat(): totals for totals in results}

    async def _day_totals(self, user_id: str, day: date) -> DailyTotals:
        try:
            records = await asyncio.to_thread(
                self.store.get_by_date_prefix, user_id, day.isoformat()
            )
        except Exception:
            _logger.warning(
                "Daily totals query failed, using zero totals",
                extra={"user_id": user_id, "day": day.isoformat()},
                exc_info=True,
            )
            return zero_totals(day)
        return aggregate_day(records, day)
