"""Rolling calorie averages for the dashboard."""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from macro_tracker.domain.records import DailyTotals
from macro_tracker.domain.stats import DashboardAverages, RollingAverage
from macro_tracker.services.aggregation import add_totals, zero_totals
from macro_tracker.services.ranges import RangeAggregator, days_in_range

TRAILING_DAYS_BEFORE = 6
CENTERED_DAYS_AROUND = 3

_logger = logging.getLogger(__name__)


@dataclass
class RollingStatsService:
    """Derives windowed averages from per-day range totals.

    ``today`` is always supplied by the caller so windows can be clamped
    without reading a wall clock. Days after ``today`` are never queried.
    """

    range_aggregator: RangeAggregator

    async def trailing_average(
        self, user_id: str, selected: date, today: date
    ) -> RollingAverage:
        """Average over the seven days ending at the selected date."""
        return await self._window_average(
            user_id,
            start=selected - timedelta(days=TRAILING_DAYS_BEFORE),
            nominal_end=selected,
            today=today,
        )

    async def centered_average(
        self, user_id: str, selected: date, today: date
    ) -> RollingAverage:
        """Average over three days either side of the selected date."""
        return await self._window_average(
            user_id,
            start=selected - timedelta(days=CENTERED_DAYS_AROUND),
            nominal_end=selected + timedelta(days=CENTERED_DAYS_AROUND),
            today=today,
        )

    async def dashboard(
        self, user_id: str, selected: date, today: date
    ) -> DashboardAverages:
        """Compute both windows; a failed window is reported as None."""
        trailing, centered = await asyncio.gather(
            _or_none(self.trailing_average(user_id, selected, today), "trailing"),
            _or_none(self.centered_average(user_id, selected, today), "centered"),
        )
        return DashboardAverages(trailing=trailing, centered=centered)

    async def _window_average(
        self, user_id: str, start: date, nominal_end: date, today: date
    ) -> RollingAverage:
        window_days = days_in_range(start, nominal_end)
        window_end = min(nominal_end, today)
        remaining = min(window_days, max(0, (nominal_end - today).days))
        if window_end < start:
            return RollingAverage(
                window_start=start,
                window_end=window_end,
                average=None,
                totals=zero_totals(start),
                days_included=0,
                days_remaining=remaining,
            )

        daily = await self.range_aggregator.aggregate_range(
            user_id, start.isoformat(), window_end.isoformat()
        )
        totals = _sum_days(start, daily.values())
        days_included = len(daily)
        return RollingAverage(
            window_start=start,
            window_end=window_end,
            average=totals.calories / days_included if days_included else None,
            totals=totals,
            days_included=days_included,
            days_remaining=remaining,
        )


def _sum_days(start: date, daily: Iterable[DailyTotals]) -> DailyTotals:
    totals = zero_totals(start)
    for entry in daily:
        totals = add_totals(totals, entry)
    return totals


async def _or_none(
    awaitable: Awaitable[RollingAverage], label: str
) -> RollingAverage | None:
    try:
        return await awaitable
    except Exception:
        _logger.warning("Rolling %s average failed", label, exc_info=True)
        return None
