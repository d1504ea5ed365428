"""Domain models for derived statistics."""

from dataclasses import dataclass
from datetime import date

from macro_tracker.domain.records import DailyTotals


@dataclass(frozen=True)
class RollingAverage:
    """Average daily intake over a window of days.

    ``window_end`` is already clamped to today, so it precedes
    ``window_start`` when the whole window lies in the future. ``average`` is
    ``None`` when no day of the window has happened yet.
    """

    window_start: date
    window_end: date
    average: float | None
    totals: DailyTotals
    days_included: int
    days_remaining: int


@dataclass(frozen=True)
class DashboardAverages:
    """Both rolling windows for a selected date."""

    trailing: RollingAverage | None
    centered: RollingAverage | None


@dataclass(frozen=True)
class MacroSplit:
    """Share of macro calories contributed by each macronutrient."""

    protein_pct: float
    carbs_pct: float
    fat_pct: float
