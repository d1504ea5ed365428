"""Domain models for food records and their daily totals."""

from dataclasses import dataclass, field
from datetime import date

from macro_tracker.domain.keys import build_record_key


@dataclass(frozen=True)
class FoodRecord:
    """A single logged food entry."""

    user_id: str
    day: date
    timestamp: int
    record_id: str
    name: str
    calories: float | None
    protein: float
    carbs: float
    fat: float
    quantity: float | None = None
    created_at: str | None = None

    @property
    def key(self) -> str:
        """Composite sort key of the record."""
        return build_record_key(self.day.isoformat(), self.timestamp, self.record_id)


@dataclass(frozen=True)
class DailyTotals:
    """Summed calories and macros for one day."""

    day: date
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    record_count: int = 0


@dataclass(frozen=True)
class BulkFailure:
    """A key that could not be deleted and why."""

    key: str
    reason: str


@dataclass
class BulkResult:
    """Outcome of a best-effort bulk delete."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)
