"""Daily calorie and macro aggregation."""

from collections.abc import Iterable
from datetime import date

from macro_tracker.domain.records import DailyTotals, FoodRecord
from macro_tracker.domain.stats import MacroSplit

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


def calories_from_macros(protein: float, carbs: float, fat: float) -> float:
    """Return calories implied by macro grams."""
    return (
        protein * PROTEIN_KCAL_PER_G
        + carbs * CARBS_KCAL_PER_G
        + fat * FAT_KCAL_PER_G
    )


def record_calories(record: FoodRecord) -> float:
    """Return stored calories, back-filled from macros when absent."""
    if record.calories is not None:
        return record.calories
    return calories_from_macros(
        _number(record.protein), _number(record.carbs), _number(record.fat)
    )


def aggregate_day(records: Iterable[FoodRecord], day: date) -> DailyTotals:
    """Sum calories and macros across the records of one day."""
    total = DailyTotals(day=day)
    for record in records:
        total = DailyTotals(
            day=day,
            calories=total.calories + record_calories(record),
            protein=total.protein + _number(record.protein),
            carbs=total.carbs + _number(record.carbs),
            fat=total.fat + _number(record.fat),
            record_count=total.record_count + 1,
        )
    return total


def zero_totals(day: date) -> DailyTotals:
    """Totals for a day with no records."""
    return DailyTotals(day=day)


def add_totals(first: DailyTotals, second: DailyTotals) -> DailyTotals:
    """Field-wise sum of two totals, keeping the first one's day."""
    return DailyTotals(
        day=first.day,
        calories=first.calories + second.calories,
        protein=first.protein + second.protein,
        carbs=first.carbs + second.carbs,
        fat=first.fat + second.fat,
        record_count=first.record_count + second.record_count,
    )


def sort_most_recent_first(records: Iterable[FoodRecord]) -> list[FoodRecord]:
    """Order records by creation time, newest first."""
    return sorted(records, key=lambda record: record.timestamp, reverse=True)


def macro_split(totals: DailyTotals) -> MacroSplit | None:
    """Return each macro's share of macro calories, or None without macros."""
    protein_kcal = totals.protein * PROTEIN_KCAL_PER_G
    carbs_kcal = totals.carbs * CARBS_KCAL_PER_G
    fat_kcal = totals.fat * FAT_KCAL_PER_G
    macro_kcal = protein_kcal + carbs_kcal + fat_kcal
    if macro_kcal <= 0:
        return None
    return MacroSplit(
        protein_pct=protein_kcal / macro_kcal * 100,
        carbs_pct=carbs_kcal / macro_kcal * 100,
        fat_pct=fat_kcal / macro_kcal * 100,
    )


def _number(value: float | None) -> float:
    return value if value is not None else 0
