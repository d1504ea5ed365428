"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from macro_tracker.adapters.dynamodb_food_record_repository import (
    DynamoFoodRecordRepository,
)
from macro_tracker.adapters.supabase_food_record_repository import (
    SupabaseFoodRecordRepository,
)
from macro_tracker.config import Settings, parse_storage_backend
from macro_tracker.services.food_log import FoodLogService
from macro_tracker.services.ranges import RangeAggregator
from macro_tracker.services.records import FoodRecordRepository, RecordStore
from macro_tracker.services.rolling import RollingStatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    food_log_service: FoodLogService
    range_aggregator: RangeAggregator
    rolling_stats_service: RollingStatsService


def build_repository(settings: Settings) -> FoodRecordRepository:
    """Create the food record repository for the configured backend."""
    backend = parse_storage_backend(settings.storage_backend)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseFoodRecordRepository(
            client, table_name=settings.food_records_table
        )
    return DynamoFoodRecordRepository.create(
        table_name=settings.food_records_table,
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
    )


def build_container(
    settings: Settings | None = None,
    repository: FoodRecordRepository | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    record_store = RecordStore(repository or build_repository(resolved_settings))
    range_aggregator = RangeAggregator(record_store)
    return AppContainer(
        settings=resolved_settings,
        record_store=record_store,
        food_log_service=FoodLogService(record_store),
        range_aggregator=range_aggregator,
        rolling_stats_service=RollingStatsService(range_aggregator),
    )
