"""FastAPI application factory."""

import logging
import time
from datetime import date

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from macro_tracker.api.dependencies import get_today, require_user_id
from macro_tracker.api.models import BulkDeleteRequest, CreateFoodRecordRequest
from macro_tracker.app_logging import configure_logging
from macro_tracker.containers import AppContainer
from macro_tracker.domain.errors import (
    ForbiddenError,
    FutureDateError,
    InvalidDateFormatError,
    InvalidFoodRecordError,
    InvalidRangeError,
    InvalidRecordKeyError,
    MacroTrackerError,
    NotFoundError,
    RangeTooLargeError,
    StorageUnavailableError,
)
from macro_tracker.domain.keys import parse_date
from macro_tracker.domain.records import BulkResult, DailyTotals, FoodRecord
from macro_tracker.domain.stats import RollingAverage
from macro_tracker.services.aggregation import macro_split
from macro_tracker.services.ranges import days_in_range, validate_range

_ERROR_STATUS: tuple[tuple[type[MacroTrackerError], int], ...] = (
    (InvalidDateFormatError, status.HTTP_400_BAD_REQUEST),
    (InvalidRecordKeyError, status.HTTP_400_BAD_REQUEST),
    (InvalidRangeError, status.HTTP_400_BAD_REQUEST),
    (RangeTooLargeError, status.HTTP_400_BAD_REQUEST),
    (InvalidFoodRecordError, status.HTTP_400_BAD_REQUEST),
    (FutureDateError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

_REASONS = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Service Unavailable",
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(MacroTrackerError)
    async def domain_error_handler(
        request: Request, exc: MacroTrackerError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed: %s %s", request.method, request.url.path, exc_info=exc
            )
        return _error_response(status_code, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, details)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/food-records")
    async def list_food_records(
        request: Request,
        day: str | None = Query(default=None, alias="date"),
        user_id: str = Depends(require_user_id),
        today: date = Depends(get_today),
    ) -> dict[str, object]:
        """Return a day's food records, most recent first."""
        state_container: AppContainer = request.app.state.container
        resolved_day = day or today.isoformat()
        records = state_container.food_log_service.list_day(user_id, resolved_day)
        return {
            "message": "Food records retrieved successfully",
            "data": [_record_payload(record) for record in records],
            "date": resolved_day,
            "count": len(records),
        }

    @app.get("/food-records-range")
    async def food_records_range(
        request: Request,
        start_date: str | None = Query(default=None, alias="startDate"),
        end_date: str | None = Query(default=None, alias="endDate"),
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Return per-day totals for every day of a range."""
        if not start_date or not end_date:
            raise InvalidRangeError(
                "Both startDate and endDate query parameters are required "
                "(YYYY-MM-DD format)"
            )
        state_container: AppContainer = request.app.state.container
        start, end = validate_range(start_date, end_date)
        started = time.monotonic()
        daily = await state_container.range_aggregator.aggregate_range(
            user_id, start_date, end_date
        )
        logger.info(
            "Range totals computed for %s..%s",
            start_date,
            end_date,
            extra={
                "user_id": user_id,
                "duration_ms": round((time.monotonic() - started) * 1000),
            },
        )
        return {
            "message": "Food records retrieved successfully",
            "data": {day: _totals_payload(totals) for day, totals in daily.items()},
            "startDate": start_date,
            "endDate": end_date,
            "daysInRange": days_in_range(start, end),
        }

    @app.post("/food-records", status_code=status.HTTP_201_CREATED)
    async def create_food_record(
        payload: CreateFoodRecordRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
        today: date = Depends(get_today),
    ) -> dict[str, object]:
        """Log one food record for the caller."""
        state_container: AppContainer = request.app.state.container
        record = state_container.food_log_service.create_record(
            user_id,
            name=payload.name,
            protein=payload.protein,
            carbs=payload.carbs,
            fat=payload.fat,
            calories=payload.calories,
            quantity=payload.quantity,
            day=payload.date,
            today=today,
        )
        return {
            "message": "Food record created successfully",
            "data": _record_payload(record),
        }

    @app.post("/food-records/bulk-delete")
    async def bulk_delete_food_records(
        payload: BulkDeleteRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Delete several records, reporting each key's outcome."""
        state_container: AppContainer = request.app.state.container
        result = state_container.food_log_service.delete_records(user_id, payload.keys)
        return _bulk_payload(result)

    @app.delete("/food-records/{record_key:path}")
    async def delete_food_record(
        record_key: str,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Delete exactly one of the caller's records."""
        state_container: AppContainer = request.app.state.container
        state_container.food_log_service.delete_record(user_id, record_key)
        return {"message": "Food record deleted successfully", "recordId": record_key}

    @app.get("/rolling-averages")
    async def rolling_averages(
        request: Request,
        selected_date: str | None = Query(default=None, alias="selectedDate"),
        user_id: str = Depends(require_user_id),
        today: date = Depends(get_today),
    ) -> dict[str, object]:
        """Return trailing and centered seven-day averages."""
        state_container: AppContainer = request.app.state.container
        selected = parse_date(selected_date) if selected_date else today
        averages = await state_container.rolling_stats_service.dashboard(
            user_id, selected, today
        )
        return {
            "selectedDate": selected.isoformat(),
            "today": today.isoformat(),
            "trailing": _rolling_payload(averages.trailing),
            "centered": _rolling_payload(averages.centered),
        }

    return app


def _status_for(exc: MacroTrackerError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": _REASONS.get(status_code, "Error"), "message": message},
    )


def _record_payload(record: FoodRecord) -> dict[str, object]:
    return {
        "user_id": record.user_id,
        "date_timestamp": record.key,
        "date": record.day.isoformat(),
        "timestamp": record.timestamp,
        "recordId": record.record_id,
        "name": record.name,
        "calories": record.calories,
        "protein": record.protein,
        "carbs": record.carbs,
        "fat": record.fat,
        "quantity": record.quantity,
        "createdAt": record.created_at,
    }


def _totals_payload(totals: DailyTotals) -> dict[str, object]:
    return {
        "calories": totals.calories,
        "protein": totals.protein,
        "carbs": totals.carbs,
        "fat": totals.fat,
        "recordCount": totals.record_count,
    }


def _rolling_payload(average: RollingAverage | None) -> dict[str, object] | None:
    if average is None:
        return None
    split = macro_split(average.totals)
    return {
        "windowStart": average.window_start.isoformat(),
        "windowEnd": average.window_end.isoformat(),
        "average": average.average,
        "totals": _totals_payload(average.totals),
        "daysIncluded": average.days_included,
        "daysRemaining": average.days_remaining,
        "macroSplit": (
            {
                "protein": split.protein_pct,
                "carbs": split.carbs_pct,
                "fat": split.fat_pct,
            }
            if split
            else None
        ),
    }


def _bulk_payload(result: BulkResult) -> dict[str, object]:
    return {
        "succeeded": result.succeeded,
        "failed": [
            {"key": failure.key, "reason": failure.reason}
            for failure in result.failed
        ],
    }
