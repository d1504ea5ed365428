"""DynamoDB repository for food records."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from macro_tracker.domain.errors import InvalidRecordKeyError, StorageUnavailableError
from macro_tracker.domain.keys import parse_record_key
from macro_tracker.domain.records import FoodRecord
from macro_tracker.services.records import FoodRecordRepository

PARTITION_KEY = "user_id"
SORT_KEY = "date_timestamp"

_logger = logging.getLogger(__name__)


@dataclass
class DynamoFoodRecordRepository(FoodRecordRepository):
    """Single-table DynamoDB implementation.

    Partition key ``user_id``, sort key ``date_timestamp``. boto3 resources
    are not thread safe, so each worker thread builds its own table through
    ``table_factory``.
    """

    table_factory: Callable[[], Any]
    _local: threading.local = field(
        default_factory=threading.local, init=False, repr=False
    )

    @classmethod
    def create(
        cls,
        table_name: str,
        region_name: str,
        endpoint_url: str | None = None,
    ) -> "DynamoFoodRecordRepository":
        """Create a repository bound to a DynamoDB table resource."""
        resource_kwargs: dict[str, Any] = {"region_name": region_name}
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url

        def build_table() -> Any:
            session = boto3.session.Session()
            return session.resource("dynamodb", **resource_kwargs).Table(table_name)

        return cls(table_factory=build_table)

    @property
    def table(self) -> Any:
        """Return the table resource owned by the calling thread."""
        table = getattr(self._local, "table", None)
        if table is None:
            table = self.table_factory()
            self._local.table = table
        return table

    def put_record(self, record: FoodRecord) -> None:
        """Write a record item."""
        try:
            self.table.put_item(Item=_to_item(record))
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailableError("Failed to write food record") from exc

    def list_by_prefix(self, user_id: str, prefix: str) -> list[FoodRecord]:
        """Query the user's partition with begins_with on the sort key."""
        items: list[dict[str, Any]] = []
        last_key = None
        try:
            while True:
                kwargs: dict[str, Any] = {
                    "KeyConditionExpression": Key(PARTITION_KEY).eq(user_id)
                    & Key(SORT_KEY).begins_with(prefix),
                }
                if last_key:
                    kwargs["ExclusiveStartKey"] = last_key
                response = self.table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailableError("Failed to query food records") from exc
        return _parse_items(items)

    def get_record(self, user_id: str, key: str) -> FoodRecord | None:
        """Return the item at (user_id, key), if present."""
        try:
            response = self.table.get_item(
                Key={PARTITION_KEY: user_id, SORT_KEY: key}
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailableError("Failed to read food record") from exc
        item = response.get("Item")
        if not item:
            return None
        return _parse_item(item)

    def delete_record(self, user_id: str, key: str) -> None:
        """Delete the item at (user_id, key)."""
        try:
            self.table.delete_item(Key={PARTITION_KEY: user_id, SORT_KEY: key})
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailableError("Failed to delete food record") from exc


def _to_item(record: FoodRecord) -> dict[str, Any]:
    item: dict[str, Any] = {
        PARTITION_KEY: record.user_id,
        SORT_KEY: record.key,
        "name": record.name,
        "protein": _to_decimal(record.protein),
        "carbs": _to_decimal(record.carbs),
        "fat": _to_decimal(record.fat),
    }
    if record.calories is not None:
        item["calories"] = _to_decimal(record.calories)
    if record.quantity is not None:
        item["quantity"] = _to_decimal(record.quantity)
    if record.created_at:
        item["createdAt"] = record.created_at
    return item


def _to_decimal(value: float) -> Decimal:
    return Decimal(str(value))


def _parse_items(items: list[dict[str, Any]]) -> list[FoodRecord]:
    records = []
    for item in items:
        try:
            records.append(_parse_item(item))
        except InvalidRecordKeyError:
            _logger.warning(
                "Skipping food record with malformed sort key",
                extra={
                    "user_id": item.get(PARTITION_KEY),
                    "key": item.get(SORT_KEY),
                },
            )
    return records


def _parse_item(item: dict[str, Any]) -> FoodRecord:
    key = parse_record_key(str(item[SORT_KEY]))
    calories = item.get("calories")
    quantity = item.get("quantity")
    return FoodRecord(
        user_id=str(item.get(PARTITION_KEY, "")),
        day=key.day,
        timestamp=key.timestamp,
        record_id=key.record_id,
        name=str(item.get("name", "")),
        calories=float(calories) if calories is not None else None,
        protein=float(item.get("protein") or 0),
        carbs=float(item.get("carbs") or 0),
        fat=float(item.get("fat") or 0),
        quantity=float(quantity) if quantity is not None else None,
        created_at=item.get("createdAt"),
    )
