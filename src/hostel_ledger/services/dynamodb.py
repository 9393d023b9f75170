"""DynamoDB service wrapper for type-safe table operations.

Reads and writes go through two separately configured low-level clients:
reads retry transient faults with botocore's standard backoff, writes are
attempted exactly once so an ambiguous failure is never re-applied behind
the caller's back.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NamedTuple

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hostel_ledger.config import Settings
from hostel_ledger.models.errors import StorageUnavailableError
from hostel_ledger.utils.logging import get_logger

logger = get_logger(__name__)

AVAILABILITY_TABLE = "availability"

# Error codes that mean "try later" rather than "your request was wrong"
TRANSIENT_ERROR_CODES = frozenset(
    {
        "InternalServerError",
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "ServiceUnavailable",
        "ThrottlingException",
        "TransactionInProgressException",
    }
)


def availability_table_definition(table_name: str) -> dict[str, Any]:
    """CreateTable arguments for the availability ledger.

    ``room_id`` + ``date`` is the primary key, which is what makes a
    second record for the same room and day impossible.
    """
    return {
        "TableName": table_name,
        "KeySchema": [
            {"AttributeName": "room_id", "KeyType": "HASH"},
            {"AttributeName": "date", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "room_id", "AttributeType": "S"},
            {"AttributeName": "date", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


class TransactionOutcome(NamedTuple):
    """Result of a TransactWriteItems call.

    ``reasons`` holds one cancellation code per submitted action (``"None"``
    for actions that were not the cause) when the transaction was cancelled.
    """

    succeeded: bool
    reasons: list[str]

    @property
    def first_failed_condition(self) -> int | None:
        """Index of the first action whose condition check failed."""
        for index, code in enumerate(self.reasons):
            if code == "ConditionalCheckFailed":
                return index
        return None

    def condition_failed_at(self, index: int) -> bool:
        """Whether the action at ``index`` was cancelled by its own condition."""
        return index < len(self.reasons) and self.reasons[index] == "ConditionalCheckFailed"

    @property
    def conflicted(self) -> bool:
        """Cancelled only because another transaction touched the same items."""
        return "TransactionConflict" in self.reasons and self.first_failed_condition is None


class DynamoDBService:
    """Service for DynamoDB operations with environment-aware table names.

    Created once by the host process and handed to every component.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        read_client: Any | None = None,
        write_client: Any | None = None,
    ) -> None:
        """Initialize DynamoDB service.

        Args:
            settings: Runtime settings. Defaults to Settings.from_env().
            read_client: Optional preconfigured client for reads (testing)
            write_client: Optional preconfigured client for writes (testing)
        """
        self.settings = settings or Settings.from_env()
        self.name_prefix = self.settings.table_prefix
        self._read_client = read_client or boto3.client(
            "dynamodb",
            region_name=self.settings.region_name,
            config=Config(
                retries={
                    "mode": "standard",
                    "total_max_attempts": self.settings.read_max_attempts,
                }
            ),
        )
        self._write_client = write_client or boto3.client(
            "dynamodb",
            region_name=self.settings.region_name,
            config=Config(retries={"mode": "standard", "total_max_attempts": 1}),
        )
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def close(self) -> None:
        """Release both clients' connection pools."""
        self._read_client.close()
        if self._write_client is not self._read_client:
            self._write_client.close()

    def table_name(self, table: str) -> str:
        """Get full table name with prefix."""
        return f"{self.name_prefix}-{table}"

    # Attribute value conversion

    def serialize(self, item: dict[str, Any]) -> dict[str, Any]:
        """Convert plain values to DynamoDB attribute values."""
        return {k: self._serializer.serialize(v) for k, v in item.items()}

    def deserialize(self, item: dict[str, Any]) -> dict[str, Any]:
        """Convert DynamoDB attribute values to plain values."""
        return {k: self._deserializer.deserialize(v) for k, v in item.items()}

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        """Translate transient botocore failures into StorageUnavailableError."""
        try:
            yield
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code in TRANSIENT_ERROR_CODES:
                logger.warning("DynamoDB %s failed transiently: %s", operation, code)
                raise StorageUnavailableError(
                    details={"operation": operation, "storage_error": code}
                ) from e
            raise
        except BotoCoreError as e:
            logger.warning("DynamoDB %s failed: %s", operation, type(e).__name__)
            raise StorageUnavailableError(
                details={"operation": operation, "storage_error": type(e).__name__}
            ) from e

    # Reads

    def get_item(
        self,
        table: str,
        key: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Get a single item by key with a strongly consistent read.

        Args:
            table: Table name without prefix
            key: Primary key dict (plain values)

        Returns:
            Item dict or None if not found
        """
        with self._storage_errors("get_item"):
            response = self._read_client.get_item(
                TableName=self.table_name(table),
                Key=self.serialize(key),
                ConsistentRead=True,
            )
        item = response.get("Item")
        return self.deserialize(item) if item else None

    def query(
        self,
        table: str,
        key_condition: str,
        expression_attribute_values: dict[str, Any],
        expression_attribute_names: dict[str, str] | None = None,
        scan_index_forward: bool = True,
        limit: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Lazily query a table, following pagination.

        Each page is fetched only when iteration reaches it.

        Args:
            table: Table name without prefix
            key_condition: KeyConditionExpression string
            expression_attribute_values: Plain values for the expression
            expression_attribute_names: Names for expression (for reserved words)
            scan_index_forward: Sort order (True=ascending)
            limit: Max items to yield in total

        Yields:
            Deserialized items in sort-key order
        """
        kwargs: dict[str, Any] = {
            "TableName": self.table_name(table),
            "KeyConditionExpression": key_condition,
            "ExpressionAttributeValues": self.serialize(expression_attribute_values),
            "ScanIndexForward": scan_index_forward,
            "ConsistentRead": True,
        }
        if expression_attribute_names:
            kwargs["ExpressionAttributeNames"] = expression_attribute_names
        if limit:
            kwargs["Limit"] = limit

        yielded = 0
        while True:
            with self._storage_errors("query"):
                response = self._read_client.query(**kwargs)
            for raw in response.get("Items", []):
                yield self.deserialize(raw)
                yielded += 1
                if limit and yielded >= limit:
                    return
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    # Writes

    def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> bool:
        """Put an item into the table.

        Args:
            table: Table name without prefix
            item: Item to store (plain values)
            condition_expression: Optional condition for write

        Returns:
            True if successful, False if condition failed
        """
        kwargs: dict[str, Any] = {
            "TableName": self.table_name(table),
            "Item": self.serialize(item),
        }
        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        try:
            with self._storage_errors("put_item"):
                self._write_client.put_item(**kwargs)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise

    def transact_write(self, items: list[dict[str, Any]]) -> TransactionOutcome:
        """Execute transactional write for multiple items.

        Args:
            items: List of TransactWriteItem dicts (typed attribute values)

        Returns:
            TransactionOutcome; on cancellation ``reasons`` lists one code per item

        Raises:
            StorageUnavailableError: On transient faults (outcome unknown)
        """
        try:
            with self._storage_errors("transact_write_items"):
                self._write_client.transact_write_items(TransactItems=items)
            return TransactionOutcome(succeeded=True, reasons=[])
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                reasons = [
                    str(reason.get("Code", "None"))
                    for reason in e.response.get("CancellationReasons", [])
                ]
                return TransactionOutcome(succeeded=False, reasons=reasons)
            raise

    # Table management (local development and tests)

    def create_availability_table(self) -> None:
        """Create the availability table and wait until it is active."""
        name = self.table_name(AVAILABILITY_TABLE)
        self._write_client.create_table(**availability_table_definition(name))
        self._write_client.get_waiter("table_exists").wait(TableName=name)
        logger.info("Created table %s", name)
