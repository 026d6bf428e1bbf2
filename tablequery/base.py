"""Shared base functionality for the tablequery executors.

This module provides the query parameters and result types, and the logic
shared between the synchronous and asynchronous executors: building the
Query request, marshaling expression values, accumulating pages and mapping
client failures. Only the page fetch itself differs between the two.
"""

import json
import time
from threading import Event
from typing import Any, Literal, NamedTuple

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from tablequery.attributes import decode, decode_item, flatten, to_wire_format, to_wire_item
from tablequery.exceptions import QueryCancelledError, StoreError, wrap_client_error
from tablequery.keys import LastEvaluatedKey, WireAttributeValue

log = structlog.get_logger(__name__)

Select = Literal["ALL_ATTRIBUTES", "ALL_PROJECTED_ATTRIBUTES", "SPECIFIC_ATTRIBUTES", "COUNT"]
ReturnConsumedCapacity = Literal["INDEXES", "TOTAL", "NONE"]

QUERY_OPERATION = "Query"


class QueryParameters(BaseModel):
    """Parameters for one query execution.

    Optional fields left as None (or empty) are not sent, so DynamoDB applies
    its own defaults.

    Attributes:
        table_name: The table to query.
        key_condition_expression: The key condition, e.g. "#pk = :pk".
        filter_expression: Optional filter applied after the key condition.
        index_name: Optional GSI or LSI to query instead of the table.
        expression_attribute_names: Placeholder substitutions for names.
        expression_attribute_values: Placeholder substitutions for values, each
            an attribute value document such as '{"S": "abc"}'.
        projection_expression: Attributes to return.
        consistent_read: Whether to use strongly consistent reads.
        scan_index_forward: False to read the sort key in descending order.
        select: Which attributes to return, or COUNT.
        limit: Page size hint passed to DynamoDB as Limit.
        output_limit: Stop once this many items have been collected. None
            means no cap.
        exclusive_start_key: Resume cursor as a JSON object of attribute
            value documents.
        return_consumed_capacity: Capacity reporting verbosity.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    table_name: str = Field(min_length=1)
    key_condition_expression: str = Field(min_length=1)
    filter_expression: str | None = None
    index_name: str | None = None
    expression_attribute_names: dict[str, str] | None = None
    expression_attribute_values: dict[str, str] | None = None
    projection_expression: str | None = None
    consistent_read: bool | None = None
    scan_index_forward: bool | None = None
    select: Select | None = None
    limit: PositiveInt | None = None
    output_limit: PositiveInt | None = None
    exclusive_start_key: str | None = None
    return_consumed_capacity: ReturnConsumedCapacity | None = None


class QueryResult(NamedTuple):
    """Aggregate result of a query execution.

    Attributes:
        items: Flattened JSON items, in the order DynamoDB returned them.
        item_count: Sum of Count over every page fetched.
        scanned_count: Sum of ScannedCount over every page fetched.
        query_count: Number of pages fetched.
        last_evaluated_key: Resume cursor returned with the last page fetched.
        consumed_capacity: Capacity reports, one per page that returned one.

    """

    items: list[str]
    item_count: int
    scanned_count: int
    query_count: int
    last_evaluated_key: LastEvaluatedKey | None
    consumed_capacity: list[dict[str, Any]]


def marshal_expression_values(values: dict[str, str]) -> dict[str, WireAttributeValue]:
    """Convert expression attribute value documents to wire format.

    Each document is quoted and decoded the same way as other caller-supplied
    attribute values. The first failure aborts the conversion.

    Raises:
        DecodeError: If a document is not a valid attribute value.
        MarshalError: If a decoded value cannot be converted.

    """
    marshaled: dict[str, WireAttributeValue] = {}
    for placeholder, document in values.items():
        wire_value = to_wire_format(decode(json.dumps(document)))
        if wire_value is not None:
            marshaled[placeholder] = wire_value
    return marshaled


def build_query_request(params: QueryParameters) -> dict[str, Any]:
    """Build kwargs for the client query() call from query parameters.

    Returns:
        Dictionary of kwargs to pass to client.query(), without the keys of
        absent optional parameters.

    """
    request: dict[str, Any] = {
        "TableName": params.table_name,
        "KeyConditionExpression": params.key_condition_expression,
    }

    if params.filter_expression:
        request["FilterExpression"] = params.filter_expression

    if params.index_name:
        request["IndexName"] = params.index_name

    if params.expression_attribute_names:
        request["ExpressionAttributeNames"] = dict(params.expression_attribute_names)

    if params.expression_attribute_values:
        request["ExpressionAttributeValues"] = marshal_expression_values(
            params.expression_attribute_values
        )

    if params.projection_expression:
        request["ProjectionExpression"] = params.projection_expression

    if params.consistent_read is not None:
        request["ConsistentRead"] = params.consistent_read

    if params.scan_index_forward is not None:
        request["ScanIndexForward"] = params.scan_index_forward

    if params.select:
        request["Select"] = params.select

    if params.limit is not None:
        request["Limit"] = params.limit

    if params.exclusive_start_key:
        request["ExclusiveStartKey"] = to_wire_item(decode_item(params.exclusive_start_key))

    if params.return_consumed_capacity:
        request["ReturnConsumedCapacity"] = params.return_consumed_capacity

    return request


class _QueryPager:
    """Accumulates query pages until the output cap or the last page is reached.

    The loop driving it runs while `done` is False: fetch `request`, then
    `consume` the response.
    """

    def __init__(self, *, request: dict[str, Any], output_limit: int | None) -> None:
        self.request = request
        self._output_limit = output_limit
        self.items: list[str] = []
        self.item_count = 0
        self.scanned_count = 0
        self.query_count = 0
        self.last_evaluated_key: LastEvaluatedKey | None = None
        self.consumed_capacity: list[dict[str, Any]] = []
        self.done = False

    @property
    def table_name(self) -> str:
        return self.request["TableName"]  # type: ignore[no-any-return]

    def _output_limit_reached(self) -> bool:
        return self._output_limit is not None and len(self.items) >= self._output_limit

    def consume(self, response: dict[str, Any]) -> None:
        """Add one page of results and decide whether another page is needed."""
        self.query_count += 1
        self.item_count += response.get("Count", 0)
        self.scanned_count += response.get("ScannedCount", 0)

        capacity = response.get("ConsumedCapacity")
        if capacity:
            self.consumed_capacity.append(capacity)

        last_evaluated_key = response.get("LastEvaluatedKey") or None
        self.last_evaluated_key = last_evaluated_key

        log.debug(
            "query_page_fetched",
            table_name=self.table_name,
            page=self.query_count,
            count=response.get("Count", 0),
            scanned_count=response.get("ScannedCount", 0),
            has_more=last_evaluated_key is not None,
        )

        for item in response.get("Items", []):
            self.items.append(flatten(item))
            if self._output_limit_reached():
                log.debug(
                    "query_output_limit_reached",
                    table_name=self.table_name,
                    output_limit=self._output_limit,
                    page=self.query_count,
                )
                self.done = True
                return

        if last_evaluated_key is None:
            self.done = True
        else:
            self.request = {**self.request, "ExclusiveStartKey": last_evaluated_key}

    def result(self) -> QueryResult:
        log.info(
            "query_completed",
            table_name=self.table_name,
            items=len(self.items),
            item_count=self.item_count,
            scanned_count=self.scanned_count,
            query_count=self.query_count,
        )
        return QueryResult(
            items=self.items,
            item_count=self.item_count,
            scanned_count=self.scanned_count,
            query_count=self.query_count,
            last_evaluated_key=self.last_evaluated_key,
            consumed_capacity=self.consumed_capacity,
        )


def deadline_from_timeout(timeout: float | None) -> float | None:
    return None if timeout is None else time.monotonic() + timeout


def raise_if_cancelled(
    pager: _QueryPager,
    *,
    cancel_event: Event | None = None,
    deadline: float | None = None,
) -> None:
    """Raise QueryCancelledError if the caller cancelled or the deadline passed.

    Raises:
        QueryCancelledError: If the query must not fetch another page.

    """
    if cancel_event is not None and cancel_event.is_set():
        raise QueryCancelledError(table_name=pager.table_name, pages_fetched=pager.query_count)
    if deadline is not None and time.monotonic() >= deadline:
        raise QueryCancelledError(
            table_name=pager.table_name,
            pages_fetched=pager.query_count,
            reason="timed out",
        )


def store_error(error: ClientError | BotoCoreError, *, table_name: str) -> StoreError:
    """Map a botocore failure from the query call to a StoreError."""
    if isinstance(error, ClientError):
        wrapped = wrap_client_error(error, operation=QUERY_OPERATION, table_name=table_name)
    else:
        wrapped = StoreError(
            str(error),
            operation=QUERY_OPERATION,
            table_name=table_name,
            original_error=error,
        )
    log.warning(
        "query_failed",
        table_name=table_name,
        error_code=wrapped.error_code,
        error_type=type(wrapped).__name__,
    )
    return wrapped


__all__ = [
    "QueryParameters",
    "QueryResult",
    "ReturnConsumedCapacity",
    "Select",
    "build_query_request",
    "marshal_expression_values",
]
