"""Synchronous DynamoDB query executor.

This module provides `TableQuery`, which runs a Query against a boto3
DynamoDB client, following resume cursors page by page until the output cap
is reached or DynamoDB reports no further pages.
"""

from threading import Event
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from tablequery.base import (
    QueryParameters,
    QueryResult,
    _QueryPager,
    build_query_request,
    deadline_from_timeout,
    raise_if_cancelled,
    store_error,
)

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.client import DynamoDBClient
else:
    DynamoDBClient = Any


class TableQuery:
    """Run DynamoDB queries and aggregate their pages.

    The client is passed in explicitly; the executor holds no other state and
    may be reused across executions.

    Example:
        client = boto3.client("dynamodb")
        params = QueryParameters(
            table_name="orders",
            key_condition_expression="customer = :c",
            expression_attribute_values={":c": '{"S": "user-123"}'},
            output_limit=10,
        )
        result = TableQuery(client).execute(params)
        for item in result.items:
            print(item)

    """

    def __init__(self, client: DynamoDBClient) -> None:
        self._client = client

    def execute(
        self,
        params: QueryParameters,
        *,
        cancel_event: Event | None = None,
        timeout: float | None = None,
    ) -> QueryResult:
        """Execute the query, fetching pages until done.

        Args:
            params: The query parameters.
            cancel_event: Checked before every page fetch; set it to stop.
            timeout: Seconds after which no further page is fetched.

        Returns:
            QueryResult with flattened items and aggregate counters.

        Raises:
            DecodeError: If an expression value or the resume cursor is invalid.
            MarshalError: If a decoded value cannot be converted to wire format.
            StoreError: If DynamoDB reports a failure on any page.
            SerializationError: If a returned item cannot be flattened.
            QueryCancelledError: If cancelled or timed out between pages.

        """
        deadline = deadline_from_timeout(timeout)
        pager = _QueryPager(
            request=build_query_request(params),
            output_limit=params.output_limit,
        )

        while not pager.done:
            raise_if_cancelled(pager, cancel_event=cancel_event, deadline=deadline)
            try:
                response = self._client.query(**pager.request)
            except (ClientError, BotoCoreError) as e:
                raise store_error(e, table_name=params.table_name) from e
            pager.consume(response)  # type: ignore[arg-type]

        return pager.result()


__all__ = [
    "TableQuery",
]
