"""Async DynamoDB query executor.

This module provides `AsyncTableQuery`, the aioboto3 counterpart of
`TableQuery`. Besides the timeout, it can be stopped with ordinary asyncio
task cancellation while awaiting a page.
"""

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
    from types_aiobotocore_dynamodb.client import DynamoDBClient as AsyncDynamoDBClient
else:
    AsyncDynamoDBClient = Any


class AsyncTableQuery:
    """Run DynamoDB queries asynchronously and aggregate their pages.

    Example:
        session = aioboto3.Session()
        async with session.client("dynamodb") as client:
            result = await AsyncTableQuery(client).execute(params)

    """

    def __init__(self, client: AsyncDynamoDBClient) -> None:
        self._client = client

    async def execute(
        self,
        params: QueryParameters,
        *,
        timeout: float | None = None,
    ) -> QueryResult:
        """Execute the query, fetching pages until done.

        Args:
            params: The query parameters.
            timeout: Seconds after which no further page is fetched.

        Returns:
            QueryResult with flattened items and aggregate counters.

        Raises:
            DecodeError: If an expression value or the resume cursor is invalid.
            MarshalError: If a decoded value cannot be converted to wire format.
            StoreError: If DynamoDB reports a failure on any page.
            SerializationError: If a returned item cannot be flattened.
            QueryCancelledError: If the timeout passed between pages.

        """
        deadline = deadline_from_timeout(timeout)
        pager = _QueryPager(
            request=build_query_request(params),
            output_limit=params.output_limit,
        )

        while not pager.done:
            raise_if_cancelled(pager, deadline=deadline)
            try:
                response = await self._client.query(**pager.request)
            except (ClientError, BotoCoreError) as e:
                raise store_error(e, table_name=params.table_name) from e
            pager.consume(response)  # type: ignore[arg-type]

        return pager.result()


__all__ = [
    "AsyncTableQuery",
]
