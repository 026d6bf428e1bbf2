"""tablequery: run DynamoDB queries and flatten their results.

Example:
    from tablequery import QueryParameters, TableQuery, create_client

    result = TableQuery(create_client()).execute(
        QueryParameters(
            table_name="orders",
            key_condition_expression="customer = :c",
            expression_attribute_values={":c": '{"S": "user-123"}'},
        )
    )

"""

from tablequery.async_query import AsyncTableQuery
from tablequery.attributes import (
    AttributeValue,
    decode,
    decode_document,
    decode_item,
    flatten,
    to_wire_format,
)
from tablequery.base import QueryParameters, QueryResult
from tablequery.client import ClientConfig, create_async_client, create_client
from tablequery.data_source import build_query_id, read_table_query
from tablequery.exceptions import (
    DecodeError,
    MarshalError,
    QueryCancelledError,
    SerializationError,
    StoreError,
    TableNotFoundError,
    TableQueryError,
    ThroughputExceededError,
)
from tablequery.sync_query import TableQuery

__all__ = [
    "AsyncTableQuery",
    "AttributeValue",
    "ClientConfig",
    "DecodeError",
    "MarshalError",
    "QueryCancelledError",
    "QueryParameters",
    "QueryResult",
    "SerializationError",
    "StoreError",
    "TableNotFoundError",
    "TableQuery",
    "TableQueryError",
    "ThroughputExceededError",
    "build_query_id",
    "create_async_client",
    "create_client",
    "decode",
    "decode_document",
    "decode_item",
    "flatten",
    "read_table_query",
    "to_wire_format",
]
