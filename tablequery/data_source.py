"""Flat input/output adapter for hosts such as a Terraform data source.

A host hands over its attribute values as a flat mapping, using its own zero
values ("" for strings, 0 for numbers, {} for maps) for attributes the user did
not set. `read_table_query` turns that mapping into `QueryParameters`, runs the
query and returns the named outputs:

- id: opaque identifier of this read
- items: flattened JSON items
- item_count, scanned_count, query_count: aggregate counters
- last_evaluated_key: resume cursor as JSON, or None
- consumed_capacity: capacity reports as JSON
"""

import time
from collections.abc import Mapping
from threading import Event
from typing import Any

from tablequery.attributes import to_json
from tablequery.base import QueryParameters
from tablequery.sync_query import DynamoDBClient, TableQuery

INPUT_ATTRIBUTES = tuple(QueryParameters.model_fields)


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return value == "" or value == 0 or value == {}


def parameters_from_inputs(inputs: Mapping[str, Any]) -> QueryParameters:
    """Build query parameters from host attribute values.

    Unknown keys are ignored. Zero values mean "not set", so an output_limit
    of 0 becomes no cap rather than an empty result.

    Raises:
        pydantic.ValidationError: If a set attribute has an invalid value.

    """
    values = {
        name: inputs[name]
        for name in INPUT_ATTRIBUTES
        if name in inputs and not _is_unset(inputs[name])
    }
    return QueryParameters.model_validate(values)


def build_query_id(
    table_name: str,
    key_condition_expression: str,
    index_name: str | None = None,
    *,
    now_ns: int | None = None,
) -> str:
    """Build the identifier of one read.

    Example:
        build_query_id("orders", "pk = :pk", "by-status", now_ns=1)
        Returns "orders|KeyConditionExpression|pk = :pk|IndexName|by-status|1".

    """
    parts = [table_name]

    if key_condition_expression:
        parts.extend(["KeyConditionExpression", key_condition_expression])

    if index_name:
        parts.extend(["IndexName", index_name])

    parts.append(str(time.time_ns() if now_ns is None else now_ns))

    return "|".join(parts)


def read_table_query(
    client: DynamoDBClient,
    inputs: Mapping[str, Any],
    *,
    cancel_event: Event | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Run the query described by host inputs and return the named outputs.

    Raises:
        pydantic.ValidationError: If the inputs are invalid.
        TableQueryError: If the query fails; see TableQuery.execute.

    """
    params = parameters_from_inputs(inputs)
    query_id = build_query_id(
        params.table_name,
        params.key_condition_expression,
        params.index_name,
    )

    result = TableQuery(client).execute(params, cancel_event=cancel_event, timeout=timeout)

    return {
        "id": query_id,
        "table_name": params.table_name,
        "items": result.items,
        "item_count": result.item_count,
        "scanned_count": result.scanned_count,
        "query_count": result.query_count,
        "last_evaluated_key": (
            to_json(result.last_evaluated_key) if result.last_evaluated_key else None
        ),
        "consumed_capacity": [to_json(report) for report in result.consumed_capacity],
    }


__all__ = [
    "INPUT_ATTRIBUTES",
    "build_query_id",
    "parameters_from_inputs",
    "read_table_query",
]
