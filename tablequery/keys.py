"""Type aliases for DynamoDB wire-format values and pagination.

Type aliases:
    WireAttributeValue: A single attribute value in the shape the low-level
        DynamoDB client sends and receives, e.g. {"S": "abc"} or
        {"L": [{"N": "1"}, {"BOOL": true}]}.

    WireItem: A mapping of attribute names to wire attribute values. Items in
        a Query response have this shape.

    LastEvaluatedKey: The resume cursor returned by query(). Pass it back as
        ExclusiveStartKey to continue from where the previous page stopped.
        Has the same structure as WireItem.
"""

from typing import Any, TypeAlias

from typing_extensions import TypeAliasType

WireAttributeValue: TypeAlias = dict[str, Any]
WireItem: TypeAlias = dict[str, WireAttributeValue]
LastEvaluatedKey = TypeAliasType("LastEvaluatedKey", WireItem)


__all__ = [
    "LastEvaluatedKey",
    "WireAttributeValue",
    "WireItem",
]
