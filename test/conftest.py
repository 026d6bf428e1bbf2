"""Shared test fixtures.

This module provides:
- Fake AWS credentials so no test can reach a real account
- Canned Query response pages for unit tests with mocked clients
- A moto-backed DynamoDB client and tables for integration tests
"""

from collections.abc import Generator
from os import environ
from typing import Any

import boto3
from moto import mock_aws
from pytest import fixture


@fixture(scope="session", autouse=True)
def aws_credentials() -> None:
    environ["AWS_ACCESS_KEY_ID"] = "testing"
    environ["AWS_SECRET_ACCESS_KEY"] = "testing"  # noqa: S105
    environ["AWS_SECURITY_TOKEN"] = "testing"  # noqa: S105
    environ["AWS_SESSION_TOKEN"] = "testing"  # noqa: S105
    environ["AWS_DEFAULT_REGION"] = "us-east-1"


def _make_page(
    items: list[dict[str, Any]],
    *,
    last_evaluated_key: dict[str, Any] | None = None,
    scanned_count: int | None = None,
    consumed_capacity: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a Query response page the way the low-level client returns it."""
    page: dict[str, Any] = {
        "Items": items,
        "Count": len(items),
        "ScannedCount": len(items) if scanned_count is None else scanned_count,
    }
    if last_evaluated_key is not None:
        page["LastEvaluatedKey"] = last_evaluated_key
    if consumed_capacity is not None:
        page["ConsumedCapacity"] = consumed_capacity
    return page


@fixture(name="make_page")
def make_page_fixture() -> Any:
    return _make_page


@fixture
def three_pages() -> list[dict[str, Any]]:
    """Three pages of one item each; the first two carry a resume cursor."""
    return [
        _make_page(
            [{"hashKey": {"S": "p"}, "sort": {"N": "1"}}],
            last_evaluated_key={"hashKey": {"S": "p"}, "sort": {"N": "1"}},
            scanned_count=2,
        ),
        _make_page(
            [{"hashKey": {"S": "p"}, "sort": {"N": "2"}}],
            last_evaluated_key={"hashKey": {"S": "p"}, "sort": {"N": "2"}},
            scanned_count=3,
        ),
        _make_page(
            [{"hashKey": {"S": "p"}, "sort": {"N": "3"}}],
            scanned_count=4,
        ),
    ]


@fixture
def dynamodb_client() -> Generator[Any, None, None]:
    with mock_aws():
        yield boto3.client("dynamodb")


@fixture
def hash_table(dynamodb_client: Any) -> str:
    """Create a table with only a partition key."""
    dynamodb_client.create_table(
        TableName="HashTable",
        KeySchema=[{"AttributeName": "hashKey", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "hashKey", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    return "HashTable"


@fixture
def hash_range_table(dynamodb_client: Any) -> str:
    """Create a table with partition and sort key and a GSI on 'status'."""
    dynamodb_client.create_table(
        TableName="HashRangeTable",
        KeySchema=[
            {"AttributeName": "hashKey", "KeyType": "HASH"},
            {"AttributeName": "sort", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "hashKey", "AttributeType": "S"},
            {"AttributeName": "sort", "AttributeType": "N"},
            {"AttributeName": "status", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "status-index",
                "KeySchema": [
                    {"AttributeName": "status", "KeyType": "HASH"},
                    {"AttributeName": "sort", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    return "HashRangeTable"
