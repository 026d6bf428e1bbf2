"""DynamoDB client construction.

The executors never resolve a client on their own; these helpers build one
from an explicit `ClientConfig`. Retries of transient failures are left to
botocore and configured here.
"""

from typing import TYPE_CHECKING, Any, Literal

import aioboto3
import boto3
from botocore.config import Config
from pydantic import BaseModel, ConfigDict, PositiveFloat, PositiveInt

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.client import DynamoDBClient
else:
    DynamoDBClient = Any


class ClientConfig(BaseModel):
    """Connection settings for the DynamoDB client.

    Attributes:
        region_name: AWS region; None uses the environment's default.
        endpoint_url: Override endpoint, e.g. DynamoDB Local.
        max_attempts: Total attempts botocore makes per call, including retries.
        retry_mode: botocore retry mode.
        connect_timeout: Seconds to wait for a connection.
        read_timeout: Seconds to wait for a response.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    region_name: str | None = None
    endpoint_url: str | None = None
    max_attempts: PositiveInt = 10
    retry_mode: Literal["legacy", "standard", "adaptive"] = "adaptive"
    connect_timeout: PositiveFloat = 2
    read_timeout: PositiveFloat = 10

    def botocore_config(self) -> Config:
        return Config(
            retries={"max_attempts": self.max_attempts, "mode": self.retry_mode},
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )

    def client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"config": self.botocore_config()}
        if self.region_name is not None:
            kwargs["region_name"] = self.region_name
        if self.endpoint_url is not None:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs


def create_client(config: ClientConfig | None = None) -> DynamoDBClient:
    """Create a boto3 DynamoDB client."""
    config = config or ClientConfig()
    return boto3.client("dynamodb", **config.client_kwargs())


def create_async_client(
    config: ClientConfig | None = None,
    *,
    session: aioboto3.Session | None = None,
) -> Any:
    """Create an aioboto3 DynamoDB client context manager.

    Example:
        async with create_async_client(ClientConfig(region_name="eu-west-1")) as client:
            result = await AsyncTableQuery(client).execute(params)

    """
    config = config or ClientConfig()
    session = session or aioboto3.Session()
    return session.client("dynamodb", **config.client_kwargs())


__all__ = [
    "ClientConfig",
    "create_async_client",
    "create_client",
]
