"""tablequery exceptions.

This module defines the exception hierarchy for the tablequery library.
All custom exceptions inherit from TableQueryError, allowing callers to catch
every library-specific error with a single except clause.

Exception categories:
- TableQueryError: Base exception for all tablequery errors
- DecodeError: Caller-supplied attribute value JSON could not be decoded
- MarshalError: A decoded value could not be translated to wire format
- SerializationError: A returned item could not be flattened to JSON
- QueryCancelledError: The query was cancelled or timed out between pages
- StoreError: DynamoDB reported a failure
  - TableNotFoundError: The table or index does not exist
  - ThroughputExceededError: The request was throttled

Note: Pydantic validation errors raised while building QueryParameters are
intentionally not wrapped and will bubble up as pydantic.ValidationError.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from botocore.exceptions import ClientError
else:
    ClientError = Any


class TableQueryError(Exception):
    """Base exception for all tablequery errors.

    Example:
        try:
            result = TableQuery(client).execute(params)
        except TableQueryError as e:
            pass

    """


class DecodeError(TableQueryError):
    """Raised when a caller-supplied attribute value cannot be decoded.

    Covers a failure to unquote the outer JSON string literal, malformed JSON
    in the document itself, and documents that do not carry exactly one
    DynamoDB type tag.

    Attributes:
        raw: The input that failed to decode.

    """

    def __init__(self, message: str, *, raw: str | None = None) -> None:
        self.raw = raw
        super().__init__(message)


class MarshalError(TableQueryError):
    """Raised when a value cannot be translated to the DynamoDB wire format.

    Attributes:
        value_type: The type of the value that could not be translated.

    """

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type
        super().__init__(f"Cannot convert {value_type.__name__} to a DynamoDB attribute value")


class SerializationError(TableQueryError):
    """Raised when a returned item cannot be flattened to a JSON string."""

    def __init__(self, message: str = "Item could not be serialized to JSON") -> None:
        super().__init__(message)


class QueryCancelledError(TableQueryError):
    """Raised when a query is cancelled or times out at a page boundary.

    Attributes:
        table_name: The table that was being queried.
        pages_fetched: Number of pages fetched before cancellation.

    """

    def __init__(
        self,
        *,
        table_name: str | None = None,
        pages_fetched: int = 0,
        reason: str = "cancelled",
    ) -> None:
        self.table_name = table_name
        self.pages_fetched = pages_fetched
        message = f"Query {reason} after {pages_fetched} page(s)"
        if table_name:
            message = f"Query on {table_name} {reason} after {pages_fetched} page(s)"
        super().__init__(message)


class StoreError(TableQueryError):
    """Raised when DynamoDB reports a failure.

    Attributes:
        error_code: The DynamoDB error code, if one was reported.
        operation: The operation that failed.
        table_name: The table the operation targeted.
        original_error: The underlying botocore exception.

    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        operation: str | None = None,
        table_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.error_code = error_code
        self.operation = operation
        self.table_name = table_name
        self.original_error = original_error
        if error_code:
            message = f"{error_code}: {message}"
        if operation:
            message = f"{operation} failed: {message}"
        super().__init__(message)


class TableNotFoundError(StoreError):
    """Raised when the queried table or index does not exist."""

    def __init__(
        self,
        *,
        table_name: str | None = None,
        operation: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        message = "Table not found"
        if table_name:
            message = f"Table '{table_name}' not found"
        super().__init__(
            message,
            error_code="ResourceNotFoundException",
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


class ThroughputExceededError(StoreError):
    """Raised when DynamoDB throttles the request."""

    def __init__(
        self,
        *,
        error_code: str = "ProvisionedThroughputExceededException",
        table_name: str | None = None,
        operation: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            "Request throughput exceeded",
            error_code=error_code,
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


_THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def wrap_client_error(
    error: ClientError,
    *,
    operation: str | None = None,
    table_name: str | None = None,
) -> StoreError:
    """Convert a botocore ClientError into the matching StoreError.

    Args:
        error: The ClientError raised by the DynamoDB client.
        operation: The operation that failed.
        table_name: The table the operation targeted.

    Returns:
        A StoreError subclass carrying the original error.

    """
    error_info = error.response.get("Error", {})
    error_code = error_info.get("Code", "")
    message = error_info.get("Message", str(error))

    if error_code == "ResourceNotFoundException":
        return TableNotFoundError(
            table_name=table_name,
            operation=operation,
            original_error=error,
        )
    if error_code in _THROTTLING_CODES:
        return ThroughputExceededError(
            error_code=error_code,
            table_name=table_name,
            operation=operation,
            original_error=error,
        )
    return StoreError(
        message,
        error_code=error_code or None,
        operation=operation,
        table_name=table_name,
        original_error=error,
    )


__all__ = [
    "DecodeError",
    "MarshalError",
    "QueryCancelledError",
    "SerializationError",
    "StoreError",
    "TableNotFoundError",
    "TableQueryError",
    "ThroughputExceededError",
    "wrap_client_error",
]
