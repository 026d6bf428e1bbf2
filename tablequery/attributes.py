"""DynamoDB attribute values and their JSON codec.

Callers describe expression attribute values and resume cursors with the
DynamoDB JSON shape, e.g. ``{"S": "abc"}`` or ``{"M": {"n": {"N": "1"}}}``.
This module parses that shape into an immutable tagged union, converts it to
the wire format accepted by the low-level client, and flattens returned items
back into JSON text.

Every document must carry exactly one type tag. ``{"S": "a", "N": "1"}`` is
rejected rather than guessing which tag wins.
"""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Tag, TypeAdapter, ValidationError, field_validator

from tablequery.exceptions import DecodeError, MarshalError, SerializationError
from tablequery.keys import WireAttributeValue, WireItem


def _b64decode(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64: {e}") from e
    return value


class _AttributeValueBase(BaseModel):
    """Internal base class for the attribute value variants.

    Each subclass holds exactly one field, named after its DynamoDB type tag.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    tag: ClassVar[str]

    def to_wire(self) -> WireAttributeValue:
        return {self.tag: getattr(self, self.tag)}


class BinaryValue(_AttributeValueBase):
    tag: ClassVar[str] = "B"
    B: bytes

    @field_validator("B", mode="before")
    @classmethod
    def _decode_base64(cls, value: Any) -> Any:
        return _b64decode(value)


class BooleanValue(_AttributeValueBase):
    tag: ClassVar[str] = "BOOL"
    BOOL: bool


class BinarySetValue(_AttributeValueBase):
    tag: ClassVar[str] = "BS"
    BS: tuple[bytes, ...]

    @field_validator("BS", mode="before")
    @classmethod
    def _decode_base64(cls, value: Any) -> Any:
        if isinstance(value, list | tuple):
            return tuple(_b64decode(element) for element in value)
        return value

    def to_wire(self) -> WireAttributeValue:
        return {"BS": list(self.BS)}


class ListValue(_AttributeValueBase):
    tag: ClassVar[str] = "L"
    L: tuple["AttributeValue", ...]

    def to_wire(self) -> WireAttributeValue:
        return {"L": [_marshal(element) for element in self.L]}


class MapValue(_AttributeValueBase):
    tag: ClassVar[str] = "M"
    M: dict[str, "AttributeValue"]

    def to_wire(self) -> WireAttributeValue:
        return {"M": {name: _marshal(element) for name, element in self.M.items()}}


class NumberValue(_AttributeValueBase):
    """A number, kept as its decimal string to avoid losing precision."""

    tag: ClassVar[str] = "N"
    N: str


class NumberSetValue(_AttributeValueBase):
    tag: ClassVar[str] = "NS"
    NS: tuple[str, ...]

    def to_wire(self) -> WireAttributeValue:
        return {"NS": list(self.NS)}


class NullValue(_AttributeValueBase):
    tag: ClassVar[str] = "NULL"
    NULL: bool


class StringValue(_AttributeValueBase):
    tag: ClassVar[str] = "S"
    S: str


class StringSetValue(_AttributeValueBase):
    tag: ClassVar[str] = "SS"
    SS: tuple[str, ...]

    def to_wire(self) -> WireAttributeValue:
        return {"SS": list(self.SS)}


def _tag_of(value: Any) -> str | None:
    """Pick the union member for a document: its single key, or nothing."""
    if isinstance(value, _AttributeValueBase):
        return value.tag
    if isinstance(value, dict) and len(value) == 1:
        return next(iter(value))
    return None


AttributeValue = Annotated[
    Union[
        Annotated[BinaryValue, Tag("B")],
        Annotated[BooleanValue, Tag("BOOL")],
        Annotated[BinarySetValue, Tag("BS")],
        Annotated[ListValue, Tag("L")],
        Annotated[MapValue, Tag("M")],
        Annotated[NumberValue, Tag("N")],
        Annotated[NumberSetValue, Tag("NS")],
        Annotated[NullValue, Tag("NULL")],
        Annotated[StringValue, Tag("S")],
        Annotated[StringSetValue, Tag("SS")],
    ],
    Discriminator(
        _tag_of,
        custom_error_type="attribute_value_tag",
        custom_error_message="Attribute value must have exactly one of B, BOOL, BS, L, M, N, NS, NULL, S, SS",
    ),
]

ListValue.model_rebuild()
MapValue.model_rebuild()

_attribute_value_adapter: TypeAdapter[AttributeValue] = TypeAdapter(AttributeValue)
_item_adapter: TypeAdapter[dict[str, AttributeValue]] = TypeAdapter(dict[str, AttributeValue])


def decode(raw: str) -> AttributeValue:
    """Decode a quoted JSON attribute value document.

    The document arrives encoded twice: ``raw`` is a JSON string literal whose
    content is the attribute value document, e.g. ``"{\\"S\\": \\"abc\\"}"``.

    Raises:
        DecodeError: If the literal cannot be unquoted or the document is
            not a valid attribute value.

    """
    try:
        document = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Cannot unquote attribute value: {e}", raw=raw) from e

    if not isinstance(document, str):
        raise DecodeError("Attribute value must be a quoted JSON string", raw=raw)

    return decode_document(document)


def decode_document(text: str) -> AttributeValue:
    """Decode an attribute value document such as ``{"N": "42"}``.

    Raises:
        DecodeError: If the text is not valid JSON or not a valid attribute value.

    """
    try:
        return _attribute_value_adapter.validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"Invalid attribute value: {e}", raw=text) from e


def decode_item(text: str) -> dict[str, AttributeValue]:
    """Decode a JSON object mapping attribute names to attribute value documents.

    Raises:
        DecodeError: If the text is not valid JSON or any value is invalid.

    """
    try:
        return _item_adapter.validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"Invalid item: {e}", raw=text) from e


def _marshal(value: Any) -> WireAttributeValue:
    if not isinstance(value, _AttributeValueBase):
        raise MarshalError(type(value))
    return value.to_wire()


def to_wire_format(value: AttributeValue | None) -> WireAttributeValue | None:
    """Convert an attribute value to the low-level client's wire format.

    ``None`` stands for "no value" and converts to ``None``. Lists and maps
    are converted depth-first; the first nested failure is raised.

    Raises:
        MarshalError: If the value, or any nested element, is not an attribute value.

    """
    if value is None:
        return None
    return _marshal(value)


def to_wire_item(item: Mapping[str, AttributeValue]) -> WireItem:
    """Convert every value of an item to wire format."""
    return {name: _marshal(value) for name, value in item.items()}


def _jsonable(value: Any) -> Any:
    if isinstance(value, bytes | bytearray):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Mapping):
        return {name: _jsonable(element) for name, element in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_jsonable(element) for element in value]
    return value


def to_json(value: Any) -> str:
    """Serialize a wire-format structure to compact JSON with sorted keys.

    Binary values are written as standard base64 strings.

    Raises:
        SerializationError: If the structure holds values JSON cannot represent.

    """
    try:
        return json.dumps(_jsonable(value), sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Item could not be serialized to JSON: {e}") from e


def flatten(item: Mapping[str, WireAttributeValue]) -> str:
    """Flatten a returned item into a single JSON object string.

    Example:
        flatten({"hashKey": {"S": "something"}, "one": {"N": "11111"}})
        Returns '{"hashKey":{"S":"something"},"one":{"N":"11111"}}'.

    """
    return to_json(dict(item))


__all__ = [
    "AttributeValue",
    "BinarySetValue",
    "BinaryValue",
    "BooleanValue",
    "ListValue",
    "MapValue",
    "NullValue",
    "NumberSetValue",
    "NumberValue",
    "StringSetValue",
    "StringValue",
    "decode",
    "decode_document",
    "decode_item",
    "flatten",
    "to_json",
    "to_wire_format",
    "to_wire_item",
]
