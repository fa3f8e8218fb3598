"""Schema-driven record encoder.

This module provides the encode() function that converts a record value (a
mapping or a Pydantic model instance) to the Avro binary encoding declared
by a record schema.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel

from ..exceptions import SchemaMismatch
from ..utils.fingerprint import schema_fingerprint, single_object_header
from .binary import BinaryEncoder
from .introspect import SchemaLike, as_record_schema
from .schema import EnumSchema, FixedSchema, PrimitiveSchema, RecordSchema, Schema

_BYTES_TYPES = (bytes, bytearray, memoryview)


def encode(schema: SchemaLike, value: Any, *, single_object: bool = False) -> bytes:
    """Encode a record value to Avro binary format.

    Fields are written in the schema's declaration order; the order of keys
    in the value mapping does not matter. Nested records are written inline
    with no framing. The call is all-or-nothing and has no side effects.

    Args:
        schema: RecordSchema, JSON schema text, parsed mapping or Pydantic
            model class
        value: Mapping from field name to value, or a Pydantic model instance
        single_object: If True, prepend the Avro single-object header
            (``C3 01`` + 8-byte schema fingerprint)

    Returns:
        Encoded bytes

    Raises:
        InvalidSchema: If the schema is malformed
        SchemaMismatch: If the value does not conform to the schema (missing
            field, extra field or type mismatch at any nesting level)

    Example:
        >>> schema = '''{"type": "record", "name": "User", "fields": [
        ...     {"name": "username", "type": "string"},
        ...     {"name": "identity", "type": {"type": "record", "name": "Identity",
        ...         "fields": [{"name": "role", "type": "string"},
        ...                    {"name": "domain", "type": "string"}]}}]}'''
        >>> encode(schema, {"username": "user1",
        ...                 "identity": {"role": "admin", "domain": "domain1"}})
        b'\\nuser1\\nadmin\\x0edomain1'
    """
    record_schema = as_record_schema(schema)
    encoder = BinaryEncoder()
    write_record(encoder, record_schema, value, "")
    if single_object:
        return single_object_header(record_schema) + encoder.getvalue()
    return encoder.getvalue()


class RecordEncoder:
    """Encoder bound to one schema, parsed and fingerprinted once.

    Holds no mutable state after construction, so one instance may be
    shared by any number of threads.

    Example:
        >>> encoder = RecordEncoder(User)
        >>> data = encoder.encode(User(username="user1", identity=...))
    """

    def __init__(self, schema: SchemaLike) -> None:
        self.schema = as_record_schema(schema)
        self.fingerprint = schema_fingerprint(self.schema)
        self._header = single_object_header(self.schema)

    def encode(self, value: Any, *, single_object: bool = False) -> bytes:
        """Encode one record value. See encode()."""
        encoder = BinaryEncoder()
        write_record(encoder, self.schema, value, "")
        if single_object:
            return self._header + encoder.getvalue()
        return encoder.getvalue()

    def encode_many(self, values: Iterable[Any]) -> Iterator[bytes]:
        """Encode records one by one, stopping at the first mismatch.

        Raises:
            SchemaMismatch: For the first value that does not conform
        """
        for value in values:
            yield self.encode(value)


def write_record(encoder: BinaryEncoder, schema: RecordSchema, value: Any, path: str) -> None:
    """Write a record value field by field in schema order.

    Args:
        encoder: BinaryEncoder (or SizeCounter) to write to
        schema: Record schema
        value: Mapping or Pydantic model instance
        path: Dotted path of this record, used in error messages

    Raises:
        SchemaMismatch: If the value does not conform
    """
    if isinstance(value, BaseModel):
        value = _model_values(value)

    if not isinstance(value, Mapping):
        raise SchemaMismatch(
            f"expected record {schema.fullname}, got {type(value).__name__}", path
        )

    missing = [name for name in schema.field_names if name not in value]
    if missing:
        raise SchemaMismatch(f"missing required field(s) {missing} of {schema.fullname}", path)

    declared = set(schema.field_names)
    extra = sorted(str(key) for key in value if key not in declared)
    if extra:
        raise SchemaMismatch(f"unexpected field(s) {extra} for {schema.fullname}", path)

    for field_schema in schema.fields:
        field_path = f"{path}.{field_schema.name}" if path else field_schema.name
        write_value(encoder, field_schema.type, value[field_schema.name], field_path)


def _model_values(model: BaseModel) -> dict[str, Any]:
    """Dump a model, keeping nested models and enum members intact.

    Models configured with ``use_enum_values`` store the member value, so
    enum fields are mapped back to their member to be matched by name.
    """
    values = model.model_dump()
    for name, field_info in type(model).model_fields.items():
        annotation = field_info.annotation
        current = getattr(model, name)
        if isinstance(current, BaseModel):
            values[name] = current
        elif (
            isinstance(annotation, type)
            and issubclass(annotation, enum.Enum)
            and not isinstance(current, enum.Enum)
        ):
            try:
                values[name] = annotation(current)
            except ValueError:
                # Left as is; the symbol check reports it
                values[name] = current
    return values


def write_value(encoder: BinaryEncoder, schema: Schema, value: Any, path: str) -> None:
    if isinstance(schema, RecordSchema):
        write_record(encoder, schema, value, path)
    elif isinstance(schema, PrimitiveSchema):
        _write_primitive(encoder, schema.type, value, path)
    elif isinstance(schema, EnumSchema):
        _write_enum(encoder, schema, value, path)
    elif isinstance(schema, FixedSchema):
        _write_fixed(encoder, schema, value, path)
    else:
        raise SchemaMismatch(f"unsupported schema {schema!r}", path)


def _write_primitive(encoder: BinaryEncoder, type_name: str, value: Any, path: str) -> None:
    if type_name == "null":
        if value is not None:
            raise SchemaMismatch(f"expected null, got {type(value).__name__}", path)
        encoder.write_null()
        return

    if type_name == "boolean":
        if not isinstance(value, bool):
            raise SchemaMismatch(f"expected boolean, got {type(value).__name__}", path)
        encoder.write_boolean(value)
        return

    if type_name in ("int", "long"):
        # bool is an int subclass but never a valid Avro number
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaMismatch(f"expected {type_name}, got {type(value).__name__}", path)
        try:
            if type_name == "int":
                encoder.write_int(value)
            else:
                encoder.write_long(value)
        except ValueError as err:
            raise SchemaMismatch(str(err), path) from err
        return

    if type_name in ("float", "double"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SchemaMismatch(f"expected {type_name}, got {type(value).__name__}", path)
        try:
            if type_name == "float":
                encoder.write_float(value)
            else:
                encoder.write_double(value)
        except OverflowError as err:
            raise SchemaMismatch(f"value {value} does not fit in {type_name}", path) from err
        return

    if type_name == "bytes":
        if not isinstance(value, _BYTES_TYPES):
            raise SchemaMismatch(f"expected bytes, got {type(value).__name__}", path)
        encoder.write_bytes(bytes(value))
        return

    if type_name == "string":
        if not isinstance(value, str):
            raise SchemaMismatch(f"expected string, got {type(value).__name__}", path)
        try:
            encoder.write_string(value)
        except UnicodeEncodeError as err:
            raise SchemaMismatch(f"string is not valid UTF-8: {err.reason}", path) from err
        return

    raise SchemaMismatch(f"unsupported primitive type {type_name!r}", path)


def _write_enum(encoder: BinaryEncoder, schema: EnumSchema, value: Any, path: str) -> None:
    # Enum members are matched by name, plain strings by symbol
    if isinstance(value, enum.Enum):
        symbol = value.name
    elif isinstance(value, str):
        symbol = value
    else:
        raise SchemaMismatch(
            f"expected enum {schema.fullname}, got {type(value).__name__}", path
        )

    try:
        index = schema.symbols.index(symbol)
    except ValueError as err:
        raise SchemaMismatch(
            f"{symbol!r} is not a symbol of {schema.fullname} {list(schema.symbols)}", path
        ) from err
    encoder.write_int(index)


def _write_fixed(encoder: BinaryEncoder, schema: FixedSchema, value: Any, path: str) -> None:
    if not isinstance(value, _BYTES_TYPES):
        raise SchemaMismatch(f"expected fixed {schema.fullname}, got {type(value).__name__}", path)
    data = bytes(value)
    if len(data) != schema.size:
        raise SchemaMismatch(
            f"expected {schema.size} bytes for {schema.fullname}, got {len(data)} bytes", path
        )
    encoder.write_fixed(data)
