"""Record size calculation utilities.

This module provides functions to calculate the encoded size of a record
without building the encoded bytes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..codec.binary import SizeCounter
from ..codec.encoder import write_record, write_value
from ..codec.introspect import SchemaLike, as_record_schema


def encoded_size(schema: SchemaLike, value: Any) -> int:
    """Calculate the encoded size of a record in bytes.

    Unlike a fixed-width codec, Avro sizes depend on the value (varints and
    length-prefixed strings), so both the schema and the value are needed.
    The value is validated exactly as encode() would validate it.

    Args:
        schema: Record schema or anything encode() accepts
        value: Record value

    Returns:
        Size in bytes of ``encode(schema, value)``

    Raises:
        InvalidSchema: If the schema is malformed
        SchemaMismatch: If the value does not conform to the schema

    Example:
        >>> encoded_size(User, {"username": "user1",
        ...                     "identity": {"role": "admin", "domain": "domain1"}})
        20
    """
    record_schema = as_record_schema(schema)
    counter = SizeCounter()
    write_record(counter, record_schema, value, "")
    return len(counter)


def field_sizes(schema: SchemaLike, value: Any) -> dict[str, int]:
    """Get the encoded size in bytes of each top-level field.

    Args:
        schema: Record schema or anything encode() accepts
        value: Record value

    Returns:
        Dictionary mapping field names to their size in bytes, in schema order

    Raises:
        InvalidSchema: If the schema is malformed
        SchemaMismatch: If the value does not conform to the schema

    Example:
        >>> field_sizes(User, {"username": "user1",
        ...                    "identity": {"role": "admin", "domain": "domain1"}})
        {'username': 6, 'identity': 14}
    """
    record_schema = as_record_schema(schema)
    # Validate the record as a whole first so missing/extra fields are reported
    # the same way encode() reports them
    write_record(SizeCounter(), record_schema, value, "")

    if isinstance(value, BaseModel):
        value = value.model_dump()

    sizes: dict[str, int] = {}
    for field_schema in record_schema.fields:
        counter = SizeCounter()
        write_value(counter, field_schema.type, value[field_schema.name], field_schema.name)
        sizes[field_schema.name] = len(counter)
    return sizes
