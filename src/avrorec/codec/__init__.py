"""Avro binary codec for avrorec.

This module provides schema loading and the schema-driven record encoder.
"""

from __future__ import annotations

from .encoder import RecordEncoder, encode
from .introspect import schema_from_model
from .schema import (
    EnumSchema,
    FieldSchema,
    FixedSchema,
    PrimitiveSchema,
    RecordSchema,
    canonical_form,
    load_schema,
    parse_schema,
)

__all__ = [
    "encode",
    "RecordEncoder",
    "parse_schema",
    "load_schema",
    "canonical_form",
    "schema_from_model",
    "RecordSchema",
    "FieldSchema",
    "PrimitiveSchema",
    "EnumSchema",
    "FixedSchema",
]
