"""avrorec: Schema-Driven Avro Record Encoder

A Python library that turns nested record values into the Avro binary
encoding declared by a record schema.

Key Features:
- Schemas from Avro JSON descriptors or Pydantic models
- Strict validation: missing, extra and mistyped fields are rejected
- Field order follows the schema, never the input mapping
- Single-object encoding with CRC-64-AVRO schema fingerprints
- Object container file writer (null and deflate codecs)

Quick Start:
    >>> from avrorec import BaseRecord, encode
    >>>
    >>> class Identity(BaseRecord):
    ...     role: str
    ...     domain: str
    >>>
    >>> class User(BaseRecord):
    ...     username: str
    ...     identity: Identity
    >>>
    >>> user = User(username="user1", identity=Identity(role="admin", domain="domain1"))
    >>> data = encode(User, user)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .codec import (
    EnumSchema,
    FieldSchema,
    FixedSchema,
    PrimitiveSchema,
    RecordEncoder,
    RecordSchema,
    canonical_form,
    encode,
    load_schema,
    parse_schema,
    schema_from_model,
)
from .container import ContainerWriter, WriterConfig, write_container
from .exceptions import AvrorecError, ContainerError, InvalidSchema, SchemaMismatch
from .models import BaseRecord
from .utils.fingerprint import (
    crc64_avro,
    fingerprint_bytes,
    schema_fingerprint,
    single_object_header,
)
from .utils.sizing import encoded_size, field_sizes

__all__ = [
    # Core API
    "encode",
    "RecordEncoder",
    "parse_schema",
    "load_schema",
    "schema_from_model",
    "canonical_form",
    # Schema model
    "RecordSchema",
    "FieldSchema",
    "PrimitiveSchema",
    "EnumSchema",
    "FixedSchema",
    # Records
    "BaseRecord",
    # Exceptions
    "AvrorecError",
    "InvalidSchema",
    "SchemaMismatch",
    "ContainerError",
    # Container files
    "ContainerWriter",
    "WriterConfig",
    "write_container",
    # Fingerprints
    "crc64_avro",
    "schema_fingerprint",
    "fingerprint_bytes",
    "single_object_header",
    # Sizing
    "encoded_size",
    "field_sizes",
    # Version
    "__version__",
]
