"""Base record class and avrorec-specific Pydantic configuration.

This module provides the BaseRecord class that typed record models should
inherit from, so the same class both validates values and declares the
Avro schema they are encoded with.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from ..codec.introspect import schema_from_model
from ..codec.schema import RecordSchema


class BaseRecord(BaseModel):
    """Base class for typed avrorec records.

    Records define fields with plain annotations; nested records are fields
    annotated with another BaseRecord (or any Pydantic model) subclass.

    Naming options can be configured as ClassVar attributes:

    Example:
        >>> from typing import ClassVar, Optional
        >>> class Identity(BaseRecord):
        ...     role: str
        ...     domain: str
        >>> class User(BaseRecord):
        ...     username: str
        ...     identity: Identity
        ...
        ...     avro_namespace: ClassVar[Optional[str]] = "example.avro"
        >>> User.avro_schema().fullname
        'example.avro.User'

    Attributes:
        avro_name: Record name (defaults to the class name)
        avro_namespace: Record namespace, inherited by nested records without one
        avro_doc: Record documentation stored in the schema
    """

    model_config = ConfigDict(
        # Forbid extra fields not defined in schema
        extra="forbid",
        # Records are values; keep them immutable once built
        frozen=True,
    )

    avro_name: ClassVar[str | None] = None
    avro_namespace: ClassVar[str | None] = None
    avro_doc: ClassVar[str | None] = None

    @classmethod
    def avro_schema(cls) -> RecordSchema:
        """Return the record schema derived from this class.

        Raises:
            InvalidSchema: If a field type cannot be expressed as a schema
        """
        return schema_from_model(cls)
