"""Schema introspection for Pydantic models.

This module derives a record schema from a Pydantic model class, so callers
can describe records as typed models instead of hand-written JSON.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Optional, Type, Union, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..exceptions import InvalidSchema
from .schema import RecordSchema, parse_schema

# Default Avro type per Python annotation, and the narrower types allowed
# through json_schema_extra={"avro_type": ...}
_SCALAR_TYPES: Dict[type, str] = {
    bool: "boolean",
    int: "long",
    float: "double",
    str: "string",
    bytes: "bytes",
}
_NARROWING: Dict[type, tuple] = {
    int: ("int", "long"),
    float: ("float", "double"),
}


def schema_from_model(model_class: Type[BaseModel]) -> RecordSchema:
    """Create a record schema from a Pydantic model class.

    Fields are taken in declaration order. ``str``, ``int``, ``float``,
    ``bool`` and ``bytes`` map to string, long, double, boolean and bytes;
    ``enum.Enum`` subclasses map to enums over their member names; nested
    models map to nested records.

    Args:
        model_class: Pydantic model class

    Returns:
        Parsed RecordSchema

    Raises:
        InvalidSchema: If a field type is unsupported (Optional, unions,
            containers) or models nest cyclically

    Example:
        >>> class Identity(BaseModel):
        ...     role: str
        ...     domain: str
        >>> class User(BaseModel):
        ...     username: str
        ...     identity: Identity
        >>> schema_from_model(User).field_names
        ('username', 'identity')
    """
    builder = _DescriptorBuilder()
    descriptor = builder.record(model_class, None)
    return parse_schema(descriptor)


class _DescriptorBuilder:
    def __init__(self) -> None:
        self.defined: Dict[type, str] = {}
        self.stack: List[type] = []

    def record(self, model_class: Type[BaseModel], namespace: Optional[str]) -> Any:
        if model_class in self.stack:
            raise InvalidSchema(f"Cyclic nesting: model {model_class.__name__} contains itself")
        if model_class in self.defined:
            return self.defined[model_class]

        name = getattr(model_class, "avro_name", None) or model_class.__name__
        namespace = getattr(model_class, "avro_namespace", None) or namespace

        self.stack.append(model_class)
        fields = [
            self.field(model_class, field_name, field_info, namespace)
            for field_name, field_info in model_class.model_fields.items()
        ]
        self.stack.pop()

        descriptor: Dict[str, Any] = {"type": "record", "name": name, "fields": fields}
        if namespace:
            descriptor["namespace"] = namespace
        doc = getattr(model_class, "avro_doc", None)
        if doc:
            descriptor["doc"] = doc

        self.defined[model_class] = f"{namespace}.{name}" if namespace else name
        return descriptor

    def enum(self, enum_class: Type[enum.Enum], namespace: Optional[str]) -> Any:
        if enum_class in self.defined:
            return self.defined[enum_class]
        descriptor: Dict[str, Any] = {
            "type": "enum",
            "name": enum_class.__name__,
            "symbols": [member.name for member in enum_class],
        }
        if namespace:
            descriptor["namespace"] = namespace
        self.defined[enum_class] = (
            f"{namespace}.{enum_class.__name__}" if namespace else enum_class.__name__
        )
        return descriptor

    def field(
        self,
        model_class: Type[BaseModel],
        name: str,
        field_info: FieldInfo,
        namespace: Optional[str],
    ) -> Dict[str, Any]:
        annotation = field_info.annotation
        where = f"{model_class.__name__}.{name}"
        if annotation is None:
            raise InvalidSchema(f"Field {where} has no type annotation")

        if get_origin(annotation) is not None:
            raise InvalidSchema(
                f"Field {where}: {annotation} is not supported; "
                f"only required scalar, enum and nested model fields are"
            )

        field_type: Any
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            field_type = self.record(annotation, namespace)
        elif isinstance(annotation, type) and issubclass(annotation, enum.Enum):
            field_type = self.enum(annotation, namespace)
        elif annotation in _SCALAR_TYPES:
            field_type = _scalar_type(where, annotation, field_info)
        else:
            raise InvalidSchema(f"Field {where}: unsupported type {annotation!r}")

        descriptor: Dict[str, Any] = {"name": name, "type": field_type}
        if field_info.description:
            descriptor["doc"] = field_info.description
        return descriptor


def _scalar_type(where: str, annotation: type, field_info: FieldInfo) -> str:
    extra = field_info.json_schema_extra
    override = extra.get("avro_type") if isinstance(extra, dict) else None
    if override is None:
        return _SCALAR_TYPES[annotation]
    if override not in _NARROWING.get(annotation, ()):
        raise InvalidSchema(
            f"Field {where}: avro_type {override!r} does not apply to {annotation.__name__}"
        )
    return str(override)


SchemaLike = Union[RecordSchema, str, Dict[str, Any], Type[BaseModel]]


def as_record_schema(schema: SchemaLike) -> RecordSchema:
    """Normalize any accepted schema descriptor to a RecordSchema.

    Args:
        schema: RecordSchema, JSON text, parsed mapping or Pydantic model class

    Returns:
        RecordSchema (the same object when one is passed in)

    Raises:
        InvalidSchema: If the descriptor is malformed or of an unsupported kind
    """
    if isinstance(schema, RecordSchema):
        return schema
    if isinstance(schema, (str, dict)):
        return parse_schema(schema)
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema_from_model(schema)
    raise InvalidSchema(f"Unsupported schema descriptor: {type(schema).__name__}")
