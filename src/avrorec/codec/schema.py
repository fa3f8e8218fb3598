"""Record schema model and loading.

This module parses an Avro schema descriptor (a JSON string or an already
parsed mapping) into an immutable in-memory model, validating it once so the
encoder can trust it for the schema's whole lifetime.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set, Tuple, Union

from ..exceptions import InvalidSchema

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = frozenset(
    {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}
)

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class _NoDefault:
    """Marker for a field declared without a default."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class PrimitiveSchema:
    """Schema of a primitive scalar.

    Attributes:
        type: One of null, boolean, int, long, float, double, bytes, string
    """

    type: str


@dataclass(frozen=True)
class EnumSchema:
    """Schema of an enumeration of string symbols.

    Attributes:
        name: Short name
        namespace: Dotted namespace or None
        symbols: Ordered symbols; encoded as their index
        doc: Optional documentation
    """

    name: str
    namespace: Optional[str]
    symbols: Tuple[str, ...]
    doc: Optional[str] = None

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)


@dataclass(frozen=True)
class FixedSchema:
    """Schema of a fixed-size byte string."""

    name: str
    namespace: Optional[str]
    size: int

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)


@dataclass(frozen=True)
class FieldSchema:
    """Schema information for a single record field.

    Attributes:
        name: Field name, unique within its record
        type: Field type (primitive, record, enum or fixed)
        doc: Optional documentation
        default: Declared default. Kept as metadata only; every field is
            required when encoding.
    """

    name: str
    type: Schema
    doc: Optional[str] = None
    default: Any = field(default=NO_DEFAULT, compare=False)


@dataclass(frozen=True)
class RecordSchema:
    """A named, namespaced record type with an ordered list of fields.

    Instances are immutable and may be shared across threads without locking.

    Example:
        >>> schema = parse_schema('''
        ... {"type": "record", "name": "User", "fields": [
        ...     {"name": "username", "type": "string"}]}
        ... ''')
        >>> schema.field_names
        ('username',)
    """

    name: str
    namespace: Optional[str]
    fields: Tuple[FieldSchema, ...]
    doc: Optional[str] = None

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def field(self, name: str) -> FieldSchema:
        """Look up a field by name.

        Raises:
            KeyError: If the record declares no such field
        """
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-compatible form of this schema.

        Named types are written in full the first time they appear and as
        their fullname afterwards, so the output parses back to an equal schema.
        """
        result = _to_json_obj(self, set())
        assert isinstance(result, dict)
        return result

    def to_json(self) -> str:
        """Return the JSON form of this schema as a string."""
        return json.dumps(self.to_dict())


Schema = Union[PrimitiveSchema, RecordSchema, EnumSchema, FixedSchema]
NamedSchema = Union[RecordSchema, EnumSchema, FixedSchema]


def _fullname(name: str, namespace: Optional[str]) -> str:
    return f"{namespace}.{name}" if namespace else name


def _to_json_obj(schema: Schema, seen: Set[str]) -> Any:
    if isinstance(schema, PrimitiveSchema):
        return schema.type

    if schema.fullname in seen:
        return schema.fullname
    seen.add(schema.fullname)

    obj: Dict[str, Any]
    if isinstance(schema, RecordSchema):
        obj = {"type": "record", "name": schema.name}
        if schema.namespace:
            obj["namespace"] = schema.namespace
        if schema.doc is not None:
            obj["doc"] = schema.doc
        fields = []
        for f in schema.fields:
            entry: Dict[str, Any] = {"name": f.name, "type": _to_json_obj(f.type, seen)}
            if f.doc is not None:
                entry["doc"] = f.doc
            if f.default is not NO_DEFAULT:
                entry["default"] = f.default
            fields.append(entry)
        obj["fields"] = fields
    elif isinstance(schema, EnumSchema):
        obj = {"type": "enum", "name": schema.name}
        if schema.namespace:
            obj["namespace"] = schema.namespace
        if schema.doc is not None:
            obj["doc"] = schema.doc
        obj["symbols"] = list(schema.symbols)
    else:
        obj = {"type": "fixed", "name": schema.name}
        if schema.namespace:
            obj["namespace"] = schema.namespace
        obj["size"] = schema.size
    return obj


def canonical_form(schema: Schema) -> str:
    """Return the Parsing Canonical Form of a schema.

    Only the attributes relevant to the binary encoding are kept, names are
    replaced by fullnames, keys are ordered ``name, type, fields, symbols,
    size`` and all whitespace is removed. Two schemas with the same canonical
    form produce identical encodings for the same value.

    Args:
        schema: Parsed schema

    Returns:
        Canonical JSON text
    """
    return json.dumps(_canonical_obj(schema, set()), separators=(",", ":"))


def _canonical_obj(schema: Schema, seen: Set[str]) -> Any:
    if isinstance(schema, PrimitiveSchema):
        return schema.type

    if schema.fullname in seen:
        return schema.fullname
    seen.add(schema.fullname)

    if isinstance(schema, RecordSchema):
        return {
            "name": schema.fullname,
            "type": "record",
            "fields": [
                {"name": f.name, "type": _canonical_obj(f.type, seen)} for f in schema.fields
            ],
        }
    if isinstance(schema, EnumSchema):
        return {"name": schema.fullname, "type": "enum", "symbols": list(schema.symbols)}
    return {"name": schema.fullname, "type": "fixed", "size": schema.size}


class _SchemaParser:
    """Walks a descriptor, tracking named types to catch redefinitions and cycles."""

    def __init__(self) -> None:
        self.named: Dict[str, NamedSchema] = {}
        # Records whose fields are still being parsed
        self.pending: Set[str] = set()

    def parse(self, obj: Any, namespace: Optional[str]) -> Schema:
        if isinstance(obj, str):
            if obj in PRIMITIVE_TYPES:
                return PrimitiveSchema(obj)
            return self._resolve_reference(obj, namespace)

        if isinstance(obj, list):
            raise InvalidSchema(f"Union types are not supported: {json.dumps(obj)}")

        if not isinstance(obj, dict):
            raise InvalidSchema(f"Schema must be a string or an object, got {type(obj).__name__}")

        type_tag = obj.get("type")
        if type_tag is None:
            raise InvalidSchema(f"Schema object has no 'type' attribute: {obj!r}")
        if not isinstance(type_tag, str):
            raise InvalidSchema(f"Unknown type tag: {type_tag!r}")

        if type_tag in PRIMITIVE_TYPES:
            return PrimitiveSchema(type_tag)
        if type_tag == "record":
            return self._parse_record(obj, namespace)
        if type_tag == "enum":
            return self._parse_enum(obj, namespace)
        if type_tag == "fixed":
            return self._parse_fixed(obj, namespace)
        if type_tag in ("array", "map"):
            raise InvalidSchema(f"Type '{type_tag}' is not supported")
        raise InvalidSchema(f"Unknown type tag: {type_tag!r}")

    def _resolve_reference(self, name: str, namespace: Optional[str]) -> Schema:
        candidates = [name] if "." in name else [_fullname(name, namespace), name]
        for candidate in candidates:
            if candidate in self.pending:
                raise InvalidSchema(f"Cyclic nesting: record '{candidate}' references itself")
            if candidate in self.named:
                return self.named[candidate]
        raise InvalidSchema(f"Unknown type tag: {name!r}")

    def _declare(self, obj: Dict[str, Any], namespace: Optional[str]) -> Tuple[str, Optional[str]]:
        name = obj.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidSchema(f"Named type requires a 'name' attribute: {obj!r}")

        declared_ns = obj.get("namespace", namespace)
        if "." in name:
            declared_ns, name = name.rsplit(".", 1)
        if declared_ns is not None and not isinstance(declared_ns, str):
            raise InvalidSchema(f"Namespace must be a string, got {declared_ns!r}")
        declared_ns = declared_ns or None

        _check_name(name)
        if name in PRIMITIVE_TYPES:
            raise InvalidSchema(f"Named type cannot use the primitive name '{name}'")
        if declared_ns is not None:
            for part in declared_ns.split("."):
                _check_name(part)

        fullname = _fullname(name, declared_ns)
        if fullname in self.named or fullname in self.pending:
            raise InvalidSchema(f"Named type '{fullname}' is defined more than once")
        return name, declared_ns

    def _parse_record(self, obj: Dict[str, Any], namespace: Optional[str]) -> RecordSchema:
        name, record_ns = self._declare(obj, namespace)
        fullname = _fullname(name, record_ns)

        raw_fields = obj.get("fields")
        if not isinstance(raw_fields, list):
            raise InvalidSchema(f"Record '{fullname}' requires a 'fields' list")

        self.pending.add(fullname)
        fields = []
        seen_names: Set[str] = set()
        for raw in raw_fields:
            if not isinstance(raw, dict):
                raise InvalidSchema(f"Record '{fullname}': field must be an object, got {raw!r}")

            field_name = raw.get("name")
            if not isinstance(field_name, str):
                raise InvalidSchema(f"Record '{fullname}': field has no 'name'")
            _check_name(field_name)
            if field_name in seen_names:
                raise InvalidSchema(f"Record '{fullname}': duplicate field name '{field_name}'")
            seen_names.add(field_name)

            if "type" not in raw:
                raise InvalidSchema(f"Record '{fullname}': field '{field_name}' has no 'type'")

            fields.append(
                FieldSchema(
                    name=field_name,
                    type=self.parse(raw["type"], record_ns),
                    doc=_get_doc(raw, f"field '{fullname}.{field_name}'"),
                    default=raw.get("default", NO_DEFAULT),
                )
            )
        self.pending.discard(fullname)

        record = RecordSchema(
            name=name,
            namespace=record_ns,
            fields=tuple(fields),
            doc=_get_doc(obj, fullname),
        )
        self.named[fullname] = record
        return record

    def _parse_enum(self, obj: Dict[str, Any], namespace: Optional[str]) -> EnumSchema:
        name, enum_ns = self._declare(obj, namespace)
        symbols = obj.get("symbols")
        if not isinstance(symbols, list) or not symbols:
            raise InvalidSchema(f"Enum '{name}' requires a non-empty 'symbols' list")
        for symbol in symbols:
            if not isinstance(symbol, str):
                raise InvalidSchema(f"Enum '{name}': symbol must be a string, got {symbol!r}")
            _check_name(symbol)
        if len(set(symbols)) != len(symbols):
            raise InvalidSchema(f"Enum '{name}' has duplicate symbols")

        enum_schema = EnumSchema(
            name=name, namespace=enum_ns, symbols=tuple(symbols), doc=_get_doc(obj, name)
        )
        self.named[enum_schema.fullname] = enum_schema
        return enum_schema

    def _parse_fixed(self, obj: Dict[str, Any], namespace: Optional[str]) -> FixedSchema:
        name, fixed_ns = self._declare(obj, namespace)
        size = obj.get("size")
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise InvalidSchema(f"Fixed '{name}' requires a non-negative integer 'size'")

        fixed_schema = FixedSchema(name=name, namespace=fixed_ns, size=size)
        self.named[fixed_schema.fullname] = fixed_schema
        return fixed_schema


def _check_name(name: str) -> None:
    if not _NAME_RE.match(name):
        raise InvalidSchema(f"Invalid name: {name!r}")


def _get_doc(obj: Dict[str, Any], where: str) -> Optional[str]:
    doc = obj.get("doc")
    if doc is not None and not isinstance(doc, str):
        raise InvalidSchema(f"{where}: 'doc' must be a string, got {doc!r}")
    return doc


def parse_schema(descriptor: Union[str, Dict[str, Any]]) -> RecordSchema:
    """Parse a record schema descriptor.

    Args:
        descriptor: Avro schema as JSON text or an already parsed mapping.
            The top level must be a record.

    Returns:
        Validated, immutable RecordSchema

    Raises:
        InvalidSchema: If the descriptor is malformed (duplicate field name,
            unknown type tag, cyclic nesting, ...)

    Example:
        >>> schema = parse_schema({
        ...     "type": "record", "name": "User", "namespace": "example.avro",
        ...     "fields": [{"name": "username", "type": "string"}],
        ... })
        >>> schema.fullname
        'example.avro.User'
    """
    if isinstance(descriptor, str):
        try:
            descriptor = json.loads(descriptor)
        except json.JSONDecodeError as err:
            raise InvalidSchema(f"Schema is not valid JSON: {err}") from err

    if not isinstance(descriptor, dict) or descriptor.get("type") != "record":
        raise InvalidSchema("Top-level schema must be a record")

    schema = _SchemaParser().parse(descriptor, None)
    assert isinstance(schema, RecordSchema)
    logger.debug("Loaded schema %s with %d fields", schema.fullname, len(schema.fields))
    return schema


def load_schema(path: Union[str, Path]) -> RecordSchema:
    """Load and parse a record schema from an ``.avsc`` file.

    Args:
        path: Path to a JSON schema file

    Returns:
        Parsed RecordSchema

    Raises:
        OSError: If the file cannot be read
        InvalidSchema: If the schema is malformed
    """
    text = Path(path).read_text(encoding="utf-8")
    return parse_schema(text)
