"""Unit tests for schema fingerprints."""

from __future__ import annotations

from avrorec import RecordSchema, canonical_form, parse_schema
from avrorec.utils.fingerprint import (
    CRC64_EMPTY,
    crc64_avro,
    fingerprint_bytes,
    schema_fingerprint,
    single_object_header,
)


class TestCRC64:
    """Test the CRC-64-AVRO function."""

    def test_empty(self) -> None:
        """Test the fingerprint of no data is the empty value."""
        assert crc64_avro(b"") == CRC64_EMPTY

    def test_known_vector(self) -> None:
        """Test against the published fingerprint of the null schema."""
        assert crc64_avro(b'"null"') == 7195948357588979594

    def test_fits_in_64_bits(self) -> None:
        """Test results stay within 64 bits."""
        for data in (b"a", b"\xff" * 100, bytes(range(256))):
            assert 0 <= crc64_avro(data) < 2**64

    def test_changes_with_data(self) -> None:
        """Test different data gives different fingerprints."""
        assert crc64_avro(b"abc") != crc64_avro(b"abd")


class TestSchemaFingerprint:
    """Test schema-level fingerprints."""

    def test_fingerprint_of_canonical_form(self, user_schema: RecordSchema) -> None:
        """Test the schema fingerprint hashes the canonical form."""
        expected = crc64_avro(canonical_form(user_schema).encode("utf-8"))

        assert schema_fingerprint(user_schema) == expected

    def test_formatting_does_not_matter(self, user_schema: RecordSchema) -> None:
        """Test whitespace, docs and short names do not change the fingerprint."""
        compact = parse_schema(
            '{"type":"record","name":"example.avro.User","doc":"A user","fields":['
            '{"name":"username","type":"string"},'
            '{"name":"identity","type":{"type":"record","name":"Identity","fields":['
            '{"name":"role","type":"string"},{"name":"domain","type":"string"}]}}]}'
        )

        assert schema_fingerprint(compact) == schema_fingerprint(user_schema)

    def test_field_order_matters(self, user_schema: RecordSchema) -> None:
        """Test reordering fields changes the fingerprint."""
        reordered = parse_schema(
            {
                "type": "record",
                "name": "User",
                "namespace": "example.avro",
                "fields": list(reversed(user_schema.to_dict()["fields"])),
            }
        )

        assert schema_fingerprint(reordered) != schema_fingerprint(user_schema)

    def test_fingerprint_bytes_little_endian(self, user_schema: RecordSchema) -> None:
        """Test the 8-byte form is little-endian."""
        raw = fingerprint_bytes(user_schema)

        assert len(raw) == 8
        assert int.from_bytes(raw, "little") == schema_fingerprint(user_schema)

    def test_single_object_header(self, user_schema: RecordSchema) -> None:
        """Test the header layout."""
        header = single_object_header(user_schema)

        assert len(header) == 10
        assert header[:2] == b"\xc3\x01"
        assert header[2:] == fingerprint_bytes(user_schema)
