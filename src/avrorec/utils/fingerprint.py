"""Schema fingerprints.

This module provides the 64-bit Rabin fingerprint (CRC-64-AVRO) used to
identify a schema by its Parsing Canonical Form, and the single-object
encoding header built from it.
"""

from __future__ import annotations

import struct

from ..codec.schema import Schema, canonical_form

CRC64_EMPTY = 0xC15D213AA4D7A795

SINGLE_OBJECT_MAGIC = b"\xc3\x01"


def _make_table() -> tuple:
    table = []
    for i in range(256):
        fp = i
        for _ in range(8):
            fp = (fp >> 1) ^ (CRC64_EMPTY & -(fp & 1))
        table.append(fp)
    return tuple(table)


_CRC64_TABLE = _make_table()


def crc64_avro(data: bytes) -> int:
    """Calculate the CRC-64-AVRO (Rabin) fingerprint of raw bytes.

    Args:
        data: Data to fingerprint

    Returns:
        Unsigned 64-bit fingerprint

    Example:
        >>> hex(crc64_avro(b""))
        '0xc15d213aa4d7a795'
    """
    fp = CRC64_EMPTY
    for byte in data:
        fp = (fp >> 8) ^ _CRC64_TABLE[(fp ^ byte) & 0xFF]
    return fp


def schema_fingerprint(schema: Schema) -> int:
    """Fingerprint a schema by its Parsing Canonical Form.

    Schemas that differ only in docs, defaults, whitespace or key order get
    the same fingerprint.

    Args:
        schema: Parsed schema

    Returns:
        Unsigned 64-bit fingerprint
    """
    return crc64_avro(canonical_form(schema).encode("utf-8"))


def fingerprint_bytes(schema: Schema) -> bytes:
    """Return the schema fingerprint as 8 bytes, little-endian."""
    return struct.pack("<Q", schema_fingerprint(schema))


def single_object_header(schema: Schema) -> bytes:
    """Build the Avro single-object encoding header.

    The header is the two-byte marker ``C3 01`` followed by the 8-byte
    little-endian fingerprint, so a reader can pick the writer schema from a
    registry before decoding the payload.

    Args:
        schema: Parsed schema

    Returns:
        10-byte header
    """
    return SINGLE_OBJECT_MAGIC + fingerprint_bytes(schema)
