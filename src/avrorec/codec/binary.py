"""Low-level Avro binary writer.

This module provides the primitive encodings of the Avro binary format:
zig-zag varints for ``int``/``long``, little-endian IEEE 754 for
``float``/``double`` and length-prefixed ``bytes``/``string``.
"""

from __future__ import annotations

import struct

INT_MIN = -(1 << 31)
INT_MAX = (1 << 31) - 1
LONG_MIN = -(1 << 63)
LONG_MAX = (1 << 63) - 1

_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")


def zigzag(value: int) -> int:
    """Map a signed 64-bit integer to an unsigned one.

    Small magnitudes map to small numbers: 0 -> 0, -1 -> 1, 1 -> 2, -2 -> 3.

    Args:
        value: Signed integer in the ``long`` range

    Returns:
        Zig-zag encoded unsigned integer
    """
    return (value << 1) ^ (value >> 63)


def varint_size(value: int) -> int:
    """Return the number of bytes a zig-zag varint takes for ``value``.

    Example:
        >>> varint_size(0)
        1
        >>> varint_size(64)
        2
    """
    return _uvarint_size(zigzag(value))


def _uvarint_size(n: int) -> int:
    size = 1
    while n > 0x7F:
        n >>= 7
        size += 1
    return size


class BinaryEncoder:
    """Writes Avro primitive encodings into a byte buffer.

    Example:
        >>> enc = BinaryEncoder()
        >>> enc.write_string("user1")
        >>> enc.write_long(-1)
        >>> enc.getvalue()
        b'\\nuser1\\x01'
    """

    def __init__(self) -> None:
        """Initialize an empty encoder."""
        self._buf = bytearray()

    def write_null(self) -> None:
        """Null is written as zero bytes."""
        return None

    def write_boolean(self, value: bool) -> None:
        """Write a boolean as a single byte (0 or 1)."""
        self._emit(b"\x01" if value else b"\x00")

    def write_int(self, value: int) -> None:
        """Write a 32-bit signed integer as a zig-zag varint.

        Raises:
            ValueError: If value does not fit in 32 bits
        """
        if value < INT_MIN or value > INT_MAX:
            raise ValueError(f"Value {value} out of range for int [{INT_MIN}, {INT_MAX}]")
        self._write_varint(zigzag(value))

    def write_long(self, value: int) -> None:
        """Write a 64-bit signed integer as a zig-zag varint.

        Raises:
            ValueError: If value does not fit in 64 bits
        """
        if value < LONG_MIN or value > LONG_MAX:
            raise ValueError(f"Value {value} out of range for long [{LONG_MIN}, {LONG_MAX}]")
        self._write_varint(zigzag(value))

    def write_float(self, value: float) -> None:
        """Write a 4-byte little-endian IEEE 754 float.

        Raises:
            OverflowError: If value is too large for single precision
        """
        self._emit(_FLOAT.pack(value))

    def write_double(self, value: float) -> None:
        """Write an 8-byte little-endian IEEE 754 double."""
        self._emit(_DOUBLE.pack(value))

    def write_bytes(self, data: bytes) -> None:
        """Write a long length followed by the raw bytes."""
        self.write_long(len(data))
        self._emit(data)

    def write_string(self, value: str) -> None:
        """Write a string as length-prefixed UTF-8."""
        self.write_bytes(value.encode("utf-8"))

    def write_fixed(self, data: bytes) -> None:
        """Write raw bytes with no length prefix."""
        self._emit(data)

    def _write_varint(self, n: int) -> None:
        # Low 7 bits first, high bit set on every byte but the last
        while n > 0x7F:
            self._buf.append((n & 0x7F) | 0x80)
            n >>= 7
        self._buf.append(n)

    def _emit(self, data: bytes) -> None:
        self._buf.extend(data)

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)


class SizeCounter(BinaryEncoder):
    """Counts the bytes a BinaryEncoder would write, without keeping them.

    Range and overflow checks are the same as BinaryEncoder's, so a value
    that can be counted can also be encoded.
    """

    def __init__(self) -> None:
        super().__init__()
        self._size = 0

    def _write_varint(self, n: int) -> None:
        self._size += _uvarint_size(n)

    def _emit(self, data: bytes) -> None:
        self._size += len(data)

    def getvalue(self) -> bytes:
        raise TypeError("SizeCounter does not keep the encoded bytes")

    def __len__(self) -> int:
        return self._size
