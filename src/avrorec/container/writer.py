"""Avro object container file writer.

This module frames encoded records into the Avro object container format so
they can be persisted as a self-describing ``.avro`` file:

- Header: ``Obj\\x01`` magic, metadata map (schema JSON, codec), 16-byte sync marker
- Blocks: [Object count (long)] [Data size (long)] [Records] [Sync marker]
"""

from __future__ import annotations

import logging
import os
import zlib
from typing import Any, BinaryIO, Iterable, Optional

from ..codec.binary import BinaryEncoder
from ..codec.encoder import write_record
from ..codec.introspect import SchemaLike, as_record_schema
from ..exceptions import ContainerError, SchemaMismatch
from .config import SYNC_SIZE, WriterConfig

logger = logging.getLogger(__name__)

MAGIC = b"Obj\x01"


class ContainerWriter:
    """Appends records to an Avro object container file.

    The header is written on the first flush. Records are buffered into a
    block until the block reaches ``sync_interval`` bytes. A record that
    fails to encode is never added to the block.

    The writer does not close the file object it was given.

    Example:
        >>> with open("users.avro", "wb") as fo:
        ...     with ContainerWriter(fo, schema) as writer:
        ...         writer.append({"username": "user1",
        ...                        "identity": {"role": "admin", "domain": "domain1"}})
    """

    def __init__(
        self,
        fo: BinaryIO,
        schema: SchemaLike,
        config: Optional[WriterConfig] = None,
    ) -> None:
        self.fo = fo
        self.schema = as_record_schema(schema)
        self.config = config or WriterConfig()
        self.sync_marker = self.config.sync_marker or os.urandom(SYNC_SIZE)
        self.records_written = 0
        self.blocks_written = 0

        self._block = BinaryEncoder()
        self._block_count = 0
        self._header_written = False
        self._closed = False

    def __enter__(self) -> ContainerWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def append(self, value: Any) -> None:
        """Encode one record into the current block.

        Raises:
            ContainerError: If the writer is closed
            SchemaMismatch: If the value does not conform to the schema; the
                block is left unchanged
        """
        if self._closed:
            raise ContainerError("Cannot append to a closed ContainerWriter")

        record = BinaryEncoder()
        write_record(record, self.schema, value, "")
        self._block.write_fixed(record.getvalue())
        self._block_count += 1
        self.records_written += 1

        if len(self._block) >= self.config.sync_interval:
            self.flush()

    def flush(self) -> None:
        """Write the header (if not yet written) and the pending block."""
        if self._closed:
            raise ContainerError("Cannot flush a closed ContainerWriter")

        if not self._header_written:
            self._write_header()

        if self._block_count == 0:
            return

        data = self._compress(self._block.getvalue())
        framing = BinaryEncoder()
        framing.write_long(self._block_count)
        framing.write_long(len(data))

        self.fo.write(framing.getvalue())
        self.fo.write(data)
        self.fo.write(self.sync_marker)
        self.blocks_written += 1
        logger.debug(
            "Wrote block %d: %d records, %d bytes (%s)",
            self.blocks_written,
            self._block_count,
            len(data),
            self.config.codec,
        )

        self._block = BinaryEncoder()
        self._block_count = 0

    def close(self) -> None:
        """Flush the pending block and mark the writer closed."""
        if self._closed:
            return
        self.flush()
        self._closed = True

    def _write_header(self) -> None:
        metadata = {
            "avro.schema": self.schema.to_json().encode("utf-8"),
            "avro.codec": self.config.codec.encode("ascii"),
        }
        metadata.update(self.config.metadata)

        header = BinaryEncoder()
        header.write_fixed(MAGIC)
        # Metadata is a map<bytes>: one block of entries, then a zero count
        header.write_long(len(metadata))
        for key, value in metadata.items():
            header.write_string(key)
            header.write_bytes(value)
        header.write_long(0)
        header.write_fixed(self.sync_marker)

        self.fo.write(header.getvalue())
        self._header_written = True

    def _compress(self, data: bytes) -> bytes:
        if self.config.codec == "deflate":
            compressor = zlib.compressobj(self.config.compression_level, zlib.DEFLATED, -15)
            return compressor.compress(data) + compressor.flush()
        return data


def write_container(
    fo: BinaryIO,
    schema: SchemaLike,
    records: Iterable[Any],
    config: Optional[WriterConfig] = None,
    *,
    skip_invalid: bool = False,
) -> int:
    """Write records to an Avro object container file.

    Args:
        fo: Binary file object to write to (left open)
        schema: Record schema or anything encode() accepts
        records: Record values (mappings or Pydantic model instances)
        config: Writer configuration
        skip_invalid: If True, log and skip records that do not conform to
            the schema instead of raising

    Returns:
        Number of records written

    Raises:
        InvalidSchema: If the schema is malformed
        SchemaMismatch: If a record does not conform and skip_invalid is False
    """
    skipped = 0
    with ContainerWriter(fo, schema, config) as writer:
        for index, record in enumerate(records):
            try:
                writer.append(record)
            except SchemaMismatch as err:
                if not skip_invalid:
                    raise
                skipped += 1
                logger.warning("Skipping record %d: %s", index, err)

    if skipped:
        logger.warning(
            "Skipped %d record(s) that did not match %s", skipped, writer.schema.fullname
        )
    return writer.records_written
