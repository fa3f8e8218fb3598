"""Unit tests for object container file writing."""

from __future__ import annotations

import io
import zlib
from typing import Any

import pytest

from avrorec import (
    ContainerError,
    ContainerWriter,
    RecordSchema,
    SchemaMismatch,
    WriterConfig,
    encode,
    write_container,
)
from avrorec.container.writer import MAGIC


def _split_header(data: bytes, sync_marker: bytes) -> tuple[bytes, bytes]:
    end = data.index(sync_marker) + len(sync_marker)
    return data[:end], data[end:]


class TestWriterConfig:
    """Test configuration validation."""

    def test_defaults(self) -> None:
        """Test default configuration."""
        config = WriterConfig()

        assert config.codec == "null"
        assert config.sync_interval == 16000
        assert config.sync_marker is None
        assert config.metadata == {}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"codec": "snappy"},
            {"compression_level": 10},
            {"sync_interval": 0},
            {"sync_marker": b"short"},
            {"metadata": {"avro.schema": b"{}"}},
            {"metadata": {"owner": "not bytes"}},
            {"metadata": {1: b"x"}},
        ],
    )
    def test_invalid(self, kwargs: dict[str, Any]) -> None:
        """Test invalid settings are rejected."""
        with pytest.raises(ContainerError):
            WriterConfig(**kwargs)


class TestContainerWriter:
    """Test the container writer."""

    def test_header(self, user_schema: RecordSchema, sync_marker: bytes) -> None:
        """Test the header carries magic, schema, codec and sync marker."""
        fo = io.BytesIO()
        with ContainerWriter(fo, user_schema, WriterConfig(sync_marker=sync_marker)):
            pass

        data = fo.getvalue()
        assert data.startswith(MAGIC)
        assert data.endswith(sync_marker)
        assert b"avro.schema" in data
        assert user_schema.to_json().encode("utf-8") in data
        assert b"avro.codec\x08null" in data

    def test_single_block(
        self, user_schema: RecordSchema, user_value: dict[str, Any], sync_marker: bytes
    ) -> None:
        """Test one block holds count, size, records and the sync marker."""
        fo = io.BytesIO()
        with ContainerWriter(fo, user_schema, WriterConfig(sync_marker=sync_marker)) as writer:
            writer.append(user_value)
            writer.append(user_value)

        payload = encode(user_schema, user_value) * 2
        _, body = _split_header(fo.getvalue(), sync_marker)
        # count 2 -> 0x04, size 40 -> zig-zag 80 -> 0x50
        assert body == b"\x04" + b"\x50" + payload + sync_marker
        assert writer.records_written == 2
        assert writer.blocks_written == 1

    def test_deflate_codec(
        self, user_schema: RecordSchema, user_value: dict[str, Any], sync_marker: bytes
    ) -> None:
        """Test deflate blocks decompress to the encoded records."""
        fo = io.BytesIO()
        config = WriterConfig(codec="deflate", sync_marker=sync_marker)
        with ContainerWriter(fo, user_schema, config) as writer:
            for _ in range(10):
                writer.append(user_value)

        header, body = _split_header(fo.getvalue(), sync_marker)
        assert b"avro.codec\x0edeflate" in header
        assert body[0:1] == b"\x14"  # 10 records
        assert body.endswith(sync_marker)

        # Block size is a single-byte varint here (compressed data < 64 bytes)
        size = body[1] >> 1
        compressed = body[2 : 2 + size]
        assert zlib.decompress(compressed, -15) == encode(user_schema, user_value) * 10

    def test_sync_interval_splits_blocks(
        self, user_schema: RecordSchema, user_value: dict[str, Any], sync_marker: bytes
    ) -> None:
        """Test a small sync interval flushes a block per record."""
        fo = io.BytesIO()
        config = WriterConfig(sync_interval=1, sync_marker=sync_marker)
        with ContainerWriter(fo, user_schema, config) as writer:
            for _ in range(3):
                writer.append(user_value)

        assert writer.blocks_written == 3
        # Header marker plus one marker per block
        assert fo.getvalue().count(sync_marker) == 4

    def test_user_metadata(self, user_schema: RecordSchema, sync_marker: bytes) -> None:
        """Test user metadata is stored in the header."""
        fo = io.BytesIO()
        config = WriterConfig(sync_marker=sync_marker, metadata={"owner": b"etl"})
        with ContainerWriter(fo, user_schema, config):
            pass

        assert b"\x0aowner\x06etl" in fo.getvalue()

    def test_random_sync_marker(self, user_schema: RecordSchema) -> None:
        """Test a random marker is generated when none is configured."""
        first = ContainerWriter(io.BytesIO(), user_schema)
        second = ContainerWriter(io.BytesIO(), user_schema)

        assert len(first.sync_marker) == 16
        assert first.sync_marker != second.sync_marker

    def test_mismatch_leaves_block_unchanged(
        self, user_schema: RecordSchema, user_value: dict[str, Any], sync_marker: bytes
    ) -> None:
        """Test a failed append adds nothing to the block."""
        fo = io.BytesIO()
        with ContainerWriter(fo, user_schema, WriterConfig(sync_marker=sync_marker)) as writer:
            writer.append(user_value)
            with pytest.raises(SchemaMismatch):
                writer.append({"username": "user2"})

        _, body = _split_header(fo.getvalue(), sync_marker)
        assert body == b"\x02\x28" + encode(user_schema, user_value) + sync_marker
        assert writer.records_written == 1

    def test_append_after_close(self, user_schema: RecordSchema, user_value: dict[str, Any]) -> None:
        """Test a closed writer rejects records."""
        writer = ContainerWriter(io.BytesIO(), user_schema)
        writer.close()

        assert writer.closed
        with pytest.raises(ContainerError, match="closed"):
            writer.append(user_value)

    def test_close_is_idempotent(self, user_schema: RecordSchema) -> None:
        """Test closing twice writes the header once."""
        fo = io.BytesIO()
        writer = ContainerWriter(fo, user_schema)
        writer.close()
        size = len(fo.getvalue())
        writer.close()

        assert len(fo.getvalue()) == size

    def test_file_object_left_open(self, user_schema: RecordSchema) -> None:
        """Test the writer does not close the caller's file."""
        fo = io.BytesIO()
        with ContainerWriter(fo, user_schema):
            pass

        assert not fo.closed



class TestWriteContainer:
    """Test the convenience writer."""

    def test_write_all(
        self, user_schema: RecordSchema, user_value: dict[str, Any], sync_marker: bytes
    ) -> None:
        """Test every record is written."""
        fo = io.BytesIO()
        count = write_container(
            fo, user_schema, [user_value] * 3, WriterConfig(sync_marker=sync_marker)
        )

        assert count == 3
        _, body = _split_header(fo.getvalue(), sync_marker)
        assert body[0:1] == b"\x06"

    def test_mismatch_raises(self, user_schema: RecordSchema, user_value: dict[str, Any]) -> None:
        """Test a bad record aborts the write by default."""
        with pytest.raises(SchemaMismatch):
            write_container(io.BytesIO(), user_schema, [user_value, {"username": "user2"}])

    def test_skip_invalid(
        self,
        user_schema: RecordSchema,
        user_value: dict[str, Any],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test bad records are logged and skipped."""
        records = [user_value, {"username": "user2"}, user_value]

        with caplog.at_level("WARNING", logger="avrorec.container.writer"):
            count = write_container(io.BytesIO(), user_schema, records, skip_invalid=True)

        assert count == 2
        assert "Skipping record 1" in caplog.text
