"""Configuration for object container file writing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..exceptions import ContainerError

CODECS = ("null", "deflate")

SYNC_SIZE = 16


@dataclass
class WriterConfig:
    """Configuration for ContainerWriter.

    Attributes:
        codec: Block compression codec, ``"null"`` (none) or ``"deflate"``
            (raw RFC 1951 deflate) (default "null")
        compression_level: zlib level 0-9 for the deflate codec (default 6)
        sync_interval: Approximate number of uncompressed bytes per block
            before it is flushed (default 16000)
        sync_marker: 16-byte block separator. A random marker is generated
            when None; set it to make file output reproducible.
        metadata: Extra user metadata stored in the file header. Keys may not
            use the reserved ``avro.`` prefix.

    Examples:
        ```python
        from avrorec.container import ContainerWriter, WriterConfig

        config = WriterConfig(codec="deflate", sync_interval=64 * 1024)
        with open("users.avro", "wb") as fo:
            with ContainerWriter(fo, User, config) as writer:
                writer.append(user)
        ```
    """

    codec: str = "null"
    compression_level: int = 6
    sync_interval: int = 16000
    sync_marker: Optional[bytes] = None
    metadata: Dict[str, bytes] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.codec not in CODECS:
            raise ContainerError(f"Unknown codec {self.codec!r}, expected one of {CODECS}")

        if not 0 <= self.compression_level <= 9:
            raise ContainerError(
                f"compression_level must be 0-9, got {self.compression_level}"
            )

        if self.sync_interval <= 0:
            raise ContainerError(f"sync_interval must be positive, got {self.sync_interval}")

        if self.sync_marker is not None and len(self.sync_marker) != SYNC_SIZE:
            raise ContainerError(
                f"sync_marker must be {SYNC_SIZE} bytes, got {len(self.sync_marker)}"
            )

        for key, value in self.metadata.items():
            if not isinstance(key, str):
                raise ContainerError(f"Metadata key must be a string, got {key!r}")
            if key.startswith("avro."):
                raise ContainerError(f"Metadata key {key!r} uses the reserved 'avro.' prefix")
            if not isinstance(value, bytes):
                raise ContainerError(f"Metadata value for {key!r} must be bytes")
