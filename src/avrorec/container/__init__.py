"""Object container file output for avrorec.

This module provides the writer that persists encoded records as Avro
object container files.
"""

from __future__ import annotations

from .config import WriterConfig
from .writer import ContainerWriter, write_container

__all__ = [
    "ContainerWriter",
    "WriterConfig",
    "write_container",
]
