"""Pydantic record modeling for avrorec.

This module provides the BaseRecord class for defining records whose schema
is derived from their type annotations.
"""

from __future__ import annotations

from .base import BaseRecord

__all__ = [
    "BaseRecord",
]
