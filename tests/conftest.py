"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from avrorec import RecordSchema, parse_schema

USER_SCHEMA_JSON = """
{
  "type": "record",
  "name": "User",
  "namespace": "example.avro",
  "fields": [
    {"name": "username", "type": "string"},
    {"name": "identity", "type": {
      "type": "record",
      "name": "Identity",
      "fields": [
        {"name": "role", "type": "string"},
        {"name": "domain", "type": "string"}
      ]
    }}
  ]
}
"""


@pytest.fixture
def user_schema_json() -> str:
    """Schema text for a user with a nested identity record."""
    return USER_SCHEMA_JSON


@pytest.fixture
def user_schema() -> RecordSchema:
    """Parsed user schema."""
    return parse_schema(USER_SCHEMA_JSON)


@pytest.fixture
def user_value() -> dict[str, Any]:
    """Value matching the user schema."""
    return {"username": "user1", "identity": {"role": "admin", "domain": "domain1"}}


@pytest.fixture
def sync_marker() -> bytes:
    """Fixed sync marker for reproducible container files."""
    return bytes(range(16))
