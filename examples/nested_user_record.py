#!/usr/bin/env python3
"""Nested user records written to an Avro file.

This example shows the typical workflow:
1. Start from flat rows (username, role, domain)
2. Wrap role and domain into a nested ``identity`` record
3. Encode each row with the schema and write an object container file
"""

from __future__ import annotations

import sys
from typing import ClassVar, Optional

from avrorec import BaseRecord, SchemaMismatch, WriterConfig, encode, field_sizes, write_container


class Identity(BaseRecord):
    """Role and domain of a user."""

    role: str
    domain: str


class User(BaseRecord):
    """A user with a nested identity."""

    username: str
    identity: Identity

    avro_namespace: ClassVar[Optional[str]] = "example.avro"


def main() -> None:
    """Run the nested record example."""
    print("=" * 60)
    print("avrorec Example: Nested User Records")
    print("=" * 60)
    print()

    rows = [
        ("user1", "admin", "domain1"),
        ("user2", "developer", "domain2"),
        ("user3", "analyst", "domain1"),
    ]

    # 1. Show the schema derived from the models
    schema = User.avro_schema()
    print("1. Schema:")
    print(f"   {schema.to_json()}")
    print()

    # 2. Wrap the flat rows into nested values
    records = [
        {"username": username, "identity": {"role": role, "domain": domain}}
        for username, role, domain in rows
    ]

    # 3. Encode one record and break down its size
    data = encode(User, records[0])
    print("2. First record:")
    print(f"   Encoded: {data.hex()} ({len(data)} bytes)")
    for name, size in field_sizes(User, records[0]).items():
        print(f"   {name:10s}: {size} bytes")
    print()

    # 4. A record missing its identity is rejected
    print("3. Mismatching record:")
    try:
        encode(User, {"username": "user4"})
    except SchemaMismatch as e:
        print(f"   Rejected: {e}")
    print()

    # 5. Write everything to an Avro file
    path = sys.argv[1] if len(sys.argv) > 1 else "users.avro"
    with open(path, "wb") as fo:
        count = write_container(fo, User, records, WriterConfig(codec="deflate"))
    print(f"4. Wrote {count} records to {path}")


if __name__ == "__main__":
    main()
