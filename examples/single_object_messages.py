#!/usr/bin/env python3
"""Single-object messages for queues and logs.

Each message carries the schema fingerprint, so a consumer can look up the
writer schema in a registry before decoding.
"""

from __future__ import annotations

from avrorec import RecordEncoder, canonical_form, parse_schema

SCHEMA_JSON = """
{
  "type": "record",
  "name": "SensorReading",
  "namespace": "example.iot",
  "fields": [
    {"name": "sensor", "type": "string"},
    {"name": "kind", "type": {"type": "enum", "name": "Kind", "symbols": ["TEMP", "HUMIDITY"]}},
    {"name": "value", "type": "double"},
    {"name": "sequence", "type": "long"}
  ]
}
"""


def main() -> None:
    """Run the single-object example."""
    schema = parse_schema(SCHEMA_JSON)
    encoder = RecordEncoder(schema)

    print("Canonical form:")
    print(f"  {canonical_form(schema)}")
    print(f"Fingerprint: {encoder.fingerprint:016x}")
    print()

    readings = [
        {"sensor": "t-01", "kind": "TEMP", "value": 21.5, "sequence": 1},
        {"sensor": "h-07", "kind": "HUMIDITY", "value": 0.43, "sequence": 2},
    ]
    for reading in readings:
        message = encoder.encode(reading, single_object=True)
        print(f"{reading['sensor']}: {message.hex()} ({len(message)} bytes)")


if __name__ == "__main__":
    main()
