"""Main CLI entry point for avrorec."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterator

from .. import __version__
from ..codec.schema import RecordSchema, canonical_form, load_schema
from ..container import WriterConfig, write_container
from ..container.config import CODECS
from ..exceptions import AvrorecError, InvalidSchema, SchemaMismatch
from ..utils.fingerprint import schema_fingerprint

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the avrorec CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        prog="avrorec",
        description="avrorec: Schema-Driven Avro Record Encoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  avrorec --schema user.avsc --fingerprint                     Show canonical form and fingerprint
  avrorec --schema user.avsc --encode users.jsonl -o users.avro
  avrorec --version                                            Show version
        """,
    )

    parser.add_argument("--schema", metavar="FILE", type=str, help="Record schema (.avsc)")
    parser.add_argument(
        "--fingerprint",
        action="store_true",
        help="Print the schema's canonical form and CRC-64-AVRO fingerprint",
    )
    parser.add_argument(
        "--encode",
        metavar="INPUT",
        type=str,
        help="Encode JSON Lines records into an object container file",
    )
    parser.add_argument("-o", "--output", metavar="FILE", type=str, help="Output .avro file")
    parser.add_argument("--codec", choices=CODECS, default="null", help="Block compression codec")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Log and skip records that do not match the schema",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"avrorec {__version__}")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # If no command specified, show help
    if not (args.fingerprint or args.encode):
        parser.print_help()
        return 0

    if not args.schema:
        print("Error: --schema is required", file=sys.stderr)
        return 1

    schema_path = Path(args.schema)
    if not schema_path.exists():
        print(f"Error: File not found: {schema_path}", file=sys.stderr)
        return 1

    try:
        schema = load_schema(schema_path)
    except InvalidSchema as e:
        print(f"Error: Invalid schema {schema_path}: {e}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read schema {schema_path}: {e}", file=sys.stderr)
        return 1

    if args.fingerprint:
        print(canonical_form(schema))
        print(f"{schema_fingerprint(schema):016x}")

    if args.encode:
        return _encode_file(schema, args)

    return 0


def _encode_file(schema: RecordSchema, args: argparse.Namespace) -> int:
    input_path = Path(args.encode)
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    if not args.output:
        print("Error: --output is required with --encode", file=sys.stderr)
        return 1

    config = WriterConfig(codec=args.codec)
    try:
        with open(args.output, "wb") as fo:
            count = write_container(
                fo,
                schema,
                _read_records(input_path, args.skip_invalid),
                config,
                skip_invalid=args.skip_invalid,
            )
    except SchemaMismatch as e:
        print(f"Error: Record does not match schema: {e}", file=sys.stderr)
        return 1
    except (AvrorecError, ValueError) as e:
        print(f"Error encoding {input_path}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Wrote {count} record{'s' if count != 1 else ''} to {args.output}")
    return 0


def _read_records(path: Path, skip_invalid: bool) -> Iterator[Any]:
    """Yield one JSON value per non-blank line."""
    with open(path, encoding="utf-8") as fi:
        for line_number, line in enumerate(fi, start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as err:
                if not skip_invalid:
                    raise ValueError(f"line {line_number}: invalid JSON ({err.msg})") from err
                logger.warning("Skipping line %d: invalid JSON (%s)", line_number, err.msg)


if __name__ == "__main__":
    sys.exit(main())
