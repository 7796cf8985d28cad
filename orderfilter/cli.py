"""orderfilter command line interface.

Commands:
  topic     Print the pubsub topic for a chain ID and custom order schema
  decode    Print the chain ID and canonical schema carried by a topic
  validate  Validate an order (or a mesh message) JSON file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Callable, List

from .canonical import canonicalize
from .config import OrderFilterConfig, load_config
from .errors import OrderFilterError
from .filter import Filter
from .topic import decode_topic

logger = logging.getLogger(__name__)

CommandHandler = Callable[[List[str], OrderFilterConfig], int]

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--chain-id",
        type=int,
        default=None,
        help="Chain ID (default: from configuration)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--schema", help="Custom order schema as JSON text")
    source.add_argument("--schema-file", help="Path to a custom order schema file")


def _filter_from_args(args: argparse.Namespace, config: OrderFilterConfig) -> Filter:
    chain_id = config.chain_id if args.chain_id is None else args.chain_id
    if args.schema is not None:
        schema = args.schema
    elif args.schema_file is not None:
        schema = Path(args.schema_file).read_text(encoding="utf-8")
    else:
        schema = config.resolve_custom_order_schema()
    return Filter(chain_id, schema, contract_addresses=config.contract_addresses)


def cmd_topic(argv: List[str], config: OrderFilterConfig) -> int:
    """Print the topic for a filter."""
    parser = argparse.ArgumentParser(
        prog="orderfilter topic",
        description="Print the pubsub topic for a chain ID and custom order schema",
    )
    _add_filter_arguments(parser)
    args = parser.parse_args(argv)
    print(_filter_from_args(args, config).topic)
    return EXIT_OK


def cmd_decode(argv: List[str], config: OrderFilterConfig) -> int:
    """Print what a topic carries."""
    parser = argparse.ArgumentParser(
        prog="orderfilter decode",
        description="Print the chain ID and canonical custom order schema of a topic",
    )
    parser.add_argument("topic", help="Topic string to decode")
    args = parser.parse_args(argv)
    chain_id, schema = decode_topic(args.topic)
    print(
        json.dumps(
            {"chain_id": chain_id, "schema": canonicalize(schema).decode("utf-8")}
        )
    )
    return EXIT_OK


def cmd_validate(argv: List[str], config: OrderFilterConfig) -> int:
    """Validate an order or message file; exit 1 when it is invalid."""
    parser = argparse.ArgumentParser(
        prog="orderfilter validate",
        description="Validate a signed order (or mesh message) JSON file",
    )
    parser.add_argument("--topic", help="Validate against the filter of this topic")
    _add_filter_arguments(parser)
    parser.add_argument(
        "--message",
        action="store_true",
        help="Treat the file as a mesh message instead of a bare order",
    )
    parser.add_argument("path", help="JSON file to validate ('-' for stdin)")
    args = parser.parse_args(argv)

    if args.topic is not None:
        flt = Filter.from_topic(args.topic, contract_addresses=config.contract_addresses)
    else:
        flt = _filter_from_args(args, config)
    if args.path == "-":
        document = sys.stdin.read()
    else:
        document = Path(args.path).read_text(encoding="utf-8")

    if args.message:
        valid = flt.match_message_json(document)
        print(json.dumps({"valid": valid}))
    else:
        result = flt.validate_order_json(document)
        valid = result.valid
        print(json.dumps(result.as_dict()))
    return EXIT_OK if valid else EXIT_INVALID


COMMANDS: dict[str, CommandHandler] = {
    "topic": cmd_topic,
    "decode": cmd_decode,
    "validate": cmd_validate,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orderfilter",
        add_help=False,
        allow_abbrev=False,
        formatter_class=argparse.RawTextHelpFormatter,
        description=textwrap.dedent("""
            Available commands:
              topic     Print the pubsub topic for a chain ID and custom order schema
              decode    Print the chain ID and canonical schema carried by a topic
              validate  Validate an order (or a mesh message) JSON file
        """),
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    """Main CLI entry point."""
    argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()
    if not argv or argv[0] in {"-h", "--help"}:
        parser.print_help()
        return EXIT_OK

    args, rest = parser.parse_known_args(argv)
    if not rest or rest[0] not in COMMANDS:
        cmd = rest[0] if rest else None
        print(f"Error: unknown command {cmd!r}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.config)
        logger.debug("Running command %s with %s", rest[0], config)
        return COMMANDS[rest[0]](rest[1:], config)
    except (OrderFilterError, OSError, ValueError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
