"""Entry point for the ordered key-value store.

Loads a JSON ordered-record into an ``OrderedStore``, applies edits given on
the command line, and prints the result.

Usage
-----
    # Edit a record file and print it back as JSON:
    python main.py config.json --set retries=3 --delete legacy

    # Read from stdin and list entries one per line:
    echo '{"b": 2, "a": 1}' | python main.py --format entries

Environment (also read from a ``.env`` file):
    ORDMAP_KEY_POLICY   default for --key-policy (coerce, skip, reject);
                        validated, but every CLI key is already a string
    ORDMAP_INDENT       default for --indent
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

from dotenv import load_dotenv

from records import KeyPolicy, RecordError, dumps_record, loads_record
from store import OrderedStore

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load, edit and print an insertion-ordered key-value record",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "record",
        nargs="?",
        default="-",
        help="JSON object file to load, or '-' for stdin (default: -).",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="assignments",
        help=(
            "Set KEY to VALUE. VALUE is parsed as JSON when possible, "
            "otherwise kept as a string. May be repeated."
        ),
    )
    parser.add_argument(
        "--delete",
        action="append",
        default=[],
        metavar="KEY",
        dest="deletions",
        help="Delete KEY if present. May be repeated.",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        default=False,
        help="Remove every loaded entry before applying --set.",
    )
    parser.add_argument(
        "--format",
        choices=("record", "entries"),
        default="record",
        help="Output as a JSON record or as one entry per line (default: record).",
    )
    parser.add_argument(
        "--key-policy",
        choices=[p.value for p in KeyPolicy],
        default=os.environ.get("ORDMAP_KEY_POLICY", KeyPolicy.COERCE.value),
        dest="key_policy",
        help=(
            "How non-string keys become field names (default: coerce). "
            "Keys loaded from JSON or given to --set are always strings, so "
            "the output does not depend on it here; the value is still checked."
        ),
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="JSON indent for record output (default: compact).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )
    return parser


def parse_assignment(text: str) -> tuple[str, Any]:
    """Split ``KEY=VALUE``; VALUE is decoded as JSON, falling back to the raw text."""
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise ValueError(f"expected KEY=VALUE, got {text!r}")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key, value


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def apply_edits(store: OrderedStore, args: argparse.Namespace) -> None:
    if args.clear:
        logger.info("Clearing %d loaded entries", store.size)
        store.clear()
    for assignment in args.assignments:
        key, value = parse_assignment(assignment)
        store.set(key, value)
    removed = sum(1 for key in args.deletions if store.delete(key))
    logger.info(
        "Applied %d set(s), removed %d of %d key(s)",
        len(args.assignments),
        removed,
        len(args.deletions),
    )


def render(store: OrderedStore, args: argparse.Namespace) -> str:
    if args.format == "entries":
        lines = [
            f"{key}\t{json.dumps(value, ensure_ascii=False)}"
            for key, value in store.entries()
        ]
        lines.append(f"size: {store.size}")
        return "\n".join(lines)
    return dumps_record(store, key_policy=args.key_policy, indent=args.indent)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.indent is None and os.environ.get("ORDMAP_INDENT"):
        try:
            args.indent = int(os.environ["ORDMAP_INDENT"])
        except ValueError:
            sys.exit("Error: ORDMAP_INDENT must be an integer.")
    try:
        KeyPolicy(args.key_policy)
    except ValueError:
        sys.exit(f"Error: unknown key policy {args.key_policy!r}.")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        source = read_source(args.record)
    except (OSError, UnicodeDecodeError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        sys.exit(f"Error: cannot read {args.record}: {reason}")

    try:
        store = loads_record(source) if source.strip() else OrderedStore()
        logger.info("Loaded %d entries from %s", store.size, args.record)
        apply_edits(store, args)
        output = render(store, args)
    except (RecordError, ValueError) as exc:
        sys.exit(f"Error: {exc}")

    print(output)


if __name__ == "__main__":
    main()
