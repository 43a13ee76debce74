from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List

from recnorm.core.config import NormalizerConfig
from recnorm.core.errors import NormalizationError
from recnorm.core.normalization import Normalizer, dumps
from recnorm.core.schema.reflection import describe_record
from recnorm.core.schema.registry import load_record_factory

_LOAD_ERRORS = (ImportError, AttributeError, TypeError, ValueError, RuntimeError, NormalizationError)


def _build_record(target: str) -> Any:
    """Resolve "module:Attr" and build a record value with default field values."""
    factory = load_record_factory(target)
    return factory()


def _read_input(path: str | None) -> str:
    """Read the input document from a file, or stdin when path is None or "-"."""

    if not path or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _print_tree(tree: Any, args: argparse.Namespace) -> None:
    indent = args.indent if args.indent and args.indent > 0 else None
    print(dumps(tree, sort_keys=bool(args.sort_keys), indent=indent))


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a JSON document against a record type and print the result.

    Exit codes:
    - 0 success
    - 2 unreadable input, unknown record, or normalization error

    """

    if args.path and args.path != "-":
        path = os.path.abspath(args.path)
        if not os.path.isfile(path):
            print(f"error: file not found: {path}", file=sys.stderr)
            return 2
    else:
        path = None

    try:
        record = _build_record(args.record)
    except _LOAD_ERRORS as e:
        print(f"error: cannot load record {args.record}: {e}", file=sys.stderr)
        return 2

    normalizer = Normalizer(config=NormalizerConfig.from_env())
    try:
        out = normalizer.normalize(record, _read_input(path))
    except (OSError, UnicodeDecodeError, NormalizationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _print_tree(out, args)
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    """Print the field descriptors of a record type."""

    try:
        record = _build_record(args.record)
        fields = describe_record(record, NormalizerConfig.from_env())
    except _LOAD_ERRORS as e:
        print(f"error: cannot describe record {args.record}: {e}", file=sys.stderr)
        return 2

    print(json.dumps([f.to_dict() for f in fields], indent=2))
    return 0


def cmd_skeleton(args: argparse.Namespace) -> int:
    """Print the full projection of a record built from its defaults."""

    try:
        record = _build_record(args.record)
        out = Normalizer(config=NormalizerConfig.from_env()).normalize_record(record, {})
    except _LOAD_ERRORS as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _print_tree(out, args)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the recnorm API server.

    Records are served from RECNORM_RECORDS, or from --record entries.

    """

    try:
        import uvicorn
    except ImportError as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from recnorm.api.server import create_app
    from recnorm.core.schema.registry import RecordRegistry

    entries = ";".join(args.record or []) or os.environ.get("RECNORM_RECORDS", "")
    try:
        registry = RecordRegistry.from_spec(entries)
    except _LOAD_ERRORS as e:
        print(f"error: invalid record registry: {e}", file=sys.stderr)
        return 2

    app = create_app(registry)
    uvicorn.run(app, host=args.host, port=int(args.port), log_level=str(args.log_level).lower())
    return 0


def _add_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--indent", type=int, default=0, help="Pretty-print with this indent (0=compact)")
    p.add_argument("--sort-keys", action="store_true", help="Sort object keys in the output")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="recnorm", description="Schema-driven JSON normalizer")
    p.add_argument("--log-level", default=os.environ.get("RECNORM_LOG_LEVEL", "WARNING"), help="Logging level")
    sub = p.add_subparsers(dest="cmd", required=True)

    np = sub.add_parser("normalize", help="Normalize a JSON document against a record type")
    np.add_argument("record", help="Record type or factory, as module:Attr")
    np.add_argument("path", nargs="?", default=None, help="Path to JSON file (default: stdin)")
    _add_output_args(np)
    np.set_defaults(func=cmd_normalize)

    dp = sub.add_parser("describe", help="Show the field descriptors of a record type")
    dp.add_argument("record", help="Record type or factory, as module:Attr")
    dp.set_defaults(func=cmd_describe)

    kp = sub.add_parser("skeleton", help="Print a record's full projection from its defaults")
    kp.add_argument("record", help="Record type or factory, as module:Attr")
    _add_output_args(kp)
    kp.set_defaults(func=cmd_skeleton)

    sv = sub.add_parser("serve", help="Run the recnorm FastAPI server")
    sv.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    sv.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    sv.add_argument(
        "--record",
        action="append",
        default=None,
        help="Register a record as name=module:Attr (repeatable; default: RECNORM_RECORDS)",
    )
    sv.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
