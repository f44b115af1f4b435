"""
Command-line interface for CI relationship trees.

Usage:
    cmdb-graph web-portal --depth 2 --direction downstream
    cmdb-graph --id 0123456789abcdef0123456789abcdef --impact --json
    cmdb-graph web-portal --snapshot ./cmdb.kuzu --class server

Connection settings come from SN_INSTANCE, SN_USER and SN_PASSWORD
(or a .env file) unless --snapshot points at an offline Kuzu snapshot.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from pydantic import ValidationError

from .config import InstanceSettings
from .exceptions import CINotFoundError, InvalidTraversalOptionsError, RecordSourceError
from .explorer import RelationshipExplorer
from .graph.render import RecordRenderer, TreeRenderer
from .graph.types import (
    DEFAULT_DEPTH,
    MAX_DEPTH,
    MIN_DEPTH,
    Direction,
    TraversalOptions,
    TraversalResult,
)
from .logging import setup_logging
from .sources.kuzu_source import KuzuRecordSource
from .sources.protocol import RecordSource
from .sources.table_api import TableAPISource

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdb-graph",
        description="Show the relationship tree of a CMDB configuration item.",
    )
    parser.add_argument("ci", nargs="?", help="CI name (or sys_id)")
    parser.add_argument("--id", dest="sys_id", help="Resolve the root by sys_id")
    parser.add_argument(
        "--depth",
        type=int,
        default=DEFAULT_DEPTH,
        help=f"Maximum traversal depth, {MIN_DEPTH}-{MAX_DEPTH} (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument("--type", dest="rel_type", help="Relationship type substring filter")
    parser.add_argument(
        "--class",
        dest="ci_class",
        help="Only show CIs whose class contains this (traversal is not pruned)",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=Direction.BOTH.value,
        help="Edge direction relative to each expanded CI (default: both)",
    )
    parser.add_argument(
        "--impact",
        action="store_true",
        help="Impact analysis: follow upstream edges only (what depends on this CI)",
    )
    parser.add_argument("--json", action="store_true", help="Print a structured record")
    parser.add_argument("--snapshot", metavar="PATH", help="Read from a Kuzu snapshot")
    parser.add_argument(
        "--save-snapshot",
        metavar="PATH",
        help="Write the traversed CIs and relationships to a Kuzu snapshot",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log requests (-vv for debug)"
    )
    return parser


def _log_level(verbose: int, default: str) -> str:
    if verbose > 1:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return default


def _open_source(args: argparse.Namespace) -> RecordSource:
    """Open the snapshot or the instance; configuration errors propagate."""
    if args.snapshot:
        setup_logging(_log_level(args.verbose, "WARNING"))
        return KuzuRecordSource(args.snapshot)
    settings = InstanceSettings()
    setup_logging(_log_level(args.verbose, settings.log_level))
    return TableAPISource.from_settings(settings)


def _save_snapshot(path: str, result: TraversalResult) -> None:
    snapshot = KuzuRecordSource(path)
    try:
        snapshot.save_result(result)
    finally:
        snapshot.close()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if bool(args.ci) == bool(args.sys_id):
        parser.error("give exactly one of a CI name or --id")
    try:
        options = TraversalOptions(
            max_depth=args.depth,
            rel_type=args.rel_type,
            ci_class=args.ci_class,
            direction=args.direction,
            impact=args.impact,
        )
    except InvalidTraversalOptionsError as exc:
        parser.error(str(exc))

    try:
        source = _open_source(args)
    except ValidationError as exc:
        missing = ", ".join(f"SN_{str(e['loc'][0]).upper()}" for e in exc.errors())
        print(f"ERROR: invalid or missing configuration: {missing}", file=sys.stderr)
        return EXIT_USAGE
    except RuntimeError as exc:
        # Kuzu reports unreadable or locked databases as RuntimeError.
        print(f"ERROR: cannot open snapshot {args.snapshot}: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND

    if args.json:
        renderer: TreeRenderer | RecordRenderer = RecordRenderer()
    else:
        renderer = TreeRenderer(write=print)

    try:
        explorer = RelationshipExplorer(source)
        reference = args.sys_id or args.ci
        by_id = True if args.sys_id else None
        try:
            result = explorer.explore(reference, options, by_id=by_id, sinks=[renderer])
        except (CINotFoundError, RecordSourceError) as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_NOT_FOUND

        if isinstance(renderer, RecordRenderer):
            print(json.dumps(renderer.record, indent=2, ensure_ascii=False))

        if args.save_snapshot:
            try:
                _save_snapshot(args.save_snapshot, result)
            except RuntimeError as exc:
                print(
                    f"ERROR: cannot write snapshot {args.save_snapshot}: {exc}",
                    file=sys.stderr,
                )
                return EXIT_NOT_FOUND
    finally:
        source.close()

    print(f"→ Found {len(result.entries)} related CI(s)", file=sys.stderr)
    if result.truncated:
        print(
            f"→ Relationship lists truncated for {len(result.truncated)} CI(s)",
            file=sys.stderr,
        )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
