"""Command-line front end."""

from __future__ import annotations

import argparse
import logging
import sys

from .catalog import default_catalog, load_catalog
from .driver import (
    EnumeratedProgram,
    EnumerationConfig,
    format_program,
    replay_program,
    run_enumeration,
)
from .errors import ConfigurationError
from .generator import ParameterPlacement
from .verify import ProgramVerificationError
from . import constants

logger = logging.getLogger(__name__)


def _parse_decisions(text: str) -> list[int]:
    try:
        return [int(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Expected comma-separated integers, got {text!r}"
        ) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="irenum",
        description="Exhaustively enumerate small well-formed IR programs",
    )
    parser.add_argument(
        "--max-ops",
        "-n",
        type=int,
        default=constants.DEFAULT_MAX_OPERATIONS,
        help=(
            "Maximum operations per program "
            f"(default: {constants.DEFAULT_MAX_OPERATIONS})"
        ),
    )
    parser.add_argument(
        "--guide",
        "-g",
        default=constants.GUIDE_BFS,
        choices=list(constants.SUPPORTED_GUIDES),
        help="Enumeration policy (default: bfs)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=constants.DEFAULT_SEED,
        help="Seed for the random guide (ignored by bfs)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after this many programs (required with --guide random)",
    )
    parser.add_argument(
        "--append-params",
        action="store_true",
        help="Always append synthesized parameters instead of choosing a position",
    )
    parser.add_argument(
        "--catalog", default=None, help="JSON file describing the operation catalog"
    )
    parser.add_argument(
        "--format",
        default=constants.FORMAT_TEXT,
        choices=[constants.FORMAT_TEXT, constants.FORMAT_JSON],
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--show-decisions",
        action="store_true",
        help="Prefix each text program with its decision sequence",
    )
    parser.add_argument(
        "--replay",
        type=_parse_decisions,
        default=None,
        help="Rebuild the single program for a comma-separated decision sequence",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check each program's structural well-formedness before emitting it",
    )
    parser.add_argument(
        "--stats", action="store_true", help="Print enumeration statistics to stderr"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    unbounded = args.guide == constants.GUIDE_RANDOM and args.limit is None
    if unbounded and args.replay is None:
        parser.error("--guide random never exhausts; pass --limit")
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    config = EnumerationConfig(
        max_operations=args.max_ops,
        policy=args.guide,
        seed=args.seed,
        placement=(
            ParameterPlacement.APPEND
            if args.append_params
            else ParameterPlacement.ANY_POSITION
        ),
        limit=args.limit,
        verify=args.verify,
    )

    def emit(program: EnumeratedProgram) -> None:
        print(format_program(program, args.format, args.show_decisions))

    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
        if args.replay is not None:
            module = replay_program(args.replay, config, catalog)
            emit(
                EnumeratedProgram(
                    index=0, decisions=tuple(args.replay), module=module
                )
            )
            return 0
        stats = run_enumeration(config, catalog, emit)
    except ConfigurationError as exc:
        print(f"irenum: configuration error: {exc}", file=sys.stderr)
        return 1
    except ProgramVerificationError as exc:
        print(f"irenum: malformed program: {exc}", file=sys.stderr)
        return 1

    if args.stats:
        print(stats.report(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
