"""CLI entrypoint for prune-globals."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .corpus import DirectoryReadError
from .logging import configure_logging
from .orchestrator import Orchestrator, RunOutcome


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prune-globals",
        description=(
            "Document which `window.* = ...` assignments after the marker comment are "
            "used by other files, and comment out the ones that are not."
        ),
    )
    parser.add_argument(
        "source_dir",
        nargs="?",
        default=None,
        help="Directory of script files to analyze (defaults to the configured source_dir, ./src).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as a diff without writing files.",
    )
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .prune-globals.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for prune-globals."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = Orchestrator(config=config)
    try:
        outcome = orchestrator.run(args.source_dir, dry_run=bool(args.dry_run))
    except DirectoryReadError as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"prune-globals failed: {exc}\nRun with --verbose for more details.\n")

    if outcome.dry_run:
        for file_outcome in outcome.files:
            if file_outcome.diff:
                print(file_outcome.diff, end="")
    print(_summarize(outcome))


def _summarize(outcome: RunOutcome) -> str:
    verb = "would rewrite" if outcome.dry_run else "rewrote"
    return (
        f"{verb} {len(outcome.rewritten)} file(s), {len(outcome.unchanged)} unchanged, "
        f"{len(outcome.parse_failures)} parse failure(s), {len(outcome.write_failures)} write failure(s)"
    )


if __name__ == "__main__":
    main(sys.argv[1:])
