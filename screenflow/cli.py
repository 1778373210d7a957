"""CLI entrypoints for screenflow commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .errors import ScreenflowError
from .logging import configure_logging
from .models import AnalysisResult
from .orchestrator import Orchestrator
from .sources import LocalSourceProvider
from .stores import InMemoryAnalysisStore, JsonAnalysisStore


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only log warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screenflow",
        description="Recover screens, navigation and code flows from a frontend repository.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a local checkout and print its screens and flows.",
    )
    _add_logging_options(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    analyze_parser.add_argument("--branch", default="main", help="Branch label recorded with the analysis.")
    analyze_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Override the maximum number of files analyzed.",
    )
    analyze_parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Directory where the analysis record is written as JSON.",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis result as JSON.",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print a stored analysis record as JSON.",
    )
    _add_logging_options(show_parser, suppress_default=True)
    show_parser.add_argument("analysis_id", help="Identifier printed by `screenflow analyze`.")
    show_parser.add_argument(
        "--store",
        type=Path,
        required=True,
        help="Directory holding stored analysis records.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for screenflow commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    try:
        if args.command == "analyze":
            _run_analyze(args)
        elif args.command == "show":
            record = JsonAnalysisStore(args.store).get(args.analysis_id)
            print(json.dumps(record.to_dict(), indent=2))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ScreenflowError as exc:
        parser.exit(1, f"screenflow {args.command} failed: {exc}\n")


def _run_analyze(args: argparse.Namespace) -> None:
    if args.limit is not None and args.limit < 0:
        raise ScreenflowError("--limit must not be negative")
    repo_path = Path(args.path).expanduser().resolve()
    config = load_config(repo_path)
    if args.limit is not None:
        config.analysis.file_limit = args.limit

    store = JsonAnalysisStore(args.store) if args.store is not None else InMemoryAnalysisStore()
    orchestrator = Orchestrator(
        source=LocalSourceProvider(config.exclude_paths),
        store=store,
        config=config,
    )
    result = orchestrator.analyze(str(repo_path), args.branch)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(_format_summary(result))


def _format_summary(result: AnalysisResult) -> str:
    framework = result.framework.primary or "unknown"
    lines = [
        f"Analysis {result.analysis_id} at {result.commit_sha}",
        f"Framework: {framework} (confidence {result.framework.confidence:.2f})",
        f"Screens ({len(result.screens)}):",
    ]
    for screen in result.screens:
        lines.append(f"  {screen.path}  {screen.name}  [{screen.file_path}] flows={len(screen.flows)}")
    lines.append(f"Flows: {len(result.flows)}")
    return "\n".join(lines)


if __name__ == "__main__":
    main(sys.argv[1:])
