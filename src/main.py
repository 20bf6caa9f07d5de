# src/main.py — v2
"""CLI entry point — sync, agent, show commands.

Usage:
    affectedfiles sync <references.json> -w <workspace> -o <result_dir> [options]
    affectedfiles agent            (one JSON request on stdin, response on stdout)
    affectedfiles show <result_dir> <logical_name>
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from affectedfiles.core.errors import SyncInterruptedError
from affectedfiles.core.models import FileReference
from affectedfiles.version import __version__

logger = logging.getLogger(__name__)

_REFERENCES = TypeAdapter(list[FileReference])


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    _setup_logging(args.verbose)

    try:
        return args.func(args)
    except (KeyboardInterrupt, SyncInterruptedError):
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def cli() -> None:
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="affectedfiles",
        description=f"affectedfiles v{__version__} — copy affected source files into a result store",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- sync ---
    p_sync = subparsers.add_parser(
        "sync", help="Copy files referenced by findings into a result store",
    )
    p_sync.add_argument(
        "references", type=Path,
        help="JSON file: list of {logical_name, absolute_path}",
    )
    p_sync.add_argument(
        "-w", "--workspace", type=Path, default=None,
        help="Workspace root on the agent (default: AFFECTEDFILES_WORKSPACE_ROOT)",
    )
    p_sync.add_argument(
        "-o", "--result-dir", type=Path, default=Path("./result"),
        help="Result directory (default: ./result)",
    )
    p_sync.add_argument(
        "-s", "--source-dir", action="append", default=[],
        help="Additional source directory (repeatable)",
    )
    p_sync.add_argument(
        "--agent-command", default=None,
        help="Command that runs 'affectedfiles agent' on the build agent",
    )
    p_sync.set_defaults(func=_cmd_sync)

    # --- agent ---
    p_agent = subparsers.add_parser(
        "agent", help="Serve one batch request from stdin (agent side)",
    )
    p_agent.set_defaults(func=_cmd_agent)

    # --- show ---
    p_show = subparsers.add_parser(
        "show", help="Print the stored copy of a file",
    )
    p_show.add_argument("result_dir", type=Path, help="Result directory")
    p_show.add_argument("logical_name", help="File name as referenced by findings")
    p_show.set_defaults(func=_cmd_show)

    return parser


def _cmd_sync(args: argparse.Namespace) -> int:
    """Copy affected files for one report."""
    from affectedfiles.api.facade import copy_affected_files
    from affectedfiles.config.settings import load_settings

    references_path: Path = args.references
    if not references_path.is_file():
        logger.error("References file not found: %s", references_path)
        return 1
    try:
        references = _REFERENCES.validate_json(references_path.read_bytes())
    except ValidationError as e:
        logger.error("Invalid references file %s: %s", references_path, e)
        return 1

    overrides: dict[str, object] = {}
    if args.workspace is not None:
        overrides["workspace_root"] = args.workspace.absolute()
    if args.source_dir:
        overrides["source_directories"] = ",".join(args.source_dir)
    if args.agent_command is not None:
        overrides["agent_command"] = args.agent_command
    settings = load_settings(**overrides)

    report = copy_affected_files(references, args.result_dir, settings=settings)

    for line in report.info_messages:
        print(line)
    for line in report.error_messages:
        print(line, file=sys.stderr)
    return 0


def _cmd_agent(args: argparse.Namespace) -> int:
    """Answer one batch request; stdout carries only the JSON response."""
    from affectedfiles.batch.copier import handle_request

    payload = sys.stdin.buffer.read()
    try:
        response = handle_request(payload)
    except ValidationError as e:
        logger.error("Invalid batch request: %s", e)
        return 2
    sys.stdout.buffer.write(response)
    sys.stdout.buffer.flush()
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """Write a stored file to stdout."""
    from affectedfiles.api.facade import has_affected_file, open_affected_file
    from affectedfiles.config.settings import load_settings

    settings = load_settings()
    if not has_affected_file(args.result_dir, args.logical_name, settings):
        logger.error("No stored copy of %s in %s", args.logical_name, args.result_dir)
        return 1
    with open_affected_file(args.result_dir, args.logical_name, settings) as handle:
        shutil.copyfileobj(handle, sys.stdout.buffer)
    sys.stdout.buffer.flush()
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage; logs go to stderr."""
    from affectedfiles.config.settings import ConfigurationError, Settings
    from affectedfiles.logging.logger import setup_logging

    try:
        settings = Settings()
    except (ConfigurationError, ValidationError) as e:
        setup_logging(level="DEBUG" if verbose else "INFO")
        logger.warning("Ignoring invalid logging configuration: %s", e)
        return
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
