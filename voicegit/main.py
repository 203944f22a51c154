"""
VOICEGIT Application Entry Point

Command-line interface for the voice workflow commands. Parses arguments,
loads configuration, sets up logging and runs one command.

Usage:
    voicegit audio-commit                       # Record, transcribe, write a commit message
    voicegit audio-commit --file notes.m4a --sendit
    voicegit audio-review --max-recording-time 120 --include-recent-diffs
    voicegit audio-review --directory ./standup-recordings
    voicegit select-audio                       # Choose the microphone
    voicegit --dry-run audio-review             # Describe what would happen

Exit codes:
    0   Success
    1   Configuration, workflow or unexpected error
    130 Cancelled by the user (C while recording, or Ctrl+C)

Entry Points:
    - CLI: `voicegit` command (via pyproject.toml)
    - Direct: `python -m voicegit.main`
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from voicegit import __version__
from voicegit.commands import audio_commit, audio_review, select_audio
from voicegit.config import VoicegitConfig, apply_overrides, load_config
from voicegit.exceptions import ConfigurationError, ErrorKind, VoicegitError
from voicegit.logging_config import LOG_LEVELS, get_logger, setup_logging

__all__ = ["main", "async_main", "create_parser", "build_overrides"]

# Module logger
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130  # Standard exit code for SIGINT

# CLI flag (dest) -> option field, per audio command section
_SHARED_AUDIO_FLAGS = ("file", "max_recording_time", "archive", "context", "sendit")
_REVIEW_ONLY_FLAGS = (
    "directory",
    "include_commit_history",
    "include_recent_diffs",
    "include_release_notes",
    "include_github_issues",
    "commit_history_limit",
    "diff_history_limit",
    "release_notes_limit",
    "github_issues_limit",
)


# =============================================================================
# Argument Parser
# =============================================================================


def _add_audio_arguments(parser: argparse.ArgumentParser, allow_directory: bool = False) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--file",
        type=str,
        metavar="PATH",
        default=None,
        help="Use an existing audio file instead of recording",
    )
    if allow_directory:
        source.add_argument(
            "--directory",
            type=str,
            metavar="DIR",
            default=None,
            help="Review every audio file in DIR (batch mode)",
        )

    parser.add_argument(
        "--max-recording-time",
        type=int,
        metavar="SECONDS",
        default=None,
        help="Stop recording after SECONDS and show a countdown",
    )
    parser.add_argument(
        "--archive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Archive the audio and transcript in the output directory (default: on)",
    )
    parser.add_argument(
        "--context",
        type=str,
        metavar="TEXT",
        default=None,
        help="Extra context for the generator",
    )
    parser.add_argument(
        "--sendit",
        action="store_true",
        default=None,
        help="Act on the result (commit, or file the review as an issue)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="voicegit",
        description="VOICEGIT voice-driven commit messages and code reviews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Configuration
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file (default: auto-discover)",
    )
    parser.add_argument(
        "--output-directory",
        type=str,
        metavar="DIR",
        default=None,
        help="Where recordings and archives are written (default: output)",
    )

    # Logging
    parser.add_argument(
        "-l",
        "--log-level",
        type=str,
        choices=list(LOG_LEVELS),
        default=None,
        help="Set logging level (overrides config file)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Path to log file (default: stderr only)",
    )

    # Operation modes
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Describe what would happen without recording or generating",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Verbose logging and debug artifacts",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    commit_parser = subparsers.add_parser(
        "audio-commit",
        help="Speak a commit direction and generate a commit message",
    )
    _add_audio_arguments(commit_parser)
    commit_parser.add_argument(
        "--cached",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Describe staged changes (default) or the working tree",
    )

    review_parser = subparsers.add_parser(
        "audio-review",
        help="Speak review notes and generate a review",
    )
    _add_audio_arguments(review_parser, allow_directory=True)
    for source in ("commit-history", "recent-diffs", "release-notes", "github-issues"):
        review_parser.add_argument(
            f"--include-{source}",
            action="store_true",
            default=None,
            help=f"Give the reviewer the {source.replace('-', ' ')}",
        )
    for limit in ("commit-history", "diff-history", "release-notes", "github-issues"):
        review_parser.add_argument(
            f"--{limit}-limit",
            type=int,
            metavar="N",
            default=None,
            help=f"How many {limit.replace('-', ' ')} entries to include",
        )

    subparsers.add_parser(
        "select-audio",
        help="Choose the microphone to record from",
    )

    return parser


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect the configuration overrides given on the command line."""
    overrides: Dict[str, Any] = {}

    for flag in ("dry_run", "debug", "output_directory", "log_level", "log_file"):
        value = getattr(args, flag, None)
        if value is not None:
            overrides[flag] = value

    if args.command == "audio-commit":
        section = {f: getattr(args, f) for f in _SHARED_AUDIO_FLAGS if getattr(args, f, None) is not None}
        if section:
            overrides["audio_commit"] = section
        if getattr(args, "cached", None) is not None:
            overrides["commit"] = {"cached": args.cached}
    elif args.command == "audio-review":
        flags = _SHARED_AUDIO_FLAGS + _REVIEW_ONLY_FLAGS
        section = {f: getattr(args, f) for f in flags if getattr(args, f, None) is not None}
        if section:
            overrides["audio_review"] = section

    return overrides


# =============================================================================
# Main Entry Points
# =============================================================================


async def async_main(args: argparse.Namespace, config: VoicegitConfig) -> str:
    """Run the selected command.

    Args:
        args: Parsed command-line arguments
        config: Validated configuration

    Returns:
        Text to print on stdout
    """
    if args.command == "audio-commit":
        return await audio_commit(config)
    if args.command == "audio-review":
        return await audio_review(config)
    return await select_audio(config)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the VOICEGIT CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Basic setup before config is loaded
    setup_logging(log_level=args.log_level or "INFO")

    try:
        logger.debug(f"Loading configuration from: {args.config or 'auto-discover'}")
        config = apply_overrides(load_config(args.config), build_overrides(args))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_ERROR

    log_level = args.log_level or ("DEBUG" if config.debug else config.log_level)
    setup_logging(
        log_level=log_level,
        log_file=config.log_file,
        verbose_console=config.debug,
        service_levels=config.service_log_levels,
    )
    logger.debug(f"VOICEGIT v{__version__} running {args.command}")

    try:
        result = asyncio.run(async_main(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_CANCELLED
    except VoicegitError as e:
        if e.kind == ErrorKind.CANCELLED:
            return EXIT_CANCELLED
        logger.error(f"VOICEGIT error: {e}")
        return EXIT_ERROR
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EXIT_ERROR

    if result:
        print(result)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
