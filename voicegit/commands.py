"""
VOICEGIT Commands

Entry points behind the CLI subcommands:
    audio_commit  - speak a commit direction, get a commit message
    audio_review  - speak review notes (or batch a directory of recordings)
    select_audio  - choose and save the microphone to record from

Each takes the invocation's VoicegitConfig and returns the text to print.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from services.audio import process_audio, select_and_configure_audio_device
from services.git import commit, review
from voice.stt import transcribe_audio
from voicegit.config import VoicegitConfig
from voicegit.constants import SELECT_AUDIO_DRY_RUN_RESULT
from voicegit.exceptions import DeviceSelectionError, ErrorKind, classify_error
from voicegit.logging_config import get_dry_run_logger, get_logger
from voicegit.orchestrator import Collaborators, OrchestrationController
from voicegit.types import CommandKind

logger = get_logger(__name__)

__all__ = ["audio_commit", "audio_review", "select_audio", "build_collaborators"]

DeviceSelector = Callable[[str, logging.Logger | logging.LoggerAdapter, bool], Awaitable[str]]


def build_collaborators(config: VoicegitConfig) -> Collaborators:
    """Wire the real recorder, transcriber and generators to ``config``."""
    return Collaborators(
        process_audio=functools.partial(
            process_audio,
            sample_rate=config.recording.sample_rate,
            channels=config.recording.channels,
            device=config.recording.device,
            preferences_directory=config.preferences_directory,
        ),
        transcribe_audio=functools.partial(
            transcribe_audio,
            device=config.transcription.device,
            compute_type=config.transcription.compute_type,
            language=config.transcription.language,
            beam_size=config.transcription.beam_size,
        ),
        commit=commit,
        review=review,
    )


def _log_failure(command: CommandKind, error: BaseException) -> None:
    message = getattr(error, "message", None) or str(error)
    if classify_error(error) == ErrorKind.CANCELLED:
        logger.info(f"{command.label}_ERROR: Error during audio {command.value} | Error: %s", message)
        return
    logger.error(
        f"{command.label}_FAILED: Audio {command.value} command failed | Error: %s | Impact: No {command.value} generated",
        message,
    )
    if error.__cause__ is not None:
        logger.debug(f"Caused by: {error.__cause__}")


async def _run(config: VoicegitConfig, command: CommandKind, collaborators: Optional[Collaborators]) -> str:
    controller = OrchestrationController(collaborators or build_collaborators(config))
    try:
        return await controller.run(config, command)
    except Exception as e:
        _log_failure(command, e)
        raise


async def audio_commit(config: VoicegitConfig, collaborators: Optional[Collaborators] = None) -> str:
    """Record or load audio, transcribe it, and generate a commit message."""
    return await _run(config, CommandKind.COMMIT, collaborators)


async def audio_review(config: VoicegitConfig, collaborators: Optional[Collaborators] = None) -> str:
    """Record or load audio (or a directory of it) and generate a review."""
    return await _run(config, CommandKind.REVIEW, collaborators)


def _preferences_path(preferences_directory: str) -> Path:
    try:
        return Path(preferences_directory).expanduser()
    except RuntimeError as e:
        raise DeviceSelectionError(f"Failed to determine home directory: {e}")


async def select_audio(
    config: VoicegitConfig,
    selector: Optional[DeviceSelector] = None,
) -> str:
    """
    Choose the recording device and save it to the preferences directory.

    Args:
        config: Invocation configuration
        selector: Device selection collaborator (interactive sounddevice
            selector by default)

    Returns:
        The selector's summary, or a fixed message in dry-run mode

    Raises:
        DeviceSelectionError: The home directory could not be resolved or
            selection failed
    """
    log = get_dry_run_logger(config.dry_run)
    selector = selector or select_and_configure_audio_device

    if config.dry_run:
        try:
            path = _preferences_path(config.preferences_directory) / "audio-device.json"
        except DeviceSelectionError as e:
            log.warning(
                "AUDIO_SELECT_CONFIG_PATH_ERROR: Error determining config path | Error: %s | Impact: Cannot show save location",
                e.message,
            )
            return SELECT_AUDIO_DRY_RUN_RESULT
        log.info("AUDIO_SELECT_DRY_RUN: Would start audio device selection | Purpose: Choose input device")
        log.info("AUDIO_SELECT_SAVE_DRY_RUN: Would save device to config | Path: %s", path)
        return SELECT_AUDIO_DRY_RUN_RESULT

    try:
        preferences_directory = _preferences_path(config.preferences_directory)
    except DeviceSelectionError as e:
        log.error("AUDIO_SELECT_FAILED: Audio device selection failed | Error: %s", e.message)
        raise

    try:
        return await selector(str(preferences_directory), log, config.debug)
    except Exception as e:
        message = getattr(e, "message", None) or str(e)
        log.error(
            "AUDIO_SELECT_COMMAND_FAILED: Audio device selection command failed | Error: %s | Status: failed",
            message,
        )
        raise DeviceSelectionError(f"Audio device selection failed: {message}") from e
