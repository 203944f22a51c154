"""
VOICEGIT Transcription Stage

Converts an audio artifact to text through the speech-to-text collaborator
and validates the shape of what comes back. Silence is not a failure: an
empty transcript is a valid result the controller falls back from.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Awaitable, Callable, Mapping, Optional

from services.storage import archive_audio
from voicegit.constants import ARCHIVE_SUBDIRECTORY
from voicegit.exceptions import TranscriptionValidationError, classify_error
from voicegit.logging_config import get_logger
from voicegit.types import (
    ArchiveCallback,
    OutcomeKind,
    StageOutcome,
    Transcriber,
    TranscriptionOptions,
    TranscriptionResult,
)

__all__ = ["TranscriptionStage", "validate_transcription", "make_archive_callback"]

_MISSING = object()

# Values that are never an object-shaped transcription result
_SCALARS = (str, bytes, bytearray, int, float, bool, list, tuple, set)


def validate_transcription(raw: Any) -> TranscriptionResult:
    """Check a collaborator result and convert it to a TranscriptionResult.

    The result must be object-shaped (a mapping or an object with
    attributes) and its ``text`` must be a string, possibly empty.

    Raises:
        TranscriptionValidationError: For any other shape
    """
    if raw is None or isinstance(raw, _SCALARS):
        text = _MISSING
    elif isinstance(raw, Mapping):
        text = raw.get("text", _MISSING)
    else:
        text = getattr(raw, "text", _MISSING)

    if not isinstance(text, str):
        raise TranscriptionValidationError(
            "Invalid transcription result: missing or invalid text property"
        )
    return TranscriptionResult(text=text)


def make_archive_callback(
    output_directory: str,
    archive: Callable[[str, str, str], Awaitable[Any]] = archive_audio,
) -> ArchiveCallback:
    """Build the on_archive callback that stores audio/transcript pairs
    under ``<output_directory>/voicegit``."""
    archive_directory = os.path.join(output_directory, ARCHIVE_SUBDIRECTORY)

    async def on_archive(audio_path: str, transcript: str) -> None:
        await archive(audio_path, transcript, archive_directory)

    return on_archive


class TranscriptionStage:
    """
    Transcription stage.

    Usage:
        stage = TranscriptionStage(transcribe_audio, event_prefix="AUDIO_REVIEW")
        outcome = await stage.transcribe("/tmp/a.wav", TranscriptionOptions(model="base"))
    """

    def __init__(
        self,
        transcribe_audio: Transcriber,
        event_prefix: str = "AUDIO",
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        self.transcribe_audio = transcribe_audio
        self.event_prefix = event_prefix
        self.logger = logger or get_logger(__name__)

    async def transcribe(
        self,
        audio_path: str,
        options: TranscriptionOptions,
    ) -> StageOutcome[TranscriptionResult]:
        """
        Transcribe ``audio_path``.

        Args:
            audio_path: Audio file to transcribe
            options: Model, debug flag, storage adapter, logger, archive callback

        Returns:
            SUCCESS with a validated (possibly blank) result; otherwise the
            kind classified from the raised error, or RECOVERABLE when the
            result has the wrong shape.
        """
        prefix = self.event_prefix
        try:
            self.logger.info(
                f"{prefix}_TRANSCRIBING: Transcribing audio locally | Model: %s | File: %s",
                options.model,
                os.path.basename(audio_path),
            )
            raw = await self.transcribe_audio(
                audio_path,
                model=options.model,
                debug=options.debug,
                storage=options.storage,
                logger=options.logger,
                on_archive=options.on_archive,
            )
        except Exception as e:
            return StageOutcome.failure(OutcomeKind.from_error_kind(classify_error(e)), e)

        try:
            result = validate_transcription(raw)
        except TranscriptionValidationError as e:
            return StageOutcome.failure(OutcomeKind.RECOVERABLE, e)

        if result.is_blank:
            self.logger.warning(
                f"{prefix}_NO_CONTENT: No audio content transcribed | File: %s | Reason: Empty or silent audio",
                audio_path,
            )
        else:
            self.logger.info(
                f"{prefix}_TRANSCRIPT_SUCCESS: Successfully transcribed audio | Length: %d characters",
                len(result.text),
            )
            self.logger.debug("Transcribed text: %s", result.text)

        return StageOutcome.success(result)
