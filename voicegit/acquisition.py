"""
VOICEGIT Audio Acquisition

Obtains a playable audio artifact for one invocation: either the file the
user supplied, or a live recording made by the audio-capture collaborator.
Live recordings with a time limit run a countdown alongside the capture.

The stage never raises for collaborator failures. It returns a StageOutcome
tagged SUCCESS, CANCELLED, RECOVERABLE or FATAL and leaves the policy to the
orchestration controller.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Mapping, Optional, Tuple

from services.storage import get_timestamped_audio_filename
from voicegit.countdown import CountdownTimer, countdown_scope
from voicegit.exceptions import CancellationError, classify_error
from voicegit.logging_config import get_logger
from voicegit.types import (
    AcquisitionRequest,
    AcquisitionResult,
    AudioProcessor,
    CountdownHandle,
    OutcomeKind,
    StageOutcome,
)

__all__ = ["AudioAcquisition", "read_process_result"]


def read_process_result(raw: Any) -> Tuple[bool, Optional[str]]:
    """Extract ``(cancelled, audio_file_path)`` from a capture result.

    Accepts a mapping or an object exposing ``cancelled`` and
    ``audio_file_path`` (missing values count as False / None).
    """
    if raw is None:
        return False, None
    if isinstance(raw, Mapping):
        return bool(raw.get("cancelled", False)), raw.get("audio_file_path")
    return bool(getattr(raw, "cancelled", False)), getattr(raw, "audio_file_path", None)


class AudioAcquisition:
    """
    Acquisition stage.

    Usage:
        acquisition = AudioAcquisition(process_audio, event_prefix="AUDIO_COMMIT")
        outcome = await acquisition.acquire(AcquisitionRequest(output_directory="output"))
        if outcome.ok:
            print(outcome.value.audio_path)
    """

    def __init__(
        self,
        process_audio: AudioProcessor,
        countdown_factory: Callable[[int], CountdownHandle] = CountdownTimer,
        filename_factory: Callable[[], str] = get_timestamped_audio_filename,
        event_prefix: str = "AUDIO",
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        """
        Initialize acquisition stage.

        Args:
            process_audio: Audio-capture collaborator
            countdown_factory: Builds the countdown shown during live recording
            filename_factory: Generates the last-resort recording filename
            event_prefix: Prefix of log event codes (e.g. AUDIO_REVIEW)
            logger: Logger to report through
        """
        self.process_audio = process_audio
        self.countdown_factory = countdown_factory
        self.filename_factory = filename_factory
        self.event_prefix = event_prefix
        self.logger = logger or get_logger(__name__)

    async def acquire(self, request: AcquisitionRequest) -> StageOutcome[AcquisitionResult]:
        """
        Obtain the audio artifact described by ``request``.

        Args:
            request: File, time limit, output directory and debug flag

        Returns:
            SUCCESS with the resolved audio path, CANCELLED if the user
            aborted, otherwise the kind classified from the raised error.
        """
        prefix = self.event_prefix
        self.logger.info(f"{prefix}_RECORDING_STARTING: Starting audio acquisition | Source: %s",
                         request.file or "microphone")

        if request.is_live_recording:
            self.logger.info(
                f"{prefix}_RECORDING_ACTIVE: Recording in progress | Action: Press ENTER to stop | Alternative: Press C to cancel"
            )

        countdown_seconds = request.max_recording_time if request.is_live_recording else None

        try:
            async with countdown_scope(countdown_seconds, self.countdown_factory):
                raw = await self.process_audio(
                    file=request.file,
                    max_recording_time=request.max_recording_time,
                    output_directory=request.output_directory,
                    debug=request.debug,
                )
        except Exception as e:
            return StageOutcome.failure(OutcomeKind.from_error_kind(classify_error(e)), e)

        cancelled, reported_path = read_process_result(raw)

        if cancelled:
            self.logger.info(f"{prefix}_CANCELLED: Recording cancelled by user | Status: aborted")
            return StageOutcome.failure(
                OutcomeKind.CANCELLED,
                CancellationError("Audio recording cancelled by user", command=prefix.lower()),
                value=AcquisitionResult(cancelled=True),
            )

        audio_path = self._resolve_audio_path(request, reported_path)
        return StageOutcome.success(AcquisitionResult(cancelled=False, audio_path=audio_path))

    def _resolve_audio_path(self, request: AcquisitionRequest, reported_path: Optional[str]) -> str:
        if request.file:
            return request.file
        if reported_path:
            return reported_path

        audio_path = os.path.join(request.output_directory, self.filename_factory())
        self.logger.warning(
            f"{self.event_prefix}_FILENAME_GENERATED: Using generated filename for audio | Filename: %s | "
            "Warning: May not match the file actually written by the recorder",
            audio_path,
        )
        return audio_path
