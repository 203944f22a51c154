"""
VOICEGIT Orchestrator
Control flow of the audio-commit and audio-review commands.

The OrchestrationController is responsible for:
- Dry-run previews (no collaborator is touched)
- Acquisition, with a countdown during live recording
- Transcription, falling back to "no audio context" on recoverable failures
- Delegation of the transcript to the commit or review generator
- Batch review of a directory of recordings, one isolated item per file

Architecture:
    +-----------------------+
    | OrchestrationController|
    +-----------+-----------+
                |
       +--------+---------+------------------+
       |                  |                  |
    Acquisition  ->  Transcription  ->  Delegation
    (+ Countdown)                        (commit / review)
       ^
       |  batch mode only
    BatchDiscovery

Policy:
    Single file: cancellation aborts the command; every other acquisition
    or transcription failure continues without audio context; delegation
    errors propagate.
    Batch: any failure of a file (cancellation included) is recorded in that
    file's report section and the batch continues; a discovery failure
    aborts the batch.

Usage:
    from voicegit.orchestrator import Collaborators, OrchestrationController
    from voicegit.types import CommandKind

    controller = OrchestrationController(collaborators)
    result = await controller.run(config, CommandKind.REVIEW)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from services.storage import archive_audio, create_storage, create_storage_adapter
from voicegit.acquisition import AudioAcquisition
from voicegit.config import AudioCommitOptions, VoicegitConfig
from voicegit.constants import (
    BATCH_DRY_RUN_RESULT,
    BATCH_SECTION_SEPARATOR,
    COMMIT_DRY_RUN_RESULT,
    NO_AUDIO_FILES_RESULT,
    REVIEW_DRY_RUN_RESULT,
)
from voicegit.countdown import CountdownTimer
from voicegit.delegation import DelegationAdapter
from voicegit.discovery import BatchDiscovery
from voicegit.exceptions import CancellationError, classify_error
from voicegit.logging_config import get_dry_run_logger
from voicegit.transcription import TranscriptionStage, make_archive_callback
from voicegit.types import (
    AcquisitionRequest,
    AudioProcessor,
    BatchItemOutcome,
    CommandKind,
    CountdownHandle,
    DirectoryStorage,
    OutcomeKind,
    StageOutcome,
    TextCommand,
    Transcriber,
    TranscriptionOptions,
)

__all__ = [
    "Collaborators",
    "OrchestrationController",
    "render_batch_report",
]


@dataclass
class Collaborators:
    """External capabilities the controller drives.

    Everything is injected so tests can substitute fakes.
    """
    process_audio: AudioProcessor
    transcribe_audio: Transcriber
    commit: TextCommand
    review: TextCommand
    storage: DirectoryStorage = field(default_factory=create_storage)
    countdown_factory: Callable[[int], CountdownHandle] = CountdownTimer
    archive: Callable[[str, str, str], Awaitable[Any]] = archive_audio
    storage_adapter_factory: Callable[[str], Any] = create_storage_adapter


def render_batch_report(outcomes: List[BatchItemOutcome]) -> str:
    """Render the aggregate batch report, sections in discovery order."""
    header = f"Batch Audio Review Results ({len(outcomes)} files):\n\n"
    return header + BATCH_SECTION_SEPARATOR.join(o.render() for o in outcomes)


class OrchestrationController:
    """Runs one audio-commit or audio-review invocation."""

    def __init__(
        self,
        collaborators: Collaborators,
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        self.collaborators = collaborators
        self._logger = logger

    def _log(self, config: VoicegitConfig) -> logging.Logger | logging.LoggerAdapter:
        return self._logger or get_dry_run_logger(config.dry_run, "voicegit.orchestrator")

    @staticmethod
    def _options(config: VoicegitConfig, command: CommandKind) -> AudioCommitOptions:
        return config.audio_review if command == CommandKind.REVIEW else config.audio_commit

    # =========================================================================
    # Entry Point
    # =========================================================================

    async def run(self, config: VoicegitConfig, command: CommandKind) -> str:
        """
        Execute the command described by ``config``.

        Args:
            config: Immutable configuration of this invocation
            command: CommandKind.COMMIT or CommandKind.REVIEW

        Returns:
            The downstream generator's result, a batch report, or a
            dry-run description.

        Raises:
            CancellationError: The user cancelled a single-file recording
            DiscoveryError: The batch directory could not be read
            VoicegitError: The downstream generator failed
        """
        log = self._log(config)
        options = self._options(config, command)
        log.info(f"{command.label}_STARTING: Starting audio-driven {command.value} workflow")

        directory = getattr(options, "directory", None) if command == CommandKind.REVIEW else None
        if directory:
            if config.dry_run:
                return self._preview_batch(directory, log)
            return await self._run_batch(config, directory, log)

        if config.dry_run:
            return self._preview(config, command, options, log)

        return await self._run_single(config, command, options, log)

    # =========================================================================
    # Dry Run
    # =========================================================================

    def _preview(
        self,
        config: VoicegitConfig,
        command: CommandKind,
        options: AudioCommitOptions,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> str:
        prefix = command.label
        if options.file:
            log.info(f"{prefix}_PREVIEW: Would process supplied audio file | File: %s", options.file)
        else:
            log.info(
                f"{prefix}_PREVIEW: Would record audio then transcribe | Max duration: %s | Output: %s",
                f"{options.max_recording_time}s" if options.max_recording_time else "unlimited",
                config.output_directory,
            )

        if command == CommandKind.COMMIT:
            log.info(f"{prefix}_PREVIEW: Would generate commit message with audio context")
            return COMMIT_DRY_RUN_RESULT
        log.info(f"{prefix}_PREVIEW: Would perform review analysis with audio context")
        return REVIEW_DRY_RUN_RESULT

    def _preview_batch(self, directory: str, log: logging.Logger | logging.LoggerAdapter) -> str:
        log.info(
            "AUDIO_REVIEW_PREVIEW: Would batch-process audio files in directory | Directory: %s",
            directory,
        )
        return BATCH_DRY_RUN_RESULT

    # =========================================================================
    # Stage Construction
    # =========================================================================

    def _stages(self, prefix: str, log: logging.Logger | logging.LoggerAdapter):
        c = self.collaborators
        acquisition = AudioAcquisition(
            c.process_audio,
            countdown_factory=c.countdown_factory,
            event_prefix=prefix,
            logger=log,
        )
        transcription = TranscriptionStage(c.transcribe_audio, event_prefix=prefix, logger=log)
        delegation = DelegationAdapter(commit=c.commit, review=c.review, logger=log)
        return acquisition, transcription, delegation

    def _transcription_options(
        self,
        config: VoicegitConfig,
        options: AudioCommitOptions,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> TranscriptionOptions:
        c = self.collaborators
        on_archive = None
        # Archiving is on unless explicitly disabled
        if options.archive is not False:
            on_archive = make_archive_callback(config.output_directory, c.archive)
        return TranscriptionOptions(
            model=config.transcription.model,
            debug=config.debug,
            storage=c.storage_adapter_factory(config.output_directory),
            logger=log,
            on_archive=on_archive,
        )

    @staticmethod
    def _acquisition_request(
        config: VoicegitConfig,
        options: AudioCommitOptions,
        file: Optional[str],
    ) -> AcquisitionRequest:
        return AcquisitionRequest(
            output_directory=config.output_directory,
            file=file,
            max_recording_time=options.max_recording_time,
            debug=config.debug,
        )

    @staticmethod
    def _cancellation(outcome: StageOutcome, command: CommandKind) -> CancellationError:
        if isinstance(outcome.error, CancellationError):
            return outcome.error
        return CancellationError(outcome.message or "Operation cancelled by user", command=command.value)

    # =========================================================================
    # Single File / Live Recording
    # =========================================================================

    async def _run_single(
        self,
        config: VoicegitConfig,
        command: CommandKind,
        options: AudioCommitOptions,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> str:
        prefix = command.label
        acquisition, transcription, delegation = self._stages(prefix, log)
        transcript = ""

        acquired = await acquisition.acquire(self._acquisition_request(config, options, options.file))

        if acquired.kind == OutcomeKind.CANCELLED:
            raise self._cancellation(acquired, command)

        if not acquired.ok:
            log.warning(
                f"{prefix}_RECORDING_FAILED: Audio acquisition failed, continuing without audio context | Error: %s",
                acquired.message,
            )
        else:
            try:
                transcription_options = self._transcription_options(config, options, log)
            except Exception as e:
                transcribed = StageOutcome.failure(OutcomeKind.from_error_kind(classify_error(e)), e)
            else:
                transcribed = await transcription.transcribe(acquired.value.audio_path, transcription_options)
            if transcribed.kind == OutcomeKind.CANCELLED:
                raise self._cancellation(transcribed, command)
            if not transcribed.ok:
                log.warning(
                    f"{prefix}_TRANSCRIPTION_FAILED: Transcription failed, continuing without audio context | Error: %s",
                    transcribed.message,
                )
            else:
                transcript = transcribed.value.text.strip()

        if command == CommandKind.COMMIT:
            return await delegation.delegate_commit(config, transcript)
        return await delegation.delegate_review(config, transcript)

    # =========================================================================
    # Batch
    # =========================================================================

    async def _run_batch(
        self,
        config: VoicegitConfig,
        directory: str,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> str:
        log.info("AUDIO_REVIEW_BATCH_STARTING: Starting batch audio processing | Directory: %s", directory)
        paths = await BatchDiscovery(self.collaborators.storage, logger=log).discover(directory)

        if not paths:
            log.warning("AUDIO_REVIEW_NO_FILES: No audio files found | Directory: %s", directory)
            return NO_AUDIO_FILES_RESULT

        stages = self._stages(CommandKind.REVIEW.label, log)
        outcomes: List[BatchItemOutcome] = []
        for path in paths:
            outcomes.append(await self._process_batch_item(config, path, stages, log))

        failed = sum(1 for o in outcomes if not o.succeeded)
        log.info(
            "AUDIO_REVIEW_BATCH_COMPLETE: Batch processing finished | Files: %d | Failed: %d",
            len(outcomes),
            failed,
        )
        return render_batch_report(outcomes)

    async def _process_batch_item(
        self,
        config: VoicegitConfig,
        path: str,
        stages,
        log: logging.Logger | logging.LoggerAdapter,
    ) -> BatchItemOutcome:
        acquisition, transcription, delegation = stages
        options = config.audio_review
        name = os.path.basename(path)
        log.info("AUDIO_REVIEW_FILE_PROCESSING: Processing audio file | File: %s", name)

        def failed(message: str) -> BatchItemOutcome:
            log.error("AUDIO_REVIEW_FILE_FAILED: Failed to process audio file | File: %s | Error: %s", name, message)
            return BatchItemOutcome(name, f"Failed to process {name}: {message}", succeeded=False)

        # Nothing raised for one file may reach the next
        try:
            acquired = await acquisition.acquire(self._acquisition_request(config, options, path))
            if not acquired.ok:
                return failed(acquired.message)

            transcribed = await transcription.transcribe(
                acquired.value.audio_path,
                self._transcription_options(config, options, log),
            )
            if not transcribed.ok:
                return failed(transcribed.message)

            text = transcribed.value.text.strip()
            if not text:
                return BatchItemOutcome(name, "")

            result = await delegation.delegate_review(
                config,
                text,
                note_override=f"Audio Review from {name}:\n\n{text}",
            )
        except Exception as e:
            return failed(getattr(e, "message", None) or str(e))

        return BatchItemOutcome(name, result)
