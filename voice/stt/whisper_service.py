"""
VOICEGIT Voice STT Service
Whisper Speech-to-Text Integration

This module provides file transcription with faster-whisper, running
inference locally so spoken commit directions and review notes never
leave the machine.

Supports:
- Local faster-whisper inference on CPU or CUDA
- A per-process model cache (loading a model is the slow part)
- Debug transcripts written through a storage adapter
- An archive hook called after every successful transcription
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from voicegit.exceptions import TranscriptionError

# Try to import Whisper
try:
    from faster_whisper import WhisperModel
    WHISPER_AVAILABLE = True
except ImportError:
    WhisperModel = None
    WHISPER_AVAILABLE = False

logger = logging.getLogger("voicegit.services.stt")


class WhisperModelSize(Enum):
    """Available Whisper model sizes."""
    TINY = "tiny"        # 39M params, fastest
    BASE = "base"        # 74M params
    SMALL = "small"      # 244M params
    MEDIUM = "medium"    # 769M params
    LARGE = "large-v3"   # 1.5B params, most accurate

    @classmethod
    def from_name(cls, name: str) -> "WhisperModelSize":
        """Resolve a config value such as ``"base"`` or ``"large"``."""
        for size in cls:
            if name in (size.value, size.name.lower()):
                return size
        raise ValueError(f"Unknown Whisper model: {name}")


@dataclass
class SpeechTranscript:
    """Result from speech transcription."""
    text: str
    language: str
    duration_seconds: float
    timestamp: datetime = field(default_factory=datetime.now)
    segments: List[dict] = field(default_factory=list)  # Segment-level timing

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class WhisperSTT:
    """
    Whisper-based speech-to-text service.

    Usage:
        stt = WhisperSTT(WhisperModelSize.BASE, device="cpu")
        stt.initialize()
        transcript = stt.transcribe_file("recording.wav")
    """

    def __init__(
        self,
        model_size: WhisperModelSize = WhisperModelSize.BASE,
        device: str = "cpu",
        compute_type: str = "int8",
        language: str = "en",
        beam_size: int = 5,
    ):
        """
        Initialize Whisper STT service.

        Args:
            model_size: Whisper model size
            device: "cuda" or "cpu"
            compute_type: "float16", "int8", or "float32"
            language: Language code for transcription
            beam_size: Beam search width
        """
        self.model_size = model_size
        self.device = device
        self.compute_type = compute_type
        self.language = language
        self.beam_size = beam_size

        self._model = None

    @property
    def is_initialized(self) -> bool:
        return self._model is not None

    def initialize(self):
        """Load Whisper model."""
        if self._model is not None:
            return
        if not WHISPER_AVAILABLE:
            raise TranscriptionError(
                "Whisper not available. Install with: pip install faster-whisper"
            )

        logger.info(f"Loading Whisper model: {self.model_size.value} ({self.device}, {self.compute_type})")
        self._model = WhisperModel(
            self.model_size.value,
            device=self.device,
            compute_type=self.compute_type,
        )
        logger.info("Whisper model loaded")

    def transcribe_file(self, audio_path: str) -> SpeechTranscript:
        """
        Transcribe audio from file. Blocking; run it in a worker thread.

        Args:
            audio_path: Path to audio file (any format ffmpeg can decode)

        Returns:
            SpeechTranscript (text may be empty for silent audio)
        """
        self.initialize()
        start_time = datetime.now()

        segments, info = self._model.transcribe(
            audio_path,
            language=self.language,
            beam_size=self.beam_size,
            vad_filter=True,
        )

        text_parts = []
        segment_list = []
        for segment in segments:
            text_parts.append(segment.text)
            segment_list.append({
                "start": segment.start,
                "end": segment.end,
                "text": segment.text,
            })

        return SpeechTranscript(
            text=" ".join(part.strip() for part in text_parts).strip(),
            language=getattr(info, "language", None) or self.language,
            duration_seconds=(datetime.now() - start_time).total_seconds(),
            segments=segment_list,
        )


# =============================================================================
# MODULE-LEVEL TRANSCRIPTION
# =============================================================================

_stt_cache: Dict[Tuple[str, str, str, str, int], WhisperSTT] = {}


def get_stt(
    model: str = "base",
    device: str = "cpu",
    compute_type: str = "int8",
    language: str = "en",
    beam_size: int = 5,
) -> WhisperSTT:
    """Return a cached WhisperSTT for the given settings."""
    key = (model, device, compute_type, language, beam_size)
    if key not in _stt_cache:
        _stt_cache[key] = WhisperSTT(
            WhisperModelSize.from_name(model),
            device=device,
            compute_type=compute_type,
            language=language,
            beam_size=beam_size,
        )
    return _stt_cache[key]


def clear_cache():
    """Drop cached models (mainly for tests)."""
    _stt_cache.clear()


async def transcribe_audio(
    audio_path: str,
    model: str = "base",
    debug: bool = False,
    storage: Any = None,
    logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    on_archive=None,
    device: str = "cpu",
    compute_type: str = "int8",
    language: str = "en",
    beam_size: int = 5,
) -> SpeechTranscript:
    """
    Transcribe an audio file.

    Args:
        audio_path: Audio file to transcribe
        model: Whisper model name
        debug: Also write the transcript through ``storage``
        storage: Object with ``async write_file(name, content)``
        logger: Logger to report through
        on_archive: ``async (audio_path, text)`` called after success;
            its failures are logged and do not fail the transcription
        device, compute_type, language, beam_size: faster-whisper settings

    Returns:
        SpeechTranscript

    Raises:
        TranscriptionError: If the file is missing or inference fails
    """
    log = logger or logging.getLogger("voicegit.services.stt")

    if not os.path.isfile(audio_path):
        raise TranscriptionError(f"Audio file not found: {audio_path}", audio_path=audio_path)

    try:
        stt = get_stt(model, device, compute_type, language, beam_size)
    except ValueError as e:
        raise TranscriptionError(str(e), audio_path=audio_path)

    try:
        result = await asyncio.to_thread(stt.transcribe_file, audio_path)
    except TranscriptionError:
        raise
    except Exception as e:
        raise TranscriptionError(f"Transcription failed: {e}", audio_path=audio_path) from e

    log.debug(
        f"Transcribed {Path(audio_path).name} in {result.duration_seconds:.1f}s "
        f"({result.word_count} words)"
    )

    if debug and storage is not None:
        name = f"transcript-{Path(audio_path).stem}.txt"
        try:
            await storage.write_file(name, result.text)
        except OSError as e:
            log.warning(f"Failed to write debug transcript {name}: {e}")

    if on_archive is not None:
        try:
            await on_archive(audio_path, result.text)
        except Exception as e:
            log.warning(f"AUDIO_ARCHIVE_FAILED: Failed to archive audio | File: {audio_path} | Error: {e}")

    return result
