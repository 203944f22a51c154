"""
VOICEGIT Voice STT Service

Speech-to-text using Whisper for spoken commit directions and review notes.
"""

from .whisper_service import (
    WHISPER_AVAILABLE,
    SpeechTranscript,
    WhisperModelSize,
    WhisperSTT,
    get_stt,
    transcribe_audio,
)

__all__ = [
    "WHISPER_AVAILABLE",
    "SpeechTranscript",
    "WhisperModelSize",
    "WhisperSTT",
    "get_stt",
    "transcribe_audio",
]
