"""
VOICEGIT Voice Layer

Speech-to-text for the voice workflow commands. Inference runs locally
with faster-whisper.
"""

from .stt import WhisperSTT, SpeechTranscript, transcribe_audio

__all__ = [
    "WhisperSTT",
    "SpeechTranscript",
    "transcribe_audio",
]
