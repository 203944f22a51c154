"""
VOICEGIT - Voice-Driven Git Workflows

Speak a commit direction or review notes; VOICEGIT records or loads the
audio, transcribes it locally, and hands the transcript to the commit
message or code review generator.

Architecture:
    - Orchestration: acquisition, transcription, fallback, delegation
    - Local-first speech-to-text with faster-whisper
    - Pluggable text generation: OpenAI, Anthropic, local llama-cpp
"""

__version__ = "0.1.0"

# Version tuple for programmatic comparison
VERSION_INFO = (0, 1, 0)

# Core exceptions (import base class for convenience)
from voicegit.exceptions import ErrorKind, VoicegitError

# Core constants (import commonly used constants for convenience)
from voicegit.constants import (
    VOICEGIT_NAME,
    VOICEGIT_VERSION,
)

__all__ = [
    "__version__",
    "VERSION_INFO",
    "ErrorKind",
    "VoicegitError",
    "VOICEGIT_NAME",
    "VOICEGIT_VERSION",
]
