"""
VOICEGIT Custom Exceptions

Provides the domain-specific exception hierarchy for the VOICEGIT voice
workflow commands. Every error carries an explicit ``kind`` field so callers
can branch on what happened (user cancellation, recoverable failure, fatal
failure) without inspecting exception classes or message text.

Exception Hierarchy:
    VoicegitError (base, kind=FAILURE)
    ├── ConfigurationError
    ├── CancellationError (kind=CANCELLED)
    ├── AcquisitionError
    ├── TranscriptionError
    │   └── TranscriptionValidationError
    ├── DiscoveryError (kind=FATAL)
    ├── DelegationError
    └── DeviceSelectionError
"""

import asyncio
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Discriminates how an error should be treated by the workflow."""
    CANCELLED = "cancelled"  # User-initiated abort
    FAILURE = "failure"      # Ordinary failure, recoverable by callers that choose to
    FATAL = "fatal"          # Must abort the whole invocation


class VoicegitError(Exception):
    """Base exception for all VOICEGIT errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
        kind: ErrorKind discriminating cancellation from failure
    """

    kind: ErrorKind = ErrorKind.FAILURE

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(VoicegitError):
    """Error in configuration file or settings.

    Raised when configuration validation fails, required settings are missing,
    or configuration values are invalid.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


# =============================================================================
# Workflow Errors
# =============================================================================

class CancellationError(VoicegitError):
    """The user cancelled the operation (e.g. pressed C while recording)."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Operation cancelled by user", command: Optional[str] = None) -> None:
        details = {"command": command} if command else {}
        super().__init__(message, details)
        self.command = command


class AcquisitionError(VoicegitError):
    """Audio could not be recorded or the supplied file could not be used."""

    def __init__(self, message: str, audio_path: Optional[str] = None) -> None:
        details = {"audio_path": audio_path} if audio_path else {}
        super().__init__(message, details)
        self.audio_path = audio_path


class TranscriptionError(VoicegitError):
    """Speech-to-text failed for an audio file."""

    def __init__(self, message: str, audio_path: Optional[str] = None) -> None:
        details = {"audio_path": audio_path} if audio_path else {}
        super().__init__(message, details)
        self.audio_path = audio_path


class TranscriptionValidationError(TranscriptionError):
    """The transcription service returned a result of the wrong shape."""
    pass


class DiscoveryError(VoicegitError):
    """A batch directory could not be enumerated.

    Fatal for the batch as a whole.
    """

    kind = ErrorKind.FATAL

    def __init__(self, message: str, directory: Optional[str] = None) -> None:
        details = {"directory": directory} if directory else {}
        super().__init__(message, details)
        self.directory = directory


class DelegationError(VoicegitError):
    """The downstream commit/review generator failed."""

    def __init__(self, message: str, command: Optional[str] = None) -> None:
        details = {"command": command} if command else {}
        super().__init__(message, details)
        self.command = command


class DeviceSelectionError(VoicegitError):
    """Audio input device selection or persistence failed."""
    pass


# =============================================================================
# Classification
# =============================================================================

def classify_error(error: BaseException) -> ErrorKind:
    """Map any exception onto an ErrorKind.

    VOICEGIT errors carry their own kind. Foreign exceptions are failures,
    except the interpreter's own interruption signals which count as
    cancellation.
    """
    kind = getattr(error, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    if isinstance(error, (KeyboardInterrupt, asyncio.CancelledError)):
        return ErrorKind.CANCELLED
    return ErrorKind.FAILURE

