"""
VOICEGIT Shared Type Definitions

Data structures and protocols shared across the voice workflow: stage
results, tagged outcomes, batch outcomes, and the interfaces the
orchestration controller expects from its collaborators.

Types are organized by category:
    - Command and outcome enumerations
    - Stage result types
    - Collaborator protocols (for duck typing and test doubles)

Usage:
    from voicegit.types import AcquisitionResult, StageOutcome, OutcomeKind
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    Protocol,
    TypeAlias,
    TypeVar,
    runtime_checkable,
)

from voicegit.exceptions import ErrorKind

T = TypeVar("T")

# (audio_path, transcript_text) -> awaitable archival side effect
ArchiveCallback: TypeAlias = Callable[[str, str], Awaitable[None]]


# =============================================================================
# Enumerations
# =============================================================================


class CommandKind(Enum):
    """Downstream text command an invocation delegates to."""
    COMMIT = "commit"
    REVIEW = "review"

    @property
    def label(self) -> str:
        """Upper-case tag used in log event codes."""
        return f"AUDIO_{self.name}"


class OutcomeKind(Enum):
    """Tag of a StageOutcome."""
    SUCCESS = "success"
    CANCELLED = "cancelled"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"

    @classmethod
    def from_error_kind(cls, kind: ErrorKind) -> "OutcomeKind":
        """Map an error's discriminator onto an outcome tag."""
        if kind == ErrorKind.CANCELLED:
            return cls.CANCELLED
        if kind == ErrorKind.FATAL:
            return cls.FATAL
        return cls.RECOVERABLE


# =============================================================================
# Stage Results
# =============================================================================


@dataclass(frozen=True)
class AcquisitionResult:
    """Result of obtaining a playable audio artifact.

    Attributes:
        cancelled: True if the user aborted the recording
        audio_path: Resolved path of the audio file (None when cancelled)
    """
    cancelled: bool = False
    audio_path: Optional[str] = None


@dataclass(frozen=True)
class TranscriptionResult:
    """Validated speech-to-text output. ``text`` may be empty."""
    text: str

    @property
    def is_blank(self) -> bool:
        """True if nothing but whitespace was transcribed."""
        return not self.text.strip()


@dataclass(frozen=True)
class BatchItemOutcome:
    """One section of a batch report."""
    label: str
    content: str
    succeeded: bool = True

    def render(self) -> str:
        """Format as a report section."""
        return f"File: {self.label}\n{self.content}"


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Tagged result of a workflow stage.

    Exactly one of ``value`` (SUCCESS) or ``error`` (any other kind) is
    meaningful. Callers branch on ``kind``.
    """
    kind: OutcomeKind
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: T) -> "StageOutcome[T]":
        return cls(OutcomeKind.SUCCESS, value=value)

    @classmethod
    def failure(
        cls,
        kind: OutcomeKind,
        error: BaseException,
        value: Optional[T] = None,
    ) -> "StageOutcome[T]":
        return cls(kind, value=value, error=error)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def message(self) -> str:
        """Error description, empty for successes."""
        if self.error is None:
            return ""
        return getattr(self.error, "message", None) or str(self.error)


@dataclass(frozen=True)
class AcquisitionRequest:
    """Inputs of one acquisition."""
    output_directory: str
    file: Optional[str] = None
    max_recording_time: Optional[int] = None
    debug: bool = False

    @property
    def is_live_recording(self) -> bool:
        return not self.file


@dataclass
class TranscriptionOptions:
    """Options forwarded to the transcription collaborator."""
    model: str
    debug: bool = False
    storage: Any = None
    logger: Any = None
    on_archive: Optional[ArchiveCallback] = None


# =============================================================================
# Collaborator Protocols
# =============================================================================


@runtime_checkable
class CountdownHandle(Protocol):
    """Bounded-duration companion task for live recording."""

    async def start(self) -> None:
        """Suspend until the duration elapses or stop() is called."""
        ...

    def stop(self) -> None:
        """Cancel the countdown. Safe to call more than once."""
        ...


class AudioProcessor(Protocol):
    """Records audio or accepts a supplied file."""

    async def __call__(
        self,
        file: Optional[str] = None,
        max_recording_time: Optional[int] = None,
        output_directory: str = "output",
        debug: bool = False,
    ) -> Any:
        ...


class Transcriber(Protocol):
    """Converts an audio file to a ``{"text": ...}`` shaped result."""

    async def __call__(self, audio_path: str, **options: Any) -> Any:
        ...


class TextCommand(Protocol):
    """Downstream text-generation command (commit or review)."""

    async def __call__(self, config: Any) -> str:
        ...


class DirectoryStorage(Protocol):
    """Directory access needed for batch discovery."""

    async def is_directory_readable(self, directory: str) -> bool:
        ...

    async def list_files(self, directory: str) -> List[str]:
        ...
