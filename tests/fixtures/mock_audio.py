"""
Mock Audio Collaborators for Testing.

Simulates the recorder, the countdown and the directory storage so the
orchestration layer can be exercised without a microphone or file system.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger("voicegit.fixtures.MockAudio")


class MockAudioProcessor:
    """
    Mock of process_audio.

    By default reports a successful recording at /tmp/recording.wav. A
    supplied ``file`` is echoed back. ``per_file`` maps a file's basename
    to a result dict or an exception to raise for that file.
    """

    def __init__(
        self,
        result: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
        per_file: Optional[Dict[str, Any]] = None,
        delay: float = 0.0,
    ):
        self.result = result
        self.error = error
        self.per_file = per_file or {}
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(
        self,
        file: Optional[str] = None,
        max_recording_time: Optional[int] = None,
        output_directory: str = "output",
        debug: bool = False,
    ) -> Any:
        self.calls.append({
            "file": file,
            "max_recording_time": max_recording_time,
            "output_directory": output_directory,
            "debug": debug,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        if file is not None:
            outcome = self.per_file.get(os.path.basename(file))
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome is not None:
                return outcome
            return {"cancelled": False, "audio_file_path": file}

        if self.result is not None:
            return self.result
        return {"cancelled": False, "audio_file_path": "/tmp/recording.wav"}


class MockCountdown:
    """Countdown handle that runs until stopped and counts its calls."""

    def __init__(self, duration_seconds: int):
        self.duration_seconds = duration_seconds
        self.start_calls = 0
        self.stop_calls = 0
        self._stopped = asyncio.Event()

    async def start(self) -> None:
        self.start_calls += 1
        await self._stopped.wait()

    def stop(self) -> None:
        self.stop_calls += 1
        self._stopped.set()


class MockCountdownFactory:
    """Builds MockCountdowns and remembers every one it built."""

    def __init__(self):
        self.created: List[MockCountdown] = []

    def __call__(self, duration_seconds: int) -> MockCountdown:
        countdown = MockCountdown(duration_seconds)
        self.created.append(countdown)
        return countdown


class MockStorage:
    """In-memory directory storage."""

    def __init__(self, files: Optional[Dict[str, List[str]]] = None, unreadable: Optional[List[str]] = None):
        self.files = files or {}
        self.unreadable = set(unreadable or [])
        self.list_calls: List[str] = []

    async def is_directory_readable(self, directory: str) -> bool:
        return directory in self.files and directory not in self.unreadable

    async def list_files(self, directory: str) -> List[str]:
        self.list_calls.append(directory)
        return list(self.files.get(directory, []))


class MockStorageAdapter:
    """Records debug artifacts written by the transcriber."""

    def __init__(self, output_directory: str = "output"):
        self.output_directory = output_directory
        self.written: Dict[str, str] = {}

    async def write_file(self, name: str, content: str):
        self.written[name] = content
        return os.path.join(self.output_directory, name)
