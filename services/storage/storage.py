"""
VOICEGIT Local Storage Service

File-system access used by the voice workflow:
- Directory checks and listing for batch discovery
- Timestamped names for new recordings
- A storage adapter the transcription service writes debug output through
- Archival of audio/transcript pairs for later audit

All blocking file operations run in worker threads so callers can await
them from the event loop.
"""

import asyncio
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from voicegit.constants import RECORDING_FILENAME_PREFIX, RECORDING_TIMESTAMP_FORMAT

logger = logging.getLogger("voicegit.services.storage")


def get_timestamped_audio_filename(
    now: Optional[datetime] = None,
    extension: str = ".wav",
) -> str:
    """Return a recording filename such as ``recording-20260110-120000.wav``."""
    stamp = (now or datetime.now()).strftime(RECORDING_TIMESTAMP_FORMAT)
    return f"{RECORDING_FILENAME_PREFIX}-{stamp}{extension}"


def _directory_readable(directory: str) -> bool:
    path = Path(directory)
    return path.is_dir() and os.access(path, os.R_OK | os.X_OK)


def _regular_files(directory: str) -> List[str]:
    with os.scandir(directory) as entries:
        return [entry.name for entry in entries if entry.is_file()]


class LocalStorage:
    """Directory access backed by the local file system."""

    async def is_directory_readable(self, directory: str) -> bool:
        """Check that ``directory`` exists and can be listed."""
        return await asyncio.to_thread(_directory_readable, directory)

    async def list_files(self, directory: str) -> List[str]:
        """List the names (not paths) of regular files in ``directory``."""
        return await asyncio.to_thread(_regular_files, directory)


def create_storage() -> LocalStorage:
    """Create the default directory storage."""
    return LocalStorage()


async def is_directory_readable(directory: str) -> bool:
    """Module-level shortcut for LocalStorage.is_directory_readable."""
    return await LocalStorage().is_directory_readable(directory)


async def list_files(directory: str) -> List[str]:
    """Module-level shortcut for LocalStorage.list_files."""
    return await LocalStorage().list_files(directory)


class StorageAdapter:
    """
    Text file access rooted at an output directory.

    Handed to the transcription service so it can persist debug artifacts
    without knowing where the output directory lives.
    """

    def __init__(self, output_directory: str):
        self.output_directory = Path(output_directory)

    def path_for(self, name: str) -> Path:
        """Resolve a name relative to the output directory."""
        return self.output_directory / name

    async def ensure_directory(self) -> Path:
        """Create the output directory if needed."""
        await asyncio.to_thread(self.output_directory.mkdir, parents=True, exist_ok=True)
        return self.output_directory

    async def write_file(self, name: str, content: str) -> Path:
        """Write ``content`` to ``name`` under the output directory."""
        await self.ensure_directory()
        path = self.path_for(name)
        await asyncio.to_thread(path.write_text, content, encoding="utf-8")
        logger.debug(f"Wrote {path}")
        return path

    async def read_file(self, name: str) -> str:
        """Read a text file under the output directory."""
        return await asyncio.to_thread(self.path_for(name).read_text, encoding="utf-8")

    async def exists(self, name: str) -> bool:
        """Check whether ``name`` exists under the output directory."""
        return await asyncio.to_thread(self.path_for(name).exists)


def create_storage_adapter(output_directory: str) -> StorageAdapter:
    """Create a StorageAdapter for ``output_directory``."""
    return StorageAdapter(output_directory)


def _archive(audio_path: str, transcript: str, archive_directory: str) -> Tuple[Path, Path]:
    source = Path(audio_path)
    target_dir = Path(archive_directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime(RECORDING_TIMESTAMP_FORMAT)
    stem = f"{stamp}-{source.stem}"

    audio_copy = target_dir / f"{stem}{source.suffix}"
    shutil.copy2(source, audio_copy)

    transcript_file = target_dir / f"{stem}.md"
    transcript_file.write_text(
        "\n".join([
            f"# Audio Transcript: {source.name}",
            "",
            f"- Archived: {datetime.now().isoformat(timespec='seconds')}",
            f"- Source: {source}",
            f"- Audio copy: {audio_copy.name}",
            "",
            "## Transcript",
            "",
            transcript.strip() or "_(no speech detected)_",
            "",
        ]),
        encoding="utf-8",
    )
    return audio_copy, transcript_file


async def archive_audio(audio_path: str, transcript: str, archive_directory: str) -> Tuple[Path, Path]:
    """
    Archive an audio file together with its transcript.

    Copies the audio into ``archive_directory`` under a timestamped name and
    writes a markdown transcript with the same stem next to it.

    Args:
        audio_path: Audio file that was transcribed
        transcript: Transcribed text
        archive_directory: Destination directory (created if missing)

    Returns:
        (audio copy path, transcript path)
    """
    audio_copy, transcript_file = await asyncio.to_thread(
        _archive, audio_path, transcript, archive_directory
    )
    logger.info(
        "AUDIO_ARCHIVED: Archived audio and transcript | Audio: %s | Transcript: %s",
        audio_copy,
        transcript_file,
    )
    return audio_copy, transcript_file
