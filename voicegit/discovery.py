"""
VOICEGIT Batch Discovery

Enumerates the audio files of a directory for batch review.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from services.storage import create_storage
from voicegit.constants import AUDIO_EXTENSIONS
from voicegit.exceptions import DiscoveryError
from voicegit.logging_config import get_logger
from voicegit.types import DirectoryStorage

__all__ = ["BatchDiscovery", "is_audio_file"]


def is_audio_file(name: str, extensions: Iterable[str] = AUDIO_EXTENSIONS) -> bool:
    """Case-insensitive extension check (``TALK.WAV`` qualifies)."""
    return os.path.splitext(name)[1].lower() in tuple(extensions)


class BatchDiscovery:
    """Lists eligible audio files in a directory, sorted by path."""

    def __init__(
        self,
        storage: Optional[DirectoryStorage] = None,
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        self.storage = storage or create_storage()
        self.logger = logger or get_logger(__name__)

    async def discover(self, directory: str) -> List[str]:
        """
        Find audio files in ``directory``.

        Args:
            directory: Directory to scan (not recursive)

        Returns:
            Full paths, sorted lexicographically. May be empty.

        Raises:
            DiscoveryError: If the directory cannot be read
        """
        try:
            readable = await self.storage.is_directory_readable(directory)
        except OSError as e:
            raise DiscoveryError(f"Directory not readable: {directory} ({e})", directory=directory)
        if not readable:
            raise DiscoveryError(f"Directory not readable: {directory}", directory=directory)

        try:
            names = await self.storage.list_files(directory)
        except OSError as e:
            raise DiscoveryError(f"Failed to list directory: {directory} ({e})", directory=directory)

        paths = sorted(os.path.join(directory, name) for name in names if is_audio_file(name))

        self.logger.info(
            "AUDIO_REVIEW_FILES_FOUND: Found audio files in directory | Count: %d | Directory: %s",
            len(paths),
            directory,
        )
        return paths
