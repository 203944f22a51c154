"""
VOICEGIT Storage Service

Local file-system access for discovery, recording names, and archival.
"""

from .storage import (
    LocalStorage,
    StorageAdapter,
    archive_audio,
    create_storage,
    create_storage_adapter,
    get_timestamped_audio_filename,
    is_directory_readable,
    list_files,
)

__all__ = [
    "LocalStorage",
    "StorageAdapter",
    "archive_audio",
    "create_storage",
    "create_storage_adapter",
    "get_timestamped_audio_filename",
    "is_directory_readable",
    "list_files",
]
