"""
Unit tests for VOICEGIT batch discovery.
"""

import os

import pytest

from services.storage import LocalStorage
from tests.fixtures.audio import make_audio_directory
from tests.fixtures.mock_audio import MockStorage
from voicegit.discovery import BatchDiscovery, is_audio_file
from voicegit.exceptions import DiscoveryError, ErrorKind


class TestIsAudioFile:
    """Tests for is_audio_file function."""

    @pytest.mark.parametrize("name", ["a.wav", "b.mp3", "c.m4a", "d.aac", "e.flac", "f.ogg", "g.wma", "TALK.WAV"])
    def test_audio_extensions(self, name):
        assert is_audio_file(name)

    @pytest.mark.parametrize("name", ["notes.txt", "wav", "archive.wav.zip", ".hidden", "video.mp4"])
    def test_other_files(self, name):
        assert not is_audio_file(name)


class _RaisingStorage:
    def __init__(self, on_check=False):
        self.on_check = on_check

    async def is_directory_readable(self, directory):
        if self.on_check:
            raise PermissionError("denied")
        return True

    async def list_files(self, directory):
        raise OSError("I/O error")


class TestBatchDiscovery:
    """Tests for BatchDiscovery class."""

    @pytest.mark.asyncio
    async def test_filters_and_sorts(self):
        """Test only audio files are returned, as sorted full paths."""
        storage = MockStorage(files={"/rec": ["z.wav", "readme.md", "a.FLAC", "m.mp3"]})

        paths = await BatchDiscovery(storage).discover("/rec")

        assert paths == ["/rec/a.FLAC", "/rec/m.mp3", "/rec/z.wav"]

    @pytest.mark.asyncio
    async def test_empty_result(self):
        """Test a directory without audio yields an empty list."""
        paths = await BatchDiscovery(MockStorage(files={"/rec": ["notes.txt"]})).discover("/rec")
        assert paths == []

    @pytest.mark.asyncio
    async def test_unreadable_directory(self):
        """Test an unreadable directory raises a fatal DiscoveryError."""
        with pytest.raises(DiscoveryError, match="Directory not readable: /missing") as exc_info:
            await BatchDiscovery(MockStorage()).discover("/missing")

        assert exc_info.value.kind == ErrorKind.FATAL
        assert exc_info.value.directory == "/missing"

    @pytest.mark.asyncio
    async def test_check_raises(self):
        """Test an OS error while checking becomes DiscoveryError."""
        with pytest.raises(DiscoveryError, match="Directory not readable"):
            await BatchDiscovery(_RaisingStorage(on_check=True)).discover("/rec")

    @pytest.mark.asyncio
    async def test_listing_raises(self):
        """Test an OS error while listing becomes DiscoveryError."""
        with pytest.raises(DiscoveryError, match="Failed to list directory"):
            await BatchDiscovery(_RaisingStorage()).discover("/rec")

    @pytest.mark.asyncio
    async def test_local_file_system(self, tmp_path):
        """Test discovery against a real directory."""
        directory = make_audio_directory(tmp_path, ["b.wav", "a.m4a", "notes.txt"])
        (directory / "nested.wav").mkdir()

        paths = await BatchDiscovery(LocalStorage()).discover(str(directory))

        assert paths == [os.path.join(str(directory), "a.m4a"), os.path.join(str(directory), "b.wav")]

    @pytest.mark.asyncio
    async def test_local_missing_directory(self, tmp_path):
        """Test a missing directory is reported as unreadable."""
        with pytest.raises(DiscoveryError):
            await BatchDiscovery(LocalStorage()).discover(str(tmp_path / "nope"))
