"""
Pytest Fixtures for VOICEGIT Testing.

Provides shared fixtures for unit and integration tests. Loaded for the
whole suite through ``pytest_plugins`` in tests/conftest.py.

Usage:
    # In test files, fixtures are automatically available:
    async def test_commit(controller, mock_commit, make_config):
        await controller.run(make_config(), CommandKind.COMMIT)
        assert mock_commit.call_count == 1
"""

from typing import Any, Dict

import pytest

from tests.fixtures.mock_audio import (
    MockAudioProcessor,
    MockCountdownFactory,
    MockStorage,
    MockStorageAdapter,
)
from tests.fixtures.mock_generators import MockTextCommand, MockTranscriber
from voicegit.config import VoicegitConfig
from voicegit.orchestrator import Collaborators, OrchestrationController


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def make_config(tmp_path):
    """
    Build a VoicegitConfig rooted in a temporary directory.

    Keyword arguments are top-level fields; section dicts are validated
    through the models.
    """
    def _make(**overrides: Any) -> VoicegitConfig:
        data: Dict[str, Any] = {
            "output_directory": str(tmp_path / "output"),
            "preferences_directory": str(tmp_path / "prefs"),
        }
        data.update(overrides)
        return VoicegitConfig.model_validate(data)
    return _make


# =============================================================================
# Collaborator Fixtures
# =============================================================================

@pytest.fixture
def mock_processor() -> MockAudioProcessor:
    """Recorder that reports /tmp/recording.wav."""
    return MockAudioProcessor()


@pytest.fixture
def mock_transcriber() -> MockTranscriber:
    """Transcriber returning a fixed sentence."""
    return MockTranscriber()


@pytest.fixture
def mock_commit() -> MockTextCommand:
    """Commit generator."""
    return MockTextCommand(result="feat: generated commit message")


@pytest.fixture
def mock_review() -> MockTextCommand:
    """Review generator."""
    return MockTextCommand(result="# Review\n- finding")


@pytest.fixture
def mock_storage() -> MockStorage:
    """Empty in-memory directory storage."""
    return MockStorage()


@pytest.fixture
def countdown_factory() -> MockCountdownFactory:
    """Countdown factory that tracks every handle it creates."""
    return MockCountdownFactory()


@pytest.fixture
def archive_calls():
    """List collecting (audio_path, transcript, archive_directory) tuples."""
    return []


@pytest.fixture
def collaborators(
    mock_processor,
    mock_transcriber,
    mock_commit,
    mock_review,
    mock_storage,
    countdown_factory,
    archive_calls,
) -> Collaborators:
    """Collaborators bundle wired entirely to mocks."""
    async def archive(audio_path: str, transcript: str, archive_directory: str):
        archive_calls.append((audio_path, transcript, archive_directory))

    return Collaborators(
        process_audio=mock_processor,
        transcribe_audio=mock_transcriber,
        commit=mock_commit,
        review=mock_review,
        storage=mock_storage,
        countdown_factory=countdown_factory,
        archive=archive,
        storage_adapter_factory=MockStorageAdapter,
    )


@pytest.fixture
def controller(collaborators) -> OrchestrationController:
    """Controller over the mock collaborators."""
    return OrchestrationController(collaborators)
