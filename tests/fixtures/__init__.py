"""
VOICEGIT Test Fixtures Package.

Provides mock collaborators for the voice workflow so the orchestration
layer can be tested without a microphone, Whisper model, LLM or git
repository.

Available fixtures:
- MockAudioProcessor: Simulates the recorder (process_audio)
- MockCountdown / MockCountdownFactory: Countdown handles that count calls
- MockStorage: In-memory directory listing for batch discovery
- MockStorageAdapter: Captures debug transcripts
- MockTranscriber: Simulates speech-to-text (transcribe_audio)
- MockTextCommand: Simulates the commit and review generators

Usage:
    from tests.fixtures import MockAudioProcessor, MockTranscriber

    async def test_flow():
        recorder = MockAudioProcessor()
        result = await recorder(max_recording_time=30)
        assert result["audio_file_path"] == "/tmp/recording.wav"
"""

from tests.fixtures.mock_audio import (
    MockAudioProcessor,
    MockCountdown,
    MockCountdownFactory,
    MockStorage,
    MockStorageAdapter,
)
from tests.fixtures.mock_generators import MockTextCommand, MockTranscriber

__all__ = [
    "MockAudioProcessor",
    "MockCountdown",
    "MockCountdownFactory",
    "MockStorage",
    "MockStorageAdapter",
    "MockTextCommand",
    "MockTranscriber",
]
