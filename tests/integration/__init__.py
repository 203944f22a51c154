"""
VOICEGIT Integration Tests

End-to-end tests of the command-line flows against the local file system.
Speech-to-text and text generation are scripted, so no microphone, model
download, API key or network access is needed.

Running:
    pytest tests/integration/ -v

Markers:
    @pytest.mark.integration - Full CLI flow tests
"""
