"""
VOICEGIT Services Package

Service modules the voice workflow commands are wired to, organized by function.

Audio (services.audio)
----------------------
- AudioRecorder: Microphone capture with ENTER / ``c`` controls
- process_audio: Record, or accept a supplied file
- select_and_configure_audio_device: Interactive input device choice

Git (services.git)
------------------
- GitRepository: Async git subprocess access (diffs, log, tags, commit)
- GitHubClient: Issue listing and filing over the GitHub REST API
- commit: Commit message generator
- review: Code review generator

Storage (services.storage)
--------------------------
- LocalStorage: Directory listing for batch discovery
- StorageAdapter: Debug artifact writes
- archive_audio: Audio and transcript archival
"""

__version__ = "0.1.0"
