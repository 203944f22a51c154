"""
VOICEGIT Constants

Fixed values shared by the commands, collaborators and tests.
"""

VOICEGIT_NAME = "VOICEGIT"
VOICEGIT_VERSION = "0.1.0"

# Environment variable prefix for configuration overrides
ENV_PREFIX = "VOICEGIT_"

# =============================================================================
# Files and Directories
# =============================================================================

DEFAULT_OUTPUT_DIRECTORY = "output"
DEFAULT_PREFERENCES_DIRNAME = ".voicegit"
ARCHIVE_SUBDIRECTORY = "voicegit"
AUDIO_DEVICE_PREFERENCES_FILE = "audio-device.json"
CONFIG_FILENAME = "voicegit.yaml"

# Audio formats eligible for batch processing (compared lower-cased)
AUDIO_EXTENSIONS = (".wav", ".mp3", ".m4a", ".aac", ".flac", ".ogg", ".wma")

# Timestamped recording names, e.g. recording-20260110-120000.wav
RECORDING_FILENAME_PREFIX = "recording"
RECORDING_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# =============================================================================
# Recording
# =============================================================================

DEFAULT_SAMPLE_RATE = 16000   # Whisper expects 16kHz
DEFAULT_CHANNELS = 1          # Mono
RECORDING_CANCEL_KEY = "c"

# Countdown display: announce these remaining-second marks as warnings
COUNTDOWN_WARNING_MARKS = (30, 10, 5)

# =============================================================================
# Transcription
# =============================================================================

DEFAULT_TRANSCRIPTION_MODEL = "base"
DEFAULT_TRANSCRIPTION_LANGUAGE = "en"

# =============================================================================
# Result Strings
# =============================================================================

DRY_RUN_MARKER = "DRY RUN"
COMMIT_DRY_RUN_RESULT = (
    "DRY RUN: Would process audio, transcribe it, and generate commit message with audio context"
)
REVIEW_DRY_RUN_RESULT = (
    "DRY RUN: Would process audio, transcribe it, and perform review analysis with audio context"
)
BATCH_DRY_RUN_RESULT = "DRY RUN: Directory batch processing would be performed"
NO_AUDIO_FILES_RESULT = "No audio files found to process"
BATCH_SECTION_SEPARATOR = "\n\n---\n\n"
SELECT_AUDIO_DRY_RUN_RESULT = "Audio device selection completed (dry run)"
