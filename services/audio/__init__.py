"""
VOICEGIT Audio Service

Microphone recording and input device selection.
"""

from .device_selector import (
    list_input_devices,
    load_device_preference,
    save_device_preference,
    select_and_configure_audio_device,
)
from .recorder import AudioRecorder, KeyWatcher, process_audio

__all__ = [
    "AudioRecorder",
    "KeyWatcher",
    "list_input_devices",
    "load_device_preference",
    "process_audio",
    "save_device_preference",
    "select_and_configure_audio_device",
]
