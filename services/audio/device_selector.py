"""
VOICEGIT Audio Device Selector

Lists microphone inputs, lets the user pick one, and saves the choice as
``audio-device.json`` in the preferences directory. The recorder reads the
saved preference on every recording.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from voicegit.constants import AUDIO_DEVICE_PREFERENCES_FILE
from voicegit.exceptions import DeviceSelectionError

# Try to import audio libraries (OSError: PortAudio missing)
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    sd = None
    SOUNDDEVICE_AVAILABLE = False

logger = logging.getLogger("voicegit.services.audio")


def list_input_devices() -> List[Dict[str, Any]]:
    """
    Enumerate devices that can record.

    Returns:
        Dicts with index, name, channels, default_samplerate and is_default
    """
    if not SOUNDDEVICE_AVAILABLE:
        raise DeviceSelectionError("sounddevice not available. Install with: pip install sounddevice")

    try:
        default_input = sd.default.device[0]
    except (TypeError, IndexError):
        default_input = None

    devices = []
    for index, info in enumerate(sd.query_devices()):
        if info.get("max_input_channels", 0) <= 0:
            continue
        devices.append({
            "index": index,
            "name": info.get("name", f"Device {index}"),
            "channels": info.get("max_input_channels", 0),
            "default_samplerate": info.get("default_samplerate"),
            "is_default": index == default_input,
        })
    return devices


def preferences_file(preferences_directory: str) -> Path:
    return Path(preferences_directory).expanduser() / AUDIO_DEVICE_PREFERENCES_FILE


def save_device_preference(preferences_directory: str, device: Dict[str, Any]) -> Path:
    """Persist the selected device. Returns the file written."""
    path = preferences_file(preferences_directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "index": device["index"],
        "name": device["name"],
        "selected_at": datetime.now().isoformat(timespec="seconds"),
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def load_device_preference(preferences_directory: str) -> Optional[Dict[str, Any]]:
    """Read the saved device, or None if nothing usable is saved."""
    path = preferences_file(preferences_directory)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable audio device preferences {path}: {e}")
        return None
    if not isinstance(data, dict) or "index" not in data:
        logger.warning(f"Ignoring malformed audio device preferences {path}")
        return None
    return data


def _print_devices(devices: List[Dict[str, Any]]) -> None:
    print("Available audio input devices:", file=sys.stderr)
    for device in devices:
        marker = " (default)" if device["is_default"] else ""
        print(f"  [{device['index']}] {device['name']}{marker}", file=sys.stderr)


def _choose(devices: List[Dict[str, Any]], choice: str) -> Dict[str, Any]:
    choice = choice.strip()
    if not choice:
        for device in devices:
            if device["is_default"]:
                return device
        return devices[0]

    try:
        wanted = int(choice)
    except ValueError:
        raise DeviceSelectionError(f"Invalid device selection: {choice}")

    for device in devices:
        if device["index"] == wanted:
            return device
    raise DeviceSelectionError(f"Invalid device selection: {choice}")


async def select_and_configure_audio_device(
    preferences_directory: str,
    logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    debug: bool = False,
    prompt: Callable[[str], str] = input,
) -> str:
    """
    Interactively select the recording device and save it.

    Args:
        preferences_directory: Where audio-device.json is written
        logger: Logger to report through
        debug: Log the full device list
        prompt: Reads the user's answer (``input`` by default)

    Returns:
        Human-readable summary of the saved selection

    Raises:
        DeviceSelectionError: No devices, invalid choice, or save failure
    """
    log = logger or logging.getLogger("voicegit.services.audio")

    devices = await asyncio.to_thread(list_input_devices)
    if not devices:
        raise DeviceSelectionError("No audio input devices found")

    if debug:
        log.debug(f"Input devices: {devices}")

    _print_devices(devices)
    answer = await asyncio.to_thread(prompt, "Select input device number (ENTER for default): ")
    device = _choose(devices, answer)

    try:
        path = await asyncio.to_thread(save_device_preference, preferences_directory, device)
    except OSError as e:
        raise DeviceSelectionError(f"Failed to save audio device preferences: {e}")

    log.info(
        "AUDIO_DEVICE_SELECTED: Audio input device saved | Device: %s | Preferences: %s",
        device["name"],
        path,
    )
    return f"Audio device configured: {device['name']} (index {device['index']})"
