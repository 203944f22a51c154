"""
VOICEGIT Audio Recorder

Microphone capture for the voice workflow commands.

Recording runs until the user presses ENTER, types ``c`` then ENTER to
cancel, or the optional time limit elapses. Captured 16-bit PCM is written
as a WAV file named ``recording-YYYYMMDD-HHMMSS.wav`` in the output
directory. When a file is supplied instead, it is only checked and handed
back.
"""

import asyncio
import logging
import os
import queue
import sys
import threading
import wave
from typing import Any, Dict, List, Optional, TextIO

import numpy as np

from services.audio.device_selector import load_device_preference
from services.storage import get_timestamped_audio_filename
from voicegit.constants import DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE, RECORDING_CANCEL_KEY
from voicegit.exceptions import AcquisitionError

# Try to import audio libraries (OSError: PortAudio missing)
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    sd = None
    SOUNDDEVICE_AVAILABLE = False

logger = logging.getLogger("voicegit.services.audio")


class KeyWatcher:
    """
    Reads one line from the terminal on a daemon thread.

    ``c`` (any case) means cancel; anything else, including a bare ENTER,
    means stop.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.pressed = threading.Event()
        self.cancelled = False
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._thread = threading.Thread(target=self._watch, name="voicegit-keys", daemon=True)
        self._thread.start()

    def _watch(self):
        try:
            line = self.stream.readline()
        except (OSError, ValueError):
            return
        if not line:
            # EOF: no terminal attached, leave the limit in charge
            return
        self.cancelled = line.strip().lower() == RECORDING_CANCEL_KEY
        self.pressed.set()


class AudioRecorder:
    """
    Microphone recorder.

    Usage:
        recorder = AudioRecorder(sample_rate=16000)
        path = await recorder.record("output/recording.wav", max_recording_time=60)
        if path is None:
            print("cancelled")
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        channels: int = DEFAULT_CHANNELS,
        device: Optional[Any] = None,
        key_stream: Optional[TextIO] = None,
        poll_interval: float = 0.05,
    ):
        """
        Initialize recorder.

        Args:
            sample_rate: Capture rate in Hz
            channels: 1 (mono) or 2
            device: sounddevice device index or name (None for default)
            key_stream: Where ENTER / ``c`` is read from (stdin by default)
            poll_interval: Seconds between checks of the key and time limit
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.key_stream = key_stream
        self.poll_interval = poll_interval
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    def _check_available(self):
        if not SOUNDDEVICE_AVAILABLE:
            raise AcquisitionError("sounddevice not available. Install with: pip install sounddevice")

    async def record(self, output_path: str, max_recording_time: Optional[int] = None) -> Optional[str]:
        """
        Record until ENTER, cancel, or the time limit.

        Args:
            output_path: WAV file to write
            max_recording_time: Limit in seconds (None for no limit)

        Returns:
            ``output_path``, or None if the user cancelled

        Raises:
            AcquisitionError: If the device cannot be opened or nothing
                was captured
        """
        self._check_available()

        audio_queue: queue.Queue = queue.Queue()
        frames: List[Any] = []
        watcher = KeyWatcher(self.key_stream)

        def audio_callback(indata, frames_count, time_info, status):
            if status:
                logger.warning(f"Audio capture status: {status}")
            audio_queue.put(indata.copy())

        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_recording_time if max_recording_time else None

        self._recording = True
        try:
            with sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                callback=audio_callback,
                device=self.device,
            ):
                watcher.start()
                while not watcher.pressed.is_set():
                    if deadline is not None and loop.time() >= deadline:
                        logger.info("Recording time limit reached")
                        break
                    await asyncio.sleep(self.poll_interval)
        except Exception as e:
            raise AcquisitionError(f"Audio device error: {e}") from e
        finally:
            self._recording = False

        if watcher.cancelled:
            logger.info("Recording cancelled")
            return None

        while not audio_queue.empty():
            frames.append(audio_queue.get_nowait())

        if not frames:
            raise AcquisitionError("No audio captured")

        audio = np.concatenate(frames)
        await asyncio.to_thread(self._write_wav, output_path, audio.tobytes())
        logger.info(f"Recorded {len(audio) / self.sample_rate:.1f}s of audio to {output_path}")
        return output_path

    def _write_wav(self, output_path: str, pcm: bytes):
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with wave.open(output_path, "wb") as wav_file:
            wav_file.setnchannels(self.channels)
            wav_file.setsampwidth(2)  # int16
            wav_file.setframerate(self.sample_rate)
            wav_file.writeframes(pcm)


def _resolve_device(device: Optional[str], preferences_directory: Optional[str]) -> Optional[Any]:
    if device is not None:
        return int(device) if device.isdigit() else device
    if preferences_directory:
        preference = load_device_preference(preferences_directory)
        if preference is not None:
            return preference["index"]
    return None


async def process_audio(
    file: Optional[str] = None,
    max_recording_time: Optional[int] = None,
    output_directory: str = "output",
    debug: bool = False,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    channels: int = DEFAULT_CHANNELS,
    device: Optional[str] = None,
    preferences_directory: Optional[str] = None,
    key_stream: Optional[TextIO] = None,
) -> Dict[str, Any]:
    """
    Record audio, or accept a supplied file.

    Args:
        file: Existing audio file to use instead of recording
        max_recording_time: Recording limit in seconds
        output_directory: Where new recordings are written
        debug: Log device details
        sample_rate, channels: Capture format
        device: Explicit input device (overrides the saved preference)
        preferences_directory: Where the saved device preference lives
        key_stream: Terminal input for ENTER / ``c``

    Returns:
        ``{"cancelled": bool, "audio_file_path": Optional[str]}``

    Raises:
        AcquisitionError: Missing file or capture failure
    """
    if file:
        if not os.path.isfile(file):
            raise AcquisitionError(f"Audio file not found: {file}", audio_path=file)
        return {"cancelled": False, "audio_file_path": file}

    resolved_device = _resolve_device(device, preferences_directory)
    if debug:
        logger.debug(f"Recording device: {resolved_device if resolved_device is not None else 'default'}")

    output_path = os.path.join(output_directory, get_timestamped_audio_filename())
    recorder = AudioRecorder(
        sample_rate=sample_rate,
        channels=channels,
        device=resolved_device,
        key_stream=key_stream,
    )
    path = await recorder.record(output_path, max_recording_time=max_recording_time)

    if path is None:
        return {"cancelled": True, "audio_file_path": None}
    return {"cancelled": False, "audio_file_path": path}
