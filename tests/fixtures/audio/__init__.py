"""
Audio fixture files for voice workflow tests.

Writes small synthetic recordings to disk so storage, discovery and CLI
tests have real files to work with.

Usage:
    from tests.fixtures.audio import write_wav, make_audio_directory

    path = write_wav(tmp_path / "note.wav", duration_sec=0.5)
    directory = make_audio_directory(tmp_path, ["b.wav", "a.MP3", "notes.txt"])
"""

import math
import struct
import wave
from pathlib import Path
from typing import Iterable, Union

# Whisper input rate
RATE_16K = 16000


def generate_silence(duration_sec: float, sample_rate: int = RATE_16K) -> bytes:
    """Raw 16-bit mono PCM silence."""
    return bytes(int(duration_sec * sample_rate) * 2)


def generate_tone(
    frequency_hz: float,
    duration_sec: float,
    amplitude: float = 0.5,
    sample_rate: int = RATE_16K,
) -> bytes:
    """Raw 16-bit mono PCM sine tone."""
    num_samples = int(duration_sec * sample_rate)
    return b"".join(
        struct.pack("<h", int(amplitude * 32767 * math.sin(2 * math.pi * frequency_hz * i / sample_rate)))
        for i in range(num_samples)
    )


def write_wav(
    path: Union[str, Path],
    duration_sec: float = 0.25,
    sample_rate: int = RATE_16K,
    tone_hz: float = 0.0,
) -> Path:
    """Write a mono 16-bit WAV file (silence unless ``tone_hz`` is set)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pcm = generate_tone(tone_hz, duration_sec, sample_rate=sample_rate) if tone_hz else generate_silence(duration_sec, sample_rate)
    with wave.open(str(path), "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return path


def make_audio_directory(root: Union[str, Path], names: Iterable[str], subdir: str = "recordings") -> Path:
    """Create ``root/subdir`` holding one file per name.

    ``.wav`` names get real WAV content, everything else a few bytes.
    """
    directory = Path(root) / subdir
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        if name.lower().endswith(".wav"):
            write_wav(directory / name)
        else:
            (directory / name).write_bytes(b"\x00\x01\x02\x03")
    return directory
