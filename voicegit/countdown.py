"""
VOICEGIT Recording Countdown

Bounded-duration companion task shown while a live recording runs. The
recorder enforces the time limit itself; the countdown tells the user how
much time is left.

Usage:
    async with countdown_scope(max_recording_time) as timer:
        result = await process_audio(...)
    # timer has been stopped and its task joined here, whatever happened
"""

from __future__ import annotations

import asyncio
import math
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional, TextIO

from voicegit.constants import COUNTDOWN_WARNING_MARKS
from voicegit.logging_config import get_logger
from voicegit.types import CountdownHandle

logger = get_logger(__name__)

__all__ = ["CountdownTimer", "countdown_scope", "format_remaining"]


def format_remaining(seconds: int) -> str:
    """Format seconds as M:SS."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


class CountdownTimer:
    """
    Countdown for a live recording.

    ``start()`` suspends until the duration has elapsed or ``stop()`` is
    called; natural expiry is not an error. ``stop()`` is idempotent.
    """

    def __init__(
        self,
        duration_seconds: int,
        tick_interval: float = 1.0,
        stream: Optional[TextIO] = None,
        warning_marks: tuple = COUNTDOWN_WARNING_MARKS,
    ):
        """
        Initialize countdown.

        Args:
            duration_seconds: Total countdown length
            tick_interval: Seconds between display refreshes
            stream: Where the countdown line is drawn (stderr by default)
            warning_marks: Remaining-second marks announced as warnings
        """
        self.duration_seconds = duration_seconds
        self.tick_interval = tick_interval
        self.stream = stream if stream is not None else sys.stderr
        self.warning_marks = set(warning_marks)

        self._stop_event = asyncio.Event()
        self._stopped = False
        self._expired = False
        self._announced: set = set()

    @property
    def stopped(self) -> bool:
        """True once stop() has been called."""
        return self._stopped

    @property
    def expired(self) -> bool:
        """True if the full duration elapsed without stop()."""
        return self._expired

    async def start(self) -> None:
        """Run the countdown until expiry or stop()."""
        if self._stopped:
            return

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.duration_seconds

        try:
            while not self._stopped:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    self._expired = True
                    break

                self._render(math.ceil(remaining))

                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=min(self.tick_interval, remaining),
                    )
                except asyncio.TimeoutError:
                    continue
        finally:
            self._clear()

        if self._expired:
            logger.info("AUDIO_RECORDING_TIME_LIMIT: Maximum recording time reached | Limit: %ds", self.duration_seconds)

    def stop(self) -> None:
        """Stop the countdown."""
        if self._stopped:
            return
        self._stopped = True
        self._stop_event.set()

    def _render(self, remaining: int) -> None:
        self.stream.write(f"\r  Recording: {format_remaining(remaining)} remaining ")
        self.stream.flush()

        for mark in self.warning_marks:
            if remaining <= mark and mark not in self._announced and mark < self.duration_seconds:
                self._announced.add(mark)
                logger.warning("AUDIO_RECORDING_TIME_WARNING: Recording time almost up | Remaining: %ds", mark)

    def _clear(self) -> None:
        self.stream.write("\r" + " " * 40 + "\r")
        self.stream.flush()


@asynccontextmanager
async def countdown_scope(
    duration_seconds: Optional[int],
    factory: Callable[[int], CountdownHandle] = CountdownTimer,
) -> AsyncIterator[Optional[CountdownHandle]]:
    """Run a countdown alongside the enclosed block.

    Creates and starts exactly one countdown when ``duration_seconds`` is
    positive (yields None otherwise). On exit, by success, error or
    cancellation, the countdown is stopped once and its task is joined.

    Args:
        duration_seconds: Countdown length; None or <= 0 disables it
        factory: Builds the countdown handle from the duration
    """
    if not duration_seconds or duration_seconds <= 0:
        yield None
        return

    timer = factory(duration_seconds)
    task = asyncio.create_task(timer.start())
    try:
        yield timer
    finally:
        timer.stop()
        try:
            await task
        except Exception as e:
            # Display problems never affect the recording result
            logger.debug(f"Countdown task ended with error: {e}")
