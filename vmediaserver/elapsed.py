"""Elapsed and estimated-total time display for long transfers."""

from __future__ import annotations

import time
from typing import Callable

MS_PER_SEC = 1000
SECS_PER_MIN = 60
MINS_PER_HOUR = 60
SECS_PER_HOUR = SECS_PER_MIN * MINS_PER_HOUR
IDLE_TEXT = "0:00/0:00"

_U16 = 0xFFFF


def format_progress(elapsed_ms: int, progress: int, total: int) -> str:
    """Render "elapsed/estimated total" from the elapsed time and progress."""
    base_secs = elapsed_ms // MS_PER_SEC
    e_sec = base_secs % SECS_PER_MIN
    e_min = e_hour = 0
    if base_secs >= SECS_PER_MIN:
        e_min = (base_secs // SECS_PER_MIN) & _U16
        if base_secs >= SECS_PER_HOUR:
            e_hour = (base_secs // SECS_PER_HOUR) & _U16

    total_secs = int(base_secs * (total / progress)) if progress else 0
    t_sec = total_secs % SECS_PER_MIN
    t_min = t_hour = 0
    if total_secs >= SECS_PER_MIN:
        total_min = total_secs // SECS_PER_MIN
        t_min = total_min % MINS_PER_HOUR
        if total_min > MINS_PER_HOUR:
            t_hour = (total_min // MINS_PER_HOUR) & _U16

    text = f"{e_min:02d}:{e_sec:02d}/"
    if e_hour > 0:
        text = f"{e_hour:02d}:" + text
    if t_hour > 0:
        text += f"{t_hour:02d}:"
    return text + f"{t_min:02d}:{t_sec:02d} "


class ElapsedTimer:
    """Tracks transfer time and keeps a display string up to date."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started: float | None = None
        self.text = IDLE_TEXT
        self.visible = False

    def start(self) -> None:
        """Show the display and start timing from now."""
        self.visible = True
        self._started = self._clock()

    def stop(self) -> None:
        """Hide the display and reset its text."""
        self.visible = False
        self.text = IDLE_TEXT

    def ms(self) -> int:
        """Milliseconds since the last start, or 0 if never started."""
        if self._started is None:
            return 0
        return int((self._clock() - self._started) * MS_PER_SEC)

    def update(self, progress: int, total: int) -> str:
        """Refresh the display text from the transfer progress and return it."""
        self.text = format_progress(self.ms(), progress, total)
        return self.text