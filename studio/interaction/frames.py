"""
Frame Scheduling

Stand-in for the browser's animation-frame callback. Continuous inputs
defer their state writes to the next frame so that bursts of pointer
events collapse into one update per rendered frame.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import asyncio


FrameCallback = Callable[[], None]


class FrameScheduler(ABC):
    """Runs callbacks once, on the next frame."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> None:
        """Queue ``callback`` for the next frame."""


class AsyncioFrameScheduler(FrameScheduler):
    """
    Frame ticks on an asyncio loop, one ``frame_interval`` after the request.

    Must be used from inside the running loop (pointer handlers are).
    """

    def __init__(
        self,
        frame_interval: float = 1 / 60,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self._frame_interval = frame_interval
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(self._frame_interval, callback)


class ManualFrameScheduler(FrameScheduler):
    """
    Frames advance only when ``tick()`` is called.

    Used by headless hosts and tests. Callbacks requested while a tick is
    running land in the following frame.
    """

    def __init__(self):
        self._pending: List[FrameCallback] = []
        self._frames = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def frame_count(self) -> int:
        return self._frames

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def tick(self) -> int:
        """Run one frame; returns how many callbacks ran."""
        callbacks, self._pending = self._pending, []
        self._frames += 1
        for callback in callbacks:
            callback()
        return len(callbacks)
