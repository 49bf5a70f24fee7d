"""
Scale Drag Control
==================

Translates a horizontal pointer drag into a UI scale value.

STATE MACHINE:
==============
    IDLE --pointer_down--> DRAGGING --pointer_up / pointer_cancel--> IDLE

- pointer_down captures the pointer and records (origin_x, origin_scale)
- pointer_move computes origin_scale + (x - origin_x) / pixels_per_unit
  and schedules ONE store write on the next frame; further moves before
  that frame only replace the pending value
- pointer_up releases the capture; a frame already scheduled still lands

Clamping is the store's job, not the controller's.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from ..state.scale import ScaleStore
from .frames import FrameScheduler, ManualFrameScheduler


logger = logging.getLogger(__name__)

DEFAULT_PIXELS_PER_UNIT = 200.0


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class DragPhase(Enum):
    """Phase of the drag gesture."""
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerEvent:
    """A pointer sample in client coordinates."""
    pointer_id: int
    client_x: float


@dataclass(frozen=True)
class DragOrigin:
    """Where the drag started and the scale at that moment."""
    pointer_id: int
    origin_x: float
    origin_scale: float


class PointerTarget:
    """
    Element that can capture a pointer.

    While captured, move and up events for that pointer are delivered to
    the target regardless of cursor position. The default implementation
    only tracks which pointer is held.
    """

    def __init__(self):
        self.captured_pointer: Optional[int] = None

    def set_pointer_capture(self, pointer_id: int) -> None:
        self.captured_pointer = pointer_id

    def release_pointer_capture(self, pointer_id: int) -> None:
        if self.captured_pointer == pointer_id:
            self.captured_pointer = None


# =============================================================================
# CONTROLLER
# =============================================================================

class ScaleDragController:
    """
    Drag-to-scale controller bound to one ScaleStore.

    GUARANTEES:
    ===========
    1. At most one store write per frame, carrying the latest candidate
    2. Events for pointers other than the captured one are ignored
    3. No snapping or easing on release
    """

    def __init__(
        self,
        store: ScaleStore,
        scheduler: Optional[FrameScheduler] = None,
        target: Optional[PointerTarget] = None,
        pixels_per_unit: float = DEFAULT_PIXELS_PER_UNIT
    ):
        if pixels_per_unit <= 0:
            raise ValueError("pixels_per_unit must be positive")
        self._store = store
        self._scheduler = scheduler or ManualFrameScheduler()
        self._target = target or PointerTarget()
        self._pixels_per_unit = pixels_per_unit

        self._phase = DragPhase.IDLE
        self._origin: Optional[DragOrigin] = None
        self._pending_scale: Optional[float] = None
        self._frame_requested = False

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def is_dragging(self) -> bool:
        return self._phase == DragPhase.DRAGGING

    @property
    def origin(self) -> Optional[DragOrigin]:
        return self._origin

    @property
    def pending_scale(self) -> Optional[float]:
        """Candidate waiting for the next frame, before clamping."""
        return self._pending_scale

    @property
    def can_reset(self) -> bool:
        return self._store.can_reset

    def candidate_scale(self, client_x: float) -> float:
        """Unclamped scale the drag implies at ``client_x``."""
        if self._origin is None:
            raise RuntimeError("No drag in progress")
        delta = client_x - self._origin.origin_x
        return self._origin.origin_scale + delta / self._pixels_per_unit

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> bool:
        """Start a drag. Returns False if one is already running."""
        if self._phase == DragPhase.DRAGGING:
            return False
        self._target.set_pointer_capture(event.pointer_id)
        self._origin = DragOrigin(
            pointer_id=event.pointer_id,
            origin_x=event.client_x,
            origin_scale=self._store.scale
        )
        self._phase = DragPhase.DRAGGING
        logger.debug("scale drag started at x=%s scale=%s", event.client_x, self._store.scale)
        return True

    def pointer_move(self, event: PointerEvent) -> Optional[float]:
        """Record a move; returns the pending candidate, or None if ignored."""
        if not self._owns(event):
            return None
        self._pending_scale = self.candidate_scale(event.client_x)
        if not self._frame_requested:
            self._frame_requested = True
            self._scheduler.request_frame(self._flush)
        return self._pending_scale

    def pointer_up(self, event: PointerEvent) -> bool:
        """End the drag. Returns False if the event did not belong to it."""
        if not self._owns(event):
            return False
        self._target.release_pointer_capture(event.pointer_id)
        self._origin = None
        self._phase = DragPhase.IDLE
        logger.debug("scale drag ended at scale=%s", self._store.scale)
        return True

    pointer_cancel = pointer_up

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def reset(self) -> bool:
        """
        Back to the default scale; no-op when already there.

        Drops any candidate still waiting for a frame, so a drag that
        ended just before the reset cannot overwrite it.
        """
        self._pending_scale = None
        return self._store.reset()

    def _owns(self, event: PointerEvent) -> bool:
        return (
            self._phase == DragPhase.DRAGGING
            and self._origin is not None
            and self._origin.pointer_id == event.pointer_id
        )

    def _flush(self):
        self._frame_requested = False
        value, self._pending_scale = self._pending_scale, None
        if value is not None:
            self._store.set_scale(value)
