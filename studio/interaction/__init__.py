"""
Interaction Layer

Continuous-input controllers that turn pointer gestures into shared state
writes, coalesced to one write per frame.
"""

from .frames import FrameScheduler, AsyncioFrameScheduler, ManualFrameScheduler, FrameCallback
from .scale_drag import (
    DragPhase, PointerEvent, DragOrigin, PointerTarget, ScaleDragController,
    DEFAULT_PIXELS_PER_UNIT
)

__all__ = [
    'FrameScheduler', 'AsyncioFrameScheduler', 'ManualFrameScheduler', 'FrameCallback',
    'DragPhase', 'PointerEvent', 'DragOrigin', 'PointerTarget', 'ScaleDragController',
    'DEFAULT_PIXELS_PER_UNIT',
]
