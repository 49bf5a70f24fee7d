"""
UI Scale State

Single mutable cell holding the interface zoom factor.

INVARIANT: scale is always within [min_scale, max_scale].
The setter clamps, so the invariant holds whoever writes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional


MIN_SCALE = 0.5
MAX_SCALE = 1.5
DEFAULT_SCALE = 1.0

ScaleListener = Callable[[float], None]


@dataclass(frozen=True)
class ScaleBounds:
    """Allowed range and default for the UI scale."""
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    default_scale: float = DEFAULT_SCALE

    def __post_init__(self):
        if self.min_scale > self.max_scale:
            raise ValueError(f"min_scale {self.min_scale} exceeds max_scale {self.max_scale}")
        if not self.min_scale <= self.default_scale <= self.max_scale:
            raise ValueError(f"default_scale {self.default_scale} is outside [{self.min_scale}, {self.max_scale}]")

    def clamp(self, value: float) -> float:
        return max(self.min_scale, min(self.max_scale, value))


class ScaleStore:
    """
    Shared UI scale slice.

    Listeners receive the new value and are only called when it actually
    changes, so a reset at the default is observably a no-op.
    """

    def __init__(self, bounds: Optional[ScaleBounds] = None):
        self._bounds = bounds or ScaleBounds()
        self._scale = self._bounds.default_scale
        self._listeners: List[ScaleListener] = []

    @property
    def bounds(self) -> ScaleBounds:
        return self._bounds

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def percentage(self) -> int:
        """Scale as a whole percentage, e.g. 1.25 -> 125."""
        return round(self._scale * 100)

    @property
    def can_reset(self) -> bool:
        return self._scale != self._bounds.default_scale

    def set_scale(self, value: float) -> float:
        """Store ``value`` clamped to bounds; returns the stored value."""
        self._apply(self._bounds.clamp(value))
        return self._scale

    def reset(self) -> bool:
        """Restore the default. Returns False (and notifies nobody) if already there."""
        if not self.can_reset:
            return False
        self._apply(self._bounds.default_scale)
        return True

    def subscribe(self, listener: ScaleListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _apply(self, value: float):
        if value == self._scale:
            return
        self._scale = value
        for listener in list(self._listeners):
            listener(value)
