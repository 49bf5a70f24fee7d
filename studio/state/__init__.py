"""
Shared Application State

Small mutable slices read and written by view collaborators.
Each slice is owned by one StudioClient; there are no module-level
instances.
"""

from .scale import (
    MIN_SCALE, MAX_SCALE, DEFAULT_SCALE, ScaleBounds, ScaleStore, ScaleListener
)
from .selection import SelectionStore, SelectionListener

__all__ = [
    'MIN_SCALE', 'MAX_SCALE', 'DEFAULT_SCALE', 'ScaleBounds', 'ScaleStore', 'ScaleListener',
    'SelectionStore', 'SelectionListener',
]
