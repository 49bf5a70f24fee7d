"""
Scale Store Tests

The stored scale never leaves its bounds, whoever writes it.
"""

import pytest
from hypothesis import given, strategies as st

from studio.state import DEFAULT_SCALE, MAX_SCALE, MIN_SCALE, ScaleBounds, ScaleStore


class TestScaleStore:
    """Clamping, reset and change notification."""

    def test_defaults(self):
        store = ScaleStore()
        assert (MIN_SCALE, MAX_SCALE, DEFAULT_SCALE) == (0.5, 1.5, 1.0)
        assert store.scale == DEFAULT_SCALE
        assert store.percentage == 100
        assert not store.can_reset

    @given(value=st.floats(allow_nan=False, allow_infinity=False, min_value=-1e6, max_value=1e6))
    def test_scale_always_within_bounds(self, value):
        store = ScaleStore()
        stored = store.set_scale(value)
        assert MIN_SCALE <= stored <= MAX_SCALE
        assert stored == store.scale

    def test_percentage_rounds(self):
        store = ScaleStore()
        store.set_scale(1.257)
        assert store.percentage == 126

    def test_listener_called_only_on_change(self):
        store = ScaleStore()
        seen = []
        store.subscribe(seen.append)

        store.set_scale(1.2)
        store.set_scale(1.2)
        store.set_scale(9.0)
        store.set_scale(9.0)

        assert seen == [1.2, 1.5]

    def test_unsubscribe(self):
        store = ScaleStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        store.set_scale(1.2)

        assert seen == []

    def test_reset_is_noop_at_default(self):
        store = ScaleStore()
        assert not store.reset()
        store.set_scale(0.7)
        assert store.reset()
        assert store.scale == DEFAULT_SCALE


class TestScaleBounds:
    """Bounds are validated on construction."""

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            ScaleBounds(min_scale=2.0, max_scale=1.0, default_scale=1.5)

    def test_default_outside_range_rejected(self):
        with pytest.raises(ValueError):
            ScaleBounds(min_scale=0.5, max_scale=1.5, default_scale=2.0)

    def test_clamp(self):
        bounds = ScaleBounds()
        assert bounds.clamp(0.1) == 0.5
        assert bounds.clamp(1.1) == 1.1
        assert bounds.clamp(4.0) == 1.5
