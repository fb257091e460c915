from __future__ import annotations

import numpy as np
import pytest

from infinigrid.core.grid_state import GridSnapshot
from infinigrid.interactive.transition import ViewTransition, ease_in


def _snap(scale: float, translation: tuple[float, float], multiplier: float = 1.0) -> GridSnapshot:
    return GridSnapshot(
        scale=scale,
        translation=translation,
        viewport_size=(800.0, 600.0),
        base_line_spacing=40.0,
        spacing_multiplier=multiplier,
    )


def test_ease_in_endpoints_and_clamping() -> None:
    assert ease_in(0.0) == 0.0
    assert ease_in(1.0) == 1.0
    assert ease_in(-3.0) == 0.0
    assert ease_in(7.0) == 1.0


def test_ease_in_is_monotonic_and_starts_slow() -> None:
    ts = np.linspace(0.0, 1.0, 101)
    values = [ease_in(float(t)) for t in ts]

    assert all(b >= a for a, b in zip(values, values[1:]))
    assert ease_in(0.5) < 0.5
    assert ease_in(0.1) < 0.1


def test_sample_interpolates_between_start_and_end() -> None:
    tr = ViewTransition(
        start=_snap(1.0, (0.0, 0.0), 6.4),
        end=_snap(2.0, (-200.0, -150.0), 1.6),
        start_time=10.0,
        duration=0.8,
    )

    assert tr.sample(10.0).scale == pytest.approx(1.0)
    assert tr.sample(10.0).translation == pytest.approx((0.0, 0.0))

    mid = tr.sample(10.4)
    assert 1.0 < mid.scale < 2.0
    assert -200.0 < mid.translation[0] < 0.0
    assert 1.6 < mid.spacing_multiplier < 6.4

    assert tr.sample(10.8) is tr.end
    assert tr.sample(99.0) is tr.end
    assert tr.is_finished(10.8)
    assert not tr.is_finished(10.79)


def test_zero_duration_jumps_to_end() -> None:
    tr = ViewTransition(start=_snap(1.0, (0.0, 0.0)), end=_snap(3.0, (1.0, 1.0)), start_time=0.0, duration=0.0)
    assert tr.progress(0.0) == 1.0
    assert tr.sample(0.0) is tr.end
