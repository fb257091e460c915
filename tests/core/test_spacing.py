from __future__ import annotations

import math

import numpy as np
import pytest

from infinigrid.core.spacing import (
    SPACING_BAND_MAX_PX,
    SPACING_BAND_MIN_PX,
    compute_spacing_multiplier,
    spacing_function,
    stabilize_spacing_multiplier,
)


def test_compute_halves_when_rendered_gap_is_too_large() -> None:
    # 40 * 10 * 1 = 400 >= 256
    assert compute_spacing_multiplier(10.0, 40.0, 1.0) == pytest.approx(128.0 / 400.0)


def test_compute_doubles_when_rendered_gap_is_too_small() -> None:
    # 40 * 1 * 1 = 40 <= 128
    assert compute_spacing_multiplier(1.0, 40.0, 1.0) == pytest.approx(256.0 / 40.0)


def test_compute_keeps_multiplier_inside_band() -> None:
    # 40 * 4 * 1 = 160
    assert compute_spacing_multiplier(4.0, 40.0, 1.0) == 1.0
    assert compute_spacing_multiplier(1.0, 40.0, 5.0) == 5.0


def test_compute_band_edges_trigger_the_rule() -> None:
    # 64 * 4 = 256 ちょうど → 下端へ、32 * 4 = 128 ちょうど → 上端へ。
    assert compute_spacing_multiplier(4.0, 64.0, 1.0) == 0.5
    assert compute_spacing_multiplier(4.0, 32.0, 1.0) == 2.0


@pytest.mark.parametrize("scale", np.geomspace(1e-3, 1e3, 37).tolist())
def test_single_step_lands_on_closed_band(scale: float) -> None:
    m = compute_spacing_multiplier(scale, 40.0, 1.0)
    rendered = 40.0 * scale * m
    assert SPACING_BAND_MIN_PX - 1e-9 <= rendered <= SPACING_BAND_MAX_PX + 1e-9


def test_single_step_alternates_between_band_edges_when_reapplied() -> None:
    """規則は帯の端を再トリガーするので、同じ scale で再適用すると 128 と 256 を行き来する。"""
    m1 = compute_spacing_multiplier(1.0, 64.0, 1.0)
    m2 = compute_spacing_multiplier(1.0, 64.0, m1)
    m3 = compute_spacing_multiplier(1.0, 64.0, m2)

    assert 64.0 * m1 == 256.0
    assert 64.0 * m2 == 128.0
    assert m3 == m1


@pytest.mark.parametrize("scale", np.geomspace(1e-4, 1e4, 41).tolist())
@pytest.mark.parametrize("current", [1.0, 0.001, 37.0])
def test_stabilize_lands_inside_half_open_band(scale: float, current: float) -> None:
    m = stabilize_spacing_multiplier(scale, 40.0, current)
    rendered = 40.0 * scale * m
    assert SPACING_BAND_MIN_PX <= rendered < SPACING_BAND_MAX_PX


@pytest.mark.parametrize("scale", [0.01, 0.5, 3.3, 250.0])
def test_stabilize_is_idempotent(scale: float) -> None:
    m = stabilize_spacing_multiplier(scale, 40.0, 1.0)
    assert stabilize_spacing_multiplier(scale, 40.0, m) == m


def test_stabilize_keeps_power_of_two_steps() -> None:
    m = stabilize_spacing_multiplier(100.0, 40.0, 1.0)
    assert math.log2(m) == pytest.approx(round(math.log2(m)))


@pytest.mark.parametrize("fn", [compute_spacing_multiplier, stabilize_spacing_multiplier])
@pytest.mark.parametrize(
    "scale, base",
    [(0.0, 40.0), (-1.0, 40.0), (math.nan, 40.0), (1.0, math.inf)],
)
def test_invalid_inputs_keep_current_multiplier(fn, scale: float, base: float) -> None:
    assert fn(scale, base, 3.0) == 3.0


def test_spacing_function_resolves_policies() -> None:
    assert spacing_function("single_step") is compute_spacing_multiplier
    assert spacing_function("converge") is stabilize_spacing_multiplier
    with pytest.raises(ValueError):
        spacing_function("nope")
