from __future__ import annotations

import numpy as np
import pytest

from infinigrid.core.realized_geometry import (
    RealizedGeometry,
    concat_realized_geometries,
    empty_realized_geometry,
    segments_geometry,
)


def test_segments_geometry_interleaves_start_and_end() -> None:
    g = segments_geometry(
        np.array([[0.0, 0.0], [5.0, 1.0]]),
        np.array([[0.0, 10.0], [5.0, 9.0]]),
    )

    assert g.coords.dtype == np.float32
    assert g.offsets.dtype == np.int32
    assert g.offsets.tolist() == [0, 2, 4]
    np.testing.assert_array_equal(
        g.coords,
        np.array(
            [[0.0, 0.0, 0.0], [0.0, 10.0, 0.0], [5.0, 1.0, 0.0], [5.0, 9.0, 0.0]],
            dtype=np.float32,
        ),
    )


def test_segments_geometry_rejects_mismatched_shapes() -> None:
    with pytest.raises(ValueError):
        segments_geometry(np.zeros((2, 2)), np.zeros((3, 2)))


def test_empty_geometry_has_no_lines() -> None:
    g = empty_realized_geometry()
    assert g.is_empty
    assert g.coords.shape == (0, 3)
    assert g.offsets.tolist() == [0]
    assert segments_geometry(np.zeros((0, 2)), np.zeros((0, 2))).is_empty


def test_arrays_are_read_only() -> None:
    g = segments_geometry(np.zeros((1, 2)), np.ones((1, 2)))
    with pytest.raises(ValueError):
        g.coords[0, 0] = 1.0


@pytest.mark.parametrize(
    "coords, offsets",
    [
        (np.zeros((2, 4)), np.array([0, 2])),
        (np.zeros((2, 3)), np.array([1, 2])),
        (np.zeros((2, 3)), np.array([0, 3])),
        (np.zeros((4, 3)), np.array([0, 3, 2, 4])),
        (np.zeros((0, 3)), np.array([], dtype=np.int32)),
    ],
)
def test_invalid_arrays_are_rejected(coords: np.ndarray, offsets: np.ndarray) -> None:
    with pytest.raises(ValueError):
        RealizedGeometry(coords=coords, offsets=offsets)


def test_concat_shifts_offsets() -> None:
    a = segments_geometry(np.zeros((1, 2)), np.ones((1, 2)))
    b = segments_geometry(np.zeros((2, 2)), np.ones((2, 2)))

    out = concat_realized_geometries(a, empty_realized_geometry(), b)

    assert out.n_lines == 3
    assert out.offsets.tolist() == [0, 2, 4, 6]
    assert concat_realized_geometries().is_empty
