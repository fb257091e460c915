"""
どこで: `src/infinigrid/core/grid_geometry.py`。グリッド線ジオメトリの生成。
何を: GridState（または GridSnapshot）から主グリッド（+原点マーカー）と 1/5 副グリッドの線分を構築する。
なぜ: 描画面に依存しない純関数として、任意の描画バックエンドへ同じ線分を渡せるようにするため。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from infinigrid.core.grid_state import GridFrame, Vec2
from infinigrid.core.realized_geometry import (
    RealizedGeometry,
    concat_realized_geometries,
    empty_realized_geometry,
    segments_geometry,
)

_logger = logging.getLogger(__name__)

ORIGIN_MARKER_RADIUS_PX = 5.0
MINOR_SUBDIVISIONS = 5

# 1 軸あたりの線本数の上限。壊れた状態（極小 spacing）でフレームが止まるのを防ぐ。
_MAX_LINES_PER_AXIS = 100_000


@dataclass(frozen=True, slots=True)
class LineSegment:
    """スクリーン座標の線分。"""

    start: Vec2
    end: Vec2


@dataclass(frozen=True, slots=True)
class Circle:
    """スクリーン座標の円（原点マーカー）。"""

    center: Vec2
    radius: float

    def to_polyline(self, segments: int = 32) -> RealizedGeometry:
        """円を閉ポリラインへ離散化する。

        Parameters
        ----------
        segments : int, default 32
            分割数。3 未満は 3 にクランプする。

        Returns
        -------
        RealizedGeometry
            開始点を終端に重ねた 1 本の閉ポリライン。
        """
        n = max(3, int(segments))
        angles = np.linspace(0.0, 2.0 * math.pi, num=n, endpoint=False, dtype=np.float64)
        cx, cy = float(self.center[0]), float(self.center[1])
        r = float(self.radius)
        xy = np.stack([cx + r * np.cos(angles), cy + r * np.sin(angles)], axis=1)
        # 先頭頂点を終端に複製してポリラインを閉じる。
        xy = np.concatenate([xy, xy[:1]], axis=0)
        offsets = np.array([0, xy.shape[0]], dtype=np.int32)
        return RealizedGeometry(coords=xy.astype(np.float32), offsets=offsets)


@dataclass(frozen=True, slots=True)
class GridLines:
    """1 つのグリッド（主 or 副）の線分集合。

    Parameters
    ----------
    vertical : RealizedGeometry
        縦線（2 点ポリライン）の集合。中心に近い順。
    horizontal : RealizedGeometry
        横線（2 点ポリライン）の集合。中心に近い順。
    spacing : float
        隣接線の間隔 [px]。空のときは 0。
    origin_marker : Circle or None
        主グリッドのみ持つ原点マーカー。
    """

    vertical: RealizedGeometry
    horizontal: RealizedGeometry
    spacing: float = 0.0
    origin_marker: Circle | None = None

    @property
    def n_lines(self) -> int:
        return self.vertical.n_lines + self.horizontal.n_lines

    @property
    def is_empty(self) -> bool:
        return self.n_lines == 0 and self.origin_marker is None

    def segments(self) -> tuple[LineSegment, ...]:
        """縦線 → 横線の順に LineSegment 列を返す。"""
        out: list[LineSegment] = []
        for geom in (self.vertical, self.horizontal):
            coords = geom.coords
            for i in range(geom.n_lines):
                a = coords[2 * i]
                b = coords[2 * i + 1]
                out.append(
                    LineSegment(
                        start=(float(a[0]), float(a[1])),
                        end=(float(b[0]), float(b[1])),
                    )
                )
        return tuple(out)

    def combined(self) -> RealizedGeometry:
        """縦線と横線を 1 つの RealizedGeometry に連結して返す。"""
        return concat_realized_geometries(self.vertical, self.horizontal)


@dataclass(frozen=True, slots=True)
class GridGeometry:
    """描画側へ渡す 1 フレーム分のグリッドジオメトリ。"""

    major: GridLines
    minor: GridLines

    @property
    def major_lines(self) -> tuple[LineSegment, ...]:
        return self.major.segments()

    @property
    def minor_lines(self) -> tuple[LineSegment, ...]:
        return self.minor.segments()

    @property
    def origin_marker(self) -> Circle | None:
        return self.major.origin_marker

    @property
    def is_empty(self) -> bool:
        return self.major.is_empty and self.minor.is_empty


def empty_grid_lines() -> GridLines:
    """線もマーカーも持たない GridLines を返す。"""
    return GridLines(vertical=empty_realized_geometry(), horizontal=empty_realized_geometry())


def _axis_positions(center: float, spacing: float, extent: float) -> np.ndarray:
    """1 軸上の線位置を中心に近い順で返す。

    - 中心側: `center - k*spacing`（k=0,1,...）のうち `0 <= x <= extent`
    - 反対側: `center + k*spacing`（k=1,2,...）のうち `0 <= x < extent`

    中心が viewport 外にある場合でも、viewport 外の線は含めない。
    """

    parts: list[np.ndarray] = []

    if center >= 0.0:
        k_hi = int(math.floor(center / spacing)) + 1
        k_lo = 0
        if center > extent:
            k_lo = max(0, int(math.floor((center - extent) / spacing)) - 1)
        ks = np.arange(k_lo, k_hi + 1, dtype=np.float64)
        xs = center - ks * spacing
        parts.append(xs[(xs >= 0.0) & (xs <= extent)])

    if center < extent:
        k_lo = 1
        if center < 0.0:
            k_lo = max(1, int(math.ceil(-center / spacing)) - 1)
        k_hi = int(math.ceil((extent - center) / spacing)) + 1
        ks = np.arange(k_lo, k_hi + 1, dtype=np.float64)
        xs = center + ks * spacing
        parts.append(xs[(xs >= 0.0) & (xs < extent)])

    if not parts:
        return np.zeros((0,), dtype=np.float64)
    return np.concatenate(parts)


def _generate_lines(
    state: GridFrame,
    *,
    spacing_divisor: float,
    with_origin_marker: bool,
) -> GridLines:
    scale = float(state.scale)
    if not (scale > 0.0):
        return empty_grid_lines()

    spacing = (
        float(state.base_line_spacing) * scale * float(state.spacing_multiplier) / spacing_divisor
    )
    width, height = float(state.viewport_size[0]), float(state.viewport_size[1])
    tx, ty = float(state.translation[0]), float(state.translation[1])
    center_x = width / 2.0 + tx
    center_y = height / 2.0 + ty

    if not all(math.isfinite(v) for v in (spacing, center_x, center_y, width, height)):
        _logger.debug("グリッド生成をスキップ: 非有限の値 spacing=%r center=(%r, %r)", spacing, center_x, center_y)
        return empty_grid_lines()
    if spacing <= 0.0:
        _logger.debug("グリッド生成をスキップ: spacing=%r", spacing)
        return empty_grid_lines()

    marker = (
        Circle(center=(center_x, center_y), radius=ORIGIN_MARKER_RADIUS_PX)
        if with_origin_marker
        else None
    )

    if width <= 0.0 or height <= 0.0:
        # viewport 未初期化。線を置く範囲が無い。
        return GridLines(
            vertical=empty_realized_geometry(),
            horizontal=empty_realized_geometry(),
            spacing=spacing,
            origin_marker=marker,
        )

    if max(width, height) / spacing > _MAX_LINES_PER_AXIS:
        _logger.warning(
            "グリッド線が多すぎるため省略しました: spacing=%.6g viewport=(%.6g, %.6g)",
            spacing,
            width,
            height,
        )
        return GridLines(
            vertical=empty_realized_geometry(),
            horizontal=empty_realized_geometry(),
            spacing=spacing,
            origin_marker=marker,
        )

    xs = _axis_positions(center_x, spacing, width)
    ys = _axis_positions(center_y, spacing, height)

    # 縦線は viewport の全高、横線は全幅にわたる。
    vertical = segments_geometry(
        np.stack([xs, np.zeros_like(xs)], axis=1),
        np.stack([xs, np.full_like(xs, height)], axis=1),
    )
    horizontal = segments_geometry(
        np.stack([np.zeros_like(ys), ys], axis=1),
        np.stack([np.full_like(ys, width), ys], axis=1),
    )
    return GridLines(
        vertical=vertical,
        horizontal=horizontal,
        spacing=spacing,
        origin_marker=marker,
    )


def generate_major_grid(state: GridFrame) -> GridLines:
    """主グリッドの線分と原点マーカーを生成する。

    Parameters
    ----------
    state : GridFrame
        `GridState` または `GridSnapshot`。読み取りのみ。

    Returns
    -------
    GridLines
        間隔 `base_line_spacing * scale * spacing_multiplier` の縦横線と、
        論理原点（`viewport/2 + translation`）に置いた半径 5 の円。
        `scale <= 0` の場合は空。
    """
    return _generate_lines(state, spacing_divisor=1.0, with_origin_marker=True)


def generate_minor_grid(state: GridFrame) -> GridLines:
    """副グリッド（主グリッド 1 マスを 5 分割）の線分を生成する。原点マーカーは持たない。"""
    return _generate_lines(
        state,
        spacing_divisor=float(MINOR_SUBDIVISIONS),
        with_origin_marker=False,
    )


def generate_grid(state: GridFrame) -> GridGeometry:
    """主グリッドと副グリッドをまとめて生成する。"""
    return GridGeometry(major=generate_major_grid(state), minor=generate_minor_grid(state))


__all__ = [
    "Circle",
    "GridGeometry",
    "GridLines",
    "LineSegment",
    "MINOR_SUBDIVISIONS",
    "ORIGIN_MARKER_RADIUS_PX",
    "empty_grid_lines",
    "generate_grid",
    "generate_major_grid",
    "generate_minor_grid",
]
