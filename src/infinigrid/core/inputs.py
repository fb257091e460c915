"""ジェスチャ/入力層から受け取る入力イベントの型。"""

from __future__ import annotations

from dataclasses import dataclass

from infinigrid.core.grid_state import Vec2


@dataclass(frozen=True, slots=True)
class PanInput:
    """スクリーン px 単位のドラッグ量。"""

    dx: float
    dy: float

    @property
    def delta(self) -> Vec2:
        return (float(self.dx), float(self.dy))


@dataclass(frozen=True, slots=True)
class ZoomInput:
    """ズーム倍率とスクリーン座標の焦点。"""

    multiplier: float
    focal_point: Vec2


@dataclass(frozen=True, slots=True)
class ViewportResize:
    """viewport の新しいサイズ [px]。"""

    width: float
    height: float

    @property
    def size(self) -> Vec2:
        return (float(self.width), float(self.height))


GridInput = PanInput | ZoomInput | ViewportResize


__all__ = ["GridInput", "PanInput", "ViewportResize", "ZoomInput"]
