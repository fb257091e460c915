# どこで: `src/infinigrid/core/grid_state.py`。
# 何を: 無限グリッド 1 ビュー分の変換状態（scale / translation / viewport / LOD 倍率）を保持する。
# なぜ: pan/zoom/resize の書き込み先と、描画側の読み取り元を 1 つの明示的な状態に揃えるため。

"""グリッドの変換状態とその不変条件。

状態はビューごとに 1 つ作り、各操作（`apply_pan` / `apply_zoom` / 描画生成）へ
明示的に渡す。モジュールグローバルな状態は持たない。

不変条件
--------
- `scale > 0`（生成時 1.0。zoom のコミット時にのみ更新）
- `translation` は常に有限
- `viewport_size` は `(0, 0)`（未初期化）か、両成分有限かつ面積 1 以上
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

Vec2 = tuple[float, float]
"""(x, y) の 2 成分ベクトル。Vector2 / Point2 / Size2 の兼用。"""

# グリッド線の素の間隔 [px]（base_scale_factor=1 のとき）。
BASE_LINE_SPACING_PX = 40.0


def is_finite_vec2(value: Vec2) -> bool:
    """2 成分とも有限なら True を返す。"""
    return math.isfinite(value[0]) and math.isfinite(value[1])


class GridFrame(Protocol):
    """グリッド線生成が読み取る属性の集合。

    `GridState`（可変）と `GridSnapshot`（不変）の両方がこれを満たす。
    """

    @property
    def scale(self) -> float: ...

    @property
    def translation(self) -> Vec2: ...

    @property
    def viewport_size(self) -> Vec2: ...

    @property
    def base_line_spacing(self) -> float: ...

    @property
    def spacing_multiplier(self) -> float: ...


@dataclass(frozen=True, slots=True)
class GridSnapshot:
    """ある時点のグリッド状態の不変コピー。

    描画側は 1 フレームにつき 1 回これを取得して読む。
    """

    scale: float
    translation: Vec2
    viewport_size: Vec2
    base_line_spacing: float
    spacing_multiplier: float
    last_interaction_point: Vec2 = (0.0, 0.0)


@dataclass(slots=True)
class GridState:
    """無限グリッドの可変な変換状態。

    Attributes
    ----------
    scale:
        グリッド単位 → スクリーン px の一様ズーム倍率。
    translation:
        viewport 中心から見たグリッド論理原点のオフセット。
    viewport_size:
        最後に受け取った viewport サイズ (w, h) [px]。
    base_line_spacing:
        `40 * base_scale_factor`。生成後は変更しない。
    spacing_multiplier:
        scale に重ねる LOD 倍率。
    min_allowed_gap, max_allowed_gap:
        `scale * base_line_spacing` の許容範囲（描画間隔そのものではない）。
    last_interaction_point:
        最後の zoom の焦点。観測用で、計算には戻らない。
    """

    base_line_spacing: float
    min_allowed_gap: float
    max_allowed_gap: float
    scale: float = 1.0
    translation: Vec2 = (0.0, 0.0)
    viewport_size: Vec2 = (0.0, 0.0)
    spacing_multiplier: float = 1.0
    last_interaction_point: Vec2 = (0.0, 0.0)

    @classmethod
    def create(
        cls,
        base_scale_factor: float = 1.0,
        *,
        min_allowed_gap: float,
        max_allowed_gap: float,
    ) -> "GridState":
        """生成時定数を検証して GridState を作る。

        Parameters
        ----------
        base_scale_factor : float, default 1.0
            素の線間隔 40px に掛ける倍率。
        min_allowed_gap : float
            `scale * base_line_spacing` の下限。
        max_allowed_gap : float
            `scale * base_line_spacing` の上限。

        Raises
        ------
        ValueError
            定数が有限でない / 範囲が不正な場合。
        """

        factor = float(base_scale_factor)
        if not math.isfinite(factor) or factor <= 0.0:
            raise ValueError(f"base_scale_factor は正の有限値である必要がある: got={base_scale_factor!r}")

        lo = float(min_allowed_gap)
        hi = float(max_allowed_gap)
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise ValueError(
                f"min_allowed_gap / max_allowed_gap は有限値である必要がある: got=({lo}, {hi})"
            )
        if lo <= 0.0:
            raise ValueError(f"min_allowed_gap は正の値である必要がある: got={lo}")
        if lo > hi:
            raise ValueError(f"min_allowed_gap は max_allowed_gap 以下である必要がある: got=({lo}, {hi})")

        return cls(
            base_line_spacing=BASE_LINE_SPACING_PX * factor,
            min_allowed_gap=lo,
            max_allowed_gap=hi,
        )

    def set_viewport_size(self, size: Vec2) -> bool:
        """viewport サイズを更新する。

        非有限値や面積 1 未満は黙って無視し、直前の値を保持する。
        受理した場合は True を返す。
        """

        width, height = float(size[0]), float(size[1])
        if not (math.isfinite(width) and math.isfinite(height)):
            return False
        if width < 0.0 or height < 0.0:
            return False
        if width * height < 1.0:
            return False
        self.viewport_size = (width, height)
        return True

    def snapshot(self) -> GridSnapshot:
        """現在値の不変コピーを返す。"""
        return GridSnapshot(
            scale=float(self.scale),
            translation=(float(self.translation[0]), float(self.translation[1])),
            viewport_size=(float(self.viewport_size[0]), float(self.viewport_size[1])),
            base_line_spacing=float(self.base_line_spacing),
            spacing_multiplier=float(self.spacing_multiplier),
            last_interaction_point=(
                float(self.last_interaction_point[0]),
                float(self.last_interaction_point[1]),
            ),
        )


__all__ = [
    "BASE_LINE_SPACING_PX",
    "GridFrame",
    "GridSnapshot",
    "GridState",
    "Vec2",
    "is_finite_vec2",
]
