# どこで: `src/infinigrid/core/spacing.py`。
# 何を: scale に応じた LOD 倍率（spacing multiplier）を計算する。
# なぜ: ズームしても主グリッドの描画間隔を一定のピクセル帯に収め、線の密集/疎化を防ぐため。

"""主グリッド間隔の LOD 規則。

描画間隔 `base_line_spacing * scale * multiplier` を半開区間 `[128, 256)` px に収める。

2 つのポリシーを提供する:

- `single_step`（既定）: 1 回だけ規則を評価する。帯の外にある間隔は帯の端（128 または 256）へ
  スナップされる。規則は帯の端自体を再トリガーするため、繰り返し適用しても収束しない
  （256 → 128 → 256 ...）。よって呼び出しごとに 1 回の評価を正とする。
- `converge`: 現在の倍率を 2 倍 / 1/2 倍して帯の内側に入れる。冪等。
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Literal

SPACING_BAND_MIN_PX = 128.0
SPACING_BAND_MAX_PX = 256.0

SpacingPolicy = Literal["single_step", "converge"]
SPACING_POLICIES: tuple[str, ...] = ("single_step", "converge")

# converge の反復上限。倍率が float の範囲を外れる前に打ち切る。
_MAX_CONVERGE_STEPS = 2048


def compute_spacing_multiplier(
    scale: float,
    base_line_spacing: float,
    current_multiplier: float,
) -> float:
    """LOD 規則を 1 回評価して新しい spacing multiplier を返す。

    Parameters
    ----------
    scale : float
        現在のズーム倍率。
    base_line_spacing : float
        素の線間隔 [px]。
    current_multiplier : float
        現在の spacing multiplier。

    Returns
    -------
    float
        - 描画間隔 >= 256 なら `128 / (base_line_spacing * scale)`
        - 描画間隔 <= 128 なら `256 / (base_line_spacing * scale)`
        - それ以外は `current_multiplier`

    Notes
    -----
    入力が非有限、または `base_line_spacing * scale <= 0` の場合は `current_multiplier` をそのまま返す。
    """

    unscaled = float(base_line_spacing) * float(scale)
    if not math.isfinite(unscaled) or unscaled <= 0.0:
        return current_multiplier
    if not math.isfinite(current_multiplier):
        return current_multiplier

    rendered = unscaled * float(current_multiplier)
    if rendered >= SPACING_BAND_MAX_PX:
        return SPACING_BAND_MIN_PX / unscaled
    if rendered <= SPACING_BAND_MIN_PX:
        return SPACING_BAND_MAX_PX / unscaled
    return current_multiplier


def stabilize_spacing_multiplier(
    scale: float,
    base_line_spacing: float,
    current_multiplier: float,
) -> float:
    """倍率を 2 の冪で補正し、描画間隔を `[128, 256)` に収めた値を返す。

    大きな scale ジャンプの後でも 1 回の呼び出しで帯の内側に入り、
    同じ scale で再適用しても値は変わらない。
    """

    unscaled = float(base_line_spacing) * float(scale)
    multiplier = float(current_multiplier)
    if not math.isfinite(unscaled) or unscaled <= 0.0:
        return current_multiplier
    if not math.isfinite(multiplier) or multiplier <= 0.0:
        # 倍率が壊れている場合は 1 から始め直す。
        multiplier = 1.0

    for _ in range(_MAX_CONVERGE_STEPS):
        rendered = unscaled * multiplier
        if rendered >= SPACING_BAND_MAX_PX:
            multiplier *= 0.5
        elif rendered < SPACING_BAND_MIN_PX:
            multiplier *= 2.0
        else:
            return multiplier
    return current_multiplier


def spacing_function(policy: str) -> Callable[[float, float, float], float]:
    """ポリシー名から倍率計算関数を返す。

    Raises
    ------
    ValueError
        未知のポリシー名の場合。
    """

    if policy == "single_step":
        return compute_spacing_multiplier
    if policy == "converge":
        return stabilize_spacing_multiplier
    raise ValueError(f"未知の spacing policy です: got={policy!r} (choices={SPACING_POLICIES})")


__all__ = [
    "SPACING_BAND_MAX_PX",
    "SPACING_BAND_MIN_PX",
    "SPACING_POLICIES",
    "SpacingPolicy",
    "compute_spacing_multiplier",
    "spacing_function",
    "stabilize_spacing_multiplier",
]
