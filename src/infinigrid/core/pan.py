"""スクリーン空間のドラッグ量をグリッドの translation へ反映する。"""

from __future__ import annotations

import logging
import math

from infinigrid.core.grid_state import GridState, Vec2, is_finite_vec2

_logger = logging.getLogger(__name__)


def apply_pan(state: GridState, delta: Vec2) -> None:
    """`translation += delta / scale` を適用する。

    Parameters
    ----------
    state : GridState
        更新対象の状態。
    delta : tuple[float, float]
        スクリーン px 単位のドラッグ量 (dx, dy)。

    Notes
    -----
    非有限の入力、`scale <= 0`、結果が非有限になる場合は何もしない（例外も出さない）。
    """

    dx, dy = float(delta[0]), float(delta[1])
    if not (math.isfinite(dx) and math.isfinite(dy)):
        _logger.debug("pan を破棄: 非有限の delta=%r", delta)
        return

    scale = float(state.scale)
    if not math.isfinite(scale) or scale <= 0.0:
        _logger.debug("pan を破棄: scale=%r", scale)
        return

    tx, ty = state.translation
    new_translation = (tx + dx / scale, ty + dy / scale)
    if not is_finite_vec2(new_translation):
        _logger.debug("pan を破棄: translation が非有限になる delta=%r", delta)
        return

    state.translation = new_translation


__all__ = ["apply_pan"]
