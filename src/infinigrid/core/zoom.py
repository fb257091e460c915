# どこで: `src/infinigrid/core/zoom.py`。
# 何を: 焦点まわりのズーム（clamp → 焦点保持の translation 補正 → コミット）を適用する。
# なぜ: ズーム中も指/カーソル下の点をスクリーン上で動かさず、線密度を許容範囲に保つため。

from __future__ import annotations

import logging
import math

from infinigrid.core.grid_state import GridState, Vec2, is_finite_vec2
from infinigrid.core.spacing import spacing_function

_logger = logging.getLogger(__name__)


def clamp_zoom_multiplier(state: GridState, multiplier: float) -> float:
    """`scale * multiplier * base_line_spacing` が許容範囲に収まるよう倍率を補正する。

    Returns
    -------
    float
        補正後の倍率。`scale * base_line_spacing` が 0 以下の場合は非有限値になり得る
        （呼び出し側で弾く）。
    """

    unscaled = float(state.scale) * float(state.base_line_spacing)
    candidate_gap = unscaled * float(multiplier)
    if candidate_gap < state.min_allowed_gap:
        return _safe_div(state.min_allowed_gap, unscaled)
    if candidate_gap > state.max_allowed_gap:
        return _safe_div(state.max_allowed_gap, unscaled)
    return float(multiplier)


def _safe_div(num: float, den: float) -> float:
    if den == 0.0:
        return math.nan
    return num / den


def apply_zoom(
    state: GridState,
    multiplier: float,
    focal_point: Vec2,
    *,
    spacing_policy: str = "single_step",
) -> None:
    """焦点 `focal_point` を固定したまま `scale` を `multiplier` 倍する。

    Parameters
    ----------
    state : GridState
        更新対象の状態。
    multiplier : float
        要求されたズーム倍率（ピンチ/ホイール由来）。
    focal_point : tuple[float, float]
        スクリーン座標の焦点。
    spacing_policy : {"single_step", "converge"}, default "single_step"
        コミット後の spacing multiplier 更新規則。

    Notes
    -----
    - 手順 1: 許容範囲で倍率を clamp する（`clamp_zoom_multiplier`）。
    - 手順 2: 焦点の viewport 内比率に応じて、表示範囲の増減分を translation へ配分する。
    - 手順 3: translation / scale / last_interaction_point / spacing_multiplier を一括で更新する。
    - 非有限の入力・中間値が出た場合は状態を一切変えずに戻る。
    """

    compute_multiplier = spacing_function(spacing_policy)

    requested = float(multiplier)
    if not math.isfinite(requested):
        _logger.debug("zoom を破棄: 非有限の multiplier=%r", multiplier)
        return

    fx, fy = float(focal_point[0]), float(focal_point[1])
    if not (math.isfinite(fx) and math.isfinite(fy)):
        _logger.debug("zoom を破棄: 非有限の focal_point=%r", focal_point)
        return

    scale = float(state.scale)
    if not math.isfinite(scale) or scale <= 0.0:
        _logger.debug("zoom を破棄: scale=%r", scale)
        return

    # 1) clamp
    m = clamp_zoom_multiplier(state, requested)
    if not math.isfinite(m) or m <= 0.0:
        _logger.debug("zoom を破棄: clamp 後の multiplier=%r", m)
        return

    # 2) 焦点保持。viewport 未初期化（0 幅/0 高）の軸があれば比率が定義できない。
    width, height = state.viewport_size
    if width == 0.0 or height == 0.0:
        _logger.debug("zoom を破棄: viewport_size=%r", state.viewport_size)
        return
    proportion = (fx / width, fy / height)
    if not is_finite_vec2(proportion):
        _logger.debug("zoom を破棄: 焦点の比率が非有限 proportion=%r", proportion)
        return

    new_scale = scale * m
    old_extent = (width / scale, height / scale)
    new_extent = (width / new_scale, height / new_scale)
    displacement = (
        (new_extent[0] - old_extent[0]) * proportion[0],
        (new_extent[1] - old_extent[1]) * proportion[1],
    )

    tx, ty = state.translation
    new_translation = (tx + displacement[0], ty + displacement[1])
    if not (is_finite_vec2(new_translation) and math.isfinite(new_scale) and new_scale > 0.0):
        _logger.debug("zoom を破棄: 更新後の値が非有限 scale=%r translation=%r", new_scale, new_translation)
        return

    new_spacing = compute_multiplier(new_scale, state.base_line_spacing, state.spacing_multiplier)

    # 3) コミット（ここまでで全ての検証が済んでいる）
    state.translation = new_translation
    state.scale = new_scale
    state.last_interaction_point = (fx, fy)
    state.spacing_multiplier = new_spacing


__all__ = ["apply_zoom", "clamp_zoom_multiplier"]
