# どこで: `src/infinigrid/interactive/grid_view.py`。
# 何を: 1 ビュー分の GridState を持ち、入力イベントの適用・変更通知・描画用スナップショットを提供する。
# なぜ: UI 層の通知機構に依存せず、描画ループが 1 フレーム 1 回 pull するだけで済むようにするため。

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace

from infinigrid.core.grid_geometry import GridGeometry, generate_grid
from infinigrid.core.grid_state import GridSnapshot, GridState, Vec2
from infinigrid.core.inputs import GridInput, PanInput, ViewportResize, ZoomInput
from infinigrid.core.pan import apply_pan
from infinigrid.core.runtime_config import RuntimeConfig, runtime_config
from infinigrid.core.spacing import SPACING_BAND_MAX_PX, SPACING_BAND_MIN_PX, spacing_function
from infinigrid.core.zoom import apply_zoom
from infinigrid.interactive.transition import ViewTransition

_logger = logging.getLogger(__name__)

# 帯の端に乗った倍率を「帯の内側」と判定する相対許容誤差。
_BAND_REL_TOL = 1e-9


class GridView:
    """無限グリッド 1 ビューの窓口。

    - 入力（pan / zoom / resize）を GridState へ適用する。確定値は即座に GridState に入る。
    - 状態が変わるたびに `revision` を進める。描画側は `changed_since()` で差分を判定する。
    - `transition_duration > 0` の場合、表示用スナップショットは確定値へ向けて補間される。
    """

    def __init__(
        self,
        state: GridState,
        *,
        spacing_policy: str = "single_step",
        transition_duration: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._state = state
        self._spacing_policy = str(spacing_policy)
        self._compute_spacing = spacing_function(self._spacing_policy)
        self._transition_duration = max(0.0, float(transition_duration))
        self._clock = clock
        self._transition: ViewTransition | None = None
        self._revision = 0
        self._refresh_spacing()

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> "GridView":
        """`runtime_config()`（または渡された設定）から GridView を構築する。"""

        cfg = runtime_config() if config is None else config
        state = GridState.create(
            cfg.grid.base_scale_factor,
            min_allowed_gap=cfg.grid.min_allowed_gap,
            max_allowed_gap=cfg.grid.max_allowed_gap,
        )
        return cls(
            state,
            spacing_policy=cfg.spacing_policy,
            transition_duration=cfg.transition_duration_s,
            clock=clock,
        )

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def spacing_policy(self) -> str:
        return self._spacing_policy

    def changed_since(self, revision: int) -> bool:
        """`revision` 以降に状態が変わっていれば True を返す。"""
        return self._revision != int(revision)

    def is_animating(self, now: float | None = None) -> bool:
        t = self._now(now)
        return self._transition is not None and not self._transition.is_finished(t)

    # --- 入力 ---------------------------------------------------------------

    def handle(self, event: GridInput, *, now: float | None = None) -> None:
        """入力イベントを種類に応じて適用する。"""

        if isinstance(event, PanInput):
            self.pan(event.delta, now=now)
        elif isinstance(event, ZoomInput):
            self.zoom(event.multiplier, event.focal_point, now=now)
        elif isinstance(event, ViewportResize):
            self.resize(event.size)
        else:
            raise TypeError(f"未対応の入力イベントです: {type(event)!r}")

    def pan(self, delta: Vec2, *, now: float | None = None) -> None:
        # pan は補間中の場合のみ補間を張り直し、それ以外は即時反映する。
        self._mutate(lambda: apply_pan(self._state, delta), animate=None, now=now)

    def zoom(self, multiplier: float, focal_point: Vec2, *, now: float | None = None) -> None:
        self._mutate(
            lambda: apply_zoom(
                self._state,
                multiplier,
                focal_point,
                spacing_policy=self._spacing_policy,
            ),
            animate=True,
            now=now,
        )

    def resize(self, size: Vec2) -> None:
        """viewport サイズを更新し、受理された場合は LOD 倍率を再計算する。"""

        before = self._state.snapshot()
        if not self._state.set_viewport_size(size):
            _logger.debug("resize を破棄: size=%r", size)
            return
        self._refresh_spacing()
        if self._state.snapshot() != before:
            self._revision += 1

    # --- 出力 ---------------------------------------------------------------

    def snapshot(self, now: float | None = None) -> GridSnapshot:
        """表示用のスナップショットを返す。

        補間中は時刻 `now` の補間値、それ以外は GridState の確定値。
        """

        transition = self._transition
        if transition is None:
            return self._state.snapshot()
        t = self._now(now)
        if transition.is_finished(t):
            self._transition = None
            return self._state.snapshot()
        # 補間中の resize は即時反映する。
        return replace(transition.sample(t), viewport_size=self._state.viewport_size)

    def geometry(self, now: float | None = None) -> GridGeometry:
        """表示用スナップショットから主/副グリッドを生成する。"""
        return generate_grid(self.snapshot(now))

    # --- 内部 ---------------------------------------------------------------

    def _now(self, now: float | None) -> float:
        return float(self._clock()) if now is None else float(now)

    def _refresh_spacing(self) -> None:
        """LOD 倍率が帯の外にある場合だけ再計算する。

        single_step 規則は帯の端（128 / 256）を再トリガーするため、端に乗っている倍率を
        resize のたびに評価し直すと 128 と 256 の間で振動する。端を含む閉区間は確定済みとみなす（converge は冪等なので常に評価する）。
        """
        s = self._state
        rendered = s.base_line_spacing * s.scale * s.spacing_multiplier
        lo = SPACING_BAND_MIN_PX * (1.0 - _BAND_REL_TOL)
        hi = SPACING_BAND_MAX_PX * (1.0 + _BAND_REL_TOL)
        if self._spacing_policy == "single_step" and lo <= rendered <= hi:
            return
        s.spacing_multiplier = self._compute_spacing(s.scale, s.base_line_spacing, s.spacing_multiplier)

    def _mutate(self, op: Callable[[], None], *, animate: bool | None, now: float | None) -> None:
        t = self._now(now)
        presented = self.snapshot(t)
        if animate is None:
            animate = self._transition is not None
        before = self._state.snapshot()
        op()
        after = self._state.snapshot()
        if after == before:
            return
        self._revision += 1
        if animate and self._transition_duration > 0.0:
            # 進行中の補間は、現在の補間値から新しい確定値へ向けて張り直す。
            self._transition = ViewTransition(
                start=presented,
                end=after,
                start_time=t,
                duration=self._transition_duration,
            )


__all__ = ["GridView"]
