# どこで: `src/infinigrid/interactive/transition.py`。
# 何を: ズーム/パンの見た目を滑らかにする補間タイムライン（start, end, start_time, duration）。
# なぜ: 収束値は GridState が即座に持ち、補間は表示層だけの関心として分離するため。

from __future__ import annotations

from dataclasses import dataclass, replace

from infinigrid.core.grid_state import GridSnapshot

# CSS / SwiftUI の ease-in と同じ制御点。
_EASE_IN_P1 = (0.42, 0.0)
_EASE_IN_P2 = (1.0, 1.0)
_BEZIER_BISECT_STEPS = 32


def _cubic_bezier_1d(t: float, p1: float, p2: float) -> float:
    u = 1.0 - t
    return 3.0 * u * u * t * p1 + 3.0 * u * t * t * p2 + t * t * t


def ease_in(t: float) -> float:
    """cubic-bezier(0.42, 0, 1, 1) の ease-in を返す（t は [0, 1] にクランプ）。"""

    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0

    # x(s) = t となる s を二分法で求め、y(s) を返す。x(s) は単調増加。
    lo, hi = 0.0, 1.0
    for _ in range(_BEZIER_BISECT_STEPS):
        mid = 0.5 * (lo + hi)
        if _cubic_bezier_1d(mid, _EASE_IN_P1[0], _EASE_IN_P2[0]) < t:
            lo = mid
        else:
            hi = mid
    s = 0.5 * (lo + hi)
    return _cubic_bezier_1d(s, _EASE_IN_P1[1], _EASE_IN_P2[1])


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass(frozen=True, slots=True)
class ViewTransition:
    """2 つのスナップショット間の時間補間。

    Parameters
    ----------
    start : GridSnapshot
        補間開始時に表示していた状態。
    end : GridSnapshot
        収束先（GridState の確定値）。
    start_time : float
        開始時刻 [s]（呼び出し側の時計）。
    duration : float
        補間時間 [s]。0 以下は即時に end。
    """

    start: GridSnapshot
    end: GridSnapshot
    start_time: float
    duration: float

    def progress(self, now: float) -> float:
        """経過率を [0, 1] で返す（イージング前）。"""
        if self.duration <= 0.0:
            return 1.0
        t = (float(now) - self.start_time) / self.duration
        return min(max(t, 0.0), 1.0)

    def is_finished(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def sample(self, now: float) -> GridSnapshot:
        """時刻 `now` の表示用スナップショットを返す。

        終了後は `end` をそのまま返す（補間誤差を残さない）。
        """
        p = self.progress(now)
        if p >= 1.0:
            return self.end
        e = ease_in(p)
        a, b = self.start, self.end
        return replace(
            b,
            scale=_lerp(a.scale, b.scale, e),
            translation=(
                _lerp(a.translation[0], b.translation[0], e),
                _lerp(a.translation[1], b.translation[1], e),
            ),
            spacing_multiplier=_lerp(a.spacing_multiplier, b.spacing_multiplier, e),
        )


__all__ = ["ViewTransition", "ease_in"]
