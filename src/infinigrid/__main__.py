# どこで: `src/infinigrid/__main__.py`。
# 何を: `python -m infinigrid ...` の CLI エントリポイントを提供する。
# なぜ: 描画面なしで、入力列に対するグリッド状態と生成線分を手早く確認できるようにするため。

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from infinigrid.core.grid_geometry import GridLines
from infinigrid.core.grid_state import GridState
from infinigrid.core.inputs import GridInput, PanInput, ViewportResize, ZoomInput
from infinigrid.core.runtime_config import runtime_config, set_config_path
from infinigrid.core.spacing import SPACING_POLICIES
from infinigrid.interactive.grid_view import GridView


def _lines_summary(lines: GridLines) -> dict[str, Any]:
    marker = lines.origin_marker
    return {
        "spacing": lines.spacing,
        "n_vertical": lines.vertical.n_lines,
        "n_horizontal": lines.horizontal.n_lines,
        "origin_marker": (
            None
            if marker is None
            else {"center": list(marker.center), "radius": marker.radius}
        ),
    }


def _build_events(args: argparse.Namespace) -> list[GridInput]:
    events: list[GridInput] = [ViewportResize(width=args.viewport[0], height=args.viewport[1])]
    for dx, dy in args.pan or []:
        events.append(PanInput(dx=dx, dy=dy))
    for m, fx, fy in args.zoom or []:
        events.append(ZoomInput(multiplier=m, focal_point=(fx, fy)))
    return events


def _cmd_geometry(args: argparse.Namespace) -> int:
    cfg = runtime_config()
    state = GridState.create(
        cfg.grid.base_scale_factor,
        min_allowed_gap=cfg.grid.min_allowed_gap,
        max_allowed_gap=cfg.grid.max_allowed_gap,
    )
    # CLI は確定値だけを見るので補間しない。
    view = GridView(state, spacing_policy=args.policy or cfg.spacing_policy)

    for event in _build_events(args):
        view.handle(event)

    geometry = view.geometry()
    out = {
        "scale": state.scale,
        "translation": list(state.translation),
        "viewport_size": list(state.viewport_size),
        "spacing_multiplier": state.spacing_multiplier,
        "spacing_policy": view.spacing_policy,
        "major": _lines_summary(geometry.major),
        "minor": _lines_summary(geometry.minor),
    }
    json.dump(out, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def _cmd_config(_args: argparse.Namespace) -> int:
    cfg = runtime_config()
    out = {
        "config_path": None if cfg.config_path is None else str(cfg.config_path),
        "grid": {
            "base_scale_factor": cfg.grid.base_scale_factor,
            "min_allowed_gap": cfg.grid.min_allowed_gap,
            "max_allowed_gap": cfg.grid.max_allowed_gap,
        },
        "spacing_policy": cfg.spacing_policy,
        "transition_duration_s": cfg.transition_duration_s,
    }
    json.dump(out, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="python -m infinigrid")
    p.add_argument("--config", default=None, help="明示的に使う config.yaml のパス")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("geometry", help="入力列を適用したグリッド状態と線本数を JSON で出力する")
    g.add_argument(
        "--viewport",
        nargs=2,
        type=float,
        metavar=("W", "H"),
        default=(800.0, 600.0),
    )
    g.add_argument(
        "--pan",
        nargs=2,
        type=float,
        action="append",
        metavar=("DX", "DY"),
        help="pan 入力（複数指定可。zoom より先に適用）",
    )
    g.add_argument(
        "--zoom",
        nargs=3,
        type=float,
        action="append",
        metavar=("MULTIPLIER", "FX", "FY"),
        help="zoom 入力（複数指定可）",
    )
    g.add_argument("--policy", choices=SPACING_POLICIES, default=None)

    sub.add_parser("config", help="有効な実行時設定を JSON で出力する")

    args = p.parse_args(argv)
    if args.config is not None:
        set_config_path(args.config)

    if args.cmd == "geometry":
        return _cmd_geometry(args)
    if args.cmd == "config":
        return _cmd_config(args)

    raise AssertionError(f"unknown cmd: {args.cmd!r}")


if __name__ == "__main__":
    raise SystemExit(main())
