from __future__ import annotations

from pathlib import Path

import pytest

from infinigrid.core import runtime_config as runtime_config_module
from infinigrid.core.runtime_config import (
    parse_runtime_config,
    runtime_config,
    set_config_path,
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    # 開発者の HOME / CWD にある config.yaml を拾わないようにする。
    monkeypatch.setattr(runtime_config_module, "_default_config_candidates", lambda: ())
    set_config_path(None)
    yield
    set_config_path(None)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_packaged_defaults_are_loaded() -> None:
    cfg = runtime_config()

    assert cfg.config_path is None
    assert cfg.grid.base_scale_factor == 1.0
    assert 0.0 < cfg.grid.min_allowed_gap <= cfg.grid.max_allowed_gap
    assert cfg.spacing_policy == "single_step"
    assert cfg.transition_duration_s >= 0.0


def test_runtime_config_is_cached_until_path_changes(tmp_path: Path) -> None:
    a = runtime_config()
    assert runtime_config() is a

    path = _write(
        tmp_path / "config.yaml",
        "spacing:\n  policy: converge\n",
    )
    set_config_path(path)
    b = runtime_config()

    assert b is not a
    assert b.config_path == path
    assert b.spacing_policy == "converge"
    # トップレベルの浅い上書きなので grid は同梱デフォルトのまま。
    assert b.grid == a.grid


def test_user_config_overrides_grid_section(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "config.yaml",
        "grid:\n  base_scale_factor: 2\n  min_allowed_gap: 10\n  max_allowed_gap: 300\n",
    )
    set_config_path(path)

    cfg = runtime_config()

    assert cfg.grid.base_scale_factor == 2.0
    assert cfg.grid.min_allowed_gap == 10.0
    assert cfg.grid.max_allowed_gap == 300.0


def test_discovered_config_is_applied(tmp_path: Path, monkeypatch) -> None:
    path = _write(tmp_path / "config.yaml", "transition:\n  duration_s: 0\n")
    monkeypatch.setattr(runtime_config_module, "_default_config_candidates", lambda: (path,))

    cfg = runtime_config()

    assert cfg.config_path == path
    assert cfg.transition_duration_s == 0.0


def test_missing_explicit_config_raises(tmp_path: Path) -> None:
    set_config_path(tmp_path / "missing.yaml")
    with pytest.raises(FileNotFoundError):
        runtime_config()


def test_non_mapping_yaml_raises(tmp_path: Path) -> None:
    set_config_path(_write(tmp_path / "config.yaml", "- a\n- b\n"))
    with pytest.raises(RuntimeError):
        runtime_config()


def _payload(**overrides) -> dict:
    payload = {
        "version": 1,
        "grid": {"base_scale_factor": 1.0, "min_allowed_gap": 4.0, "max_allowed_gap": 400.0},
        "spacing": {"policy": "single_step"},
        "transition": {"duration_s": 0.5},
    }
    payload.update(overrides)
    return payload


def test_parse_runtime_config_accepts_valid_payload() -> None:
    cfg = parse_runtime_config(_payload())
    assert cfg.grid.max_allowed_gap == 400.0
    assert cfg.transition_duration_s == 0.5


@pytest.mark.parametrize(
    "overrides, exc",
    [
        ({"version": None}, RuntimeError),
        ({"version": 2}, RuntimeError),
        ({"grid": {"base_scale_factor": 1.0, "min_allowed_gap": 4.0}}, RuntimeError),
        ({"grid": {"base_scale_factor": 1.0, "min_allowed_gap": 40.0, "max_allowed_gap": 4.0}}, ValueError),
        ({"grid": {"base_scale_factor": 0.0, "min_allowed_gap": 4.0, "max_allowed_gap": 40.0}}, ValueError),
        ({"grid": {"base_scale_factor": "x", "min_allowed_gap": 4.0, "max_allowed_gap": 40.0}}, RuntimeError),
        ({"grid": [1, 2]}, RuntimeError),
        ({"spacing": {"policy": "loop"}}, ValueError),
        ({"transition": {"duration_s": -1}}, ValueError),
    ],
)
def test_parse_runtime_config_rejects_invalid_payload(overrides: dict, exc: type[Exception]) -> None:
    with pytest.raises(exc):
        parse_runtime_config(_payload(**overrides))
