from __future__ import annotations

import json
from pathlib import Path

import pytest

from infinigrid.__main__ import main
from infinigrid.core import runtime_config as runtime_config_module
from infinigrid.core.runtime_config import set_config_path


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    monkeypatch.setattr(runtime_config_module, "_default_config_candidates", lambda: ())
    set_config_path(None)
    yield
    set_config_path(None)


def _run(capsys, argv: list[str]) -> dict:
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_geometry_command_applies_zoom(capsys) -> None:
    out = _run(capsys, ["geometry", "--zoom", "2", "400", "300"])

    assert out["scale"] == pytest.approx(2.0)
    assert out["translation"] == pytest.approx([-200.0, -150.0])
    assert out["viewport_size"] == [800.0, 600.0]
    # 40 * 2 * 6.4 = 512 >= 256 → 128 / 80
    assert out["spacing_multiplier"] == pytest.approx(1.6)
    assert out["major"]["spacing"] == pytest.approx(128.0)
    assert out["major"]["origin_marker"]["radius"] == 5.0
    assert out["minor"]["origin_marker"] is None


def test_geometry_command_applies_pan_and_viewport(capsys) -> None:
    out = _run(capsys, ["geometry", "--viewport", "400", "400", "--pan", "10", "0"])

    assert out["translation"] == pytest.approx([10.0, 0.0])
    assert out["major"]["origin_marker"]["center"] == pytest.approx([210.0, 200.0])
    assert out["spacing_policy"] == "single_step"


def test_geometry_command_policy_override(capsys) -> None:
    out = _run(capsys, ["geometry", "--policy", "converge"])

    rendered = out["major"]["spacing"]
    assert 128.0 <= rendered < 256.0
    assert out["spacing_policy"] == "converge"


def test_config_command_reads_explicit_file(capsys, tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("spacing:\n  policy: converge\n", encoding="utf-8")

    out = _run(capsys, ["--config", str(path), "config"])

    assert out["config_path"] == str(path)
    assert out["spacing_policy"] == "converge"
    assert out["grid"]["base_scale_factor"] == 1.0
