# どこで: `src/infinigrid/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: グリッドの生成時定数や LOD ポリシーを、コードを変えずにユーザーが指定できるようにするため。

"""実行時設定（`config.yaml`）の探索・ロード・キャッシュを担当する。

このモジュールは、以下を提供する:

- `config.yaml` を「同梱デフォルト → ユーザー設定（任意）」の順に適用して `RuntimeConfig` を構築
- 探索パス（CWD / HOME）と、明示指定（`set_config_path()`）の両方に対応
- 1 回ロードした結果をプロセス内でキャッシュ（設定を切り替える場合は `set_config_path()` で破棄）

入出力 / 副作用
----------------
- 入力: 同梱 `infinigrid/resource/default_config.yaml`、任意でユーザーの `config.yaml`
- 出力: `RuntimeConfig`（不変データ）
- 副作用: ファイル読み取り、YAML パース、モジュールグローバルへのキャッシュ保存

実装メモ
--------
- ユーザー設定の適用は `dict.update()`（トップレベルの浅い上書き）で行う。
  ネストした mapping は「部分的にマージ」されず「丸ごと置換」される。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from infinigrid.core.spacing import SPACING_POLICIES


@dataclass(frozen=True, slots=True)
class GridConfig:
    """グリッドの生成時定数（`config.yaml` の `grid`）。"""

    base_scale_factor: float
    min_allowed_gap: float
    max_allowed_gap: float


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """infinigrid の実行時設定。

    Attributes
    ----------
    config_path:
        実際に採用されたユーザー設定ファイルのパス。ユーザー設定が無い場合は None。
    grid:
        `GridState.create()` へ渡す生成時定数。
    spacing_policy:
        ズーム後の spacing multiplier 更新規則（"single_step" / "converge"）。
    transition_duration_s:
        ズームの見た目の補間時間 [s]。0 で補間しない。
    """

    config_path: Path | None
    grid: GridConfig
    spacing_policy: str
    transition_duration_s: float


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    - `path` を None にすると明示指定を解除し、既定の探索に戻る。
    - 設定が変わるため、`runtime_config()` のキャッシュを破棄する。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    _EXPLICIT_CONFIG_PATH = None if path is None else Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    """既定の `config.yaml` 探索候補を返す。

    探索順（先勝ち）:
    - `./.infinigrid/config.yaml`
    - `~/.config/infinigrid/config.yaml`
    """

    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".infinigrid" / "config.yaml",
        home / ".config" / "infinigrid" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    """任意値を mapping として解釈し、dict に正規化して返す。"""

    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_float(value: Any, *, key: str) -> float | None:
    """任意値を有限の float として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}")
    try:
        out = float(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc
    if not math.isfinite(out):
        raise RuntimeError(f"{key} は有限値である必要があります: got={value!r}")
    return out


def _require_float(mapping: dict[str, Any], name: str, *, key: str) -> float:
    value = _as_float(mapping.get(name), key=key)
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    return value


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML テキストを読み、トップレベル mapping を dict として返す。"""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """UTF-8 の YAML ファイルを読み、dict を返す。"""

    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    try:
        blob = (
            resources.files("infinigrid")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except OSError as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc

    return _load_yaml_text(blob, source="infinigrid/resource/default_config.yaml")


def parse_runtime_config(payload: dict[str, Any], *, config_path: Path | None = None) -> RuntimeConfig:
    """マージ済みの設定 mapping を検証して `RuntimeConfig` を構築する。"""

    version = payload.get("version")
    if version is None:
        raise RuntimeError(
            "config.yaml の version が未設定です（同梱 default_config.yaml を確認してください）"
        )
    try:
        version_i = int(version)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の version は整数である必要があります: got={version!r}") from exc
    if version_i != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version_i}")

    grid = _as_mapping(payload.get("grid"), key="grid")
    base_scale_factor = _require_float(grid, "base_scale_factor", key="grid.base_scale_factor")
    min_allowed_gap = _require_float(grid, "min_allowed_gap", key="grid.min_allowed_gap")
    max_allowed_gap = _require_float(grid, "max_allowed_gap", key="grid.max_allowed_gap")
    if base_scale_factor <= 0.0:
        raise ValueError(f"grid.base_scale_factor は正の値である必要があります: got={base_scale_factor}")
    if min_allowed_gap <= 0.0:
        raise ValueError(f"grid.min_allowed_gap は正の値である必要があります: got={min_allowed_gap}")
    if min_allowed_gap > max_allowed_gap:
        raise ValueError(
            "grid.min_allowed_gap は grid.max_allowed_gap 以下である必要があります"
            f": got=({min_allowed_gap}, {max_allowed_gap})"
        )

    spacing = _as_mapping(payload.get("spacing"), key="spacing")
    policy = str(spacing.get("policy", "single_step")).strip()
    if policy not in SPACING_POLICIES:
        raise ValueError(f"spacing.policy は {SPACING_POLICIES} のいずれかである必要があります: got={policy!r}")

    transition = _as_mapping(payload.get("transition"), key="transition")
    duration = _as_float(transition.get("duration_s"), key="transition.duration_s")
    if duration is None:
        duration = 0.0
    if duration < 0.0:
        raise ValueError(f"transition.duration_s は 0 以上である必要があります: got={duration}")

    return RuntimeConfig(
        config_path=config_path,
        grid=GridConfig(
            base_scale_factor=float(base_scale_factor),
            min_allowed_gap=float(min_allowed_gap),
            max_allowed_gap=float(max_allowed_gap),
        ),
        spacing_policy=policy,
        transition_duration_s=float(duration),
    )


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    読み込み元の優先順位（後勝ち）:
    1) 同梱 `infinigrid/resource/default_config.yaml`
    2) 探索で見つかった `config.yaml`（任意）
    3) `set_config_path()` で明示指定された `config.yaml`（任意）
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    # 既定の探索は「CWD → HOME」の順。最初に見つかった 1 つのみを採用する。
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload.update(_load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload.update(_load_yaml_config(explicit_path))

    cfg = parse_runtime_config(payload, config_path=explicit_path or discovered_path)
    _CONFIG_CACHE = cfg
    return cfg


__all__ = [
    "GridConfig",
    "RuntimeConfig",
    "parse_runtime_config",
    "runtime_config",
    "set_config_path",
]
