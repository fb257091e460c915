# src/infinigrid/core/realized_geometry.py
# グリッド線の出力に使うポリライン配列（coords + offsets）のモデルと検証ロジック。

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class RealizedGeometry:
    """スクリーン座標のポリライン集合を表現する。

    Parameters
    ----------
    coords : np.ndarray
        float32 型 shape (N, 3) の頂点配列。z は常に 0。
    offsets : np.ndarray
        int32 型 shape (M+1,) のポリライン開始インデックス配列。

    Notes
    -----
    不変性を契約とし、配列は writeable=False で返す。
    offsets と coords の整合性はコンストラクタ内で検証する。
    """

    coords: np.ndarray
    offsets: np.ndarray

    def __post_init__(self) -> None:
        """配列形状と整合性を検証し、不変条件を満たす形に固定する。"""
        coords = np.asarray(self.coords)
        offsets = np.asarray(self.offsets)

        if coords.ndim == 2 and coords.shape[1] == 2:
            # 2D 入力は z=0 を補完して (N,3) に揃える。
            z = np.zeros((coords.shape[0], 1), dtype=coords.dtype)
            coords = np.concatenate([coords, z], axis=1)

        if coords.ndim != 2 or coords.shape[1] != 3:
            raise ValueError("coords は shape (N,3) の 2 次元配列である必要がある")

        if coords.dtype != np.float32:
            coords = coords.astype(np.float32, copy=False)

        if offsets.ndim != 1:
            raise ValueError("offsets は 1 次元配列である必要がある")

        if offsets.dtype != np.int32:
            offsets = offsets.astype(np.int32, copy=False)

        if offsets.size == 0:
            raise ValueError("offsets は少なくとも 1 要素を含む必要がある")

        if offsets[0] != 0:
            raise ValueError("offsets[0] は 0 である必要がある")

        if offsets[-1] != coords.shape[0]:
            raise ValueError("offsets[-1] は coords 行数と一致する必要がある")

        if np.any(np.diff(offsets) < 0):
            raise ValueError("offsets は単調非減少である必要がある")

        coords.setflags(write=False)
        offsets.setflags(write=False)

        object.__setattr__(self, "coords", coords)
        object.__setattr__(self, "offsets", offsets)

    @property
    def n_lines(self) -> int:
        """ポリライン本数を返す。"""
        return int(self.offsets.shape[0]) - 1

    @property
    def is_empty(self) -> bool:
        return self.n_lines == 0


def empty_realized_geometry() -> RealizedGeometry:
    """ポリラインを 1 本も含まない RealizedGeometry を返す。"""
    return RealizedGeometry(
        coords=np.zeros((0, 3), dtype=np.float32),
        offsets=np.zeros((1,), dtype=np.int32),
    )


def segments_geometry(starts: np.ndarray, ends: np.ndarray) -> RealizedGeometry:
    """始点列と終点列から 2 点ポリライン（線分）の集合を構築する。

    Parameters
    ----------
    starts : np.ndarray
        shape (M, 2) の始点配列。
    ends : np.ndarray
        shape (M, 2) の終点配列。

    Returns
    -------
    RealizedGeometry
        `coords[2i]` が始点、`coords[2i+1]` が終点となる M 本の線分。
    """
    starts_a = np.asarray(starts, dtype=np.float64).reshape(-1, 2)
    ends_a = np.asarray(ends, dtype=np.float64).reshape(-1, 2)
    if starts_a.shape != ends_a.shape:
        raise ValueError("starts と ends は同じ shape である必要がある")

    n = int(starts_a.shape[0])
    if n == 0:
        return empty_realized_geometry()

    # 始点/終点を交互に並べる: [s0, e0, s1, e1, ...]
    xy = np.empty((2 * n, 2), dtype=np.float64)
    xy[0::2] = starts_a
    xy[1::2] = ends_a
    offsets = np.arange(0, 2 * n + 1, 2, dtype=np.int32)
    return RealizedGeometry(coords=xy.astype(np.float32), offsets=offsets)


def concat_realized_geometries(*geometries: RealizedGeometry) -> RealizedGeometry:
    """複数の RealizedGeometry を連結して 1 つにまとめる。

    Parameters
    ----------
    geometries : RealizedGeometry
        連結対象のジオメトリ列。

    Returns
    -------
    RealizedGeometry
        結合後の実体ジオメトリ。
    """
    if not geometries:
        return empty_realized_geometry()

    coords_list = [g.coords for g in geometries]
    offsets_list = [g.offsets for g in geometries]

    total_coords = np.concatenate(coords_list, axis=0)

    new_offsets: list[int] = [0]
    offset_base = 0
    for offsets in offsets_list:
        # 先頭 0 を除いた差分部分だけをシフトして足し込む。
        shifted = offsets[1:].astype(np.int64) + offset_base
        new_offsets.extend(shifted.tolist())
        offset_base += int(offsets[-1])

    new_offsets_array = np.asarray(new_offsets, dtype=np.int32)
    return RealizedGeometry(coords=total_coords, offsets=new_offsets_array)


__all__ = [
    "RealizedGeometry",
    "concat_realized_geometries",
    "empty_realized_geometry",
    "segments_geometry",
]
