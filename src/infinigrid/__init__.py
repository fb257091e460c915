"""infinigrid: パン/ズーム可能な無限 2D グリッドの変換モデルとグリッド線生成。"""

from infinigrid.core.grid_geometry import (
    Circle,
    GridGeometry,
    GridLines,
    LineSegment,
    generate_grid,
    generate_major_grid,
    generate_minor_grid,
)
from infinigrid.core.grid_state import GridSnapshot, GridState
from infinigrid.core.inputs import PanInput, ViewportResize, ZoomInput
from infinigrid.core.pan import apply_pan
from infinigrid.core.spacing import compute_spacing_multiplier, stabilize_spacing_multiplier
from infinigrid.core.zoom import apply_zoom
from infinigrid.interactive.grid_view import GridView

__all__ = [
    "Circle",
    "GridGeometry",
    "GridLines",
    "GridSnapshot",
    "GridState",
    "GridView",
    "LineSegment",
    "PanInput",
    "ViewportResize",
    "ZoomInput",
    "apply_pan",
    "apply_zoom",
    "compute_spacing_multiplier",
    "generate_grid",
    "generate_major_grid",
    "generate_minor_grid",
    "stabilize_spacing_multiplier",
]
