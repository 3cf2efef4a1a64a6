from __future__ import annotations

"""World-space preprocessing for display.

Acclaim exports differ in up-axis and length units. Rather than touching the
skeleton or motion, the viewer applies an axis matrix (preset + optional
flips) and a uniform scale to the segment endpoints produced by the
kinematics. Results are new PositionCache mappings; inputs are never mutated.
"""

from dataclasses import dataclass
import json
import logging
from typing import Dict, Optional

import numpy as np

from .acclaim.corrections import presets_dir
from .acclaim.kinematics import static_pose
from .acclaim.types import PositionCache, Segment, Skeleton

logger = logging.getLogger(__name__)

PresetDict = Dict[str, object]


def load_axis_presets() -> Dict[str, PresetDict]:
    """Load axis presets from JSON.

    Returns a mapping from preset id to preset dict.
    """
    path = presets_dir() / "axis_presets.json"
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    presets: Dict[str, PresetDict] = {}
    for p in data.get("presets", []):
        pid = str(p.get("id"))
        presets[pid] = p
    return presets


def axis_matrix_from_preset(preset: PresetDict) -> np.ndarray:
    m = preset.get("matrix")
    if not isinstance(m, list) or len(m) != 3:
        return np.eye(3, dtype=np.float64)
    arr = np.array(m, dtype=np.float64)
    if arr.shape != (3, 3):
        return np.eye(3, dtype=np.float64)
    return arr


@dataclass
class PreprocessConfig:
    scale_mode: str = "auto"  # auto|none|factor
    scale_factor: float = 1.0
    axis_preset_id: str = "none"
    flip_x: bool = False
    flip_y: bool = False
    flip_z: bool = False


@dataclass
class PreprocessState:
    config: PreprocessConfig
    axis_matrix: np.ndarray
    scale_factor: float


def segment_points(positions: PositionCache) -> np.ndarray:
    """(2N, 3) array of start/end pairs, in mapping order."""
    if not positions:
        return np.zeros((0, 3), dtype=np.float64)
    pts = []
    for seg in positions.values():
        pts.append(seg.start)
        pts.append(seg.end)
    return np.asarray(pts, dtype=np.float64)


def estimate_scale_factor_auto(skeleton: Skeleton) -> float:
    """Heuristic unit scaling from the bind-pose extent.

    Returns a multiplicative factor.
    """
    pts = segment_points(static_pose(skeleton))
    if pts.size == 0:
        return 1.0
    ranges = pts.max(axis=0) - pts.min(axis=0)
    size = float(np.max(np.abs(ranges)))

    # Acclaim lengths are commonly inches scaled by `units length`, so a
    # human is somewhere between ~2 and ~200 units tall.
    if size <= 0:
        return 1.0
    if size > 1000.0:
        return 0.001
    if size > 100.0:
        return 0.01
    if size > 10.0:
        return 0.1
    return 1.0


def build_axis_matrix(axis_preset: np.ndarray, flip_x: bool, flip_y: bool, flip_z: bool) -> np.ndarray:
    m = np.array(axis_preset, dtype=np.float64)
    if m.shape != (3, 3):
        m = np.eye(3, dtype=np.float64)

    flip = np.eye(3, dtype=np.float64)
    if flip_x:
        flip[0, 0] = -1.0
    if flip_y:
        flip[1, 1] = -1.0
    if flip_z:
        flip[2, 2] = -1.0
    return flip @ m


def apply_world_transform(pts: np.ndarray, axis_m: np.ndarray, scale: float) -> np.ndarray:
    """Apply axis and scale to world-space points."""
    out = (pts @ axis_m.T) * float(scale)
    return out


def transform_positions(positions: PositionCache, state: PreprocessState) -> PositionCache:
    out: PositionCache = {}
    for name, seg in positions.items():
        pts = apply_world_transform(np.array([seg.start, seg.end], dtype=np.float64), state.axis_matrix, state.scale_factor)
        out[name] = Segment(start=tuple(float(v) for v in pts[0]), end=tuple(float(v) for v in pts[1]))
    return out


def preprocess(
    skeleton: Skeleton, cfg: PreprocessConfig, axis_presets: Optional[Dict[str, PresetDict]] = None
) -> PreprocessState:
    if axis_presets is None:
        axis_presets = load_axis_presets()

    # scale
    if cfg.scale_mode == "none":
        s = 1.0
    elif cfg.scale_mode == "factor":
        s = float(cfg.scale_factor)
    else:
        s = estimate_scale_factor_auto(skeleton)

    # axis
    preset = axis_presets.get(cfg.axis_preset_id) if cfg.axis_preset_id else None
    if cfg.axis_preset_id and preset is None:
        logger.warning("Unknown axis preset %r, using identity", cfg.axis_preset_id)
    base = axis_matrix_from_preset(preset) if preset else np.eye(3, dtype=np.float64)
    axis_m = build_axis_matrix(base, cfg.flip_x, cfg.flip_y, cfg.flip_z)

    return PreprocessState(config=cfg, axis_matrix=axis_m, scale_factor=s)
