from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


@dataclass
class BoneAxis:
    # angles are keyed by axis letter, not by position in `order`
    angles: Vec3
    order: str


@dataclass
class Limit:
    min: float
    max: float


@dataclass
class BoneDefinition:
    name: str
    id: Optional[int] = None
    direction: Vec3 = (0.0, 0.0, 0.0)
    length: float = 0.0
    axis: Optional[BoneAxis] = None
    dof: List[str] = field(default_factory=list)
    limits: List[Limit] = field(default_factory=list)


@dataclass
class Skeleton:
    version: str = ""
    name: str = ""
    units: Dict[str, str] = field(default_factory=dict)
    documentation: str = ""
    root: Dict[str, List[str]] = field(default_factory=dict)
    bones: Dict[str, BoneDefinition] = field(default_factory=dict)

    # parent name -> ordered child names; "root" is the synthetic parent
    hierarchy: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class BoneTransform:
    """Per-bone static matrices, computed once per skeleton."""

    C: np.ndarray
    Cinv: np.ndarray
    B: np.ndarray
    direction: np.ndarray


@dataclass(frozen=True)
class Segment:
    start: Vec3
    end: Vec3


# bone name -> channel values for one frame
FrameChannelMap = Dict[str, List[float]]

# frame number -> channel map, in file order
MotionFrames = Dict[int, FrameChannelMap]

# bone name -> world-space segment, in traversal order
PositionCache = Dict[str, Segment]
