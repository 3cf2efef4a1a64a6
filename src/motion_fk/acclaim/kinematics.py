from __future__ import annotations

import copy
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import numpy as np

from .corrections import DirectionCorrections, default_corrections
from .errors import FKConstructionError, MissingBoneError, ParseError
from .math3d import as_vec3, compose_axis_rotation, compose_dof_rotation, dof_axis, identity, inverse3
from .types import (
    BoneDefinition,
    BoneTransform,
    FrameChannelMap,
    MotionFrames,
    PositionCache,
    Segment,
    Skeleton,
)

logger = logging.getLogger(__name__)

Transforms = Mapping[str, BoneTransform]

# (bone, parent world position, parent global rotation) -> (end position, global rotation)
_Visit = Callable[[BoneDefinition, np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


@dataclass
class FKOptions:
    strict: bool = False  # raise MissingBoneError instead of skipping a subtree
    apply_root_orientation: bool = False
    corrections: Optional[DirectionCorrections] = None  # None = default preset


def _frozen(m: np.ndarray) -> np.ndarray:
    m = np.array(m, dtype=np.float64)
    m.setflags(write=False)
    return m


def precompute_transforms(
    skeleton: Skeleton, corrections: Optional[DirectionCorrections] = None
) -> Dict[str, BoneTransform]:
    """Build C, Cinv, B and the corrected bind direction for every bone.

    ``corrections`` maps bone name -> negate the direction's z component;
    bones missing from the table are left as declared.
    """
    corrections = corrections or {}
    out: Dict[str, BoneTransform] = {}

    for name, bone in skeleton.bones.items():
        direction = np.array(bone.direction, dtype=np.float64)
        if corrections.get(name, False):
            direction[2] = -direction[2]

        for d in bone.dof:
            if not dof_axis(d):
                logger.debug("bone '%s': dof %r is not a rotation, contributes identity", name, d)

        if bone.axis is None:
            C = Cinv = identity()
        else:
            C = compose_axis_rotation(bone.axis.order, bone.axis.angles)
            try:
                Cinv = inverse3(C)
            except ZeroDivisionError as e:
                raise FKConstructionError(name, str(e)) from e

        out[name] = BoneTransform(C=_frozen(C), Cinv=_frozen(Cinv), B=_frozen(identity()), direction=_frozen(direction))

    return out


def _walk(
    skeleton: Skeleton,
    transforms: Optional[Transforms],
    start: np.ndarray,
    start_rot: np.ndarray,
    visit: _Visit,
    strict: bool,
) -> PositionCache:
    """Depth-first traversal from the children of the synthetic root.

    Uses an explicit stack; children are visited in declared order. A name
    without a definition (or transform, when ``transforms`` is given) is
    skipped together with its subtree unless ``strict``.
    """
    positions: PositionCache = {}
    visited = set()
    stack: List[Tuple[str, np.ndarray, np.ndarray]] = [
        (name, start, start_rot) for name in reversed(skeleton.hierarchy.get("root", []))
    ]

    while stack:
        name, parent_pos, parent_rot = stack.pop()

        bone = skeleton.bones.get(name)
        if bone is None or (transforms is not None and name not in transforms):
            if strict:
                raise MissingBoneError(name)
            logger.warning("Skipping '%s' and its subtree: no bone definition", name)
            continue
        if name in visited:
            logger.warning("Bone '%s' reached twice in hierarchy, skipping repeat", name)
            continue
        visited.add(name)

        end, rot = visit(bone, parent_pos, parent_rot)
        positions[name] = Segment(start=as_vec3(parent_pos), end=as_vec3(end))

        for child in reversed(skeleton.hierarchy.get(name, [])):
            stack.append((child, end, rot))

    return positions


def root_position(skeleton: Skeleton) -> np.ndarray:
    vals = skeleton.root.get("position", [])
    pos = np.zeros(3, dtype=np.float64)
    for i, tok in enumerate(vals[:3]):
        try:
            pos[i] = float(tok)
        except ValueError:
            raise ParseError(None, f"root position: expected a number, got {tok!r}") from None
    return pos


def eval_pose_world(
    skeleton: Skeleton,
    transforms: Transforms,
    frame: FrameChannelMap,
    options: Optional[FKOptions] = None,
) -> PositionCache:
    """Forward kinematics: world-space segment for every reachable bone.

    - root: first three "root" channel values are the world position.
      Orientation channels are only applied with ``apply_root_orientation``.
    - per bone: L = Cinv @ M @ C @ B, G = G_parent @ L,
      end = start + (G @ direction) * length
    """
    opts = options or FKOptions()

    root_vals = frame.get("root", [])
    start = np.array([root_vals[i] if i < len(root_vals) else 0.0 for i in range(3)], dtype=np.float64)

    start_rot = identity()
    if opts.apply_root_orientation:
        start_rot = compose_dof_rotation(skeleton.root.get("order", []), root_vals)

    def visit(bone: BoneDefinition, parent_pos: np.ndarray, parent_rot: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        t = transforms[bone.name]
        M = compose_dof_rotation(bone.dof, frame.get(bone.name, []))
        local = t.Cinv @ M @ t.C @ t.B
        world = parent_rot @ local
        end = parent_pos + (world @ t.direction) * bone.length
        return end, world

    return _walk(skeleton, transforms, start, start_rot, visit, opts.strict)


def static_pose(skeleton: Skeleton, strict: bool = False) -> PositionCache:
    """Bind pose without motion: end = start + direction * length, no rotation."""
    rot = identity()

    def visit(bone: BoneDefinition, parent_pos: np.ndarray, parent_rot: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        end = parent_pos + np.array(bone.direction, dtype=np.float64) * bone.length
        return end, rot

    return _walk(skeleton, None, root_position(skeleton), rot, visit, strict)


class FKEngine:
    """Owns a skeleton and its precomputed transforms; evaluates frames."""

    def __init__(self, skeleton: Skeleton, options: Optional[FKOptions] = None) -> None:
        # private copy: later edits to the caller's skeleton must not desync the transforms
        self.skeleton = copy.deepcopy(skeleton)
        self.options = options or FKOptions()
        corrections = self.options.corrections
        if corrections is None:
            corrections = default_corrections(self.skeleton)
        self.transforms: Transforms = MappingProxyType(precompute_transforms(self.skeleton, dict(corrections)))

    def evaluate(self, frame: FrameChannelMap) -> PositionCache:
        return eval_pose_world(self.skeleton, self.transforms, frame, self.options)

    def evaluate_all(self, frames: MotionFrames) -> Dict[int, PositionCache]:
        return {n: self.evaluate(frames[n]) for n in sorted(frames)}

    def static_pose(self) -> PositionCache:
        return static_pose(self.skeleton, strict=self.options.strict)
