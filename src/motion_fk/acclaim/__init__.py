from .amc import load_amc, parse_amc
from .asf import load_asf, parse_asf
from .errors import AcclaimError, FKConstructionError, FKError, MissingBoneError, ParseError
from .kinematics import FKEngine, FKOptions, eval_pose_world, precompute_transforms, static_pose
from .types import BoneAxis, BoneDefinition, BoneTransform, Limit, Segment, Skeleton

__all__ = [
    "parse_asf",
    "load_asf",
    "parse_amc",
    "load_amc",
    "AcclaimError",
    "ParseError",
    "FKError",
    "FKConstructionError",
    "MissingBoneError",
    "FKEngine",
    "FKOptions",
    "precompute_transforms",
    "eval_pose_world",
    "static_pose",
    "Skeleton",
    "BoneDefinition",
    "BoneAxis",
    "Limit",
    "BoneTransform",
    "Segment",
]
