from __future__ import annotations

import logging
import re
from typing import Optional

from .asf import to_float
from .types import FrameChannelMap, MotionFrames, Skeleton

logger = logging.getLogger(__name__)

_FRAME_MARKER = re.compile(r"[+-]?\d+")


def parse_amc(text: str, skeleton: Optional[Skeleton] = None) -> MotionFrames:
    """Parse motion text into ``{frame_number: {bone_name: [values...]}}``.

    A line that is exactly an integer starts a new frame; a repeated frame
    number replaces the earlier frame. Channel counts are stored as given,
    reconciling them with each bone's dof is left to the kinematics.
    """
    frames: MotionFrames = {}
    current: Optional[FrameChannelMap] = None
    dropped = 0
    unknown = set()

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith(":"):
            continue

        if _FRAME_MARKER.fullmatch(line):
            current = {}
            frames[int(line)] = current
            continue

        if current is None:
            dropped += 1
            continue

        parts = line.split()
        name = parts[0]
        current[name] = [to_float(tok, lineno, name) for tok in parts[1:]]

        if skeleton is not None and name != "root" and name not in skeleton.bones:
            unknown.add(name)

    if dropped:
        logger.debug("Dropped %d data lines before the first frame marker", dropped)
    if unknown:
        logger.debug("Motion references bones missing from skeleton: %s", ", ".join(sorted(unknown)))
    logger.info("Parsed motion: %d frames", len(frames))
    return frames


def load_amc(path: str, skeleton: Optional[Skeleton] = None) -> MotionFrames:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        text = f.read()
    return parse_amc(text, skeleton)
