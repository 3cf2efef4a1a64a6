from __future__ import annotations

"""Bind-direction corrections.

Some Acclaim exports store arm and hand directions with the forward (z)
component mirrored. The correction is a per-bone table (bone name -> flip z),
built from a named preset so the naming rule lives in data, not in the
kinematics.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from .types import Skeleton

PresetDict = Dict[str, object]
DirectionCorrections = Dict[str, bool]

DEFAULT_PRESET_ID = "acclaim_limbs"


def presets_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "presets"


def load_correction_presets() -> Dict[str, PresetDict]:
    """Load direction-correction presets, keyed by preset id."""
    path = presets_dir() / "direction_corrections.json"
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    presets: Dict[str, PresetDict] = {}
    for p in data.get("presets", []):
        pid = str(p.get("id"))
        presets[pid] = p
    return presets


def corrections_by_substring(bone_names: Iterable[str], substrings: Iterable[str]) -> DirectionCorrections:
    subs = [s.lower() for s in substrings if s]
    return {name: any(s in name.lower() for s in subs) for name in bone_names}


def corrections_from_preset(skeleton: Skeleton, preset: Optional[PresetDict]) -> DirectionCorrections:
    if not preset:
        return {name: False for name in skeleton.bones}
    subs = preset.get("substrings") or []
    if not isinstance(subs, list):
        raise ValueError(f"preset {preset.get('id')!r}: 'substrings' must be a list")
    return corrections_by_substring(skeleton.bones, [str(s) for s in subs])


def default_corrections(skeleton: Skeleton) -> DirectionCorrections:
    presets = load_correction_presets()
    return corrections_from_preset(skeleton, presets.get(DEFAULT_PRESET_ID))
