from __future__ import annotations

from typing import Optional


class AcclaimError(RuntimeError):
    """Base exception for skeleton/motion parsing and kinematics errors."""


class ParseError(AcclaimError):
    def __init__(self, line: Optional[int], reason: str) -> None:
        self.line = line
        self.reason = reason
        if line is None:
            super().__init__(reason)
        else:
            super().__init__(f"line {line}: {reason}")


class FKError(AcclaimError):
    """Base exception for forward kinematics errors."""


class FKConstructionError(FKError):
    """A bone's axis matrix cannot be inverted."""

    def __init__(self, bone_name: str, reason: str = "degenerate axis specification") -> None:
        self.bone_name = bone_name
        super().__init__(f"bone '{bone_name}': {reason}")


class MissingBoneError(FKError):
    """Strict mode: a hierarchy name has no definition or transform."""

    def __init__(self, bone_name: str) -> None:
        self.bone_name = bone_name
        super().__init__(f"bone '{bone_name}' is referenced by the hierarchy but has no definition")
