from __future__ import annotations

"""Skeleton definition (ASF) parser.

Line-oriented state machine: a ``:section`` header switches the active
section, and each body line is interpreted by that section's handler.
Structural violations and bad numeric tokens raise ParseError; a bone record
that closes without a name is dropped.
"""

from dataclasses import dataclass, field
import logging
import math
import re
from typing import Callable, Dict, List, Optional, Tuple

from .errors import ParseError
from .types import BoneAxis, BoneDefinition, Limit, Skeleton, Vec3

logger = logging.getLogger(__name__)

SECTIONS = ("version", "name", "units", "documentation", "root", "bonedata", "hierarchy")

_LIMIT_GROUP = re.compile(r"\(([^()]*)\)")
_AXIS_ORDER = re.compile(r"[xyz]{1,3}", re.IGNORECASE)


def _iter_lines(text: str) -> List[Tuple[int, str]]:
    """Trimmed, non-blank, non-comment lines with their 1-based line numbers."""
    lines: List[Tuple[int, str]] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        s = raw.strip()
        if not s or s.startswith("#"):
            continue
        lines.append((lineno, s))
    return lines


def to_float(token: str, lineno: int, what: str) -> float:
    """float() that rejects NaN; infinities are allowed (open limits)."""
    try:
        v = float(token)
    except ValueError:
        raise ParseError(lineno, f"{what}: expected a number, got {token!r}") from None
    if math.isnan(v):
        raise ParseError(lineno, f"{what}: NaN is not a valid value")
    return v


def _to_int(token: str, lineno: int, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise ParseError(lineno, f"{what}: expected an integer, got {token!r}") from None


def _floats(parts: List[str], count: int, lineno: int, what: str) -> List[float]:
    if len(parts) < count:
        raise ParseError(lineno, f"{what} needs {count} values, got {len(parts)}")
    return [to_float(p, lineno, what) for p in parts[:count]]


@dataclass
class _BoneRecord:
    """Accumulator for one ``begin`` ... ``end`` block."""

    opened_at: int
    name: Optional[str] = None
    id: Optional[int] = None
    direction: Vec3 = (0.0, 0.0, 0.0)
    length: float = 0.0
    axis: Optional[BoneAxis] = None
    dof: List[str] = field(default_factory=list)
    limits: List[Limit] = field(default_factory=list)
    last_field: str = ""

    def build(self) -> BoneDefinition:
        assert self.name is not None
        return BoneDefinition(
            name=self.name,
            id=self.id,
            direction=self.direction,
            length=self.length,
            axis=self.axis,
            dof=list(self.dof),
            limits=list(self.limits),
        )


def parse_axis_order(token: str, lineno: int) -> str:
    if not _AXIS_ORDER.fullmatch(token):
        raise ParseError(lineno, f"axis order must be 1-3 of the letters x/y/z, got {token!r}")
    if len(set(token.lower())) != len(token):
        raise ParseError(lineno, f"axis order must not repeat an axis, got {token!r}")
    return token.lower()


def parse_limit_pairs(line: str, lineno: int) -> List[Limit]:
    out: List[Limit] = []
    for group in _LIMIT_GROUP.findall(line):
        pair = group.split()
        if len(pair) != 2:
            raise ParseError(lineno, f"limits: expected (min max), got ({group.strip()})")
        lo, hi = pair
        out.append(Limit(min=to_float(lo, lineno, "limits"), max=to_float(hi, lineno, "limits")))
    return out


class _ASFParser:
    def __init__(self) -> None:
        self.skeleton = Skeleton()
        self.section = ""
        self.bone: Optional[_BoneRecord] = None
        self.hierarchy_open = False
        self._doc_lines: List[str] = []
        self._handlers: Dict[str, Callable[[int, str], None]] = {
            "version": self._on_version,
            "name": self._on_name,
            "units": self._on_units,
            "documentation": self._on_documentation,
            "root": self._on_root,
            "bonedata": self._on_bonedata,
            "hierarchy": self._on_hierarchy,
        }

    def run(self, text: str) -> Skeleton:
        for lineno, line in _iter_lines(text):
            if line.startswith(":"):
                self._on_header(lineno, line[1:].strip())
                continue
            handler = self._handlers.get(self.section)
            if handler is not None:
                handler(lineno, line)

        if self.bone is not None:
            logger.warning("Bone record opened at line %d was never closed, discarded", self.bone.opened_at)
            self.bone = None
        self.skeleton.documentation = "\n".join(self._doc_lines)
        logger.info(
            "Parsed skeleton '%s': %d bones, %d hierarchy parents",
            self.skeleton.name,
            len(self.skeleton.bones),
            len(self.skeleton.hierarchy),
        )
        return self.skeleton

    def _on_header(self, lineno: int, header: str) -> None:
        parts = header.split(None, 1)
        name = parts[0].lower() if parts else ""
        self.section = name
        if name not in SECTIONS:
            logger.debug("line %d: ignoring unrecognised section %r", lineno, header)
            return
        # `:version 1.10` / `:name VICON` carry their value inline
        if len(parts) > 1 and name in ("version", "name"):
            setattr(self.skeleton, name, parts[1].strip())

    def _on_version(self, lineno: int, line: str) -> None:
        self.skeleton.version = line

    def _on_name(self, lineno: int, line: str) -> None:
        self.skeleton.name = line

    def _on_units(self, lineno: int, line: str) -> None:
        parts = line.split()
        if len(parts) >= 2:
            self.skeleton.units[parts[0]] = parts[1]

    def _on_documentation(self, lineno: int, line: str) -> None:
        self._doc_lines.append(line)

    def _on_root(self, lineno: int, line: str) -> None:
        parts = line.split()
        if len(parts) < 2:
            return
        key, values = parts[0], parts[1:]
        if key in ("position", "orientation"):
            _floats(values, 3, lineno, f"root {key}")
        self.skeleton.root[key] = values

    def _on_bonedata(self, lineno: int, line: str) -> None:
        if line == "begin":
            if self.bone is not None:
                logger.warning(
                    "line %d: 'begin' inside open bone record (opened at line %d), discarding it",
                    lineno,
                    self.bone.opened_at,
                )
            self.bone = _BoneRecord(opened_at=lineno)
            return
        if line == "end":
            if self.bone is None:
                raise ParseError(lineno, "'end' without matching 'begin' in bonedata")
            if self.bone.name:
                self.skeleton.bones[self.bone.name] = self.bone.build()
            else:
                logger.warning("line %d: bone record without a name, discarded", lineno)
            self.bone = None
            return
        if self.bone is None:
            return
        self._on_bone_field(self.bone, lineno, line)

    def _on_bone_field(self, bone: _BoneRecord, lineno: int, line: str) -> None:
        parts = line.split()
        key, args = parts[0], parts[1:]

        if line.startswith("(") and bone.last_field == "limits":
            bone.limits.extend(parse_limit_pairs(line, lineno))
            return

        if key == "id":
            if not args:
                raise ParseError(lineno, "id needs a value")
            bone.id = _to_int(args[0], lineno, "id")
        elif key == "name":
            if not args:
                raise ParseError(lineno, "name needs a value")
            bone.name = args[0]
        elif key == "direction":
            x, y, z = _floats(args, 3, lineno, "direction")
            bone.direction = (x, y, z)
        elif key == "length":
            bone.length = _floats(args, 1, lineno, "length")[0]
        elif key == "axis":
            if len(args) < 4:
                raise ParseError(lineno, f"axis needs 3 angles and an order, got {len(args)} values")
            x, y, z = _floats(args, 3, lineno, "axis")
            bone.axis = BoneAxis(angles=(x, y, z), order=parse_axis_order(args[3], lineno))
        elif key == "dof":
            bone.dof = list(args)
        elif key == "limits":
            bone.limits.extend(parse_limit_pairs(line, lineno))
        else:
            logger.debug("line %d: ignoring unknown bone field %r", lineno, key)
        bone.last_field = key

    def _on_hierarchy(self, lineno: int, line: str) -> None:
        if line == "begin":
            self.hierarchy_open = True
            return
        if line == "end":
            if not self.hierarchy_open:
                raise ParseError(lineno, "'end' without matching 'begin' in hierarchy")
            self.hierarchy_open = False
            return
        parts = line.split()
        self.skeleton.hierarchy[parts[0]] = parts[1:]


def parse_asf(text: str) -> Skeleton:
    """Parse skeleton definition text into a Skeleton."""
    return _ASFParser().run(text)


def load_asf(path: str) -> Skeleton:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        text = f.read()
    return parse_asf(text)
