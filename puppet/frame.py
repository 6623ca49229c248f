import copy
import logging
import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, FrozenSet, List, NamedTuple, Tuple

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Top-level sections, in the order they appear on the wire.
SECTIONS = ("face", "bones", "handLeft", "handRight")


class FrameError(ValueError):
    """Raised when a producer payload cannot be used at all (not a JSON object)."""


# ============================================================
# SCHEMA - one dataclass per nested object of the wire format.
# Attribute names are snake_case; to_dict() emits the camelCase
# keys producers and consumers use (thetaX, armLeft, uBody...).
# ============================================================

@dataclass
class Orientation:
    """Head basis axes. Seeded as a camera-facing head with Y+ pointing down."""
    look: Vec3 = (0.0, 0.0, -1.0)
    up: Vec3 = (0.0, -1.0, 0.0)
    right: Vec3 = (1.0, 0.0, 0.0)


@dataclass
class Iris:
    theta_x: float = 0.0  # rotation around the eye's negative Y axis
    theta_y: float = 0.0  # rotation around the eye's positive X axis


@dataclass
class Eye:
    """
    openness: 1.0 = fully open, 0.0 = closed. Not clamped.
    blink:    derived from openness by derive_fields(), never read from input.
    """
    openness: float = 1.0
    iris: Iris = field(default_factory=Iris)
    blink: bool = False


@dataclass
class Eyes:
    left: Eye = field(default_factory=Eye)
    right: Eye = field(default_factory=Eye)


@dataclass
class Mouth:
    # 1.0 = fully smiling, 0.0 = neutral, -1.0 = fully frowning.
    smileness: float = 0.0
    openness: float = 0.0


@dataclass
class Face:
    orientation: Orientation = field(default_factory=Orientation)
    eyes: Eyes = field(default_factory=Eyes)
    mouth: Mouth = field(default_factory=Mouth)


@dataclass
class Bones:
    """
    Global bone angles in degrees around the Z axis, increasing clockwise
    (atan2 in a Y-down system), plus the rotation axis each angle refers to.
    The u_* axes are structural: copied from the newest frame, never averaged.
    """
    body: float = 0.0
    head: float = 0.0
    arm_left: float = 110.0
    elbow_left: float = -180.0
    wrist_left: float = -180.0
    arm_right: float = 70.0
    elbow_right: float = 0.0
    wrist_right: float = 0.0

    u_body: Vec3 = (0.0, 0.0, 1.0)
    u_head: Vec3 = (0.0, 0.0, 1.0)
    u_arm_left: Vec3 = (0.0, 0.0, 1.0)
    u_elbow_left: Vec3 = (0.0, 0.0, 1.0)
    u_wrist_left: Vec3 = (0.0, 0.0, 1.0)
    u_arm_right: Vec3 = (0.0, 0.0, 1.0)
    u_elbow_right: Vec3 = (0.0, 0.0, 1.0)
    u_wrist_right: Vec3 = (0.0, 0.0, 1.0)


@dataclass
class Hand:
    """
    fingers: bitmask of extended fingers, pinky -> thumb from the high bit down.
    roll:    rotation around the wrist axis. 1.0 = palm forward, -1.0 = palm back.
    """
    fingers: int = 0b11111
    roll: float = 0.0


@dataclass
class PuppetFrame:
    """A complete pose snapshot. Every leaf is always populated."""
    face: Face = field(default_factory=Face)
    bones: Bones = field(default_factory=Bones)
    hand_left: Hand = field(default_factory=Hand)
    hand_right: Hand = field(default_factory=Hand)

    def copy(self) -> "PuppetFrame":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape served by GET /puppet-data."""
        return _to_wire(asdict(self))


def default_frame() -> PuppetFrame:
    """The seed frame served before any producer has posted."""
    return PuppetFrame()


# ============================================================
# FIELD TABLE - every leaf of PuppetFrame and how it is treated.
# merge, averaging, parsing and derivation all iterate FIELDS
# instead of hard-coding paths.
# ============================================================

class FieldKind(str, Enum):
    SCALAR = "scalar"            # averaged as a plain mean
    VECTOR = "vector"            # averaged component-wise
    CATEGORICAL = "categorical"  # integer bitmask, newest value wins
    AXIS = "axis"                # structural 3-vector, newest value wins
    DERIVED = "derived"          # computed from other fields, never parsed


class FieldSpec(NamedTuple):
    wire: Tuple[str, ...]
    attr: Tuple[str, ...]
    kind: FieldKind

    @property
    def section(self) -> str:
        return self.wire[0]

    @property
    def name(self) -> str:
        return ".".join(self.wire)


def _snake(name: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in name)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _to_wire(value):
    if isinstance(value, dict):
        return {_camel(k): _to_wire(v) for k, v in value.items()}
    if isinstance(value, (tuple, list)):
        return [_to_wire(v) for v in value]
    return value


def _spec(wire_path: str, kind: FieldKind) -> FieldSpec:
    wire = tuple(wire_path.split("."))
    return FieldSpec(wire, tuple(_snake(p) for p in wire), kind)


def _build_fields() -> Tuple[FieldSpec, ...]:
    specs = [
        _spec("face.orientation.look", FieldKind.VECTOR),
        _spec("face.orientation.up", FieldKind.VECTOR),
        _spec("face.orientation.right", FieldKind.VECTOR),
    ]
    for side in ("left", "right"):
        specs += [
            _spec(f"face.eyes.{side}.openness", FieldKind.SCALAR),
            _spec(f"face.eyes.{side}.iris.thetaX", FieldKind.SCALAR),
            _spec(f"face.eyes.{side}.iris.thetaY", FieldKind.SCALAR),
            _spec(f"face.eyes.{side}.blink", FieldKind.DERIVED),
        ]
    specs += [
        _spec("face.mouth.smileness", FieldKind.SCALAR),
        _spec("face.mouth.openness", FieldKind.SCALAR),
    ]
    bones = ("body", "head", "armLeft", "elbowLeft", "wristLeft",
             "armRight", "elbowRight", "wristRight")
    specs += [_spec(f"bones.{b}", FieldKind.SCALAR) for b in bones]
    specs += [_spec(f"bones.u{b[0].upper()}{b[1:]}", FieldKind.AXIS) for b in bones]
    for hand in ("handLeft", "handRight"):
        specs += [
            _spec(f"{hand}.fingers", FieldKind.CATEGORICAL),
            _spec(f"{hand}.roll", FieldKind.SCALAR),
        ]
    return tuple(specs)


FIELDS = _build_fields()

# Wire section name -> PuppetFrame attribute name.
SECTION_ATTRS = {s: _snake(s) for s in SECTIONS}


def get_path(obj, path):
    """Walk attribute names into the frame tree and return the leaf."""
    for part in path:
        obj = getattr(obj, part)
    return obj


def set_path(obj, path, value):
    """Set the leaf at path. Callers only ever do this on a private copy."""
    for part in path[:-1]:
        obj = getattr(obj, part)
    setattr(obj, path[-1], value)


# ============================================================
# BOUNDARY PARSING
# ============================================================

def _is_number(value) -> bool:
    # bool is an int subclass, but True is not an angle.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON integers past float range
        return False


def _coerce(kind: FieldKind, value):
    """Return the typed leaf value, or raise ValueError if it is malformed."""
    if kind == FieldKind.SCALAR:
        if not _is_number(value):
            raise ValueError(f"expected a number, got {value!r}")
        return float(value)
    if kind in (FieldKind.VECTOR, FieldKind.AXIS):
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise ValueError(f"expected a 3-vector, got {value!r}")
        if not all(_is_number(v) for v in value):
            raise ValueError(f"non-numeric vector component in {value!r}")
        return tuple(float(v) for v in value)
    if kind == FieldKind.CATEGORICAL:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"expected an integer bitmask, got {value!r}")
        return value
    raise ValueError(f"{kind.value} fields are not accepted from input")


_MISSING = object()


def _lookup(payload: Dict[str, Any], wire: Tuple[str, ...]):
    obj = payload
    for key in wire:
        if not isinstance(obj, dict) or key not in obj:
            return _MISSING
        obj = obj[key]
    return obj


@dataclass
class FrameUpdate:
    """
    One producer payload after boundary parsing.

    sections: top-level sections the payload supplied (as JSON objects).
    values:   attr path -> typed value, for every well-formed leaf supplied.

    Anything else in the payload (blink, unknown keys, malformed leaves) has
    already been dropped here, so merge and averaging only ever see clean numbers.
    """
    sections: FrozenSet[str] = frozenset()
    values: Dict[Tuple[str, ...], Any] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload) -> "FrameUpdate":
        if not isinstance(payload, dict):
            raise FrameError(f"puppet data must be a JSON object, got {type(payload).__name__}")

        sections = frozenset(s for s in SECTIONS if isinstance(payload.get(s), dict))
        values, rejected = {}, []

        for spec in FIELDS:
            if spec.kind == FieldKind.DERIVED or spec.section not in sections:
                continue
            raw = _lookup(payload, spec.wire)
            if raw is _MISSING:
                continue
            try:
                values[spec.attr] = _coerce(spec.kind, raw)
            except ValueError as e:
                logger.warning(f"Ignoring malformed field {spec.name}: {e}")
                rejected.append(spec.name)

        return cls(sections=sections, values=values, rejected=rejected)

    @classmethod
    def from_frame(cls, frame: PuppetFrame) -> "FrameUpdate":
        """A complete update carrying every non-derived leaf of frame."""
        values = {spec.attr: get_path(frame, spec.attr)
                  for spec in FIELDS if spec.kind != FieldKind.DERIVED}
        return cls(sections=frozenset(SECTIONS), values=values)
