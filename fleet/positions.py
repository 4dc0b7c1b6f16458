"""Mount positions on the tractor, the trailer and the spare rack."""

from enum import Enum
from typing import Dict, List, Tuple

from .errors import ValidationError

STEER = "Steer axle"
DRIVE = "Drive axle"
TAG = "Tag axle"
TRAILER_1 = "Trailer axle 1"
TRAILER_2 = "Trailer axle 2"
TRAILER_3 = "Trailer axle 3"
SPARE = "Spare rack"


class MountPosition(Enum):
    """A slot where exactly one tire can be mounted at a time."""

    STEER_LEFT = ("steer-left", "Steer left", STEER)
    STEER_RIGHT = ("steer-right", "Steer right", STEER)
    DRIVE_LEFT_OUTER = ("drive-left-outer", "Drive left outer", DRIVE)
    DRIVE_LEFT_INNER = ("drive-left-inner", "Drive left inner", DRIVE)
    DRIVE_RIGHT_INNER = ("drive-right-inner", "Drive right inner", DRIVE)
    DRIVE_RIGHT_OUTER = ("drive-right-outer", "Drive right outer", DRIVE)
    TAG_LEFT_OUTER = ("tag-left-outer", "Tag left outer", TAG)
    TAG_LEFT_INNER = ("tag-left-inner", "Tag left inner", TAG)
    TAG_RIGHT_INNER = ("tag-right-inner", "Tag right inner", TAG)
    TAG_RIGHT_OUTER = ("tag-right-outer", "Tag right outer", TAG)
    TRAILER1_LEFT_OUTER = ("trailer1-left-outer", "Trailer 1 left outer", TRAILER_1)
    TRAILER1_LEFT_INNER = ("trailer1-left-inner", "Trailer 1 left inner", TRAILER_1)
    TRAILER1_RIGHT_INNER = ("trailer1-right-inner", "Trailer 1 right inner", TRAILER_1)
    TRAILER1_RIGHT_OUTER = ("trailer1-right-outer", "Trailer 1 right outer", TRAILER_1)
    TRAILER2_LEFT_OUTER = ("trailer2-left-outer", "Trailer 2 left outer", TRAILER_2)
    TRAILER2_LEFT_INNER = ("trailer2-left-inner", "Trailer 2 left inner", TRAILER_2)
    TRAILER2_RIGHT_INNER = ("trailer2-right-inner", "Trailer 2 right inner", TRAILER_2)
    TRAILER2_RIGHT_OUTER = ("trailer2-right-outer", "Trailer 2 right outer", TRAILER_2)
    TRAILER3_LEFT_OUTER = ("trailer3-left-outer", "Trailer 3 left outer", TRAILER_3)
    TRAILER3_LEFT_INNER = ("trailer3-left-inner", "Trailer 3 left inner", TRAILER_3)
    TRAILER3_RIGHT_INNER = ("trailer3-right-inner", "Trailer 3 right inner", TRAILER_3)
    TRAILER3_RIGHT_OUTER = ("trailer3-right-outer", "Trailer 3 right outer", TRAILER_3)
    SPARE_1 = ("spare-1", "Spare 1", SPARE)
    SPARE_2 = ("spare-2", "Spare 2", SPARE)

    def __new__(cls, code: str, label: str, axle: str):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.label = label
        obj.axle = axle
        return obj

    @property
    def is_spare(self) -> bool:
        """Spare slots store a tire; it does not run while parked there."""
        return self.axle == SPARE


AXLE_LAYOUT: List[Tuple[str, List[MountPosition]]] = []
for _position in MountPosition:
    if not AXLE_LAYOUT or AXLE_LAYOUT[-1][0] != _position.axle:
        AXLE_LAYOUT.append((_position.axle, []))
    AXLE_LAYOUT[-1][1].append(_position)


def _legacy_labels() -> Dict[str, MountPosition]:
    """Slot names used by older exports of the mobile app."""
    labels = {
        "le diant": MountPosition.STEER_LEFT,
        "ld diant": MountPosition.STEER_RIGHT,
        "estepe 1": MountPosition.SPARE_1,
        "estepe 2": MountPosition.SPARE_2,
    }
    sides = [
        ("le fora", "LEFT_OUTER"),
        ("le dentro", "LEFT_INNER"),
        ("ld dentro", "RIGHT_INNER"),
        ("ld fora", "RIGHT_OUTER"),
    ]
    for prefix, axle in (("tração", "DRIVE"), ("truck", "TAG")):
        for side, suffix in sides:
            labels[f"{prefix} {side}"] = MountPosition[f"{axle}_{suffix}"]
    short_sides = [
        ("le f", "LEFT_OUTER"),
        ("le d", "LEFT_INNER"),
        ("ld d", "RIGHT_INNER"),
        ("ld f", "RIGHT_OUTER"),
    ]
    for n in (1, 2, 3):
        for side, suffix in short_sides:
            labels[f"c{n} {side}"] = MountPosition[f"TRAILER{n}_{suffix}"]
    return labels


_LOOKUP: Dict[str, MountPosition] = _legacy_labels()
for _position in MountPosition:
    _LOOKUP[_position.value] = _position
    _LOOKUP[_position.name.lower()] = _position
    _LOOKUP[_position.label.lower()] = _position


def parse_position(text) -> MountPosition:
    """Resolve a slot from its code, enum name or label (case-insensitive)."""
    if isinstance(text, MountPosition):
        return text
    key = str(text or "").strip().lower()
    try:
        return _LOOKUP[key]
    except KeyError:
        raise ValidationError(f"Unknown mount position: {text!r}") from None
