"""
Board schema: lanes, items, drag geometry and drop targets.

Board layout:
  [UNASSIGNED] [lane 1] [lane 2] ... [lane N] [ADD]

The two bracketed ends are pseudo-lanes. They are never part of the lane
sequence, never reorderable, and only UNASSIGNED may hold items.
"""
import math
from enum import Enum
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Tuple, Union


Identifier = Union[str, int]

DEFAULT_STEP_SIZE = 20   # grid granularity in px
ITEM_HEIGHT = 60         # fixed rendered item height in px


def _finite(data: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    value = float(data[key] if default is None else data.get(key, default))
    if not math.isfinite(value):
        raise ValueError(f"{key} must be a finite number, got {value!r}")
    return value


class BoardConfigError(Exception):
    """Raised when a board is set up with ambiguous identity or undefined snapping."""
    pass


class PseudoLane(Enum):
    """Reserved lane ids that are not part of the lane sequence."""
    UNASSIGNED = "unassigned"   # catch-all bucket for items without a lane
    ADD = "add"                 # "+ add lane" affordance, never holds items

    @property
    def accepts_items(self) -> bool:
        return self is PseudoLane.UNASSIGNED

    @property
    def reorderable(self) -> bool:
        return False

    @classmethod
    def from_id(cls, value: Any) -> Optional["PseudoLane"]:
        """Return the pseudo-lane for a raw id, or None for ordinary ids."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value == member.value:
                return member
        return None


def is_reserved(lane_id: Any) -> bool:
    return PseudoLane.from_id(lane_id) is not None


def normalize_lane_id(lane_id: Any) -> Optional[Identifier]:
    """Map the unassigned marker (None or UNASSIGNED) to None."""
    if lane_id is None or PseudoLane.from_id(lane_id) is PseudoLane.UNASSIGNED:
        return None
    return lane_id


class DragKind(Enum):
    """What the user is dragging."""
    LANE = "lane"
    ITEM = "item"


class TargetKind(Enum):
    """What a drop target resolves to on the current board."""
    LANE = "lane"
    PSEUDO_LANE = "pseudo_lane"
    ITEM = "item"

    @classmethod
    def from_str(cls, value: str) -> "TargetKind":
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown target kind: {value!r}")


@dataclass(frozen=True)
class Lane:
    id: Identifier

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class Item:
    """A positioned unit of work. ``lane_id=None`` means unassigned."""
    id: Identifier
    lane_id: Optional[Identifier] = None
    offset: int = 0

    @property
    def is_unassigned(self) -> bool:
        return normalize_lane_id(self.lane_id) is None

    def span(self, height: int = ITEM_HEIGHT) -> Tuple[int, int]:
        """Half-open vertical span ``[offset, offset + height)``."""
        return self.offset, self.offset + height

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "lane_id": self.lane_id, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        if not isinstance(data, dict):
            raise BoardConfigError(f"Item must be a mapping, got {data!r}")
        if "id" not in data:
            raise BoardConfigError(f"Item without id: {data!r}")
        offset = data.get("offset", 0)
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise BoardConfigError(f"Item {data['id']!r}: offset must be an integer, got {offset!r}")
        return cls(
            id=data["id"],
            lane_id=normalize_lane_id(data.get("lane_id")),
            offset=offset,
        )


@dataclass
class ActiveDrag:
    """The single live gesture. Exists only between drag start and end/cancel."""
    dragged_id: Identifier
    kind: DragKind
    origin_lane_id: Optional[Identifier] = None
    origin_offset: Optional[int] = None


@dataclass(frozen=True)
class Rect:
    """Measured rectangle in px. ``width == 0`` means vertical-only geometry."""
    top: float
    height: float
    left: float = 0.0
    width: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.top, self.height, self.left, self.width))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(
            top=_finite(data, "top"),
            height=_finite(data, "height"),
            left=_finite(data, "left", 0.0),
            width=_finite(data, "width", 0.0),
        )


@dataclass(frozen=True)
class Candidate:
    """A droppable measured by the gesture layer this frame."""
    id: Identifier
    kind: TargetKind
    rect: Rect

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        return cls(
            id=data["id"],
            kind=TargetKind.from_str(data.get("kind", "lane")),
            rect=Rect.from_dict(data["rect"]),
        )


@dataclass(frozen=True)
class Delta:
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Delta":
        data = data or {}
        return cls(x=_finite(data, "x", 0.0), y=_finite(data, "y", 0.0))

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class DropTarget:
    """Tagged drop target: a real lane, a pseudo-lane, or an item."""
    kind: TargetKind
    id: Identifier
    pseudo: Optional[PseudoLane] = None


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable view of the board handed to renderers."""
    lanes: Tuple[Lane, ...] = ()
    items: Tuple[Item, ...] = ()
    step_size: int = DEFAULT_STEP_SIZE
    item_height: int = ITEM_HEIGHT

    @property
    def lane_ids(self) -> List[Identifier]:
        return [lane.id for lane in self.lanes]

    @property
    def items_by_id(self) -> Dict[Identifier, Item]:
        return {item.id: item for item in self.items}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lanes": [lane.to_dict() for lane in self.lanes],
            "items": {str(item.id): item.to_dict() for item in self.items},
            "step_size": self.step_size,
            "item_height": self.item_height,
        }
