"""
Board store: ordered lanes plus the item collection.

Every mutation builds a new BoardSnapshot and swaps it in only when all
invariant checks pass, so callers never observe a half-applied change.
"""
import logging
from typing import List, Optional, Iterable, Dict, Any

from .grid import validate_step, is_on_grid, overlaps
from .schema import (
    BoardConfigError,
    BoardSnapshot,
    DropTarget,
    Identifier,
    Item,
    ITEM_HEIGHT,
    DEFAULT_STEP_SIZE,
    Lane,
    PseudoLane,
    TargetKind,
    is_reserved,
    normalize_lane_id,
)

logger = logging.getLogger(__name__)


class BoardStore:
    """In-memory store for one board."""

    def __init__(
        self,
        lanes: Iterable[Any] = (),
        items: Iterable[Any] = (),
        step_size: int = DEFAULT_STEP_SIZE,
        item_height: int = ITEM_HEIGHT,
    ):
        """Validate the initial board. Raises BoardConfigError on bad input."""
        self.step_size = validate_step(step_size)
        if isinstance(item_height, bool) or not isinstance(item_height, int) or item_height <= 0:
            raise BoardConfigError(f"item height must be a positive integer, got {item_height!r}")
        self.item_height = item_height

        lane_list = [lane if isinstance(lane, Lane) else Lane(id=lane) for lane in lanes]
        item_list = [self._coerce_item(item) for item in items]
        self._check_initial(lane_list, item_list)

        self._snapshot = BoardSnapshot(
            lanes=tuple(lane_list),
            items=tuple(item_list),
            step_size=self.step_size,
            item_height=self.item_height,
        )

    @staticmethod
    def _coerce_item(item: Any) -> Item:
        if isinstance(item, Item):
            return Item(id=item.id, lane_id=normalize_lane_id(item.lane_id), offset=item.offset)
        return Item.from_dict(item)

    def _check_initial(self, lanes: List[Lane], items: List[Item]) -> None:
        lane_ids = set()
        for lane in lanes:
            _check_id("Lane", lane.id)
            if is_reserved(lane.id):
                raise BoardConfigError(f"Lane id {lane.id!r} is reserved")
            if lane.id in lane_ids:
                raise BoardConfigError(f"Duplicate lane id {lane.id!r}")
            lane_ids.add(lane.id)

        item_ids = set()
        rendered_ids = set()
        placed: Dict[Optional[Identifier], List[Item]] = {}
        for item in items:
            _check_id("Item", item.id)
            if item.id in item_ids:
                raise BoardConfigError(f"Duplicate item id {item.id!r}")
            if is_reserved(item.id) or item.id in lane_ids:
                raise BoardConfigError(f"Item id {item.id!r} is already used by a lane")
            # Snapshots key items by str(id); 1 and "1" would collide there.
            if str(item.id) in rendered_ids:
                raise BoardConfigError(f"Item id {item.id!r} clashes with another item id once rendered")
            item_ids.add(item.id)
            rendered_ids.add(str(item.id))
            if item.lane_id is not None:
                _check_id("Lane", item.lane_id)
            if item.lane_id is not None and item.lane_id not in lane_ids:
                raise BoardConfigError(f"Item {item.id!r} references unknown lane {item.lane_id!r}")
            if item.offset < 0 or not is_on_grid(item.offset, self.step_size):
                raise BoardConfigError(
                    f"Item {item.id!r}: offset {item.offset} must be >= 0 and a multiple of {self.step_size}"
                )
            siblings = placed.setdefault(item.lane_id, [])
            if overlaps(item.offset, self.item_height, siblings):
                raise BoardConfigError(f"Item {item.id!r} overlaps another item in lane {item.lane_id!r}")
            siblings.append(item)

    # ── Queries ──────────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    @property
    def lanes(self) -> List[Lane]:
        return list(self._snapshot.lanes)

    @property
    def items(self) -> List[Item]:
        return list(self._snapshot.items)

    def is_lane(self, id: Identifier) -> bool:
        return any(lane.id == id for lane in self._snapshot.lanes)

    def is_item(self, id: Identifier) -> bool:
        return any(item.id == id for item in self._snapshot.items)

    def lane_index(self, lane_id: Identifier) -> int:
        """Position of a lane in the sequence, -1 if absent."""
        for index, lane in enumerate(self._snapshot.lanes):
            if lane.id == lane_id:
                return index
        return -1

    def get_item(self, item_id: Identifier) -> Optional[Item]:
        for item in self._snapshot.items:
            if item.id == item_id:
                return item
        return None

    def items_in_lane(self, lane_id: Optional[Identifier], exclude: Optional[Identifier] = None) -> List[Item]:
        """Items assigned to ``lane_id``; None or UNASSIGNED selects the unassigned bucket."""
        lane_id = normalize_lane_id(lane_id)
        return [
            item for item in self._snapshot.items
            if normalize_lane_id(item.lane_id) == lane_id and item.id != exclude
        ]

    def unassigned_items(self) -> List[Item]:
        return self.items_in_lane(None)

    def resolve_target(self, over_id: Optional[Identifier]) -> Optional[DropTarget]:
        """Classify a raw drop id against the current board, None if unresolvable."""
        if over_id is None:
            return None
        pseudo = PseudoLane.from_id(over_id)
        if pseudo is not None:
            return DropTarget(kind=TargetKind.PSEUDO_LANE, id=pseudo.value, pseudo=pseudo)
        if self.is_lane(over_id):
            return DropTarget(kind=TargetKind.LANE, id=over_id)
        if self.is_item(over_id):
            return DropTarget(kind=TargetKind.ITEM, id=over_id)
        return None

    # ── Mutations ────────────────────────────────────────────────────────────

    def move_lane(self, active_id: Identifier, over_id: Identifier) -> bool:
        """Move ``active_id`` into the position currently held by ``over_id``."""
        if is_reserved(active_id) or is_reserved(over_id):
            logger.debug("move_lane %r -> %r: reserved lane id", active_id, over_id)
            return False

        active_index = self.lane_index(active_id)
        over_index = self.lane_index(over_id)
        if active_index < 0 or over_index < 0:
            logger.debug("move_lane %r -> %r: unknown lane", active_id, over_id)
            return False
        if active_index == over_index:
            return False

        lanes = list(self._snapshot.lanes)
        lanes.insert(over_index, lanes.pop(active_index))
        self._replace(lanes=tuple(lanes))
        logger.info("Lane %r moved to position %d", active_id, over_index)
        return True

    def relocate_item(self, item_id: Identifier, new_lane_id: Optional[Identifier], new_offset: int) -> bool:
        """
        Atomically set an item's lane and offset.

        Returns False, leaving the board untouched, when the item or lane is
        unknown, the lane cannot hold items, the offset is negative or off-grid,
        or the item would overlap another item in the destination lane.
        """
        item = self.get_item(item_id)
        if item is None:
            logger.debug("relocate_item %r: unknown item", item_id)
            return False

        pseudo = PseudoLane.from_id(new_lane_id)
        if pseudo is not None and not pseudo.accepts_items:
            logger.debug("relocate_item %r: lane %r cannot hold items", item_id, pseudo.value)
            return False
        lane_id = normalize_lane_id(new_lane_id)
        if lane_id is not None and not self.is_lane(lane_id):
            logger.debug("relocate_item %r: unknown lane %r", item_id, lane_id)
            return False

        if isinstance(new_offset, bool) or not isinstance(new_offset, int):
            logger.debug("relocate_item %r: non-integer offset %r", item_id, new_offset)
            return False
        if new_offset < 0 or not is_on_grid(new_offset, self.step_size):
            logger.debug("relocate_item %r: offset %d rejected", item_id, new_offset)
            return False

        siblings = self.items_in_lane(lane_id, exclude=item_id)
        if overlaps(new_offset, self.item_height, siblings):
            logger.debug("relocate_item %r: overlaps in lane %r at %d", item_id, lane_id, new_offset)
            return False

        if item.lane_id == lane_id and item.offset == new_offset:
            return True

        moved = Item(id=item.id, lane_id=lane_id, offset=new_offset)
        self._replace(items=tuple(moved if i.id == item_id else i for i in self._snapshot.items))
        logger.info("Item %r relocated to lane %r at offset %d", item_id, lane_id, new_offset)
        return True

    def remove_lane(self, lane_id: Identifier) -> bool:
        """Drop a lane and send its items to the unassigned bucket, offsets kept."""
        if is_reserved(lane_id) or not self.is_lane(lane_id):
            return False

        lanes = tuple(lane for lane in self._snapshot.lanes if lane.id != lane_id)
        items = tuple(
            Item(id=i.id, lane_id=None, offset=i.offset) if i.lane_id == lane_id else i
            for i in self._snapshot.items
        )
        self._replace(lanes=lanes, items=items)
        logger.info("Lane %r removed", lane_id)
        return True

    def add_lane(self, lane_id: Identifier) -> bool:
        """Append an empty lane at the end of the sequence."""
        if isinstance(lane_id, bool) or not isinstance(lane_id, (str, int)):
            return False
        if is_reserved(lane_id) or self.is_lane(lane_id) or self.is_item(lane_id):
            return False
        self._replace(lanes=self._snapshot.lanes + (Lane(id=lane_id),))
        logger.info("Lane %r added", lane_id)
        return True

    def _replace(self, lanes=None, items=None) -> None:
        self._snapshot = BoardSnapshot(
            lanes=self._snapshot.lanes if lanes is None else lanes,
            items=self._snapshot.items if items is None else items,
            step_size=self.step_size,
            item_height=self.item_height,
        )


def _check_id(what: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise BoardConfigError(f"{what} id must be a string or integer, got {value!r}")
