"""
Drag lifecycle: Idle -> Dragging -> Idle.

    on_drag_start   records what is being dragged and where it came from
    on_drag_move    recomputes the highlighted drop target (no mutation)
    on_drag_end     commits through the store, or discards
    on_drag_cancel  discards

Rejected drops are silent: the store is left on its pre-drag snapshot and the
method returns False. Nothing in here raises for a bad gesture.
"""
import logging
from typing import Optional, Sequence

from .collision import CollisionDetector
from .grid import snap
from .schema import (
    ActiveDrag,
    Candidate,
    Delta,
    DragKind,
    Identifier,
    Rect,
    TargetKind,
)
from .store import BoardStore

logger = logging.getLogger(__name__)


class DragReconciler:
    """Turns gesture events into BoardStore mutations."""

    def __init__(self, store: BoardStore, detector: Optional[CollisionDetector] = None):
        self.store = store
        self.detector = detector or CollisionDetector(store.step_size, store.item_height)
        self._active: Optional[ActiveDrag] = None
        self._highlighted: Optional[Identifier] = None

    @property
    def active(self) -> Optional[ActiveDrag]:
        return self._active

    @property
    def is_dragging(self) -> bool:
        return self._active is not None

    @property
    def highlighted_target(self) -> Optional[Identifier]:
        return self._highlighted

    def on_drag_start(self, active_id: Identifier) -> bool:
        """Begin a drag. Refused while another drag is live or for unknown ids."""
        if self._active is not None:
            logger.debug("Drag start %r refused: %r already dragging", active_id, self._active.dragged_id)
            return False

        if self.store.is_lane(active_id):
            self._active = ActiveDrag(dragged_id=active_id, kind=DragKind.LANE)
        elif self.store.is_item(active_id):
            item = self.store.get_item(active_id)
            self._active = ActiveDrag(
                dragged_id=active_id,
                kind=DragKind.ITEM,
                origin_lane_id=item.lane_id,
                origin_offset=item.offset,
            )
        else:
            logger.debug("Drag start refused: %r is neither a lane nor an item", active_id)
            return False

        self.detector.reset()
        self._highlighted = None
        logger.debug("Drag started: %s %r", self._active.kind.value, active_id)
        return True

    def on_drag_move(self, active_rect: Rect, candidates: Sequence[Candidate]) -> Optional[Identifier]:
        """Update the highlighted target for the current frame."""
        if self._active is None:
            return None
        if not active_rect.is_finite or not all(c.rect.is_finite for c in candidates):
            logger.debug("Drag %r: non-finite geometry ignored", self._active.dragged_id)
            return self._highlighted
        self._highlighted = self.detector.detect(
            self._active, active_rect, candidates, self.store.items
        )
        return self._highlighted

    def on_drag_end(self, over_id: Optional[Identifier], delta: Optional[Delta] = None) -> bool:
        """Finish the drag. Returns True if the drop was accepted."""
        active = self._active
        self._clear()
        if active is None:
            return False

        target = self.store.resolve_target(over_id)
        if target is None:
            logger.debug("Drag %r ended without a target", active.dragged_id)
            return False

        if active.kind is DragKind.LANE:
            return self._commit_lane(active, target)
        return self._commit_item(active, target, delta or Delta())

    def on_drag_cancel(self) -> None:
        if self._active is not None:
            logger.debug("Drag %r cancelled", self._active.dragged_id)
        self._clear()

    def _clear(self) -> None:
        self._active = None
        self._highlighted = None

    def _commit_lane(self, active: ActiveDrag, target) -> bool:
        if target.kind is not TargetKind.LANE:
            # Pseudo-lanes and items are not reorder targets.
            logger.debug("Lane %r dropped on %s %r: discarded", active.dragged_id, target.kind.value, target.id)
            return False
        return self.store.move_lane(active.dragged_id, target.id)

    def _commit_item(self, active: ActiveDrag, target, delta: Delta) -> bool:
        if not delta.is_finite:
            logger.debug("Item %r dropped with non-finite delta: discarded", active.dragged_id)
            return False
        new_offset = snap(active.origin_offset + delta.y, self.store.step_size)
        if new_offset < 0:
            logger.debug("Item %r dropped above lane top (%d): discarded", active.dragged_id, new_offset)
            return False

        if target.kind is TargetKind.LANE:
            new_lane_id = target.id
        elif target.kind is TargetKind.PSEUDO_LANE:
            if not target.pseudo.accepts_items:
                logger.debug("Item %r dropped on %r: discarded", active.dragged_id, target.id)
                return False
            new_lane_id = None
        elif target.kind is TargetKind.ITEM:
            # Dropping onto an item joins that item's lane; it is not a swap.
            new_lane_id = self.store.get_item(target.id).lane_id
        else:
            raise AssertionError(f"unhandled target kind {target.kind}")

        committed = self.store.relocate_item(active.dragged_id, new_lane_id, new_offset)
        if not committed:
            logger.debug("Item %r drop rejected; left at origin", active.dragged_id)
        return committed
