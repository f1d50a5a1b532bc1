"""
Scheduler: one board instance with its store, detector, reconciler and bridge.
"""
from typing import Any, Dict, Iterable, Optional

from .collision import CollisionDetector
from .events import BoardEventBridge
from .reconciler import DragReconciler
from .schema import BoardSnapshot, DEFAULT_STEP_SIZE, ITEM_HEIGHT, Identifier
from .store import BoardStore


class Scheduler:
    """Wires the drag engine together for a single board."""

    def __init__(
        self,
        lanes: Iterable[Any] = (),
        items: Iterable[Any] = (),
        step_size: int = DEFAULT_STEP_SIZE,
        item_height: int = ITEM_HEIGHT,
        vertical: bool = False,
    ):
        self.store = BoardStore(lanes, items, step_size=step_size, item_height=item_height)
        self.detector = CollisionDetector(self.store.step_size, self.store.item_height)
        self.reconciler = DragReconciler(self.store, self.detector)
        self.events = BoardEventBridge(self.reconciler)
        self.vertical = vertical  # lanes stacked as rows instead of columns

    def snapshot(self) -> BoardSnapshot:
        return self.store.snapshot

    @property
    def highlighted_target(self) -> Optional[Identifier]:
        return self.reconciler.highlighted_target

    def add_lane(self, lane_id: Identifier) -> bool:
        if self.store.add_lane(lane_id):
            self.events.publish_board()
            return True
        return False

    def remove_lane(self, lane_id: Identifier) -> bool:
        if self.reconciler.is_dragging:
            # Lanes cannot change under a live gesture.
            return False
        if self.store.remove_lane(lane_id):
            self.events.publish_board()
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Board state for renderers, including the live highlight."""
        data = self.snapshot().to_dict()
        active = self.reconciler.active
        data["vertical"] = self.vertical
        data["active"] = (
            {"id": active.dragged_id, "kind": active.kind.value} if active else None
        )
        data["highlighted"] = self.highlighted_target
        return data
