"""
Event bridge: connects the external drag-gesture layer to the reconciler.

The gesture layer sends plain dict payloads (start, move, end, cancel). This
module decodes them, drives the DragReconciler, and notifies subscribers:

    drag_started    active_id, kind
    target_changed  active_id, over_id
    drag_committed  active_id, over_id, snapshot
    drag_discarded  active_id, over_id
    board_updated   snapshot
"""
import logging
from typing import Optional, Dict, Any, Callable, List

from .reconciler import DragReconciler
from .schema import Candidate, Delta, Rect

logger = logging.getLogger(__name__)

EVENT_TYPES = (
    "drag_started",
    "target_changed",
    "drag_committed",
    "drag_discarded",
    "board_updated",
)


class GesturePayloadError(ValueError):
    """Raised when the gesture layer sends a payload that cannot be decoded."""
    pass


class BoardEventBridge:
    """Routes gesture events to the reconciler and publishes board changes."""

    def __init__(self, reconciler: DragReconciler):
        self.reconciler = reconciler
        self.subscribers: Dict[str, List[Callable]] = {}  # event_type -> callbacks

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Invalid event_type: {event_type}")
        if event_type not in self.subscribers:
            self.subscribers[event_type] = []
        self.subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        callbacks = self.subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def _emit(self, event_type: str, **kwargs) -> None:
        """Emit an event to all subscribers. A failing callback does not stop the rest."""
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("Error in %s callback", event_type)

    # ── Gesture lifecycle ────────────────────────────────────────────────────

    def start(self, payload: Dict[str, Any]) -> bool:
        """Gesture layer picked something up: ``{"active_id": ...}``."""
        active_id = _require(payload, "active_id")
        if not self.reconciler.on_drag_start(active_id):
            return False
        self._emit("drag_started", active_id=active_id, kind=self.reconciler.active.kind)
        return True

    def move(self, payload: Dict[str, Any]) -> Optional[Any]:
        """
        Pointer moved: ``{"rect": {...}, "candidates": [{"id", "kind", "rect"}, ...]}``.

        Returns the highlighted drop target id (or None).
        """
        active = self.reconciler.active
        if active is None:
            return None
        try:
            rect = Rect.from_dict(_require(payload, "rect"))
            candidates = [Candidate.from_dict(c) for c in payload.get("candidates") or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise GesturePayloadError(f"Bad move payload: {e}") from e

        previous = self.reconciler.highlighted_target
        over_id = self.reconciler.on_drag_move(rect, candidates)
        if over_id != previous:
            self._emit("target_changed", active_id=active.dragged_id, over_id=over_id)
        return over_id

    def end(self, payload: Dict[str, Any]) -> bool:
        """Gesture released: ``{"over_id": ..., "delta": {"x": .., "y": ..}}``."""
        active = self.reconciler.active
        if active is None:
            return False
        try:
            if not isinstance(payload, dict):
                raise TypeError("payload must be an object")
            delta = Delta.from_dict(payload.get("delta"))
        except (TypeError, ValueError, AttributeError) as e:
            self.reconciler.on_drag_cancel()
            raise GesturePayloadError(f"Bad end payload: {e}") from e

        over_id = payload.get("over_id")
        if self.reconciler.on_drag_end(over_id, delta):
            snapshot = self.reconciler.store.snapshot
            self._emit("drag_committed", active_id=active.dragged_id, over_id=over_id, snapshot=snapshot)
            self._emit("board_updated", snapshot=snapshot)
            return True

        self._emit("drag_discarded", active_id=active.dragged_id, over_id=over_id)
        return False

    def cancel(self) -> None:
        active = self.reconciler.active
        self.reconciler.on_drag_cancel()
        if active is not None:
            self._emit("drag_discarded", active_id=active.dragged_id, over_id=None)

    def publish_board(self) -> None:
        """Push the current snapshot to subscribers after a non-drag mutation."""
        self._emit("board_updated", snapshot=self.reconciler.store.snapshot)


def _require(payload: Dict[str, Any], key: str) -> Any:
    if not isinstance(payload, dict) or payload.get(key) is None:
        raise GesturePayloadError(f"Payload missing {key!r}")
    return payload[key]
