"""
Drop target detection for live drags.

Lane drags resolve by plain rectangle intersection against lanes. Item drags
first check whether the snapped position would overlap a sibling in the
origin lane; while it does, the detector keeps returning the last valid
target instead of re-resolving, so the highlight does not flicker as the
pointer crosses occupied space.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

from .grid import overlaps, snap
from .schema import (
    ActiveDrag,
    Candidate,
    DragKind,
    Identifier,
    Item,
    ITEM_HEIGHT,
    PseudoLane,
    Rect,
    TargetKind,
    normalize_lane_id,
)


def intersection_ratio(a: Rect, b: Rect) -> float:
    """
    Intersection over union of two rects, 0.0 when they do not meet.

    When either rect carries no width the comparison is done on the vertical
    axis alone.
    """
    top = max(a.top, b.top)
    bottom = min(a.bottom, b.bottom)
    if bottom <= top:
        return 0.0
    vertical = bottom - top

    if a.width > 0 and b.width > 0:
        left = max(a.left, b.left)
        right = min(a.right, b.right)
        if right <= left:
            return 0.0
        shared = vertical * (right - left)
        union = a.width * a.height + b.width * b.height - shared
    else:
        shared = vertical
        union = a.height + b.height - shared

    if union <= 0:
        return 0.0
    return shared / union


def rect_intersection(active_rect: Rect, candidates: Iterable[Candidate]) -> List[Tuple[Candidate, float]]:
    """Intersecting candidates, best overlap first. Ties keep input order."""
    hits = []
    for candidate in candidates:
        ratio = intersection_ratio(active_rect, candidate.rect)
        if ratio > 0:
            hits.append((candidate, ratio))
    hits.sort(key=lambda hit: hit[1], reverse=True)
    return hits


def _is_lane_candidate(candidate: Candidate) -> bool:
    return candidate.kind in (TargetKind.LANE, TargetKind.PSEUDO_LANE) or (
        PseudoLane.from_id(candidate.id) is not None
    )


def _accepts_items(candidate: Candidate) -> bool:
    pseudo = PseudoLane.from_id(candidate.id)
    if pseudo is not None:
        return pseudo.accepts_items
    return True


class CollisionDetector:
    """Picks the drop target for the active drag, with a sticky fallback."""

    def __init__(self, step_size: int, item_height: int = ITEM_HEIGHT):
        self.step_size = step_size
        self.item_height = item_height
        self._last_over_id: Optional[Identifier] = None

    @property
    def last_over_id(self) -> Optional[Identifier]:
        return self._last_over_id

    def reset(self) -> None:
        """Forget the remembered target. Called when a new drag starts."""
        self._last_over_id = None

    def detect(
        self,
        active: ActiveDrag,
        active_rect: Rect,
        candidates: Sequence[Candidate],
        items: Sequence[Item],
    ) -> Optional[Identifier]:
        """Return the id of the current drop target, or None if there is none."""
        if active.kind is DragKind.LANE:
            pool = [c for c in candidates if _is_lane_candidate(c) and c.id != active.dragged_id]
            return self._resolve(active_rect, pool)

        snapped_top = snap(active_rect.top, self.step_size)
        origin_lane = normalize_lane_id(active.origin_lane_id)
        siblings = [
            item for item in items
            if normalize_lane_id(item.lane_id) == origin_lane and item.id != active.dragged_id
        ]
        if overlaps(snapped_top, active_rect.height, siblings, item_height=self.item_height):
            return self._last_over_id

        pool = [c for c in candidates if c.id != active.dragged_id and _accepts_items(c)]
        return self._resolve(active_rect, pool)

    def _resolve(self, active_rect: Rect, pool: List[Candidate]) -> Optional[Identifier]:
        hits = rect_intersection(active_rect, pool)
        if hits:
            self._last_over_id = hits[0][0].id
            return self._last_over_id
        return self._last_over_id
