"""
Grid snapping and vertical overlap checks.

Both helpers are pure and shared by the collision detector, the drag
reconciler and the store so that every layer agrees on where an item lands.
"""
import math
from typing import Iterable, Optional

from .schema import BoardConfigError, Item


def validate_step(step) -> int:
    """Return ``step`` if it is a usable grid size, else raise BoardConfigError."""
    if isinstance(step, bool) or not isinstance(step, int) or step <= 0:
        raise BoardConfigError(f"step size must be a positive integer, got {step!r}")
    return step


def snap(value: float, step: int) -> int:
    """
    Round ``value`` to the nearest multiple of ``step``.

    Halves round away from zero, so snap(10, 20) == 20 and snap(-10, 20) == -20.
    """
    validate_step(step)
    ratio = value / step
    units = math.floor(abs(ratio) + 0.5)
    if ratio < 0:
        units = -units
    return int(units) * step


def is_on_grid(value: int, step: int) -> bool:
    return value % validate_step(step) == 0


def spans_overlap(top_a: float, bottom_a: float, top_b: float, bottom_b: float) -> bool:
    # Half-open intervals: flush edges do not count.
    return top_a < bottom_b and top_b < bottom_a


def overlaps(
    candidate_top: float,
    height: float,
    existing_items: Iterable[Item],
    item_height: Optional[float] = None,
) -> bool:
    """
    True if ``[candidate_top, candidate_top + height)`` intersects any item span.

    Items are ``item_height`` tall; when omitted they are assumed to be as tall
    as the candidate. An item starting exactly at ``candidate_top + height`` (or
    ending exactly at ``candidate_top``) is flush-adjacent, not overlapping.
    """
    if item_height is None:
        item_height = height
    candidate_bottom = candidate_top + height
    for item in existing_items:
        if spans_overlap(candidate_top, candidate_bottom, item.offset, item.offset + item_height):
            return True
    return False
