"""Tests for grid snapping and the overlap guard."""
import pytest

from laneboard.grid import snap, overlaps, validate_step, is_on_grid
from laneboard.schema import BoardConfigError, Item


class TestSnap:
    """Round-half-away-from-zero snapping."""

    @pytest.mark.parametrize(
        "value,step,expected",
        [
            (0, 20, 0),
            (25, 20, 20),
            (29.9, 20, 20),
            (30, 20, 40),
            (10, 20, 20),
            (-10, 20, -20),
            (-9, 20, 0),
            (-25, 20, -20),
            (7, 5, 5),
            (7.5, 5, 10),
            (100, 1, 100),
        ],
    )
    def test_rounds_to_nearest_multiple(self, value, step, expected):
        assert snap(value, step) == expected

    def test_returns_int(self):
        assert isinstance(snap(41.2, 20), int)

    @pytest.mark.parametrize("value", [-73.5, -10, -0.4, 0, 3, 10, 19.99, 55, 1234.5])
    def test_idempotent(self, value):
        once = snap(value, 20)
        assert snap(once, 20) == once
        assert snap(value, 20) == once

    @pytest.mark.parametrize("step", [0, -20, 2.5, True, None, "20"])
    def test_bad_step_is_config_error(self, step):
        with pytest.raises(BoardConfigError):
            snap(10, step)

    def test_validate_step_passthrough(self):
        assert validate_step(15) == 15

    def test_is_on_grid(self):
        assert is_on_grid(40, 20)
        assert is_on_grid(0, 20)
        assert not is_on_grid(50, 20)


class TestOverlaps:
    """Half-open span intersection."""

    def setup_method(self):
        self.items = [Item(id="a", lane_id="L1", offset=60)]  # span [60, 120)

    def test_no_items_never_overlaps(self):
        assert not overlaps(0, 60, [])

    def test_flush_above_is_allowed(self):
        assert not overlaps(0, 60, self.items)

    def test_flush_below_is_allowed(self):
        assert not overlaps(120, 60, self.items)

    def test_partial_overlap_top(self):
        assert overlaps(20, 60, self.items)

    def test_partial_overlap_bottom(self):
        assert overlaps(100, 60, self.items)

    def test_identical_span(self):
        assert overlaps(60, 60, self.items)

    def test_candidate_contains_item(self):
        assert overlaps(40, 100, self.items, item_height=60)

    def test_item_contains_candidate(self):
        assert overlaps(80, 20, self.items, item_height=60)

    def test_item_height_defaults_to_candidate_height(self):
        # Item treated as 10 tall -> [60, 70); candidate [70, 80) is flush.
        assert not overlaps(70, 10, self.items)
        assert overlaps(70, 10, self.items, item_height=60)
