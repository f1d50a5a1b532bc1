"""Shared fixtures for laneboard tests."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from laneboard.scheduler import Scheduler


@pytest.fixture
def scheduler():
    """Two lanes, two flush items in L1, one in L2, step 20, height 60."""
    return Scheduler(
        lanes=["L1", "L2"],
        items=[
            {"id": "I1", "lane_id": "L1", "offset": 0},
            {"id": "I2", "lane_id": "L1", "offset": 60},
            {"id": "I3", "lane_id": "L2", "offset": 0},
        ],
        step_size=20,
        item_height=60,
    )


@pytest.fixture
def store(scheduler):
    return scheduler.store


@pytest.fixture
def reconciler(scheduler):
    return scheduler.reconciler
