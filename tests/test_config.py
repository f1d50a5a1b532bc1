"""Tests for YAML board configuration and the Scheduler wiring."""
import textwrap

import pytest

from laneboard.config import BoardConfig, CONFIG_ENV
from laneboard.scheduler import Scheduler
from laneboard.schema import BoardConfigError, DEFAULT_STEP_SIZE, ITEM_HEIGHT


def _write(tmp_path, body, name="board.yaml"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(body))
    return path


class TestBoardConfig:

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        cfg = BoardConfig.load()
        assert cfg.step_size == DEFAULT_STEP_SIZE
        assert cfg.item_height == ITEM_HEIGHT
        assert cfg.lanes == [] and cfg.items == []

    def test_load_explicit_path(self, tmp_path):
        path = _write(tmp_path, """
            step_size: 15
            item_height: 45
            vertical: true
            lanes: [a, b]
            items:
              - {id: x, lane_id: a, offset: 45}
              - {id: y, lane_id: null, offset: 0}
        """)
        cfg = BoardConfig.load(str(path))
        assert cfg.step_size == 15
        assert cfg.vertical is True

        sched = cfg.build_scheduler()
        assert sched.snapshot().lane_ids == ["a", "b"]
        assert sched.store.get_item("x").offset == 45
        assert sched.store.get_item("y").lane_id is None
        assert sched.to_dict()["vertical"] is True

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "step_size: 10\n", name="other.yaml")
        monkeypatch.setenv(CONFIG_ENV, str(path))
        assert BoardConfig.load().step_size == 10

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        _write(tmp_path, "lanes: [only]\n")
        assert BoardConfig.load().lanes == ["only"]

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(BoardConfigError):
            BoardConfig.load(str(tmp_path / "absent.yaml"))

    @pytest.mark.parametrize(
        "body",
        [
            "step_size: 0\n",
            "step_size: -20\n",
            "step_size: 12.5\n",
            "item_height: 0\n",
            "lanes: {a: 1}\n",
            "colour: blue\n",
            "- just\n- a list\n",
            "step_size: [unclosed\n",
            "vertical: \"no\"\n",
            "vertical: 1\n",
        ],
    )
    def test_invalid_files(self, tmp_path, body):
        path = _write(tmp_path, body)
        with pytest.raises(BoardConfigError):
            BoardConfig.load(str(path))

    def test_duplicate_ids_fail_at_build(self, tmp_path):
        path = _write(tmp_path, """
            lanes: [a]
            items:
              - {id: x, lane_id: a, offset: 0}
              - {id: x, lane_id: a, offset: 100}
        """)
        cfg = BoardConfig.load(str(path))
        with pytest.raises(BoardConfigError):
            cfg.build_scheduler()


class TestScheduler:

    def test_independent_instances(self):
        """Detector memory and drags are per Scheduler"""
        a = Scheduler(lanes=["L1"], items=[{"id": "I1", "lane_id": "L1", "offset": 0}])
        b = Scheduler(lanes=["L1"], items=[{"id": "I1", "lane_id": "L1", "offset": 0}])
        assert a.detector is not b.detector
        assert a.reconciler.on_drag_start("I1")
        assert b.reconciler.on_drag_start("I1")

    def test_remove_lane_publishes(self, scheduler):
        seen = []
        scheduler.events.subscribe("board_updated", lambda snapshot: seen.append(snapshot))
        assert scheduler.remove_lane("L1")
        assert seen and seen[0].lane_ids == ["L2"]
        assert {i.id for i in scheduler.store.unassigned_items()} == {"I1", "I2"}

    def test_remove_lane_refused_mid_drag(self, scheduler):
        scheduler.reconciler.on_drag_start("I1")
        assert not scheduler.remove_lane("L1")
        assert scheduler.store.is_lane("L1")

    def test_add_lane_publishes(self, scheduler):
        seen = []
        scheduler.events.subscribe("board_updated", lambda snapshot: seen.append(snapshot))
        assert scheduler.add_lane("L3")
        assert not scheduler.add_lane("unassigned")
        assert len(seen) == 1

    def test_to_dict_reports_live_drag(self, scheduler):
        scheduler.reconciler.on_drag_start("L2")
        data = scheduler.to_dict()
        assert data["active"] == {"id": "L2", "kind": "lane"}
        assert data["highlighted"] is None
        assert data["vertical"] is False


class TestBadBoardEntries:
    """Malformed lane and item entries surface as BoardConfigError at build time."""

    @pytest.mark.parametrize(
        "body",
        [
            "lanes: [a]\nitems: [idle]\n",
            "lanes: [{a: 1}]\n",
            "lanes: [a]\nitems:\n  - {id: a, lane_id: null, offset: 0}\n",
            "lanes: [a]\nitems:\n  - {id: 1, lane_id: a, offset: 0}\n  - {id: '1', lane_id: null, offset: 0}\n",
        ],
    )
    def test_build_rejects(self, tmp_path, body):
        cfg = BoardConfig.load(str(_write(tmp_path, body)))
        with pytest.raises(BoardConfigError):
            cfg.build_scheduler()

    def test_main_reports_bad_item_entry(self, tmp_path):
        from laneboard.server import main
        path = _write(tmp_path, "lanes: [a]\nitems: [idle]\n")
        assert main(["--config", str(path)]) == 2
