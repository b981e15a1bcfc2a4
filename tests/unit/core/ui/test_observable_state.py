"""Tests for ObservableState and ScreenRenderer."""

from __future__ import annotations

import threading

import pytest

from hms.core.ui.renderer import ScreenRenderer
from hms.core.ui.state import ObservableState


def _render(snapshot):
    return [f"count={snapshot['count']}", f"items={len(snapshot['items'])}"]


class TestObservableState:
    def test_initial_values(self):
        state = ObservableState(count=0, items=[])
        assert state.get("count") == 0
        assert state.version == 0
        assert state.slots == ["count", "items"]

    def test_apply_replaces_and_bumps_version(self):
        state = ObservableState(count=0)
        state.apply("count", 5)
        state.apply("count", 7)
        assert state.get("count") == 7
        assert state.version == 2

    def test_unknown_slot_raises(self):
        state = ObservableState(count=0)
        with pytest.raises(KeyError, match="Unknown state slot"):
            state.apply("missing", 1)

    def test_subscribers_see_applied_value(self):
        state = ObservableState(count=0)
        seen = []
        state.subscribe(lambda snap: seen.append((snap.version, snap["count"])))
        state.apply("count", 3)
        assert seen == [(1, 3)]

    def test_unsubscribe(self):
        state = ObservableState(count=0)
        seen = []
        unsubscribe = state.subscribe(lambda snap: seen.append(snap.version))
        unsubscribe()
        state.apply("count", 1)
        assert seen == []

    def test_snapshot_is_detached(self):
        state = ObservableState(count=0)
        snap = state.snapshot()
        state.apply("count", 9)
        assert snap["count"] == 0

    def test_write_from_other_thread_raises(self):
        state = ObservableState(count=0)
        state.apply("count", 1)
        errors = []

        def _worker():
            try:
                state.apply("count", 2)
            except RuntimeError as exc:
                errors.append(exc)

        thread = threading.Thread(target=_worker)
        thread.start()
        thread.join()
        assert len(errors) == 1
        assert state.get("count") == 1


class TestScreenRenderer:
    def test_initial_frame(self):
        state = ObservableState(count=0, items=[])
        renderer = ScreenRenderer(state, _render)
        assert renderer.last_frame == ["count=0", "items=0"]
        assert renderer.frames_rendered == 0

    def test_rerenders_on_change(self):
        state = ObservableState(count=0, items=[])
        frames = []
        renderer = ScreenRenderer(state, _render, sink=frames.append)
        state.apply("items", [1, 2, 3])
        assert renderer.last_frame == ["count=0", "items=3"]
        assert frames == [["count=0", "items=3"]]
        assert renderer.frames_rendered == 1

    def test_detach_stops_rendering(self):
        state = ObservableState(count=0, items=[])
        renderer = ScreenRenderer(state, _render)
        renderer.detach()
        state.apply("count", 4)
        assert renderer.last_frame == ["count=0", "items=0"]
