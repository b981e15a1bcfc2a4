"""Render-on-change binding between ObservableState and a frame sink."""

from __future__ import annotations

import logging
from typing import Callable

from hms.core.ui.state import ObservableState, StateSnapshot

logger = logging.getLogger(__name__)

RenderFn = Callable[[StateSnapshot], list[str]]
FrameSink = Callable[[list[str]], None]


class ScreenRenderer:
    """Re-renders a screen from state after every applied write.

    Each frame is produced from a full snapshot, so a frame reflects every
    write applied before it and none applied after.
    """

    def __init__(
        self,
        state: ObservableState,
        render: RenderFn,
        sink: FrameSink | None = None,
    ) -> None:
        self._render = render
        self._sink = sink
        self.frames_rendered = 0
        self.last_frame: list[str] = render(state.snapshot())
        self._unsubscribe = state.subscribe(self._on_change)

    def _on_change(self, snapshot: StateSnapshot) -> None:
        self.last_frame = self._render(snapshot)
        self.frames_rendered += 1
        logger.debug("Rendered frame for state version %d", snapshot.version)
        if self._sink is not None:
            self._sink(self.last_frame)

    def detach(self) -> None:
        self._unsubscribe()
