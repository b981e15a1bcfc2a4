"""Observable state container with render-on-change subscriptions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateSnapshot:
    """Immutable view of every slot at one version."""

    version: int
    values: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, slot: str) -> Any:
        return self.values[slot]


Subscriber = Callable[[StateSnapshot], None]


class ObservableState:
    """Named state slots that notify subscribers after every write.

    Slots are fixed at construction. Writes replace a slot's value
    wholesale and are confined to the thread that performs the first
    write; a write from any other thread raises ``RuntimeError``.

    Usage::

        state = ObservableState(step_count=0.0, workouts=[])
        state.subscribe(lambda snap: print(snap["step_count"]))
        state.apply("step_count", 4200.0)
    """

    def __init__(self, **initial: Any) -> None:
        self._values: dict[str, Any] = dict(initial)
        self._version = 0
        self._subscribers: list[Subscriber] = []
        self._owner: int | None = None

    @property
    def version(self) -> int:
        return self._version

    @property
    def slots(self) -> list[str]:
        return list(self._values)

    def get(self, slot: str) -> Any:
        return self._values[slot]

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(version=self._version, values=dict(self._values))

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register ``subscriber``; returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    def apply(self, slot: str, value: Any) -> None:
        """Replace ``slot`` with ``value`` and notify subscribers."""
        if slot not in self._values:
            raise KeyError(f"Unknown state slot: {slot!r}")
        current = threading.get_ident()
        if self._owner is None:
            self._owner = current
        elif self._owner != current:
            raise RuntimeError(
                f"State slot {slot!r} written outside the UI thread"
            )
        self._values[slot] = value
        self._version += 1
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            subscriber(snapshot)
