"""Health Metrics screen — state, fetch orchestration, and rendering.

When the screen becomes visible it issues four independent queries against
the health store: step total, dietary protein total, workouts, and sleep
samples. Each query writes exactly one state slot, always through the UI
dispatcher, and the screen re-renders from state after every write.

The four slots are not a consistent snapshot: they are fetched
independently and may complete in any order, or not at all.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from hms.core.ui.dispatch import UIDispatcher
from hms.core.ui.state import ObservableState, StateSnapshot
from hms.domains.health.connectors import DEFAULT_RECORD_LIMIT, HealthStoreError
from hms.domains.health.connectors.models import (
    RECORD_CLASSES,
    DateRange,
    MetricType,
    RecordType,
    Unit,
    UnitConversionError,
)
from hms.domains.health.screens.sections import SleepSection, WorkoutSection

if TYPE_CHECKING:
    from hms.domains.health.connectors import HealthStore

logger = logging.getLogger(__name__)

TITLE = "Health Metrics"

# State slots
STEP_COUNT = "step_count"
DIETARY_PROTEIN = "dietary_protein"
WORKOUTS = "workouts"
SLEEP_ANALYSIS = "sleep_analysis"
ISSUES = "issues"

_SLOT_LABELS = {
    STEP_COUNT: "Step Count",
    DIETARY_PROTEIN: "Dietary Protein",
    WORKOUTS: "Workouts",
    SLEEP_ANALYSIS: "Sleep",
}


class ErrorPolicy(str, Enum):
    """What the user sees when a fetch produces nothing to write.

    SILENT: the slot keeps its previous value and nothing is shown.
    SURFACE: the slot keeps its previous value and a FetchIssue is recorded
    in the ``issues`` slot and rendered under the screen.
    """

    SILENT = "silent"
    SURFACE = "surface"


class IssueKind(str, Enum):
    NO_DATA = "no_data"
    STORE_ERROR = "store_error"
    TYPE_MISMATCH = "type_mismatch"


_ISSUE_MESSAGES = {
    IssueKind.NO_DATA: "no data found",
    IssueKind.STORE_ERROR: "could not be loaded",
    IssueKind.TYPE_MISMATCH: "unexpected records returned",
}


@dataclass(frozen=True)
class FetchIssue:
    slot: str
    kind: IssueKind
    detail: str = ""

    @property
    def message(self) -> str:
        return f"{_SLOT_LABELS[self.slot]}: {_ISSUE_MESSAGES[self.kind]}"


def render_metrics_screen(snapshot: StateSnapshot) -> list[str]:
    """Render the full screen from a state snapshot."""
    lines = [
        TITLE,
        f"Step Count: {snapshot[STEP_COUNT]:.0f} steps",
        f"Dietary Protein: {snapshot[DIETARY_PROTEIN]:.1f} g",
        "",
    ]
    lines.extend(WorkoutSection(snapshot[WORKOUTS]).render())
    lines.extend(SleepSection(snapshot[SLEEP_ANALYSIS]).render())

    issues = snapshot[ISSUES]
    if issues:
        lines.append("")
        lines.append("Issues")
        lines.extend(f"  {issue.message}" for issue in issues.values())
    return lines


class HealthMetricsScreen:
    """Controller for the Health Metrics screen.

    ``on_appear()`` must be called from the UI event loop. It schedules the
    four fetches and returns without waiting for any of them. Completed
    fetches post their write to the dispatcher; writes are applied when the
    dispatcher is drained, in completion order.

    Usage::

        screen = HealthMetricsScreen(store)
        screen.on_appear()
        await screen.settle()
        print("\\n".join(render_metrics_screen(screen.state.snapshot())))
    """

    def __init__(
        self,
        store: HealthStore,
        *,
        dispatcher: UIDispatcher | None = None,
        error_policy: ErrorPolicy = ErrorPolicy.SILENT,
        record_limit: int = DEFAULT_RECORD_LIMIT,
    ) -> None:
        self._store = store
        self.dispatcher = dispatcher or UIDispatcher()
        self.error_policy = ErrorPolicy(error_policy)
        self.record_limit = record_limit
        self.state = ObservableState(
            **{
                STEP_COUNT: 0.0,
                DIETARY_PROTEIN: 0.0,
                WORKOUTS: [],
                SLEEP_ANALYSIS: [],
                ISSUES: {},
            }
        )
        self.visible = False
        self.appearances = 0
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_appear(self) -> list[asyncio.Task]:
        """Issue all four fetches; returns immediately with their tasks."""
        self.visible = True
        self.appearances += 1
        logger.debug("Health metrics screen appeared (#%d)", self.appearances)

        tasks = [
            asyncio.create_task(self.fetch_step_count(), name="fetch_step_count"),
            asyncio.create_task(self.fetch_dietary_protein(), name="fetch_dietary_protein"),
            asyncio.create_task(self.fetch_workouts(), name="fetch_workouts"),
            asyncio.create_task(self.fetch_sleep_analysis(), name="fetch_sleep_analysis"),
        ]
        for task in tasks:
            self._tasks.add(task)
            task.add_done_callback(self._on_fetch_done)
        return tasks

    def _on_fetch_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Slot keeps its previous value; the other fetches are unaffected.
            logger.error(
                "Fetch %s crashed: %s", task.get_name(), exc, exc_info=exc
            )

    def on_disappear(self) -> None:
        """Mark the screen torn down; writes arriving later are dropped."""
        self.visible = False
        logger.debug("Health metrics screen dismissed")

    async def settle(self) -> None:
        """Wait for every outstanding fetch, then apply their queued writes.

        A fetch that raises does not stop the others; its exception is
        logged when the task finishes and its slot is left unchanged.
        """
        try:
            while True:
                pending = [t for t in self._tasks if not t.done()]
                if not pending:
                    break
                await asyncio.gather(*pending, return_exceptions=True)
        finally:
            self.dispatcher.drain()

    async def present(self) -> StateSnapshot:
        """Appear, wait for all fetches, and return the resulting state."""
        self.on_appear()
        await self.settle()
        return self.state.snapshot()

    # ------------------------------------------------------------------
    # Fetches
    # ------------------------------------------------------------------

    async def fetch_step_count(self) -> None:
        await self._fetch_total(STEP_COUNT, MetricType.STEP_COUNT, Unit.COUNT)

    async def fetch_dietary_protein(self) -> None:
        await self._fetch_total(DIETARY_PROTEIN, MetricType.DIETARY_PROTEIN, Unit.GRAM)

    async def fetch_workouts(self) -> None:
        await self._fetch_records(WORKOUTS, RecordType.WORKOUT)

    async def fetch_sleep_analysis(self) -> None:
        await self._fetch_records(SLEEP_ANALYSIS, RecordType.SLEEP_ANALYSIS)

    async def _fetch_total(self, slot: str, metric_type: MetricType, unit: Unit) -> None:
        try:
            result = await self._store.aggregate_sum(metric_type, DateRange.until_now())
        except HealthStoreError as exc:
            self._report(FetchIssue(slot, IssueKind.STORE_ERROR, str(exc)))
            return
        if result is None:
            self._report(FetchIssue(slot, IssueKind.NO_DATA))
            return
        try:
            value = result.value_in(unit)
        except UnitConversionError as exc:
            self._report(FetchIssue(slot, IssueKind.TYPE_MISMATCH, str(exc)))
            return
        self._write(slot, value)

    async def _fetch_records(self, slot: str, record_type: RecordType) -> None:
        expected = RECORD_CLASSES[record_type]
        try:
            records = await self._store.list_records(
                record_type, None, self.record_limit, None
            )
        except HealthStoreError as exc:
            self._report(FetchIssue(slot, IssueKind.STORE_ERROR, str(exc)))
            return
        if not isinstance(records, (list, tuple)) or not all(
            isinstance(r, expected) for r in records
        ):
            self._report(
                FetchIssue(
                    slot,
                    IssueKind.TYPE_MISMATCH,
                    f"expected {expected.__name__} records",
                )
            )
            return
        self._write(slot, list(records))

    # ------------------------------------------------------------------
    # State writes (always via the dispatcher)
    # ------------------------------------------------------------------

    def _write(self, slot: str, value: Any) -> None:
        def _apply() -> None:
            if not self.visible:
                logger.debug("Screen not visible; dropping %s update", slot)
                return
            self.state.apply(slot, value)
            issues = self.state.get(ISSUES)
            if slot in issues:
                self.state.apply(ISSUES, {k: v for k, v in issues.items() if k != slot})

        self.dispatcher.post(_apply)

    def _report(self, issue: FetchIssue) -> None:
        if issue.kind is IssueKind.NO_DATA:
            logger.debug("No %s data in health store", issue.slot)
        else:
            logger.warning("Fetching %s failed (%s): %s", issue.slot, issue.kind.value, issue.detail)

        if self.error_policy is ErrorPolicy.SILENT:
            return

        def _apply() -> None:
            if not self.visible:
                return
            issues = dict(self.state.get(ISSUES))
            issues[issue.slot] = issue
            self.state.apply(ISSUES, issues)

        self.dispatcher.post(_apply)
