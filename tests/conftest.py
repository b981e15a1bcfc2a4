"""Shared test fixtures for Health Metrics tests."""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEALTH_STORE", "mock")
    monkeypatch.setenv("APPLE_HEALTH_EXPORT_PATH", "")
    monkeypatch.setenv("ERROR_POLICY", "silent")
    monkeypatch.setenv("RECORD_LIMIT", "100")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from hms.domains.health.connectors import HealthStoreError  # noqa: E402
from hms.domains.health.connectors.models import (  # noqa: E402
    MetricType,
    Quantity,
    RecordType,
    SleepSample,
    Unit,
    Workout,
)


def make_workout(
    index: int = 0,
    activity_type: str = "HKWorkoutActivityTypeRunning",
    duration: float = 2130.0,
) -> Workout:
    """Create a workout with sensible defaults."""
    start = datetime(2026, 2, 1 + index, 17, 0, tzinfo=timezone.utc)
    return Workout(
        uuid=f"workout-{index}",
        activity_type=activity_type,
        duration=duration,
        start=start,
        end=start.replace(minute=35),
    )


def make_sleep(index: int = 0) -> SleepSample:
    """Create a sleep sample from 11:00 PM to 6:30 AM the next day."""
    return SleepSample(
        uuid=f"sleep-{index}",
        start=datetime(2026, 2, 1 + index, 23, 0, tzinfo=timezone.utc),
        end=datetime(2026, 2, 2 + index, 6, 30, tzinfo=timezone.utc),
        value="HKCategoryValueSleepAnalysisAsleepCore",
    )


# ---------------------------------------------------------------------------
# Stub health store
# ---------------------------------------------------------------------------

_MISSING = object()


class StubHealthStore:
    """Configurable HealthStore for screen tests.

    ``totals`` and ``records`` hold per-type results. A value that is an
    exception instance is raised instead of returned. ``delays`` adds a
    per-type sleep (seconds) before answering, to control completion order.
    """

    def __init__(
        self,
        totals: dict[MetricType, Any] | None = None,
        records: dict[RecordType, Any] | None = None,
        delays: dict[Any, float] | None = None,
    ) -> None:
        self.totals = dict(totals or {})
        self.records = dict(records or {})
        self.delays = dict(delays or {})
        self.calls: list[tuple[str, Any, dict[str, Any]]] = []

    async def aggregate_sum(self, metric_type, date_range):
        self.calls.append(("aggregate_sum", metric_type, {"date_range": date_range}))
        await asyncio.sleep(self.delays.get(metric_type, 0))
        result = self.totals.get(metric_type)
        if isinstance(result, Exception):
            raise result
        return result

    async def list_records(self, record_type, predicate=None, limit=100, sort=None):
        self.calls.append((
            "list_records",
            record_type,
            {"predicate": predicate, "limit": limit, "sort": sort},
        ))
        await asyncio.sleep(self.delays.get(record_type, 0))
        result = self.records.get(record_type, _MISSING)
        if result is _MISSING:
            return []
        if isinstance(result, Exception):
            raise result
        return result

    def is_connected(self):
        return True

    @property
    def data_source(self):
        return "stub"

    def get_provenance(self):
        return {"data_source": "stub"}


@pytest.fixture
def stub_store() -> StubHealthStore:
    """A stub store with one value for every query."""
    return StubHealthStore(
        totals={
            MetricType.STEP_COUNT: Quantity(4200.0, Unit.COUNT),
            MetricType.DIETARY_PROTEIN: Quantity(62.5, Unit.GRAM),
        },
        records={
            RecordType.WORKOUT: [make_workout(0), make_workout(1, "HKWorkoutActivityTypeYoga", 2700.0)],
            RecordType.SLEEP_ANALYSIS: [make_sleep(0)],
        },
    )


@pytest.fixture
def failing_store() -> StubHealthStore:
    """A stub store where every query fails."""
    error = HealthStoreError("authorization denied")
    return StubHealthStore(
        totals={MetricType.STEP_COUNT: error, MetricType.DIETARY_PROTEIN: error},
        records={RecordType.WORKOUT: error, RecordType.SLEEP_ANALYSIS: error},
    )
