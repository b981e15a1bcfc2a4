"""Concrete HealthStore implementations."""

from __future__ import annotations

from typing import Any, Callable

from hms.domains.health.connectors import DEFAULT_RECORD_LIMIT, select_records
from hms.domains.health.connectors.mock_data import (
    get_mock_sleep,
    get_mock_totals,
    get_mock_workouts,
)
from hms.domains.health.connectors.models import (
    DateRange,
    MetricType,
    Quantity,
    RecordType,
)


class MockHealthStore:
    """Uses mock data generators. Always available."""

    async def aggregate_sum(
        self, metric_type: MetricType, date_range: DateRange
    ) -> Quantity | None:
        return get_mock_totals().get(metric_type)

    async def list_records(
        self,
        record_type: RecordType,
        predicate: Callable[[Any], bool] | None = None,
        limit: int = DEFAULT_RECORD_LIMIT,
        sort: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        if record_type is RecordType.WORKOUT:
            records = get_mock_workouts()
        elif record_type is RecordType.SLEEP_ANALYSIS:
            records = get_mock_sleep()
        else:
            records = []
        return select_records(records, predicate, limit, sort)

    def is_connected(self) -> bool:
        return False

    @property
    def data_source(self) -> str:
        return "mock"

    def get_provenance(self) -> dict[str, str]:
        return {
            "data_source": self.data_source,
            "data_source_note": (
                "Using simulated health data. "
                "Connect a health data source for real measurements."
            ),
        }
