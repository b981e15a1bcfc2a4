"""Health store connectors — abstraction layer for health data queries."""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from hms.domains.health.connectors.models import (
    DateRange,
    MetricType,
    Quantity,
    RecordType,
)

DEFAULT_RECORD_LIMIT = 100


class HealthStoreError(Exception):
    """Raised when a health store query cannot be completed."""


@runtime_checkable
class HealthStore(Protocol):
    """Abstract interface for read-only health store queries.

    The screen calls these methods without knowing whether data comes from
    an Apple Health export or mock generators.
    """

    async def aggregate_sum(
        self, metric_type: MetricType, date_range: DateRange
    ) -> Quantity | None:
        """Cumulative sum of ``metric_type`` samples in range; None if none exist."""
        ...

    async def list_records(
        self,
        record_type: RecordType,
        predicate: Callable[[Any], bool] | None = None,
        limit: int = DEFAULT_RECORD_LIMIT,
        sort: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        """Up to ``limit`` records of ``record_type`` in store order unless sorted."""
        ...

    def is_connected(self) -> bool:
        """Whether real health data is available."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active store: 'apple_health' or 'mock'."""
        ...

    def get_provenance(self) -> dict[str, str]:
        """Return provenance metadata for display alongside results."""
        ...


def select_records(
    records: list[Any],
    predicate: Callable[[Any], bool] | None,
    limit: int,
    sort: Callable[[Any], Any] | None,
) -> list[Any]:
    """Apply a listing query's filter, sort key and limit to ``records``."""
    if limit < 0:
        raise ValueError("limit must be non-negative")
    selected = [r for r in records if predicate is None or predicate(r)]
    if sort is not None:
        selected = sorted(selected, key=sort)
    return selected[:limit]
