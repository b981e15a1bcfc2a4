"""Composite health store — routes queries to one store chosen by priority.

Priority order: apple_health > mock.
The active store is the first connected one, or the last store when none
is connected. Every query goes to the active store only: an empty result
stays empty and a failure propagates, so data from a lower-priority store
is never mixed into a real store's answers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from hms.domains.health.connectors import DEFAULT_RECORD_LIMIT, HealthStore
from hms.domains.health.connectors.models import (
    DateRange,
    MetricType,
    Quantity,
    RecordType,
)

logger = logging.getLogger(__name__)


class CompositeHealthStore:
    """Selects one of several HealthStores with priority ordering.

    Usage::

        composite = CompositeHealthStore([
            apple_health_store,  # Used when its export is present
            mock_store,          # Fallback when nothing is connected
        ])
        steps = await composite.aggregate_sum(MetricType.STEP_COUNT, DateRange.until_now())
    """

    def __init__(self, stores: list[HealthStore]) -> None:
        """Initialize with stores in priority order (highest first).

        Args:
            stores: Ordered list of HealthStores. The first connected store
                answers every query.
        """
        if not stores:
            raise ValueError("At least one store is required")
        self._stores = stores
        logger.debug(
            "Composite store priority: %s", " > ".join(s.data_source for s in stores)
        )

    @property
    def active(self) -> HealthStore:
        """The store that answers queries right now."""
        for store in self._stores:
            if store.is_connected():
                return store
        return self._stores[-1]

    async def aggregate_sum(
        self, metric_type: MetricType, date_range: DateRange
    ) -> Quantity | None:
        """Return the sum from the active store."""
        return await self.active.aggregate_sum(metric_type, date_range)

    async def list_records(
        self,
        record_type: RecordType,
        predicate: Callable[[Any], bool] | None = None,
        limit: int = DEFAULT_RECORD_LIMIT,
        sort: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        """Return records from the active store."""
        return await self.active.list_records(record_type, predicate, limit, sort)

    def is_connected(self) -> bool:
        """True if any store is connected."""
        return any(s.is_connected() for s in self._stores)

    @property
    def data_source(self) -> str:
        """Return the data source of the active store."""
        return self.active.data_source

    def get_provenance(self) -> dict[str, str]:
        """Return provenance info including all connected sources."""
        connected = [s.data_source for s in self._stores if s.is_connected()]
        return {
            "data_source": self.data_source,
            "active_sources": ", ".join(connected) if connected else "none",
            "data_source_note": (
                f"Composite store answering from '{self.data_source}'. "
                f"Priority: {' > '.join(s.data_source for s in self._stores)}."
            ),
        }
