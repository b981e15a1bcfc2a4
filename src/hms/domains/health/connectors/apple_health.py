"""Apple Health store — answers queries from an exported Health data XML.

Users export via iOS Health app → Share → Export Health Data → produces
export.xml. This store parses that XML once and serves HealthStore queries
from the parsed result.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Callable

from hms.domains.health.connectors import (
    DEFAULT_RECORD_LIMIT,
    HealthStoreError,
    select_records,
)
from hms.domains.health.connectors.apple_health_parser import (
    HealthExport,
    parse_apple_health_export,
)
from hms.domains.health.connectors.models import (
    DateRange,
    MetricType,
    Quantity,
    RecordType,
    Unit,
)

logger = logging.getLogger(__name__)

# Unit each metric's sum is reported in
_SUM_UNITS = {
    MetricType.STEP_COUNT: Unit.COUNT,
    MetricType.DIETARY_PROTEIN: Unit.GRAM,
}


class AppleHealthStore:
    """HealthStore backed by an Apple Health XML export.

    Parsing runs in a worker thread so queries never block the caller's
    event loop.

    Usage::

        store = AppleHealthStore("/path/to/export.xml")
        if store.is_connected():
            steps = await store.aggregate_sum(MetricType.STEP_COUNT, DateRange.until_now())
    """

    def __init__(self, export_path: str) -> None:
        self._export_path = export_path
        self._export: HealthExport | None = None
        self._lock = threading.Lock()
        self._connected = bool(export_path) and Path(export_path).exists()

    async def aggregate_sum(
        self, metric_type: MetricType, date_range: DateRange
    ) -> Quantity | None:
        """Sum samples of ``metric_type`` whose start falls inside ``date_range``."""
        export = await asyncio.to_thread(self._load)
        samples = [
            s for s in export.quantities.get(metric_type, [])
            if date_range.contains(s.start)
        ]
        if not samples:
            return None
        unit = _SUM_UNITS[metric_type]
        total = sum(s.value * Quantity(1.0, s.unit).value_in(unit) for s in samples)
        return Quantity(total, unit)

    async def list_records(
        self,
        record_type: RecordType,
        predicate: Callable[[Any], bool] | None = None,
        limit: int = DEFAULT_RECORD_LIMIT,
        sort: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        """List workouts or sleep samples in export document order."""
        export = await asyncio.to_thread(self._load)
        if record_type is RecordType.WORKOUT:
            records = export.workouts
        elif record_type is RecordType.SLEEP_ANALYSIS:
            records = export.sleep
        else:
            raise HealthStoreError(f"Unsupported record type: {record_type!r}")
        return select_records(records, predicate, limit, sort)

    def is_connected(self) -> bool:
        """Check if the export file exists and is readable."""
        return self._connected

    @property
    def data_source(self) -> str:
        return "apple_health"

    def get_provenance(self) -> dict[str, str]:
        return {
            "data_source": self.data_source,
            "data_source_note": "Data from Apple Health export.",
            "export_path": self._export_path,
        }

    def _load(self) -> HealthExport:
        """Parse the export once; later calls reuse the cached result."""
        with self._lock:
            if self._export is None:
                self._export = parse_apple_health_export(self._export_path)
            return self._export
