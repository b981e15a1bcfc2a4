"""Apple Health XML export parser.

Parses the ``export.xml`` file produced by Apple Health (iOS → Share → Export
Health Data). Supports incremental parsing of large files via iterparse.

Elements read:
- ``Record`` of a supported quantity type → quantity samples
- ``Record`` of type HKCategoryTypeIdentifierSleepAnalysis → SleepSample
- ``Workout`` → Workout (duration normalized to seconds)

Exports carry no sample identifiers, so record UUIDs are derived
deterministically from each element's attributes.
"""

from __future__ import annotations

import logging
import uuid
import xml.etree.ElementTree as ET
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from hms.domains.health.connectors import HealthStoreError
from hms.domains.health.connectors.models import (
    MetricType,
    SleepSample,
    Unit,
    UnitConversionError,
    Workout,
)

logger = logging.getLogger(__name__)

_SLEEP = "HKCategoryTypeIdentifierSleepAnalysis"

_QUANTITY_TYPES = {m.value: m for m in MetricType}

# durationUnit -> seconds
_DURATION_UNITS = {
    "s": 1.0,
    "sec": 1.0,
    "min": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
}

_UUID_NAMESPACE = uuid.UUID("8c5c3a5e-3f0e-4e55-9a43-5f0f2b6d7a11")


class AppleHealthParseError(HealthStoreError):
    """Raised when parsing Apple Health export XML fails."""


@dataclass(frozen=True)
class QuantitySample:
    value: float
    unit: Unit
    start: datetime
    end: datetime


@dataclass
class HealthExport:
    """Parsed contents of one export, in document order."""

    quantities: dict[MetricType, list[QuantitySample]] = field(
        default_factory=lambda: defaultdict(list)
    )
    workouts: list[Workout] = field(default_factory=list)
    sleep: list[SleepSample] = field(default_factory=list)


def _parse_date(date_str: str) -> datetime:
    """Parse Apple Health date format: '2025-12-01 08:30:00 -0500'.

    Dates without an offset are taken as UTC.
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        # Fallback for ISO format
        parsed = datetime.fromisoformat(date_str)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _record_uuid(elem: ET.Element) -> str:
    key = "|".join(f"{k}={v}" for k, v in sorted(elem.attrib.items()))
    return str(uuid.uuid5(_UUID_NAMESPACE, f"{elem.tag}|{key}"))


def _parse_quantity(elem: ET.Element) -> QuantitySample:
    return QuantitySample(
        value=float(elem.get("value", "")),
        unit=Unit.parse(elem.get("unit", "")),
        start=_parse_date(elem.get("startDate", "")),
        end=_parse_date(elem.get("endDate", "")),
    )


def _parse_sleep(elem: ET.Element) -> SleepSample:
    return SleepSample(
        uuid=_record_uuid(elem),
        start=_parse_date(elem.get("startDate", "")),
        end=_parse_date(elem.get("endDate", "")),
        value=elem.get("value", ""),
    )


def _parse_workout(elem: ET.Element) -> Workout:
    unit = elem.get("durationUnit", "min")
    if unit not in _DURATION_UNITS:
        raise ValueError(f"Unsupported duration unit: {unit!r}")
    return Workout(
        uuid=_record_uuid(elem),
        activity_type=elem.get("workoutActivityType", ""),
        duration=float(elem.get("duration", "0")) * _DURATION_UNITS[unit],
        start=_parse_date(elem.get("startDate", "")),
        end=_parse_date(elem.get("endDate", "")),
    )


def parse_apple_health_export(export_path: str | Path) -> HealthExport:
    """Parse an Apple Health export.xml into quantity samples and records.

    Uses iterparse for memory-efficient processing of large exports.
    Elements with unreadable dates, values or units are skipped.

    Args:
        export_path: Path to the Apple Health export.xml file.

    Returns:
        HealthExport with samples grouped by metric type, plus workouts and
        sleep samples in document order.

    Raises:
        AppleHealthParseError: If the file is missing or not valid XML.
    """
    path = Path(export_path)
    if not path.exists():
        raise AppleHealthParseError(f"Export file not found: {path}")

    export = HealthExport()
    skipped = 0

    try:
        for _event, elem in ET.iterparse(str(path), events=("end",)):
            tag = elem.tag

            if tag == "Record":
                rec_type = elem.get("type", "")
                try:
                    if rec_type in _QUANTITY_TYPES:
                        export.quantities[_QUANTITY_TYPES[rec_type]].append(
                            _parse_quantity(elem)
                        )
                    elif rec_type == _SLEEP:
                        export.sleep.append(_parse_sleep(elem))
                except (ValueError, TypeError, UnitConversionError):
                    skipped += 1
                elem.clear()

            elif tag == "Workout":
                try:
                    export.workouts.append(_parse_workout(elem))
                except (ValueError, TypeError):
                    skipped += 1
                elem.clear()

    except ET.ParseError as exc:
        raise AppleHealthParseError(f"Invalid XML: {exc}") from exc

    logger.info(
        "Parsed Apple Health export: %d metric types, %d workouts, %d sleep samples (%d skipped)",
        len(export.quantities), len(export.workouts), len(export.sleep), skipped,
    )
    return export
