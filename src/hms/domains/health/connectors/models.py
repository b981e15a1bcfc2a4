"""Health store types: metric/record classifiers, quantities, and records.

HealthKit identifier mappings:
- HKQuantityTypeIdentifierStepCount → MetricType.STEP_COUNT
- HKQuantityTypeIdentifierDietaryProtein → MetricType.DIETARY_PROTEIN
- HKWorkoutTypeIdentifier → RecordType.WORKOUT
- HKCategoryTypeIdentifierSleepAnalysis → RecordType.SLEEP_ANALYSIS
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class MetricType(str, Enum):
    """Quantity types that support aggregate statistics queries."""

    STEP_COUNT = "HKQuantityTypeIdentifierStepCount"
    DIETARY_PROTEIN = "HKQuantityTypeIdentifierDietaryProtein"


class RecordType(str, Enum):
    """Sample types that support record listing queries."""

    WORKOUT = "HKWorkoutTypeIdentifier"
    SLEEP_ANALYSIS = "HKCategoryTypeIdentifierSleepAnalysis"


class UnitConversionError(ValueError):
    """Raised when converting between units of different dimensions."""


# unit symbol -> (dimension, factor to the dimension's base unit)
_UNITS: dict[str, tuple[str, float]] = {
    "count": ("count", 1.0),
    "g": ("mass", 1.0),
    "mg": ("mass", 0.001),
    "kg": ("mass", 1000.0),
}


class Unit(str, Enum):
    COUNT = "count"
    GRAM = "g"
    MILLIGRAM = "mg"
    KILOGRAM = "kg"

    @property
    def dimension(self) -> str:
        return _UNITS[self.value][0]

    @classmethod
    def parse(cls, symbol: str) -> Unit:
        """Map an export unit string onto a Unit (``"count"``, ``"g"``, ...)."""
        try:
            return cls(symbol.strip())
        except ValueError as exc:
            raise UnitConversionError(f"Unsupported unit: {symbol!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A numeric value with a unit, as returned by aggregate queries."""

    value: float
    unit: Unit

    def value_in(self, unit: Unit) -> float:
        """Return the value expressed in ``unit``."""
        if unit.dimension != self.unit.dimension:
            raise UnitConversionError(
                f"Cannot convert {self.unit.value} to {unit.value}"
            )
        base = self.value * _UNITS[self.unit.value][1]
        return base / _UNITS[unit.value][1]


@dataclass(frozen=True)
class DateRange:
    """Closed time interval used as a sample predicate."""

    start: datetime
    end: datetime

    @classmethod
    def until_now(cls) -> DateRange:
        """From the earliest representable instant to the current moment."""
        return cls(
            start=datetime.min.replace(tzinfo=timezone.utc),
            end=datetime.now(timezone.utc),
        )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class Workout:
    """A single workout record."""

    uuid: str
    activity_type: str       # e.g. 'HKWorkoutActivityTypeRunning'
    duration: float          # seconds
    start: datetime
    end: datetime

    @property
    def display_activity_type(self) -> str:
        name = self.activity_type.removeprefix("HKWorkoutActivityType")
        return name or self.activity_type


@dataclass(frozen=True)
class SleepSample:
    """A categorized sleep interval."""

    uuid: str
    start: datetime
    end: datetime
    value: str = ""          # e.g. 'HKCategoryValueSleepAnalysisAsleepCore'


# Record class expected for each listing query
RECORD_CLASSES: dict[RecordType, type] = {
    RecordType.WORKOUT: Workout,
    RecordType.SLEEP_ANALYSIS: SleepSample,
}
