"""Mock health data generators for development and testing.

All mock data represents a median healthy adult — a few runs and walks per
week, seven-ish hours of sleep, moderate protein intake.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from hms.domains.health.connectors.models import (
    MetricType,
    Quantity,
    SleepSample,
    Unit,
    Workout,
)

# Fixed anchor so mock records are stable across runs
_ANCHOR = datetime(2026, 2, 1, tzinfo=timezone.utc)


def get_mock_totals() -> dict[MetricType, Quantity]:
    """Return mock all-time totals per metric type."""
    return {
        MetricType.STEP_COUNT: Quantity(1_254_320.0, Unit.COUNT),
        MetricType.DIETARY_PROTEIN: Quantity(18_450.5, Unit.GRAM),
    }


def get_mock_workouts() -> list[Workout]:
    """Return mock workout records, oldest first."""
    plan = [
        ("HKWorkoutActivityTypeRunning", 35.5),
        ("HKWorkoutActivityTypeYoga", 45.0),
        ("HKWorkoutActivityTypeWalking", 28.0),
        ("HKWorkoutActivityTypeRunning", 41.25),
        ("HKWorkoutActivityTypeTraditionalStrengthTraining", 50.0),
    ]
    workouts = []
    for i, (activity, minutes) in enumerate(plan):
        start = _ANCHOR + timedelta(days=i, hours=17)
        workouts.append(Workout(
            uuid=f"00000000-0000-4000-8000-0000000010{i:02d}",
            activity_type=activity,
            duration=minutes * 60,
            start=start,
            end=start + timedelta(minutes=minutes),
        ))
    return workouts


def get_mock_sleep() -> list[SleepSample]:
    """Return mock sleep samples, one per night, oldest first."""
    nights = [7.5, 6.75, 8.0, 7.25]
    samples = []
    for i, hours in enumerate(nights):
        start = _ANCHOR + timedelta(days=i, hours=23)
        samples.append(SleepSample(
            uuid=f"00000000-0000-4000-8000-0000000020{i:02d}",
            start=start,
            end=start + timedelta(hours=hours),
            value="HKCategoryValueSleepAnalysisAsleepUnspecified",
        ))
    return samples
