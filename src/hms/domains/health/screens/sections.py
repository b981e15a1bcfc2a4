"""Read-only list sections for the metrics screen.

Sections render exactly what they are given: no sorting, no filtering,
one row per record in input order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from hms.domains.health.connectors.models import SleepSample, Workout

_INDENT = "  "


def format_number(value: float) -> str:
    """Grouped, up to three fraction digits, trailing zeros trimmed (2130.0 → '2,130')."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_timestamp(moment: datetime) -> str:
    """Short date and time, e.g. '2/1/2026, 11:00 PM'."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment.minute:02d} {meridiem}"


@dataclass(frozen=True)
class Row:
    """One record's lines, keyed by the record's uuid."""

    key: str
    lines: tuple[str, ...]


class WorkoutSection:
    header = "Workouts"
    placeholder = "No workouts found."

    def __init__(self, workouts: Sequence[Workout]) -> None:
        self.workouts = workouts

    def rows(self) -> list[Row]:
        return [
            Row(
                key=w.uuid,
                lines=(
                    f"Type: {w.display_activity_type}",
                    f"Duration: {format_number(w.duration)} seconds",
                ),
            )
            for w in self.workouts
        ]

    def render(self) -> list[str]:
        return _render_section(self.header, self.placeholder, self.rows())


class SleepSection:
    header = "Sleep"
    placeholder = "No sleep data found."

    def __init__(self, samples: Sequence[SleepSample]) -> None:
        self.samples = samples

    def rows(self) -> list[Row]:
        return [
            Row(
                key=s.uuid,
                lines=(
                    f"Start: {format_timestamp(s.start)}",
                    f"End: {format_timestamp(s.end)}",
                ),
            )
            for s in self.samples
        ]

    def render(self) -> list[str]:
        return _render_section(self.header, self.placeholder, self.rows())


def _render_section(header: str, placeholder: str, rows: list[Row]) -> list[str]:
    lines = [header]
    if not rows:
        lines.append(_INDENT + placeholder)
        return lines
    for row in rows:
        lines.extend(_INDENT + line for line in row.lines)
    return lines
