"""MCP tool that presents the Health Metrics screen."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

from hms.core.ui.renderer import ScreenRenderer
from hms.domains.health.screens.metrics_screen import (
    DIETARY_PROTEIN,
    ISSUES,
    SLEEP_ANALYSIS,
    STEP_COUNT,
    WORKOUTS,
    ErrorPolicy,
    HealthMetricsScreen,
    render_metrics_screen,
)

if TYPE_CHECKING:
    from hms.core.ui.state import StateSnapshot
    from hms.domains.health.connectors import HealthStore

logger = logging.getLogger(__name__)


def serialize_snapshot(snapshot: StateSnapshot) -> dict[str, Any]:
    """Convert screen state into JSON-safe primitives."""
    return {
        "version": snapshot.version,
        STEP_COUNT: snapshot[STEP_COUNT],
        DIETARY_PROTEIN: snapshot[DIETARY_PROTEIN],
        WORKOUTS: [
            {
                "uuid": w.uuid,
                "activity_type": w.display_activity_type,
                "duration_seconds": w.duration,
                "start": w.start.isoformat(),
                "end": w.end.isoformat(),
            }
            for w in snapshot[WORKOUTS]
        ],
        SLEEP_ANALYSIS: [
            {
                "uuid": s.uuid,
                "start": s.start.isoformat(),
                "end": s.end.isoformat(),
                "value": s.value,
            }
            for s in snapshot[SLEEP_ANALYSIS]
        ],
        ISSUES: [
            {"slot": issue.slot, "kind": issue.kind.value, "message": issue.message}
            for issue in snapshot[ISSUES].values()
        ],
    }


async def present_screen(
    store: HealthStore,
    *,
    error_policy: ErrorPolicy = ErrorPolicy.SILENT,
    record_limit: int = 100,
) -> tuple[HealthMetricsScreen, ScreenRenderer]:
    """Build a screen, present it once, and return it with its renderer."""
    screen = HealthMetricsScreen(
        store, error_policy=error_policy, record_limit=record_limit
    )
    renderer = ScreenRenderer(screen.state, render_metrics_screen)
    try:
        await screen.present()
    finally:
        screen.on_disappear()
        renderer.detach()
    return screen, renderer


def register_health_metrics_tools(
    mcp: FastMCP,
    store: HealthStore,
    *,
    error_policy: ErrorPolicy = ErrorPolicy.SILENT,
    record_limit: int = 100,
) -> None:
    """Register health metrics screen tools on the MCP server."""

    @mcp.tool
    async def health_metrics() -> str:
        """Show step count, dietary protein, workouts, and sleep samples.

        Queries the configured health store for all-time step and protein
        totals plus up to 100 workouts and sleep samples, then returns the
        rendered screen alongside the underlying state.
        """
        started = time.perf_counter()
        screen, renderer = await present_screen(
            store, error_policy=error_policy, record_limit=record_limit
        )
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.info(
            "Presented health metrics screen in %.1f ms (%d frames)",
            duration_ms,
            renderer.frames_rendered,
        )
        return json.dumps({
            "status": "ok",
            "rendered": renderer.last_frame,
            "state": serialize_snapshot(screen.state.snapshot()),
            "provenance": store.get_provenance(),
            "duration_ms": duration_ms,
        }, indent=2)
