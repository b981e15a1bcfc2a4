"""MCP Resources exposing rendered health screens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastmcp import FastMCP

from hms.domains.health.screens.metrics_screen import ErrorPolicy
from hms.domains.health.tools.health_metrics_tools import present_screen

if TYPE_CHECKING:
    from hms.domains.health.connectors import HealthStore


def register_health_screen_resources(
    mcp: FastMCP,
    store: HealthStore,
    *,
    error_policy: ErrorPolicy = ErrorPolicy.SILENT,
    record_limit: int = 100,
) -> None:
    """Register health screen resources on the MCP server."""

    @mcp.resource("screen://health/metrics")
    async def health_metrics_screen_resource() -> str:
        """The Health Metrics screen rendered as plain text."""
        _screen, renderer = await present_screen(
            store, error_policy=error_policy, record_limit=record_limit
        )
        return "\n".join(renderer.last_frame)
