"""Health Metrics MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from hms.core.config.settings import Settings, get_settings
from hms.domains.health.connectors import HealthStore
from hms.domains.health.connectors.apple_health import AppleHealthStore
from hms.domains.health.connectors.composite import CompositeHealthStore
from hms.domains.health.connectors.providers import MockHealthStore
from hms.domains.health.resources.screens import register_health_screen_resources
from hms.domains.health.screens.metrics_screen import ErrorPolicy
from hms.domains.health.tools.health_metrics_tools import register_health_metrics_tools

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_health_store(settings: Settings) -> HealthStore:
    """Build the configured health store.

    ``apple_health`` reads the configured export; mock data is used instead only
    when the export file is missing, never to fill gaps in a present export.
    ``mock`` uses mock data only.
    """
    if settings.health_store == "mock":
        logger.info("Using mock health store")
        return MockHealthStore()
    if settings.health_store == "apple_health":
        if not settings.apple_health_export_path:
            raise ValueError(
                "HEALTH_STORE=apple_health requires APPLE_HEALTH_EXPORT_PATH"
            )
        apple = AppleHealthStore(settings.apple_health_export_path)
        if not apple.is_connected():
            logger.warning(
                "Apple Health export not found at %s; falling back to mock data",
                settings.apple_health_export_path,
            )
        else:
            logger.info("Using Apple Health store: %s", settings.apple_health_export_path)
        return CompositeHealthStore([apple, MockHealthStore()])
    raise ValueError(f"Unknown health store: {settings.health_store!r}")  # pragma: no cover


def create_app(
    *,
    health_store_override: HealthStore | None = None,
) -> FastMCP:
    """Create and configure the Health Metrics MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Initializes the health store (Apple Health export or mock)
    3. Registers the metrics screen tool and resource
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "Health Metrics",
        instructions=(
            "Health Metrics screen server. Reports all-time step count and "
            "dietary protein totals plus recent workouts and sleep samples "
            "from the user's health store."
        ),
    )

    # --- Initialize health store ---
    if health_store_override is not None:
        store = health_store_override
    else:
        store = create_health_store(settings)

    error_policy = ErrorPolicy(settings.error_policy)
    if settings.record_limit < 0:
        raise ValueError("RECORD_LIMIT must be non-negative")

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "Health Metrics",
            "version": VERSION,
            "data_source": store.data_source,
            "store_connected": store.is_connected(),
            "error_policy": error_policy.value,
        }

    register_health_metrics_tools(
        server, store, error_policy=error_policy, record_limit=settings.record_limit
    )
    logger.info("Health metrics tools registered (error policy: %s)", error_policy.value)

    # --- Register resources ---
    register_health_screen_resources(
        server, store, error_policy=error_policy, record_limit=settings.record_limit
    )

    return server


# Module-level instance for FastMCP discovery ("...app.py:mcp").
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
