"""Health Metrics server entry point — ``python -m hms.core.server.main``.

Binds to loopback only unless explicitly overridden, since the screen exposes
personal health data and the server carries no auth layer.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address

from hms.core.config.settings import Settings, get_settings
from hms.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def describe_screen_config(settings: Settings) -> str:
    """One-line summary of where the screen reads from and how it reports gaps."""
    source = settings.health_store
    if source == "apple_health":
        source = f"apple_health ({settings.apple_health_export_path or 'no export path'})"
    return (
        f"store={source} error_policy={settings.error_policy} "
        f"record_limit={settings.record_limit}"
    )


def run() -> None:
    """Start the Health Metrics MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.hms_log_level.upper(), logging.INFO))

    if not settings.hms_allow_insecure_bind and not _is_loopback_host(settings.hms_host):
        raise RuntimeError(
            f"Refusing to expose health metrics on non-loopback host {settings.hms_host!r}. "
            "Set HMS_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    if settings.hms_allow_insecure_bind:
        logger.warning("HMS_ALLOW_INSECURE_BIND is set; health data is served without auth")

    logger.info("Health Metrics screen config: %s", describe_screen_config(settings))
    mcp = create_app()

    logger.info(
        "Serving Health Metrics on http://%s:%d (streamable-http)",
        settings.hms_host,
        settings.hms_port,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.hms_host,
        port=settings.hms_port,
    )


if __name__ == "__main__":
    run()
