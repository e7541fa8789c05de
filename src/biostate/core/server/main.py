"""BioState server entry point: ``python -m biostate.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from biostate.core.config.settings import get_settings
from biostate.core.server.app import SERVER_NAME, create_app


def is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the research MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.biostate_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger = logging.getLogger(__name__)
    if not settings.biostate_allow_insecure_bind and not is_loopback_host(settings.biostate_host):
        raise RuntimeError(
            "Refusing to bind the research server to a non-loopback host without an auth layer. "
            "Set BIOSTATE_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting %s server on %s:%d",
        SERVER_NAME,
        settings.biostate_host,
        settings.biostate_port,
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.biostate_host,
        port=settings.biostate_port,
    )


if __name__ == "__main__":
    run()
