"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_entries_server.core.config import MAX_CONCURRENCY_ENV, PAGE_SIZE_ENV
from mcp_log_entries_server.core.domain import LogEntriesDomain
from mcp_log_entries_server.core.sources import (
    LOG_PATHS_ENV,
    SOURCES_FILE_ENV,
    source_configuration_schema,
)

SAMPLE_LOG = (
    "2025-12-30T08:12:01Z [INFO] service started\n"
    '{"@timestamp": "2025-12-30T08:12:02Z", "level": "warn", "message": "retrying request", '
    '"event": {"dataset": "api.access"}, "request_id": "abc123"}\n'
    "time=2025-12-30T08:12:04Z level=error msg=\"upstream timeout\" route=/api/v1/items\n"
    "2025-12-30T08:12:05Z [CRITICAL] database unavailable\n"
)


def register_resources(mcp: FastMCP, get_domain: Callable[[], LogEntriesDomain]) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-entries/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs and settings."""
        return (
            "Resources:\n"
            "- app://log-entries/help\n"
            "- app://log-entries/sources\n"
            "- app://log-entries/schemas/source-configuration\n"
            "- app://log-entries/examples/sample-log\n"
            "\nEnvironment:\n"
            f"- {SOURCES_FILE_ENV}: JSON file mapping source ids to configurations\n"
            f"- {LOG_PATHS_ENV}: log files of the 'default' source (path-separator list)\n"
            f"- {PAGE_SIZE_ENV}: default page/window size\n"
            f"- {MAX_CONCURRENCY_ENV}: concurrent store calls per highlight request\n"
            "\nCursors are {\"time\": <epoch ms>, \"tiebreaker\": <int>} objects.\n"
        )

    @mcp.resource("app://log-entries/sources")
    async def list_sources() -> dict[str, Any]:
        """Return the configured sources with their files and columns."""
        configurations = await get_domain().sources.list_source_configurations()
        return {
            source_id: {
                "name": cfg.name,
                "description": cfg.description,
                "log_paths": list(cfg.log_paths),
                "columns": [c.model_dump() for c in cfg.log_columns],
            }
            for source_id, cfg in sorted(configurations.items())
        }

    @mcp.resource("app://log-entries/schemas/source-configuration")
    def source_schema() -> dict[str, Any]:
        """Return the JSON schema of one source configuration."""
        return source_configuration_schema()

    @mcp.resource("app://log-entries/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny mixed-format sample log for demos and tests."""
        return SAMPLE_LOG
