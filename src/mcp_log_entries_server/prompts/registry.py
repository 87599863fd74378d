"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_entries_server.core.sources import DEFAULT_SOURCE_ID


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def explore_logs_around(
        center_time: str,
        source_id: str = DEFAULT_SOURCE_ID,
        size: int = 40,
        phrase: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt that investigates what happened around a point in time."""
        call_lines = [
            f"- source_id: {source_id}",
            f"- center_time: {center_time}",
            f"- size: {size}",
        ]
        if phrase:
            call_lines.append(f"- highlight: {phrase}")
        call_block = "\n".join(call_lines)

        steps = [
            "- Call get_log_entries_around first with the parameters below.",
            "- To read further back, call get_log_entries with before set to the "
            "returned top_cursor; to read further forward, use after with bottom_cursor.",
            "- Use get_log_summary over a wider window to spot bursts before or after.",
        ]
        if phrase:
            steps.append(
                "- Call get_log_summary_highlights with the phrase to see where else it occurs."
            )
        steps.append("- Quote entries verbatim; do not fabricate lines.")

        return [
            {
                "role": "system",
                "content": (
                    "You are an incident investigator reading application logs. "
                    "Reconstruct the sequence of events from evidence only."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Explore the logs around the given time. Follow this workflow:\n"
                    + "\n".join(steps)
                    + "\n\nCall get_log_entries_around with:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Timeline (ordered bullets with timestamps)\n"
                    "2) Evidence (2-5 quoted entries with their ids)\n"
                    "3) Likely trigger (1-2 sentences; say 'Unknown' if unclear)\n"
                ),
            },
        ]
