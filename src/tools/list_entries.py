"""MCP tool that lists entries of the shared timed dictionary.

Registers the 'list_entries' tool. Listing uses first()/last(), which never
refresh timers, so inspecting the store does not extend any entry's life.
"""

from __future__ import annotations

from typing import Any, Dict, List

from mcp.server.fastmcp import FastMCP

from config import KV_MAX_LIST_ITEMS
from core.errors import ValidationError
from core.timed_dict import TimedDict


def register(mcp: FastMCP, *, store: TimedDict) -> None:
    @mcp.tool(name="list_entries")
    async def list_entries(limit: int = KV_MAX_LIST_ITEMS, from_end: bool = False) -> List[Dict[str, Any]]:
        """List up to `limit` entries in insertion order.

        Params:
          - limit: maximum number of entries (default from config).
          - from_end: take the newest entries instead of the oldest.

        Returns:
          List of {"key", "value", "ttl_seconds"} objects in insertion order.

        Raises:
          ValidationError if limit is negative.
        """
        if limit < 0:
            raise ValidationError("limit must be >= 0")

        pairs = store.last(limit) if from_end else store.first(limit)
        return [{"key": key, "value": value, "ttl_seconds": store.ttl(key)} for key, value in pairs]
