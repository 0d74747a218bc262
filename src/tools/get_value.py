"""MCP tool that reads a value from the shared timed dictionary.

Registers the 'get_value' tool. Reading refreshes the entry's timer unless
disabled per call or via KV_REFRESH_ON_READ.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from config import KV_REFRESH_ON_READ
from core.errors import NotFoundError, ValidationError
from core.timed_dict import TimedDict


def register(mcp: FastMCP, *, store: TimedDict) -> None:
    @mcp.tool(name="get_value")
    async def get_value(key: str, refresh: bool = KV_REFRESH_ON_READ) -> Any:
        """Return the value stored under a key.

        Params:
          - key: entry key (required).
          - refresh: restart the entry's timer on read (default from config).

        Raises:
          ValidationError if key is empty; NotFoundError if the key is absent
          or has expired.
        """
        if not key or not key.strip():
            raise ValidationError("Missing key")

        if not store.has(key):
            raise NotFoundError(f"Key not found: {key}")

        return store.get(key, refresh=refresh)
