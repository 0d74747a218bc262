from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from core.errors import NotFoundError, ValidationError
from core.timed_dict import TimedDict


def register(mcp: FastMCP, *, store: TimedDict) -> None:
    @mcp.tool(name="delete_value")
    async def delete_value(key: str) -> Any:
        """Delete a key and return the value it held.

        Raises:
          ValidationError if key is empty; NotFoundError if the key is absent.
        """
        if not key or not key.strip():
            raise ValidationError("Missing key")

        if not store.has(key):
            raise NotFoundError(f"Key not found: {key}")

        return store.delete(key)

    @mcp.tool(name="clear_values")
    async def clear_values() -> int:
        """Delete every entry and return how many were removed."""
        return store.clear()
