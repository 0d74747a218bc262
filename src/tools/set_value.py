"""MCP tool that stores a value in the shared timed dictionary.

Registers the 'set_value' tool which maps the optional timeout arguments
onto the dictionary's Timeout modes before delegating to TimedDict.set.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from config import KV_DEFAULT_TIMEOUT
from core.errors import ValidationError
from core.models import KEEP, UNSPECIFIED, Timeout
from core.timed_dict import TimedDict


def _resolve_timeout(store: TimedDict, key: str, timeout_seconds: Optional[float], keep_timer: bool) -> Timeout:
    if keep_timer:
        return KEEP
    if timeout_seconds is not None:
        return Timeout.after(timeout_seconds)
    # Default timeout only applies to keys that don't exist yet
    if KV_DEFAULT_TIMEOUT > 0 and not store.has(key):
        return Timeout.after(KV_DEFAULT_TIMEOUT)
    return UNSPECIFIED


def register(mcp: FastMCP, *, store: TimedDict) -> None:
    @mcp.tool(name="set_value")
    async def set_value(
        key: str,
        value: Any,
        timeout_seconds: Optional[float] = None,
        keep_timer: bool = False,
    ) -> Dict[str, Any]:
        """Add or overwrite a key in the shared dictionary.

        Params:
          - key: entry key (required, non-empty).
          - value: any JSON value to store.
          - timeout_seconds: expire the entry after this many seconds;
            zero or negative removes an existing timer. When omitted, an
            existing timer is refreshed and new keys get KV_DEFAULT_TIMEOUT.
          - keep_timer: leave an existing timer untouched (default: False).

        Returns:
          {"key", "value", "ttl_seconds"} where ttl_seconds is None for
          entries that never expire.

        Raises:
          ValidationError if key is empty.
        """
        if not key or not key.strip():
            raise ValidationError("Missing key")

        timeout = _resolve_timeout(store, key, timeout_seconds, keep_timer)
        stored = store.set(key, value, timeout)
        return {"key": key, "value": stored, "ttl_seconds": store.ttl(key)}
