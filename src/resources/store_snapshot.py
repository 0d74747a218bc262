from mcp.server.fastmcp import FastMCP

from core.timed_dict import TimedDict


def register_resources(mcp: FastMCP, *, store: TimedDict) -> None:
    """
    Register read-only views of the shared dictionary.
    """

    @mcp.resource(
        "kv://entries",
        mime_type="text/plain",
        description="Current entries of the shared dictionary, one key=value per line"
    )
    def entries_snapshot() -> str:
        return store.to_string("\n", formatter=lambda value, key: f"{key}={value}")
