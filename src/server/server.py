"""Server bootstrap for the timed dictionary MCP service.

Creates the FastMCP instance and the shared TimedDict, wires the tools and
resources to that store, and starts the MCP server (stdio transport).
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL
from core.scheduling import AsyncioScheduler
from core.timed_dict import TimedDict

from tools.set_value import register as register_set_value
from tools.get_value import register as register_get_value
from tools.delete_value import register as register_delete_value
from tools.list_entries import register as register_list_entries

from resources.store_snapshot import register_resources

logger = logging.getLogger(__name__)

mcp = FastMCP("timed-dict-mcp")
store: TimedDict = TimedDict(scheduler=AsyncioScheduler())


def register_tools() -> None:
    register_set_value(mcp, store=store)
    register_get_value(mcp, store=store)
    register_delete_value(mcp, store=store)
    register_list_entries(mcp, store=store)


def register_all() -> None:
    register_tools()
    register_resources(mcp, store=store)


register_all()


def configure_logging() -> None:
    # stdout carries the stdio transport; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    configure_logging()
    logger.info("Starting timed-dict-mcp (stdio)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
