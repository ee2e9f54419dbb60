"""MCP server for running-courses.

Registers all tools and runs via stdio transport.
"""

import json
import logging
import sys

from mcp.server.fastmcp import FastMCP

from .state import state
from .tools.courses import register_course_tools
from .tools.lookup import register_lookup_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "running-courses",
    instructions=(
        "Recommend gentle out-and-back running courses around a location, "
        "ranked by elevation profile"
    ),
)

# Register all tool groups
register_course_tools(mcp)
register_lookup_tools(mcp)
register_status_tools(mcp)


@mcp.resource("status://service")
def service_status() -> str:
    """Current service configuration and health."""
    return json.dumps(state.summary())


def main():
    # stdout carries the MCP stdio transport, so logs go to stderr
    logging.basicConfig(
        level=state.settings.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
