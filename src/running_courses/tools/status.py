"""Status tool: get_status."""

import json
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_status_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_status() -> str:
        """Return a health summary of the server.

        Shows which external services have credentials (keys are masked),
        and the configured batch limits and timeouts.
        """
        return json.dumps(state.summary(), indent=2)
