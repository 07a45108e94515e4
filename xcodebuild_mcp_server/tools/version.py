#!/usr/bin/env python3
"""version tool - Report the server version"""

from xcodebuild_mcp_server.server import mcp


@mcp.tool()
def version() -> str:
    """
    Get the current version of the XcodeBuild MCP Server.

    Returns:
        The version string
    """
    return __import__('xcodebuild_mcp_server').__version__
