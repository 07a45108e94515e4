"""XcodeBuild MCP Server - build Xcode projects over the Model Context Protocol"""

__version__ = "0.4.0"
