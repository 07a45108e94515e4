#!/usr/bin/env python3
"""FastMCP server instance shared by all tools"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP("XcodeBuild MCP Server",
    instructions="""
        This server builds Xcode projects and workspaces and Swift packages
        with the command line toolchain (xcodebuild, swift build). Builds run
        exactly as xcodebuild runs them, so results match CI.

        Every build tool takes EITHER project_path (.xcodeproj) OR
        workspace_path (.xcworkspace), plus a scheme.

        Available tools:
        - build_macos / build_macos_quiet / build_macos_error: Build a macOS app
        - build_run_macos / build_run_macos_quiet / build_run_macos_error: Build a macOS app and launch it
        - build_sim / build_sim_quiet / build_sim_error: Build for a simulator, by simulator_id or simulator_name
        - build_run_sim / build_run_sim_quiet / build_run_sim_error: Build, install and launch on an iOS simulator
        - build_device / build_device_quiet / build_device_error: Build for a physical device
        - clean: Clean build products for a scheme
        - swift_package_build: Build a Swift package
        - debug_list_notification_history: List notifications, including escalated internal errors
        - version: Get the server version

        The _quiet variants pipe output through `xcbeautify -q`, the _error
        variants through `xcbeautify -qq` (errors only), when xcbeautify is
        installed.

        If an incremental (xcodemake) build fails without any compiler
        errors, call the tool again with prefer_xcodebuild set to true.
    """
)
