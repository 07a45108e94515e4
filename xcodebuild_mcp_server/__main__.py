#!/usr/bin/env python3
"""Command line entry point for the XcodeBuild MCP Server"""

import argparse
import sys

import xcodebuild_mcp_server
from xcodebuild_mcp_server.config import (
    OUTPUT_MODE_DIAGNOSTICS,
    OUTPUT_MODE_GUIDED,
    BuildConfig,
    set_build_config,
)
from xcodebuild_mcp_server.utils.log import set_log_level
from xcodebuild_mcp_server.utils.notifications import set_notifications_enabled


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="XcodeBuild MCP Server")
    parser.add_argument("--version", action="version",
                        version=f"xcodebuild-mcp-server {xcodebuild_mcp_server.__version__}")
    parser.add_argument("--build-output", choices=[OUTPUT_MODE_GUIDED, OUTPUT_MODE_DIAGNOSTICS],
                        help="Build response format (overrides XCODEBUILDMCP_BUILD_OUTPUT)")
    parser.add_argument("--incremental-builds", action="store_true",
                        help="Use xcodemake for incremental builds when available")
    parser.add_argument("--no-xcbeautify", action="store_true",
                        help="Never pipe build output through xcbeautify")
    parser.add_argument("--timeout", type=float,
                        help="Kill external commands after this many seconds")
    parser.add_argument("--show-notifications", action="store_true", help="Enable macOS notifications")
    parser.add_argument("--hide-notifications", action="store_true", help="Disable macOS notifications")
    parser.add_argument("--debug", action="store_true", help="Log debug messages to stderr")
    return parser.parse_args(argv)


def build_config_from_args(args, environ=None) -> BuildConfig:
    """Environment settings with command line flags taking precedence."""
    config = BuildConfig.from_environment(environ)
    return config.with_overrides(
        output_mode=args.build_output,
        incremental_builds_enabled=True if args.incremental_builds else None,
        use_xcbeautify=False if args.no_xcbeautify else None,
        command_timeout=args.timeout if args.timeout and args.timeout > 0 else None,
    )


def main(argv=None):
    args = parse_args(argv)

    # Handle notification settings
    if args.show_notifications and args.hide_notifications:
        print("Error: Cannot use both --show-notifications and --hide-notifications", file=sys.stderr)
        sys.exit(1)
    elif args.show_notifications:
        set_notifications_enabled(True)
        print("Notifications enabled", file=sys.stderr)
    elif args.hide_notifications:
        set_notifications_enabled(False)
        print("Notifications disabled", file=sys.stderr)

    if args.debug:
        set_log_level("debug")

    config = build_config_from_args(args)
    set_build_config(config)
    print(f"Build output mode: {config.output_mode}", file=sys.stderr)
    if config.incremental_builds_enabled:
        print("Incremental builds (xcodemake) enabled", file=sys.stderr)

    # Importing the tools registers them on the server
    from xcodebuild_mcp_server.server import mcp
    import xcodebuild_mcp_server.tools  # noqa: F401

    mcp.run()


if __name__ == "__main__":
    main()
