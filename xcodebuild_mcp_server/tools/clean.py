#!/usr/bin/env python3
"""clean tool - Clean build products with xcodebuild"""

from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.exceptions import DestinationError
from xcodebuild_mcp_server.models import (
    BuildRequest,
    PlatformTarget,
    ToolResponse,
    XcodePlatform,
    create_text_response,
)
from xcodebuild_mcp_server.utils.build import execute_xcodebuild_command
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.destination import parse_platform
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.validation import make_build_request, nullify_empty


async def clean_logic(request: BuildRequest,
                      platform: str = XcodePlatform.MACOS.value,
                      executor=default_executor,
                      config: Optional[BuildConfig] = None) -> ToolResponse:
    """Run xcodebuild clean. Simulator platforms get the generic device destination."""
    try:
        parsed = parse_platform(platform)
    except DestinationError as e:
        log("warning", f"Clean rejected: {e.message}")
        return create_text_response(e.message, is_error=True)

    # Cleaning needs a destination but not a specific simulator
    target = PlatformTarget(platform=parsed.device_platform.value, log_prefix="Clean")

    return await execute_xcodebuild_command(
        request,
        target,
        False,
        "clean",
        executor,
        config=config or get_build_config(),
    )


@mcp.tool()
async def clean(scheme: str,
                project_path: Optional[str] = None,
                workspace_path: Optional[str] = None,
                platform: Optional[str] = None,
                configuration: Optional[str] = None,
                derived_data_path: Optional[str] = None,
                extra_args: Optional[List[str]] = None) -> str:
    """
    Clean build products for a scheme.

    Args:
        scheme: The scheme to clean
        project_path: Path to the .xcodeproj. Provide EITHER this OR workspace_path.
        workspace_path: Path to the .xcworkspace. Provide EITHER this OR project_path.
        platform: Platform to clean for (default macOS)
        configuration: Build configuration (Debug, Release, etc.). Defaults to Debug.
        derived_data_path: Path to derived data directory
        extra_args: Additional xcodebuild arguments

    Returns:
        Clean result
    """
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args)
    response = await clean_logic(request, nullify_empty(platform) or XcodePlatform.MACOS.value)
    return response.to_tool_result()
