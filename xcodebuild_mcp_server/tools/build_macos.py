#!/usr/bin/env python3
"""build_macos tools - Build a macOS app with xcodebuild"""

from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.exceptions import InvalidParameterError
from xcodebuild_mcp_server.models import BuildRequest, PlatformTarget, ToolResponse, XcodePlatform
from xcodebuild_mcp_server.utils.build import execute_xcodebuild_command
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.validation import make_build_request

VALID_ARCHS = ("arm64", "x86_64")


async def build_macos_logic(request: BuildRequest,
                            arch: Optional[str] = None,
                            executor=default_executor,
                            quiet_level: int = 0,
                            config: Optional[BuildConfig] = None) -> ToolResponse:
    """
    Build a macOS app.

    Args:
        request: Validated build parameters
        arch: arm64 or x86_64, or None for the default architecture
        executor: Command executor
        quiet_level: xcbeautify quiet level (0, 1 or 2)
        config: Build config; the process-wide config by default
    """
    if arch is not None and arch not in VALID_ARCHS:
        raise InvalidParameterError(f"arch must be one of: {', '.join(VALID_ARCHS)}")

    log("info", f"Starting macOS build for scheme {request.scheme} (internal)")

    return await execute_xcodebuild_command(
        request,
        PlatformTarget(
            platform=XcodePlatform.MACOS,
            arch=arch,
            log_prefix="macOS Build",
            xcbeautify_quiet_level=quiet_level,
        ),
        request.prefer_xcodebuild,
        "build",
        executor,
        config=config or get_build_config(),
    )


async def _build_macos(quiet_level, scheme, project_path, workspace_path, configuration,
                       derived_data_path, arch, extra_args, prefer_xcodebuild) -> str:
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args, prefer_xcodebuild)
    response = await build_macos_logic(request, arch, quiet_level=quiet_level)
    return response.to_tool_result()


@mcp.tool()
async def build_macos(scheme: str,
                      project_path: Optional[str] = None,
                      workspace_path: Optional[str] = None,
                      configuration: Optional[str] = None,
                      derived_data_path: Optional[str] = None,
                      arch: Optional[str] = None,
                      extra_args: Optional[List[str]] = None,
                      prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build a macOS app.

    Args:
        scheme: The scheme to build
        project_path: Path to the .xcodeproj. Provide EITHER this OR workspace_path.
        workspace_path: Path to the .xcworkspace. Provide EITHER this OR project_path.
        configuration: Build configuration (Debug, Release, etc.). Defaults to Debug.
        derived_data_path: Path where build products and other derived data will go
        arch: Architecture to build for (arm64 or x86_64)
        extra_args: Additional xcodebuild arguments
        prefer_xcodebuild: If true, use xcodebuild even when incremental builds are enabled

    Returns:
        Build result, followed by next steps on success
    """
    return await _build_macos(0, scheme, project_path, workspace_path, configuration,
                              derived_data_path, arch, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_macos_quiet(scheme: str,
                            project_path: Optional[str] = None,
                            workspace_path: Optional[str] = None,
                            configuration: Optional[str] = None,
                            derived_data_path: Optional[str] = None,
                            arch: Optional[str] = None,
                            extra_args: Optional[List[str]] = None,
                            prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build a macOS app (xcbeautify -q). Same arguments as build_macos.
    """
    return await _build_macos(1, scheme, project_path, workspace_path, configuration,
                              derived_data_path, arch, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_macos_error(scheme: str,
                            project_path: Optional[str] = None,
                            workspace_path: Optional[str] = None,
                            configuration: Optional[str] = None,
                            derived_data_path: Optional[str] = None,
                            arch: Optional[str] = None,
                            extra_args: Optional[List[str]] = None,
                            prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build a macOS app (xcbeautify -qq, errors only). Same arguments as build_macos.
    """
    return await _build_macos(2, scheme, project_path, workspace_path, configuration,
                              derived_data_path, arch, extra_args, prefer_xcodebuild)
