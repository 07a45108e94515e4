#!/usr/bin/env python3
"""build_device tools - Build an app for a physical Apple device"""

from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.exceptions import InvalidParameterError
from xcodebuild_mcp_server.models import (
    DEVICE_PLATFORMS,
    BuildRequest,
    PlatformTarget,
    ToolResponse,
    XcodePlatform,
)
from xcodebuild_mcp_server.utils.build import execute_xcodebuild_command
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.validation import make_build_request, nullify_empty


async def build_device_logic(request: BuildRequest,
                             platform: str = XcodePlatform.IOS.value,
                             device_id: Optional[str] = None,
                             executor=default_executor,
                             quiet_level: int = 0,
                             config: Optional[BuildConfig] = None) -> ToolResponse:
    """
    Build for a physical device. Without device_id the build uses the
    generic destination for the platform, which needs no connected device.
    """
    if platform not in {p.value for p in DEVICE_PLATFORMS}:
        raise InvalidParameterError(
            f"platform must be one of: {', '.join(sorted(p.value for p in DEVICE_PLATFORMS))}")

    return await execute_xcodebuild_command(
        request,
        PlatformTarget(
            platform=platform,
            device_id=device_id,
            log_prefix=f"{platform} Device Build",
            xcbeautify_quiet_level=quiet_level,
        ),
        request.prefer_xcodebuild,
        "build",
        executor,
        config=config or get_build_config(),
    )


async def _build_device(quiet_level, scheme, project_path, workspace_path, platform, device_id,
                        configuration, derived_data_path, extra_args, prefer_xcodebuild) -> str:
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args, prefer_xcodebuild)
    response = await build_device_logic(request, nullify_empty(platform) or XcodePlatform.IOS.value,
                                        nullify_empty(device_id), quiet_level=quiet_level)
    return response.to_tool_result()


@mcp.tool()
async def build_device(scheme: str,
                       project_path: Optional[str] = None,
                       workspace_path: Optional[str] = None,
                       platform: Optional[str] = None,
                       device_id: Optional[str] = None,
                       configuration: Optional[str] = None,
                       derived_data_path: Optional[str] = None,
                       extra_args: Optional[List[str]] = None,
                       prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for a connected device.

    Args:
        scheme: The scheme to build
        project_path: Path to the .xcodeproj. Provide EITHER this OR workspace_path.
        workspace_path: Path to the .xcworkspace. Provide EITHER this OR project_path.
        platform: iOS, watchOS, tvOS or visionOS (default iOS)
        device_id: UDID of the device. If omitted, builds for the generic platform destination.
        configuration: Build configuration (Debug, Release). Defaults to Debug.
        derived_data_path: Path to derived data directory
        extra_args: Additional arguments to pass to xcodebuild
        prefer_xcodebuild: Prefer xcodebuild over faster alternatives

    Returns:
        Build result, followed by next steps on success
    """
    return await _build_device(0, scheme, project_path, workspace_path, platform, device_id,
                               configuration, derived_data_path, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_device_quiet(scheme: str,
                             project_path: Optional[str] = None,
                             workspace_path: Optional[str] = None,
                             platform: Optional[str] = None,
                             device_id: Optional[str] = None,
                             configuration: Optional[str] = None,
                             derived_data_path: Optional[str] = None,
                             extra_args: Optional[List[str]] = None,
                             prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for a connected device (xcbeautify -q). Same arguments as build_device.
    """
    return await _build_device(1, scheme, project_path, workspace_path, platform, device_id,
                               configuration, derived_data_path, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_device_error(scheme: str,
                             project_path: Optional[str] = None,
                             workspace_path: Optional[str] = None,
                             platform: Optional[str] = None,
                             device_id: Optional[str] = None,
                             configuration: Optional[str] = None,
                             derived_data_path: Optional[str] = None,
                             extra_args: Optional[List[str]] = None,
                             prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for a connected device (xcbeautify -qq, errors only). Same arguments as build_device.
    """
    return await _build_device(2, scheme, project_path, workspace_path, platform, device_id,
                               configuration, derived_data_path, extra_args, prefer_xcodebuild)
