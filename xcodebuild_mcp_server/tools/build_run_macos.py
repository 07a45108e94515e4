#!/usr/bin/env python3
"""build_run_macos tools - Build a macOS app, then launch it"""

from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.models import BuildRequest, ToolResponse, create_text_response, text_content
from xcodebuild_mcp_server.tools.build_macos import build_macos_logic
from xcodebuild_mcp_server.utils.app_path import build_settings_command, parse_app_path
from xcodebuild_mcp_server.utils.build import exec_options_for, is_spawn_error
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.validation import make_build_request


def _carried_build_blocks(build_response: ToolResponse):
    # Launch hints are moot once the app has been launched
    return [block for block in build_response.content if not block["text"].startswith("Next Steps:")]


async def build_run_macos_logic(request: BuildRequest,
                                arch: Optional[str] = None,
                                executor=default_executor,
                                quiet_level: int = 0,
                                config: Optional[BuildConfig] = None) -> ToolResponse:
    """
    Build a macOS app, find it through -showBuildSettings and open it.

    A failed build is returned unchanged. Once the build has succeeded, a
    missing app path or a failed launch is reported without the error flag,
    after the build's own findings.

    Args:
        request: Validated build parameters
        arch: arm64 or x86_64, or None for the default architecture
        executor: Command executor
        quiet_level: xcbeautify quiet level (0, 1 or 2)
        config: Build config; the process-wide config by default
    """
    config = config or get_build_config()
    exec_opts = exec_options_for(config)

    log("info", "Handling macOS build & run logic...")

    build_response = await build_macos_logic(request, arch, executor, quiet_level, config)
    if build_response.is_error:
        return build_response
    build_blocks = _carried_build_blocks(build_response)

    try:
        settings = await executor(build_settings_command(request), 'Get Build Settings for Launch', True, exec_opts)
        if not settings.success:
            app_path, app_path_error = None, settings.error or "Failed to get build settings"
        else:
            app_path = parse_app_path(settings.output)
            app_path_error = None if app_path else "Could not extract app path from build settings"

        if app_path is None:
            log("error", "Build succeeded, but failed to get app path to launch.")
            return ToolResponse(content=build_blocks + [
                text_content(f"✅ Build succeeded, but failed to get app path to launch: {app_path_error}")
            ])

        log("info", f"App path determined as: {app_path}")

        launch = await executor(['open', app_path], 'Launch macOS App', True, exec_opts)
        if not launch.success:
            log("error", f"Build succeeded, but failed to launch app {app_path}: {launch.error}")
            return ToolResponse(content=build_blocks + [
                text_content(f"✅ Build succeeded, but failed to launch app {app_path}. Error: {launch.error}")
            ])
    except Exception as e:
        log("error", f"Error during macOS build & run logic: {e}", escalate=not is_spawn_error(e))
        return create_text_response(f"Error during macOS build and run: {e}", is_error=True)

    log("info", f"✅ macOS app launched successfully: {app_path}")
    return ToolResponse(content=build_blocks + [
        text_content(f"✅ macOS build and run succeeded for scheme {request.scheme}. App launched: {app_path}")
    ])


async def _build_run_macos(quiet_level, scheme, project_path, workspace_path, configuration,
                           derived_data_path, arch, extra_args, prefer_xcodebuild) -> str:
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args, prefer_xcodebuild)
    response = await build_run_macos_logic(request, arch, quiet_level=quiet_level)
    return response.to_tool_result()


@mcp.tool()
async def build_run_macos(scheme: str,
                          project_path: Optional[str] = None,
                          workspace_path: Optional[str] = None,
                          configuration: Optional[str] = None,
                          derived_data_path: Optional[str] = None,
                          arch: Optional[str] = None,
                          extra_args: Optional[List[str]] = None,
                          prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build a macOS app and launch it.

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
        Build findings followed by the launched app path
    """
    return await _build_run_macos(0, scheme, project_path, workspace_path, configuration,
                                  derived_data_path, arch, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_run_macos_quiet(scheme: str,
                                project_path: Optional[str] = None,
                                workspace_path: Optional[str] = None,
                                configuration: Optional[str] = None,
                                derived_data_path: Optional[str] = None,
                                arch: Optional[str] = None,
                                extra_args: Optional[List[str]] = None,
                                prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build (xcbeautify -q) and launch a macOS app. Same arguments as build_run_macos.
    """
    return await _build_run_macos(1, scheme, project_path, workspace_path, configuration,
                                  derived_data_path, arch, extra_args, prefer_xcodebuild)


@mcp.tool()
async def build_run_macos_error(scheme: str,
                                project_path: Optional[str] = None,
                                workspace_path: Optional[str] = None,
                                configuration: Optional[str] = None,
                                derived_data_path: Optional[str] = None,
                                arch: Optional[str] = None,
                                extra_args: Optional[List[str]] = None,
                                prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build (xcbeautify -qq, errors only) and launch a macOS app. Same arguments as build_run_macos.
    """
    return await _build_run_macos(2, scheme, project_path, workspace_path, configuration,
                                  derived_data_path, arch, extra_args, prefer_xcodebuild)
