#!/usr/bin/env python3
"""build_sim tools - Build an app for an iOS simulator"""

from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.models import BuildRequest, PlatformTarget, ToolResponse, XcodePlatform
from xcodebuild_mcp_server.utils.build import execute_xcodebuild_command
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.validation import make_build_request, nullify_empty, require_exactly_one


async def build_sim_logic(request: BuildRequest,
                          simulator_id: Optional[str] = None,
                          simulator_name: Optional[str] = None,
                          use_latest_os: Optional[bool] = None,
                          executor=default_executor,
                          quiet_level: int = 0,
                          config: Optional[BuildConfig] = None) -> ToolResponse:
    """
    Build an app for an iOS simulator chosen by UUID or by name.

    use_latest_os defaults to True for a named simulator and is ignored for a
    UUID, which already pins the OS.
    """
    project_type = "workspace" if request.workspace_path else "project"
    file_path = request.workspace_path or request.project_path

    if simulator_id and use_latest_os is not None:
        log("warning", "useLatestOS parameter is ignored when using simulatorId (UUID implies exact device/OS)")

    log("info", f"Starting iOS Simulator build for scheme {request.scheme} from {project_type}: {file_path}")

    return await execute_xcodebuild_command(
        request,
        PlatformTarget(
            platform=XcodePlatform.IOS_SIMULATOR,
            simulator_id=simulator_id,
            simulator_name=simulator_name,
            use_latest_os=False if simulator_id else (True if use_latest_os is None else use_latest_os),
            log_prefix="iOS Simulator Build",
            xcbeautify_quiet_level=quiet_level,
        ),
        request.prefer_xcodebuild,
        "build",
        executor,
        config=config or get_build_config(),
    )


async def _build_sim(quiet_level, scheme, project_path, workspace_path, simulator_id, simulator_name,
                     configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild) -> str:
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args, prefer_xcodebuild)
    simulator_id = nullify_empty(simulator_id)
    simulator_name = nullify_empty(simulator_name)
    require_exactly_one("simulator_id", simulator_id, "simulator_name", simulator_name)

    response = await build_sim_logic(request, simulator_id, simulator_name, use_latest_os,
                                     quiet_level=quiet_level)
    return response.to_tool_result()


@mcp.tool()
async def build_sim(scheme: str,
                    project_path: Optional[str] = None,
                    workspace_path: Optional[str] = None,
                    simulator_id: Optional[str] = None,
                    simulator_name: Optional[str] = None,
                    configuration: Optional[str] = None,
                    derived_data_path: Optional[str] = None,
                    extra_args: Optional[List[str]] = None,
                    use_latest_os: Optional[bool] = None,
                    prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for an iOS simulator.

    Args:
        scheme: The scheme to build
        project_path: Path to the .xcodeproj. Provide EITHER this OR workspace_path.
        workspace_path: Path to the .xcworkspace. Provide EITHER this OR project_path.
        simulator_id: UUID of the simulator. Provide EITHER this OR simulator_name.
        simulator_name: Name of the simulator (e.g. 'iPhone 16'). Provide EITHER this OR simulator_id.
        configuration: Build configuration (Debug, Release, etc.). Defaults to Debug.
        derived_data_path: Path where build products and other derived data will go
        extra_args: Additional xcodebuild arguments
        use_latest_os: Use the latest OS for the named simulator (default true)
        prefer_xcodebuild: If true, use xcodebuild even when incremental builds are enabled.
            Useful when an incremental build fails.

    Returns:
        Build result, followed by next steps on success
    """
    return await _build_sim(0, scheme, project_path, workspace_path, simulator_id, simulator_name,
                            configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)


@mcp.tool()
async def build_sim_quiet(scheme: str,
                          project_path: Optional[str] = None,
                          workspace_path: Optional[str] = None,
                          simulator_id: Optional[str] = None,
                          simulator_name: Optional[str] = None,
                          configuration: Optional[str] = None,
                          derived_data_path: Optional[str] = None,
                          extra_args: Optional[List[str]] = None,
                          use_latest_os: Optional[bool] = None,
                          prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for an iOS simulator (xcbeautify -q). Same arguments as build_sim.
    """
    return await _build_sim(1, scheme, project_path, workspace_path, simulator_id, simulator_name,
                            configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)


@mcp.tool()
async def build_sim_error(scheme: str,
                          project_path: Optional[str] = None,
                          workspace_path: Optional[str] = None,
                          simulator_id: Optional[str] = None,
                          simulator_name: Optional[str] = None,
                          configuration: Optional[str] = None,
                          derived_data_path: Optional[str] = None,
                          extra_args: Optional[List[str]] = None,
                          use_latest_os: Optional[bool] = None,
                          prefer_xcodebuild: Optional[bool] = None) -> str:
    """
    Build an app for an iOS simulator (xcbeautify -qq, errors only). Same arguments as build_sim.
    """
    return await _build_sim(2, scheme, project_path, workspace_path, simulator_id, simulator_name,
                            configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)
