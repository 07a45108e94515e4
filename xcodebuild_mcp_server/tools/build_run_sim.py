#!/usr/bin/env python3
"""build_run_sim tools - Build an app for an iOS simulator, install it and launch it"""

import json
from typing import Any, Dict, List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.config import BuildConfig, get_build_config
from xcodebuild_mcp_server.models import BuildRequest, ToolResponse, XcodePlatform, create_text_response, text_content
from xcodebuild_mcp_server.tools.build_sim import build_sim_logic
from xcodebuild_mcp_server.utils.app_path import build_settings_command, parse_app_path
from xcodebuild_mcp_server.utils.build import exec_options_for, is_spawn_error
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.destination import construct_destination_string
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.validation import make_build_request, nullify_empty, require_exactly_one


def find_simulator(devices_json: Dict[str, Any],
                   simulator_id: Optional[str] = None,
                   simulator_name: Optional[str] = None) -> Optional[Dict[str, str]]:
    """
    Find a simulator in `xcrun simctl list devices available --json` output.

    Matches by UUID when simulator_id is given, otherwise by name, preferring
    a booted simulator when several share the name.

    Returns:
        Dict with udid, name and state, or None if nothing matches
    """
    candidates = []
    for devices in (devices_json.get("devices") or {}).values():
        if not isinstance(devices, list):
            continue
        for device in devices:
            if not isinstance(device, dict):
                continue
            if not all(isinstance(device.get(key), str) for key in ("udid", "name", "state")):
                continue
            if simulator_id:
                if device["udid"] == simulator_id:
                    return {"udid": device["udid"], "name": device["name"], "state": device["state"]}
            elif device["name"] == simulator_name:
                candidates.append({"udid": device["udid"], "name": device["name"], "state": device["state"]})

    for candidate in candidates:
        if candidate["state"] == "Booted":
            return candidate
    return candidates[0] if candidates else None


def _failure(message: str) -> ToolResponse:
    return create_text_response(message, is_error=True)


async def _read_bundle_id(app_path: str, executor, exec_opts) -> Optional[str]:
    info_plist = f"{app_path}/Info.plist"
    attempts = [
        (['/usr/libexec/PlistBuddy', '-c', 'Print :CFBundleIdentifier', info_plist], 'Get Bundle ID with PlistBuddy'),
        (['plutil', '-extract', 'CFBundleIdentifier', 'raw', info_plist], 'Get Bundle ID with plutil'),
        (['defaults', 'read', f"{app_path}/Info", 'CFBundleIdentifier'], 'Get Bundle ID with defaults'),
    ]
    for command, label in attempts:
        result = await executor(command, label, True, exec_opts)
        if result.success and result.output.strip():
            return result.output.strip()
    return None


async def build_run_sim_logic(request: BuildRequest,
                              simulator_id: Optional[str] = None,
                              simulator_name: Optional[str] = None,
                              use_latest_os: Optional[bool] = None,
                              executor=default_executor,
                              quiet_level: int = 0,
                              config: Optional[BuildConfig] = None) -> ToolResponse:
    """
    Build for an iOS simulator, then boot the simulator, install the app and launch it.

    A failed build is returned unchanged. Every later step that fails yields
    an error response naming the step.

    Args:
        request: Validated build parameters
        simulator_id: Simulator UUID. Provide this OR simulator_name.
        simulator_name: Simulator name, e.g. "iPhone 16"
        use_latest_os: Use the latest OS for a named simulator (default true)
        executor: Command executor
        quiet_level: xcbeautify quiet level (0, 1 or 2)
        config: Build config; the process-wide config by default
    """
    config = config or get_build_config()
    exec_opts = exec_options_for(config)
    project_type = "workspace" if request.workspace_path else "project"
    file_path = request.workspace_path or request.project_path

    log("info", f"Starting iOS Simulator build and run for scheme {request.scheme} from {project_type}: {file_path}")

    build_response = await build_sim_logic(request, simulator_id, simulator_name, use_latest_os,
                                           executor, quiet_level, config)
    if build_response.is_error:
        return build_response

    try:
        destination = construct_destination_string(
            XcodePlatform.IOS_SIMULATOR,
            simulator_id=simulator_id,
            simulator_name=simulator_name,
            use_latest_os=False if simulator_id else use_latest_os,
        )
        settings = await executor(build_settings_command(request, destination), 'Get App Path', True, exec_opts)
        if not settings.success:
            return _failure(f"Build succeeded, but failed to get app path: {settings.error or 'Unknown error'}")

        app_path = parse_app_path(settings.output, prefer_codesigning_path=True)
        if not app_path:
            return _failure("Build succeeded, but could not find app path in build settings.")
        log("info", f"App bundle path for run: {app_path}")

        listing = await executor(['xcrun', 'simctl', 'list', 'devices', 'available', '--json'],
                                 'List Simulators', True, exec_opts)
        if not listing.success:
            message = listing.error or "Failed to list simulators"
            log("error", f"Error checking/booting simulator: {message}")
            return _failure(f"Build succeeded, but error checking/booting simulator: {message}")
        try:
            simulator = find_simulator(json.loads(listing.output), simulator_id, simulator_name)
        except ValueError as e:
            log("error", f"Error checking/booting simulator: {e}")
            return _failure(f"Build succeeded, but error checking/booting simulator: {e}")

        if simulator is None:
            if simulator_id:
                return _failure(f"Build succeeded, but could not find simulator with UUID: {simulator_id}")
            return _failure(f"Build succeeded, but could not find simulator named '{simulator_name}'")
        udid = simulator["udid"]

        if simulator["state"] != "Booted":
            log("info", f"Booting simulator {simulator['name']}...")
            boot = await executor(['xcrun', 'simctl', 'boot', udid], 'Boot Simulator', True, exec_opts)
            if not boot.success:
                message = boot.error or "Failed to boot simulator"
                log("error", f"Error checking/booting simulator: {message}")
                return _failure(f"Build succeeded, but error checking/booting simulator: {message}")
        else:
            log("info", f"Simulator {udid} is already booted")

        opened = await executor(['open', '-a', 'Simulator'], 'Open Simulator App', True, exec_opts)
        if not opened.success:
            log("warning", f"Warning: Could not open Simulator app: {opened.error or 'Failed to open Simulator app'}")

        log("info", f"Installing app at path: {app_path} to simulator: {udid}")
        install = await executor(['xcrun', 'simctl', 'install', udid, app_path], 'Install App', True, exec_opts)
        if not install.success:
            message = install.error or "Failed to install app"
            log("error", f"Error installing app: {message}")
            return _failure(f"Build succeeded, but error installing app on simulator: {message}")

        bundle_id = await _read_bundle_id(app_path, executor, exec_opts)
        if not bundle_id:
            message = "Could not extract bundle ID from Info.plist using any method"
            log("error", f"Error getting bundle ID: {message}")
            return _failure(f"Build and install succeeded, but error getting bundle ID: {message}")
        log("info", f"Bundle ID for run: {bundle_id}")

        launch = await executor(['xcrun', 'simctl', 'launch', udid, bundle_id], 'Launch App', True, exec_opts)
        if not launch.success:
            message = launch.error or "Failed to launch app"
            log("error", f"Error launching app: {message}")
            return _failure(f"Build and install succeeded, but error launching app on simulator: {message}")
    except Exception as e:
        log("error", f"Error in iOS Simulator build and run: {e}", escalate=not is_spawn_error(e))
        return _failure(f"Error in iOS Simulator build and run: {e}")

    log("info", "✅ iOS simulator build & run succeeded.")

    target = f"simulator UUID '{simulator_id}'" if simulator_id else f"simulator name '{simulator_name}'"
    return ToolResponse(content=[text_content(
        f"✅ iOS simulator build and run succeeded for scheme {request.scheme} from {project_type} "
        f"{file_path} targeting {target}.\n\n"
        f"The app ({bundle_id}) is now running in the iOS Simulator.\n"
        "If you don't see the simulator window, it may be hidden behind other windows. "
        "The Simulator app should be open.\n\n"
        "Next Steps:\n"
        "- Option 1: Capture structured logs only (app continues running):\n"
        f"  start_simulator_log_capture({{ simulatorId: '{udid}', bundleId: '{bundle_id}' }})\n"
        "- Option 2: Capture both console and structured logs (app will restart):\n"
        f"  start_simulator_log_capture({{ simulatorId: '{udid}', bundleId: '{bundle_id}', captureConsole: true }})\n"
        "- Option 3: Launch app with logs in one step (for a fresh start):\n"
        f"  launch_app_with_logs_in_simulator({{ simulatorId: '{udid}', bundleId: '{bundle_id}' }})\n\n"
        "When done with any option, use: stop_sim_log_cap({ logSessionId: 'SESSION_ID' })"
    )])


async def _build_run_sim(quiet_level, scheme, project_path, workspace_path, simulator_id, simulator_name,
                         configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild) -> str:
    request = make_build_request(scheme, project_path, workspace_path, configuration,
                                 derived_data_path, extra_args, prefer_xcodebuild)
    simulator_id = nullify_empty(simulator_id)
    simulator_name = nullify_empty(simulator_name)
    require_exactly_one("simulator_id", simulator_id, "simulator_name", simulator_name)

    response = await build_run_sim_logic(request, simulator_id, simulator_name, use_latest_os,
                                         quiet_level=quiet_level)
    return response.to_tool_result()


@mcp.tool()
async def build_run_sim(scheme: str,
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
    Build an app for an iOS simulator, install it and launch it.

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
        prefer_xcodebuild: If true, use xcodebuild even when incremental builds are enabled

    Returns:
        Launch confirmation with the bundle ID and log capture hints
    """
    return await _build_run_sim(0, scheme, project_path, workspace_path, simulator_id, simulator_name,
                                configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)


@mcp.tool()
async def build_run_sim_quiet(scheme: str,
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
    Build (xcbeautify -q), install and launch on an iOS simulator. Same arguments as build_run_sim.
    """
    return await _build_run_sim(1, scheme, project_path, workspace_path, simulator_id, simulator_name,
                                configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)


@mcp.tool()
async def build_run_sim_error(scheme: str,
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
    Build (xcbeautify -qq, errors only), install and launch on an iOS simulator.
    Same arguments as build_run_sim.
    """
    return await _build_run_sim(2, scheme, project_path, workspace_path, simulator_id, simulator_name,
                                configuration, derived_data_path, extra_args, use_latest_os, prefer_xcodebuild)
