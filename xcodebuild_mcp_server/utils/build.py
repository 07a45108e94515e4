#!/usr/bin/env python3
"""Build orchestration - turns a build request into an xcodebuild run and a tool response

execute_xcodebuild_command is the single entry point used by every build-like
tool. It resolves the destination, picks between xcodebuild (optionally piped
through xcbeautify) and xcodemake, runs the command, classifies its output and
renders the response. Every failure comes back as an error response; nothing
is raised to the caller.
"""

import errno
import os
from enum import Enum
from typing import Callable, List, Optional

from xcodebuild_mcp_server.config import BuildConfig
from xcodebuild_mcp_server.exceptions import DestinationError
from xcodebuild_mcp_server.models import (
    BuildRequest,
    CommandResult,
    ExecOptions,
    PlatformTarget,
    ToolResponse,
    create_text_response,
)
from xcodebuild_mcp_server.utils.command import CommandExecutor, default_executor
from xcodebuild_mcp_server.utils.destination import construct_destination_string
from xcodebuild_mcp_server.utils.formatting import format_build_response
from xcodebuild_mcp_server.utils.log import Logger, log
from xcodebuild_mcp_server.utils.output import classify_build_output
from xcodebuild_mcp_server.utils.xcbeautify import (
    XcbeautifyCache,
    build_xcbeautify_pipeline,
    get_xcbeautify_install_prompt,
    is_xcbeautify_available,
    xcbeautify_cache,
)
from xcodebuild_mcp_server.utils.xcodemake import Xcodemake, default_xcodemake

# xcodebuild's EX_USAGE: the arguments this server built were rejected
INVALID_ARGUMENTS_EXIT_CODE = 64

# Host environment problems rather than defects in this server
SPAWN_ERROR_CODES = frozenset({errno.ENOENT, errno.EACCES, errno.EPERM})


class IncrementalBuildState(Enum):
    DISABLED = "disabled"
    ENABLED_UNAVAILABLE = "enabled_unavailable"
    ENABLED_OVERRIDDEN = "enabled_overridden"
    ENABLED_ACTIVE = "enabled_active"


def decide_incremental_state(enabled: bool,
                             build_action: str,
                             prefer_xcodebuild: bool,
                             is_available: Callable[[], bool]) -> IncrementalBuildState:
    """
    Decide whether a build goes through xcodemake.

    Only plain "build" actions are eligible. is_available is only called
    when the feature is enabled for an eligible action.
    """
    if not enabled or build_action != "build":
        return IncrementalBuildState.DISABLED
    if not is_available():
        return IncrementalBuildState.ENABLED_UNAVAILABLE
    if prefer_xcodebuild:
        return IncrementalBuildState.ENABLED_OVERRIDDEN
    return IncrementalBuildState.ENABLED_ACTIVE


def build_xcodebuild_command(request: BuildRequest, destination: str, build_action: str) -> List[str]:
    command = ['xcodebuild']
    if request.workspace_path:
        command.extend(['-workspace', request.workspace_path])
    elif request.project_path:
        command.extend(['-project', request.project_path])

    command.extend(['-scheme', request.scheme])
    command.extend(['-configuration', request.configuration])
    command.append('-skipMacroValidation')
    command.extend(['-destination', destination])

    if request.derived_data_path:
        command.extend(['-derivedDataPath', request.derived_data_path])
    if request.extra_args:
        command.extend(request.extra_args)

    command.append(build_action)
    return command


def exec_options_for(config: BuildConfig) -> Optional[ExecOptions]:
    """Executor options carrying the configured command timeout, if any."""
    if config.command_timeout:
        return ExecOptions(timeout=config.command_timeout)
    return None


def project_dir_for(request: BuildRequest) -> str:
    # A bare file name lives in the current directory
    return os.path.dirname(request.workspace_path or request.project_path or "") or "."


def is_spawn_error(error: BaseException) -> bool:
    return isinstance(error, OSError) and error.errno in SPAWN_ERROR_CODES


async def _run_incremental(request: BuildRequest,
                           target: PlatformTarget,
                           command: List[str],
                           xcodemake: Xcodemake,
                           executor,
                           exec_opts: Optional[ExecOptions],
                           advisories: List[str],
                           logger: Logger) -> CommandResult:
    project_dir = project_dir_for(request)

    makefile_exists = xcodemake.makefile_exists(project_dir)
    logger("debug", f"Makefile exists: {makefile_exists}")
    make_log_exists = xcodemake.make_log_file_exists(project_dir, command)
    logger("debug", f"Makefile log exists: {make_log_exists}")

    if makefile_exists and make_log_exists:
        advisories.append("ℹ️ Using make for incremental build")
        return await xcodemake.run_make(project_dir, target.log_prefix, executor, exec_opts)

    advisories.append("ℹ️ Generating Makefile with xcodemake (first build may take longer)")
    return await xcodemake.run_xcodemake(project_dir, command[1:], target.log_prefix, executor, exec_opts)


async def _run_xcodebuild(target: PlatformTarget,
                          command: List[str],
                          config: BuildConfig,
                          cache: XcbeautifyCache,
                          executor,
                          exec_opts: Optional[ExecOptions],
                          advisories: List[str]) -> CommandResult:
    use_xcbeautify = config.use_xcbeautify and await is_xcbeautify_available(executor, exec_opts, cache)

    if config.use_xcbeautify and not use_xcbeautify:
        advisories.append(get_xcbeautify_install_prompt())

    if use_xcbeautify:
        pipeline = build_xcbeautify_pipeline(command, target.xcbeautify_quiet_level)
        return await executor(['bash', '-lc', pipeline], target.log_prefix, False, exec_opts)

    return await executor(command, target.log_prefix, True, exec_opts)


async def execute_xcodebuild_command(request: BuildRequest,
                                     target: PlatformTarget,
                                     prefer_xcodebuild: bool = False,
                                     build_action: str = "build",
                                     executor: CommandExecutor = default_executor,
                                     exec_opts: Optional[ExecOptions] = None,
                                     config: Optional[BuildConfig] = None,
                                     cache: Optional[XcbeautifyCache] = None,
                                     xcodemake: Optional[Xcodemake] = None,
                                     logger: Logger = log) -> ToolResponse:
    """
    Run an xcodebuild action and render the result.

    Args:
        request: Project or workspace, scheme, configuration and extra args
        target: Platform, destination selectors, log prefix and xcbeautify quiet level
        prefer_xcodebuild: Skip xcodemake even when it is enabled and available
        build_action: xcodebuild action such as "build", "clean" or "test"
        executor: Command executor
        exec_opts: Options passed to every command; defaults to the config timeout
        config: Output mode, incremental build and xcbeautify settings
        cache: xcbeautify availability cache; the process-wide one by default
        xcodemake: xcodemake probes; the default installation lookup by default
        logger: Called as logger(level, message, escalate=...)

    Returns:
        ToolResponse. A bad destination yields a single error block before any
        process is started.
    """
    if config is None:
        config = BuildConfig()
    if cache is None:
        cache = xcbeautify_cache
    if xcodemake is None:
        xcodemake = default_xcodemake
    if exec_opts is None:
        exec_opts = exec_options_for(config)

    prefix = f"{target.log_prefix} {build_action}"
    guided = not config.is_diagnostics
    advisories: List[str] = []

    logger("info", f"Starting {prefix} for scheme {request.scheme}")

    try:
        destination = construct_destination_string(
            target.platform,
            simulator_id=target.simulator_id,
            simulator_name=target.simulator_name,
            use_latest_os=target.use_latest_os,
            arch=target.arch,
            device_id=target.device_id,
        )
    except DestinationError as e:
        logger("warning", f"{prefix} rejected: {e.message}")
        return create_text_response(e.message, is_error=True)

    try:
        state = decide_incremental_state(
            config.incremental_builds_enabled, build_action, prefer_xcodebuild, xcodemake.is_available)

        if state == IncrementalBuildState.ENABLED_OVERRIDDEN:
            logger("info", "xcodemake is enabled but preferXcodebuild is set to true. Falling back to xcodebuild.")
            advisories.append("⚠️ incremental build support is enabled but preferXcodebuild is set to true. "
                              "Falling back to xcodebuild.")
        elif state == IncrementalBuildState.ENABLED_UNAVAILABLE:
            logger("info", "xcodemake is enabled but not available. Falling back to xcodebuild.")
            advisories.append("⚠️ xcodemake is enabled but not available. Falling back to xcodebuild.")
        elif state == IncrementalBuildState.ENABLED_ACTIVE:
            logger("info", "xcodemake is enabled and available, using it for incremental builds.")
            advisories.append("ℹ️ xcodemake is enabled and available, using it for incremental builds.")

        command = build_xcodebuild_command(request, destination, build_action)

        if state == IncrementalBuildState.ENABLED_ACTIVE:
            result = await _run_incremental(
                request, target, command, xcodemake, executor, exec_opts, advisories, logger)
        else:
            result = await _run_xcodebuild(
                target, command, config, cache, executor, exec_opts, advisories)
    except Exception as e:
        logger("error", f"Error during {prefix}: {e}", escalate=not is_spawn_error(e))
        return create_text_response(f"Error during {prefix}: {e}", is_error=True)

    classified = classify_build_output(result.output, result.error)
    warnings = classified.warnings
    if not guided and config.use_xcbeautify and cache.get() is False:
        warnings = [get_xcbeautify_install_prompt()] + warnings

    incremental_active = state == IncrementalBuildState.ENABLED_ACTIVE

    if not result.success:
        invalid_arguments = result.exit_code == INVALID_ARGUMENTS_EXIT_CODE
        logger(
            "error" if invalid_arguments else "warning",
            f"{prefix} failed: {result.error or '(no stderr; see formatted output)'}",
            escalate=invalid_arguments,
        )
    else:
        logger("info", f"✅ {prefix} succeeded.")

    return format_build_response(
        config.output_mode,
        warnings,
        classified.errors,
        succeeded=result.success,
        scheme=request.scheme,
        build_action=build_action,
        target=target,
        advisories=advisories,
        incremental_active=incremental_active,
        # No compiler diagnostics at all points at xcodemake itself
        suggest_full_build=incremental_active and not classified.has_stdout_markers,
    )
