#!/usr/bin/env python3
"""Rendering of build results in guided and diagnostics output modes"""

from typing import Dict, List, Optional, Sequence

from xcodebuild_mcp_server.config import OUTPUT_MODE_DIAGNOSTICS
from xcodebuild_mcp_server.models import (
    PlatformTarget,
    ToolResponse,
    XcodePlatform,
    text_content,
)
from xcodebuild_mcp_server.utils.output import is_stderr_line

XCODEMAKE_SUCCESS_NOTE = (
    "xcodemake: Using faster incremental builds with xcodemake.\n"
    "Future builds will use the generated Makefile for improved performance."
)

XCODEMAKE_RETRY_SUGGESTION = (
    "💡 Incremental build using xcodemake failed, suggest using preferXcodebuild option "
    "to try build again using slower xcodebuild command."
)


def format_diagnostics_blocks(warnings: Sequence[str], errors: Sequence[str]) -> List[Dict[str, str]]:
    """Counted, bulleted blocks for errors then warnings. Empty groups are omitted."""
    blocks = []
    for title, lines in ((f"❌ Errors ({len(errors)})", errors),
                         (f"⚠️ Warnings ({len(warnings)})", warnings)):
        if lines:
            blocks.append(text_content("\n".join([title] + [f"- {line}" for line in lines])))
    return blocks


def format_guided_findings(warnings: Sequence[str], errors: Sequence[str]) -> List[Dict[str, str]]:
    """One advisory block per warning and per error."""
    blocks = [text_content(f"⚠️ Warning: {line}") for line in warnings]
    for line in errors:
        if is_stderr_line(line):
            blocks.append(text_content(f"❌ {line}"))
        else:
            blocks.append(text_content(f"❌ Error: {line}"))
    return blocks


def next_steps_for(target: PlatformTarget, scheme: str) -> Optional[str]:
    """Follow-up tool calls after a successful build, or None if the platform has none."""
    try:
        platform = XcodePlatform(target.platform)
    except ValueError:
        return None

    if platform == XcodePlatform.MACOS:
        return (
            "Next Steps:\n"
            f"1. Get app path: get_mac_app_path({{ scheme: '{scheme}' }})\n"
            "2. Get bundle ID: get_mac_bundle_id({ appPath: 'PATH_FROM_STEP_1' })\n"
            "3. Launch: launch_mac_app({ appPath: 'PATH_FROM_STEP_1' })"
        )

    if platform == XcodePlatform.IOS:
        return (
            "Next Steps:\n"
            f"1. Get app path: get_device_app_path({{ scheme: '{scheme}' }})\n"
            "2. Get bundle ID: get_app_bundle_id({ appPath: 'PATH_FROM_STEP_1' })\n"
            "3. Launch: launch_app_device({ bundleId: 'BUNDLE_ID_FROM_STEP_2' })"
        )

    if platform.is_simulator:
        if target.simulator_id:
            sim_param, sim_value = "simulatorId", target.simulator_id
        else:
            sim_param, sim_value = "simulatorName", target.simulator_name
        return (
            "Next Steps:\n"
            f"1. Get app path: get_sim_app_path({{ {sim_param}: '{sim_value}', scheme: '{scheme}', "
            f"platform: '{platform.value}' }})\n"
            "2. Get bundle ID: get_app_bundle_id({ appPath: 'PATH_FROM_STEP_1' })\n"
            f"3. Launch: launch_app_sim({{ {sim_param}: '{sim_value}', bundleId: 'BUNDLE_ID_FROM_STEP_2' }})\n"
            f"   Or with logs: launch_app_logs_sim({{ {sim_param}: '{sim_value}', "
            "bundleId: 'BUNDLE_ID_FROM_STEP_2' })"
        )

    return None


def format_build_response(output_mode: str,
                          warnings: Sequence[str],
                          errors: Sequence[str],
                          succeeded: bool,
                          scheme: str,
                          build_action: str,
                          target: PlatformTarget,
                          advisories: Sequence[str] = (),
                          incremental_active: bool = False,
                          suggest_full_build: bool = False) -> ToolResponse:
    """
    Assemble the response for a finished build.

    Guided mode emits the advisories, one block per finding, the result line,
    then either the xcodemake retry suggestion (failure) or the Next Steps
    block for a "build" action (success). Diagnostics mode emits only the
    counted error and warning blocks and the result line; a clean success is
    a single line.

    Args:
        output_mode: "guided" or "diagnostics"
        warnings: Classified warning lines
        errors: Classified error lines
        succeeded: Whether the command succeeded
        scheme: Scheme that was built
        build_action: xcodebuild action, e.g. "build" or "clean"
        target: Platform options, used for the log prefix and Next Steps
        advisories: Guided-mode notices gathered before the command ran
        incremental_active: The build went through xcodemake
        suggest_full_build: Append the retry-with-xcodebuild suggestion on failure

    Returns:
        ToolResponse whose is_error is the inverse of succeeded
    """
    diagnostics = output_mode == OUTPUT_MODE_DIAGNOSTICS
    prefix = f"{target.log_prefix} {build_action}"

    if not succeeded:
        result_line = text_content(f"❌ {prefix} failed for scheme {scheme}.")
        if diagnostics:
            return ToolResponse(
                content=format_diagnostics_blocks(warnings, errors) + [result_line],
                is_error=True,
            )
        content = [text_content(a) for a in advisories] + format_guided_findings(warnings, errors)
        content.append(result_line)
        if suggest_full_build:
            content.append(text_content(XCODEMAKE_RETRY_SUGGESTION))
        return ToolResponse(content=content, is_error=True)

    if diagnostics:
        if not warnings and not errors:
            return ToolResponse(content=[
                text_content(f"✅ {prefix} succeeded for scheme {scheme} (no warnings/errors).")
            ])
        return ToolResponse(content=format_diagnostics_blocks(warnings, errors) + [
            text_content(f"✅ {prefix} succeeded for scheme {scheme}.")
        ])

    content = [text_content(a) for a in advisories] + format_guided_findings(warnings, errors)
    content.append(text_content(f"✅ {prefix} succeeded for scheme {scheme}."))

    additional_info = None
    if build_action == "build":
        additional_info = next_steps_for(target, scheme)
    if additional_info is None and incremental_active:
        additional_info = XCODEMAKE_SUCCESS_NOTE
    if additional_info:
        content.append(text_content(additional_info))

    return ToolResponse(content=content)
