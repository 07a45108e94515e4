#!/usr/bin/env python3
"""swift_package_build tool - Build a Swift package with swift build"""

import os
from typing import List, Optional

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.exceptions import InvalidParameterError
from xcodebuild_mcp_server.models import ToolResponse, create_text_response, text_content
from xcodebuild_mcp_server.utils.build import is_spawn_error
from xcodebuild_mcp_server.utils.command import default_executor
from xcodebuild_mcp_server.utils.log import log

VALID_CONFIGURATIONS = ("debug", "release")


def build_swift_command(package_path: str,
                        target_name: Optional[str] = None,
                        configuration: Optional[str] = None,
                        architectures: Optional[List[str]] = None,
                        parse_as_library: bool = False) -> List[str]:
    command = ['swift', 'build', '--package-path', os.path.abspath(package_path)]

    if configuration and configuration.lower() == 'release':
        command.extend(['-c', 'release'])
    if target_name:
        command.extend(['--target', target_name])
    for arch in architectures or []:
        command.extend(['--arch', arch])
    if parse_as_library:
        command.extend(['-Xswiftc', '-parse-as-library'])

    return command


async def swift_package_build_logic(package_path: str,
                                    target_name: Optional[str] = None,
                                    configuration: Optional[str] = None,
                                    architectures: Optional[List[str]] = None,
                                    parse_as_library: bool = False,
                                    executor=default_executor) -> ToolResponse:
    if configuration is not None and configuration.lower() not in VALID_CONFIGURATIONS:
        raise InvalidParameterError("configuration must be 'debug' or 'release'")

    command = build_swift_command(package_path, target_name, configuration, architectures, parse_as_library)
    log("info", f"Running {' '.join(command)}")

    try:
        result = await executor(command, 'Swift Package Build', True, None)
    except Exception as e:
        log("error", f"Swift package build failed: {e}", escalate=not is_spawn_error(e))
        return create_text_response(f"Failed to execute swift build: {e}", is_error=True)

    if not result.success:
        details = result.error or result.output or "Unknown error"
        return create_text_response(f"Swift package build failed\n{details}", is_error=True)

    return ToolResponse(content=[
        text_content("✅ Swift package build succeeded."),
        text_content("💡 Next: Run tests with swift_package_test or execute with swift_package_run"),
        text_content(result.output),
    ])


@mcp.tool()
async def swift_package_build(package_path: str,
                              target_name: Optional[str] = None,
                              configuration: Optional[str] = None,
                              architectures: Optional[List[str]] = None,
                              parse_as_library: Optional[bool] = None) -> str:
    """
    Build a Swift package with swift build.

    Args:
        package_path: Path to the Swift package root
        target_name: Optional target to build
        configuration: debug or release (default debug)
        architectures: Target architectures to build for
        parse_as_library: Build as library instead of executable

    Returns:
        Build result and the swift build output
    """
    if not package_path or package_path.strip() == "":
        raise InvalidParameterError("package_path cannot be empty")

    response = await swift_package_build_logic(package_path.strip(), target_name, configuration,
                                               architectures, bool(parse_as_library))
    return response.to_tool_result()
