#!/usr/bin/env python3
"""Core data types: platforms, build parameters, command results and tool responses"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from xcodebuild_mcp_server.exceptions import InvalidParameterError, XCodeMCPError


class XcodePlatform(str, Enum):
    """Xcode build platforms, valued by the name xcodebuild uses in destinations."""
    MACOS = "macOS"
    IOS = "iOS"
    IOS_SIMULATOR = "iOS Simulator"
    WATCHOS = "watchOS"
    WATCHOS_SIMULATOR = "watchOS Simulator"
    TVOS = "tvOS"
    TVOS_SIMULATOR = "tvOS Simulator"
    VISIONOS = "visionOS"
    VISIONOS_SIMULATOR = "visionOS Simulator"

    @property
    def is_simulator(self) -> bool:
        return self in SIMULATOR_PLATFORMS

    @property
    def is_device(self) -> bool:
        return self in DEVICE_PLATFORMS

    @property
    def device_platform(self) -> "XcodePlatform":
        """The physical device platform a simulator platform stands in for."""
        return SIMULATOR_DEVICE_PLATFORMS.get(self, self)


SIMULATOR_PLATFORMS = frozenset({
    XcodePlatform.IOS_SIMULATOR,
    XcodePlatform.WATCHOS_SIMULATOR,
    XcodePlatform.TVOS_SIMULATOR,
    XcodePlatform.VISIONOS_SIMULATOR,
})

DEVICE_PLATFORMS = frozenset({
    XcodePlatform.IOS,
    XcodePlatform.WATCHOS,
    XcodePlatform.TVOS,
    XcodePlatform.VISIONOS,
})

SIMULATOR_DEVICE_PLATFORMS = {
    XcodePlatform.IOS_SIMULATOR: XcodePlatform.IOS,
    XcodePlatform.WATCHOS_SIMULATOR: XcodePlatform.WATCHOS,
    XcodePlatform.TVOS_SIMULATOR: XcodePlatform.TVOS,
    XcodePlatform.VISIONOS_SIMULATOR: XcodePlatform.VISIONOS,
}


@dataclass
class BuildRequest:
    """
    Parameters shared by every xcodebuild invocation.

    Exactly one of project_path and workspace_path must be set. The scheme is
    always passed through, even when empty.
    """
    scheme: str
    project_path: Optional[str] = None
    workspace_path: Optional[str] = None
    configuration: str = "Debug"
    derived_data_path: Optional[str] = None
    extra_args: List[str] = field(default_factory=list)
    prefer_xcodebuild: bool = False

    def validate(self) -> "BuildRequest":
        if self.project_path is None and self.workspace_path is None:
            raise InvalidParameterError("Either project_path or workspace_path is required.")
        if self.project_path is not None and self.workspace_path is not None:
            raise InvalidParameterError(
                "project_path and workspace_path are mutually exclusive. Provide only one.")
        return self


@dataclass
class PlatformTarget:
    """Where a build should run, plus how its output should be labelled and filtered."""
    platform: str
    log_prefix: str
    simulator_id: Optional[str] = None
    simulator_name: Optional[str] = None
    device_id: Optional[str] = None
    use_latest_os: Optional[bool] = None
    arch: Optional[str] = None
    xcbeautify_quiet_level: int = 0


@dataclass
class ExecOptions:
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    timeout: Optional[float] = None


@dataclass
class CommandResult:
    """Outcome of one external command. exit_code is None when no status was reported."""
    success: bool
    output: str = ""
    error: Optional[str] = None
    exit_code: Optional[int] = None


@dataclass
class ToolResponse:
    content: List[Dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @property
    def texts(self) -> List[str]:
        return [block["text"] for block in self.content]

    def to_tool_result(self) -> str:
        """
        Convert to what a FastMCP tool returns.

        Error responses are raised as XCodeMCPError so the MCP layer flags the
        call as failed; success responses are the blocks joined by blank lines.

        Raises:
            XCodeMCPError: If the response is an error response
        """
        if self.is_error:
            raise XCodeMCPError("\n\n".join(self.texts))
        return "\n\n".join(self.texts)


def text_content(text: str) -> Dict[str, str]:
    return {"type": "text", "text": text}


def create_text_response(text: str, is_error: bool = False) -> ToolResponse:
    return ToolResponse(content=[text_content(text)], is_error=is_error)
