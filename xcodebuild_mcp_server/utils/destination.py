#!/usr/bin/env python3
"""xcodebuild -destination string construction"""

from typing import Optional, Union

from xcodebuild_mcp_server.exceptions import DestinationError
from xcodebuild_mcp_server.models import XcodePlatform


def parse_platform(platform: Union[str, XcodePlatform]) -> XcodePlatform:
    """
    Convert a platform name to an XcodePlatform.

    Raises:
        DestinationError: If the platform is not one xcodebuild can target
    """
    try:
        return XcodePlatform(platform)
    except ValueError:
        raise DestinationError(f"Unsupported platform: {platform}") from None


def construct_destination_string(platform: Union[str, XcodePlatform],
                                 simulator_id: Optional[str] = None,
                                 simulator_name: Optional[str] = None,
                                 use_latest_os: Optional[bool] = None,
                                 arch: Optional[str] = None,
                                 device_id: Optional[str] = None) -> str:
    """
    Build the value passed to xcodebuild's -destination flag.

    Args:
        platform: Target platform
        simulator_id: Simulator UUID. Pins an exact OS, so use_latest_os is ignored.
        simulator_name: Simulator name, e.g. "iPhone 16"
        use_latest_os: Append OS=latest for a named simulator. None means True.
        arch: macOS architecture (arm64 or x86_64)
        device_id: Physical device UDID. Without one a generic destination is used.

    Returns:
        Destination string, e.g. "platform=iOS Simulator,name=iPhone 16,OS=latest"

    Raises:
        DestinationError: For an unsupported platform, or a simulator platform
            with neither simulator_id nor simulator_name
    """
    platform = parse_platform(platform)

    if platform.is_simulator:
        if simulator_id:
            return f"platform={platform.value},id={simulator_id}"
        if simulator_name:
            destination = f"platform={platform.value},name={simulator_name}"
            if use_latest_os is not False:
                destination += ",OS=latest"
            return destination
        raise DestinationError(
            f"For {platform.value} platform, either simulatorId or simulatorName must be provided")

    if platform == XcodePlatform.MACOS:
        if arch:
            return f"platform=macOS,arch={arch}"
        return "platform=macOS"

    if device_id:
        return f"platform={platform.value},id={device_id}"
    return f"generic/platform={platform.value}"
