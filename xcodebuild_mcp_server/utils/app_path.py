#!/usr/bin/env python3
"""Locating a built app bundle through xcodebuild -showBuildSettings"""

import re
from typing import List, Optional

from xcodebuild_mcp_server.models import BuildRequest

BUILT_PRODUCTS_DIR_PATTERN = re.compile(r"^\s*BUILT_PRODUCTS_DIR\s*=\s*(.+)$", re.MULTILINE)
FULL_PRODUCT_NAME_PATTERN = re.compile(r"^\s*FULL_PRODUCT_NAME\s*=\s*(.+)$", re.MULTILINE)
CODESIGNING_FOLDER_PATTERN = re.compile(r"CODESIGNING_FOLDER_PATH = (.+\.app)")


def build_settings_command(request: BuildRequest, destination: Optional[str] = None) -> List[str]:
    """
    xcodebuild -showBuildSettings for the same project, scheme and configuration
    as a build request.

    Args:
        request: The request that was built
        destination: Destination to resolve settings for, or None for the default
    """
    command = ['xcodebuild', '-showBuildSettings']
    if request.workspace_path:
        command.extend(['-workspace', request.workspace_path])
    elif request.project_path:
        command.extend(['-project', request.project_path])

    command.extend(['-scheme', request.scheme])
    command.extend(['-configuration', request.configuration])

    if destination:
        command.extend(['-destination', destination])
    if request.derived_data_path:
        command.extend(['-derivedDataPath', request.derived_data_path])
    if request.extra_args:
        command.extend(request.extra_args)

    return command


def parse_app_path(build_settings: str, prefer_codesigning_path: bool = False) -> Optional[str]:
    """
    Extract the app bundle path from -showBuildSettings output.

    BUILT_PRODUCTS_DIR joined with FULL_PRODUCT_NAME is used unless
    prefer_codesigning_path is set and a CODESIGNING_FOLDER_PATH ending in
    .app is present.

    Returns:
        The bundle path, or None if the settings do not name one
    """
    if prefer_codesigning_path:
        match = CODESIGNING_FOLDER_PATTERN.search(build_settings or "")
        if match:
            return match.group(1).strip()

    products_dir = BUILT_PRODUCTS_DIR_PATTERN.search(build_settings or "")
    product_name = FULL_PRODUCT_NAME_PATTERN.search(build_settings or "")
    if not products_dir or not product_name:
        return None
    return f"{products_dir.group(1).strip()}/{product_name.group(1).strip()}"
