#!/usr/bin/env python3
"""Tool argument normalization and validation"""

from typing import List, Optional, Union

from xcodebuild_mcp_server.exceptions import InvalidParameterError
from xcodebuild_mcp_server.models import BuildRequest


def nullify_empty(value: Optional[str]) -> Optional[str]:
    """Treat empty or whitespace-only strings from clients as missing."""
    if value is None or value.strip() == "":
        return None
    return value


def normalize_string_list(value: Union[None, str, List[str]]) -> List[str]:
    """
    Normalize a list argument that MCP clients may send in several shapes.

    Handles None, an empty list, the strings "[]", "null" and "undefined",
    and a comma-separated string.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        if value in ('', '[]', 'null', 'undefined'):
            return []
        return [item.strip() for item in value.split(',') if item.strip()]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidParameterError("extra_args must be a list of strings")
    return list(value)


def require_exactly_one(first_name: str, first: Optional[str],
                        second_name: str, second: Optional[str]):
    """
    Raises:
        InvalidParameterError: If both or neither of the values are set
    """
    if first is None and second is None:
        raise InvalidParameterError(f"Either {first_name} or {second_name} is required.")
    if first is not None and second is not None:
        raise InvalidParameterError(
            f"{first_name} and {second_name} are mutually exclusive. Provide only one.")


def make_build_request(scheme: Optional[str],
                       project_path: Optional[str] = None,
                       workspace_path: Optional[str] = None,
                       configuration: Optional[str] = None,
                       derived_data_path: Optional[str] = None,
                       extra_args: Union[None, str, List[str]] = None,
                       prefer_xcodebuild: Optional[bool] = None) -> BuildRequest:
    """
    Build a validated BuildRequest from raw tool arguments.

    Raises:
        InvalidParameterError: If scheme is missing, or project_path and
            workspace_path are both or neither given
    """
    if scheme is None:
        raise InvalidParameterError("scheme is required")
    if prefer_xcodebuild is not None and not isinstance(prefer_xcodebuild, bool):
        raise InvalidParameterError("prefer_xcodebuild must be a boolean value")

    project_path = nullify_empty(project_path)
    workspace_path = nullify_empty(workspace_path)
    require_exactly_one("project_path", project_path, "workspace_path", workspace_path)

    return BuildRequest(
        scheme=scheme,
        project_path=project_path,
        workspace_path=workspace_path,
        configuration=nullify_empty(configuration) or "Debug",
        derived_data_path=nullify_empty(derived_data_path),
        extra_args=normalize_string_list(extra_args),
        prefer_xcodebuild=bool(prefer_xcodebuild),
    ).validate()
