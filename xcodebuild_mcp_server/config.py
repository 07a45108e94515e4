#!/usr/bin/env python3
"""Build configuration - output mode, incremental builds and xcbeautify usage"""

import os
import sys
from dataclasses import dataclass, replace
from typing import Mapping, Optional

OUTPUT_MODE_GUIDED = "guided"
OUTPUT_MODE_DIAGNOSTICS = "diagnostics"

TRUTHY_VALUES = ("1", "true", "yes", "on")


def _is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_VALUES


@dataclass(frozen=True)
class BuildConfig:
    """
    Settings the build engine receives explicitly on every call.

    Attributes:
        output_mode: "guided" interleaves advisories with the result,
            "diagnostics" groups errors and warnings into counted blocks.
        incremental_builds_enabled: Allow xcodemake for plain builds.
        use_xcbeautify: Pipe xcodebuild output through xcbeautify when installed.
        command_timeout: Seconds before an external command is killed, or None.
    """
    output_mode: str = OUTPUT_MODE_GUIDED
    incremental_builds_enabled: bool = False
    use_xcbeautify: bool = True
    command_timeout: Optional[float] = None

    @property
    def is_diagnostics(self) -> bool:
        return self.output_mode == OUTPUT_MODE_DIAGNOSTICS

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            BuildConfig populated from XCODEBUILDMCP_BUILD_OUTPUT,
            INCREMENTAL_BUILDS_ENABLED, XCODEBUILDMCP_TEST_MODE /
            PYTEST_CURRENT_TEST and XCODEBUILDMCP_COMMAND_TIMEOUT
        """
        if environ is None:
            environ = os.environ

        output_mode = OUTPUT_MODE_GUIDED
        if environ.get("XCODEBUILDMCP_BUILD_OUTPUT") == OUTPUT_MODE_DIAGNOSTICS:
            output_mode = OUTPUT_MODE_DIAGNOSTICS

        # Captured output must stay unfiltered under test
        is_test_env = (_is_truthy(environ.get("XCODEBUILDMCP_TEST_MODE"))
                       or "PYTEST_CURRENT_TEST" in environ)

        command_timeout = None
        timeout_str = environ.get("XCODEBUILDMCP_COMMAND_TIMEOUT")
        if timeout_str:
            try:
                command_timeout = float(timeout_str)
            except ValueError:
                print(f"Warning: Ignoring invalid XCODEBUILDMCP_COMMAND_TIMEOUT: {timeout_str}", file=sys.stderr)
            else:
                if command_timeout <= 0:
                    command_timeout = None

        return cls(
            output_mode=output_mode,
            incremental_builds_enabled=_is_truthy(environ.get("INCREMENTAL_BUILDS_ENABLED")),
            use_xcbeautify=not is_test_env,
            command_timeout=command_timeout,
        )

    def with_overrides(self, **changes) -> "BuildConfig":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


# Process-wide config - initialized by CLI, read by the tool layer
_ACTIVE_CONFIG: Optional[BuildConfig] = None


def set_build_config(config: BuildConfig):
    """Set the process-wide build config"""
    global _ACTIVE_CONFIG
    _ACTIVE_CONFIG = config


def get_build_config() -> BuildConfig:
    """Get the process-wide build config, reading the environment on first use"""
    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        _ACTIVE_CONFIG = BuildConfig.from_environment()
    return _ACTIVE_CONFIG
