"""Shared pytest fixtures for the XcodeBuild MCP Server test suite.

Provides:
- A recording mock command executor
- A recording logger with the log() signature
- A BuildConfig with xcbeautify disabled
- Isolation of process-wide state (xcbeautify cache, notifications)
"""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from xcodebuild_mcp_server.config import BuildConfig
from xcodebuild_mcp_server.models import CommandResult
from xcodebuild_mcp_server.utils.notifications import (
    clear_notification_history,
    set_notifications_enabled,
)
from xcodebuild_mcp_server.utils.xcbeautify import reset_xcbeautify_cache


class MockExecutor:
    """Async executor stand-in that records every call.

    Returns ``results`` in order (the last one repeats), or raises ``raises``.
    """

    def __init__(self, *results: CommandResult, raises: Optional[BaseException] = None):
        self.results = list(results) or [CommandResult(success=True, output="")]
        self.raises = raises
        self.calls: List[dict] = []

    async def __call__(self, command, log_prefix=None, use_shell=True, opts=None):
        self.calls.append({
            "command": list(command),
            "log_prefix": log_prefix,
            "use_shell": use_shell,
            "opts": opts,
        })
        if self.raises is not None:
            raise self.raises
        index = min(len(self.calls) - 1, len(self.results) - 1)
        return self.results[index]

    @property
    def commands(self) -> List[List[str]]:
        return [call["command"] for call in self.calls]


class RecordingLogger:
    def __init__(self):
        self.calls: List[dict] = []

    def __call__(self, level: str, message: str, escalate: bool = False):
        self.calls.append({"level": level, "message": message, "escalate": escalate})

    @property
    def escalated(self) -> List[dict]:
        return [call for call in self.calls if call["escalate"]]

    def at(self, level: str) -> List[dict]:
        return [call for call in self.calls if call["level"] == level]


@pytest.fixture(autouse=True)
def isolate_process_state():
    """Keep process-wide caches and notification state from leaking between tests."""
    set_notifications_enabled(False)
    clear_notification_history()
    reset_xcbeautify_cache()
    yield
    clear_notification_history()
    reset_xcbeautify_cache()


@pytest.fixture
def make_executor():
    def _make(success: bool = True, output: str = "", error: Optional[str] = None,
              exit_code: Optional[int] = None, raises: Optional[BaseException] = None) -> MockExecutor:
        return MockExecutor(
            CommandResult(success=success, output=output, error=error, exit_code=exit_code),
            raises=raises,
        )
    return _make


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def test_config() -> BuildConfig:
    """Guided output, no xcodemake, no xcbeautify."""
    return BuildConfig(use_xcbeautify=False)


@pytest.fixture
def diagnostics_config() -> BuildConfig:
    return BuildConfig(output_mode="diagnostics", use_xcbeautify=False)
