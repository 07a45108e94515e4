#!/usr/bin/env python3
"""Leveled stderr logging with an escalation channel for operator-visible diagnostics"""

import os
import sys
from typing import Callable

from xcodebuild_mcp_server.utils.notifications import show_error_notification

LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}

# Global log threshold - initialized by CLI
LOG_LEVEL = "debug" if os.environ.get("XCODEBUILDMCP_DEBUG") else "info"

# Signature shared by log() and any injected replacement
Logger = Callable[..., None]


def set_log_level(level: str):
    """Set the minimum level written to stderr"""
    global LOG_LEVEL
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    LOG_LEVEL = level


def log(level: str, message: str, escalate: bool = False):
    """
    Write a log line to stderr.

    stdout carries the MCP stdio transport, so nothing here may print to it.

    Args:
        level: One of "debug", "info", "warning", "error"
        message: Text to log
        escalate: Also report the message through an error notification.
            Reserved for defects in this server rather than in the project
            being built.
    """
    if LOG_LEVELS.get(level, LOG_LEVELS["error"]) >= LOG_LEVELS[LOG_LEVEL]:
        print(f"[{level}] {message}", file=sys.stderr)

    if escalate:
        show_error_notification("Internal error", details=message[:200])
