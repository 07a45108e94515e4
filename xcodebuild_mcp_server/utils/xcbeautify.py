#!/usr/bin/env python3
"""xcbeautify detection and pipeline construction"""

import shlex
from typing import List, Optional

from xcodebuild_mcp_server.models import ExecOptions
from xcodebuild_mcp_server.utils.log import log

XCBEAUTIFY_URL = "https://github.com/cpisciotta/xcbeautify"


class XcbeautifyCache:
    """Remembers whether xcbeautify is installed. None means not yet probed."""

    def __init__(self):
        self._available: Optional[bool] = None

    def get(self) -> Optional[bool]:
        return self._available

    def set(self, available: bool):
        self._available = available

    def reset(self):
        self._available = None


# Shared by every build in this process
xcbeautify_cache = XcbeautifyCache()


def reset_xcbeautify_cache():
    """Forget the probe result so the next build checks again"""
    xcbeautify_cache.reset()


async def is_xcbeautify_available(executor,
                                  exec_opts: Optional[ExecOptions] = None,
                                  cache: Optional[XcbeautifyCache] = None) -> bool:
    """
    Check whether xcbeautify is on the login shell's PATH.

    The answer, including a failed probe, is cached for the life of the cache.

    Args:
        executor: Command executor used for the probe
        exec_opts: Options passed through to the executor
        cache: Cache to consult and update; the process-wide cache by default

    Returns:
        True if xcbeautify can be used
    """
    if cache is None:
        cache = xcbeautify_cache

    cached = cache.get()
    if cached is not None:
        return cached

    try:
        result = await executor(
            ['bash', '-lc', 'command -v xcbeautify >/dev/null 2>&1'],
            'Check xcbeautify',
            False,
            exec_opts,
        )
        available = result.success
    except Exception as e:
        log("debug", f"xcbeautify probe failed: {e}")
        available = False

    cache.set(available)
    return available


def get_xcbeautify_args(quiet_level: int = 0) -> List[str]:
    """
    Args:
        quiet_level: 0 for normal output, 1 for -q, 2 for -qq (errors only)
    """
    if quiet_level == 1:
        return ['xcbeautify', '-q']
    if quiet_level == 2:
        return ['xcbeautify', '-qq']
    return ['xcbeautify']


def get_xcbeautify_install_prompt() -> str:
    return "\n".join([
        "⚠️ xcbeautify is not installed, so build output is shown without formatting.",
        "To install:",
        "- Homebrew: brew install xcbeautify",
        f"- Or see: {XCBEAUTIFY_URL}",
    ])


def build_xcbeautify_pipeline(command: List[str], quiet_level: int = 0) -> str:
    """
    Shell pipeline that pipes command output through xcbeautify.

    pipefail keeps xcodebuild's exit status when xcbeautify succeeds.
    """
    return f"set -o pipefail; {shlex.join(command)} 2>&1 | {shlex.join(get_xcbeautify_args(quiet_level))}"
