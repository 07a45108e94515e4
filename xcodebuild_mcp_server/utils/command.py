#!/usr/bin/env python3
"""Asynchronous external command execution"""

import asyncio
import os
import shlex
from typing import List, Optional, Protocol

from xcodebuild_mcp_server.models import CommandResult, ExecOptions
from xcodebuild_mcp_server.utils.log import log


class CommandExecutor(Protocol):
    """Anything that can run a command the way default_executor does."""

    async def __call__(self,
                       command: List[str],
                       log_prefix: Optional[str] = None,
                       use_shell: bool = True,
                       opts: Optional[ExecOptions] = None) -> CommandResult:
        ...


async def default_executor(command: List[str],
                           log_prefix: Optional[str] = None,
                           use_shell: bool = True,
                           opts: Optional[ExecOptions] = None) -> CommandResult:
    """
    Run a command to completion and capture its output.

    Args:
        command: Argument vector; command[0] is the executable
        log_prefix: Label used in log lines
        use_shell: Run the quoted argv through /bin/sh -c. When False the argv
            is executed literally, which is how pre-built shell pipelines such
            as ["bash", "-lc", "..."] are run.
        opts: Working directory, extra environment and timeout

    Returns:
        CommandResult with stdout as output and stderr (if any) as error

    Raises:
        OSError: If the process cannot be started (missing binary, permissions)
    """
    opts = opts or ExecOptions()

    if use_shell:
        argv = ["/bin/sh", "-c", shlex.join(command)]
    else:
        argv = list(command)

    env = None
    if opts.env:
        env = {**os.environ, **opts.env}

    log("info", f"Executing {log_prefix or ''} command: {shlex.join(command)}")

    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=opts.cwd,
        env=env,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=opts.timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        log("warning", f"{log_prefix or command[0]} timed out after {opts.timeout}s")
        return CommandResult(
            success=False,
            output="",
            error=f"Command timed out after {opts.timeout} seconds",
            exit_code=None,
        )

    returncode = process.returncode
    error_text = stderr.decode("utf-8", errors="replace")

    return CommandResult(
        success=returncode == 0,
        output=stdout.decode("utf-8", errors="replace"),
        error=error_text if error_text else None,
        # Negative codes mean the process was killed by a signal
        exit_code=returncode if returncode is not None and returncode >= 0 else None,
    )
