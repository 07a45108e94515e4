#!/usr/bin/env python3
"""xcodemake incremental build support

xcodemake records an xcodebuild run as a Makefile so later builds can be
replayed with make. Its artifacts live in the project directory: a Makefile
and a log file named after the exact xcodemake invocation. A build may reuse
them only when both exist for the same arguments.
"""

import os
import shutil
from typing import List, Optional

from xcodebuild_mcp_server.models import CommandResult, ExecOptions
from xcodebuild_mcp_server.utils.log import log

DEFAULT_INSTALL_PATH = os.path.expanduser("~/.xcodebuildmcp/xcodemake")


def strip_project_dir(args: List[str], project_dir: str) -> List[str]:
    """Make arguments under project_dir relative, the way xcodemake records them."""
    if project_dir in ("", "."):
        return list(args)
    prefix = project_dir.rstrip("/") + "/"
    return [arg[len(prefix):] if arg.startswith(prefix) else arg for arg in args]


def make_log_file_name(xcodebuild_command: List[str], project_dir: str) -> str:
    """
    Name of the log xcodemake writes for an xcodebuild command.

    Args:
        xcodebuild_command: Full argv, starting with "xcodebuild"
        project_dir: Directory containing the project or workspace
    """
    args = strip_project_dir(xcodebuild_command[1:], project_dir)
    return " ".join(["xcodemake"] + args) + ".log"


class Xcodemake:
    """
    Probes and runners for the xcodemake build path.

    Args:
        executable: Explicit path to xcodemake. When None it is looked up on
            PATH, then at ~/.xcodebuildmcp/xcodemake.
    """

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable

    def find_executable(self) -> Optional[str]:
        if self.executable:
            return self.executable if os.access(self.executable, os.X_OK) else None
        found = shutil.which("xcodemake")
        if found:
            return found
        if os.access(DEFAULT_INSTALL_PATH, os.X_OK):
            return DEFAULT_INSTALL_PATH
        return None

    def is_available(self) -> bool:
        path = self.find_executable()
        if path is None:
            log("debug", "xcodemake not found on PATH or in ~/.xcodebuildmcp")
            return False
        log("debug", f"Using xcodemake at {path}")
        return True

    def makefile_exists(self, project_dir: str) -> bool:
        return os.path.isfile(os.path.join(project_dir, "Makefile"))

    def make_log_file_exists(self, project_dir: str, xcodebuild_command: List[str]) -> bool:
        log_path = os.path.join(project_dir, make_log_file_name(xcodebuild_command, project_dir))
        return os.path.isfile(log_path)

    async def run_make(self, project_dir: str, log_prefix: str, executor,
                       exec_opts: Optional[ExecOptions] = None) -> CommandResult:
        """Replay the recorded build with make."""
        opts = _with_cwd(exec_opts, project_dir)
        return await executor(['make'], log_prefix, False, opts)

    async def run_xcodemake(self, project_dir: str, xcodebuild_args: List[str], log_prefix: str,
                            executor, exec_opts: Optional[ExecOptions] = None) -> CommandResult:
        """
        Run a full xcodebuild through xcodemake, generating the Makefile.

        Args:
            project_dir: Directory containing the project or workspace
            xcodebuild_args: xcodebuild argv without the leading "xcodebuild"
            log_prefix: Label used in log lines
            executor: Command executor
            exec_opts: Options passed through; cwd is replaced by project_dir
        """
        executable = self.find_executable() or "xcodemake"
        opts = _with_cwd(exec_opts, project_dir)
        command = [executable] + strip_project_dir(xcodebuild_args, project_dir)
        return await executor(command, log_prefix, False, opts)


def _with_cwd(exec_opts: Optional[ExecOptions], cwd: str) -> ExecOptions:
    if exec_opts is None:
        return ExecOptions(cwd=cwd)
    return ExecOptions(cwd=cwd, env=exec_opts.env, timeout=exec_opts.timeout)


# Default probes used when a build does not supply its own
default_xcodemake = Xcodemake()
