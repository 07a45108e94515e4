#!/usr/bin/env python3
"""Warning and error extraction from xcodebuild output"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

STDERR_PREFIX = "[stderr] "

# Plain substring markers. A path containing "error:" is misclassified;
# callers rely on this exact behaviour.
WARNING_PATTERN = re.compile(r"warning:", re.IGNORECASE)
ERROR_PATTERN = re.compile(r"error:", re.IGNORECASE)


@dataclass
class ClassifiedLines:
    """
    Warnings and errors found in one command result.

    Attributes:
        warnings: Deduplicated stdout lines with a warning marker
        errors: Deduplicated stdout lines with an error marker, followed by
            every stderr line tagged with STDERR_PREFIX
        has_stdout_markers: True if any stdout line carried either marker
    """
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    has_stdout_markers: bool = False


def dedupe_lines(lines: Iterable[str]) -> List[str]:
    """Trim lines, drop empty ones and keep the first occurrence of each."""
    seen = set()
    result = []
    for line in lines:
        trimmed = line.strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        result.append(trimmed)
    return result


def classify_build_output(stdout: Optional[str], stderr: Optional[str]) -> ClassifiedLines:
    """
    Split build output into warnings and errors.

    A stdout line with a "warning:" marker is a warning even if it also
    contains "error:". Every non-empty stderr line is an error.

    Args:
        stdout: Captured standard output
        stderr: Captured standard error

    Returns:
        ClassifiedLines with stdout errors ahead of stderr errors
    """
    warning_lines = []
    error_lines = []
    for line in (stdout or "").split("\n"):
        if WARNING_PATTERN.search(line):
            warning_lines.append(line)
        elif ERROR_PATTERN.search(line):
            error_lines.append(line)

    stderr_lines = [f"{STDERR_PREFIX}{line.strip()}"
                    for line in (stderr or "").split("\n") if line.strip()]

    return ClassifiedLines(
        warnings=dedupe_lines(warning_lines),
        errors=dedupe_lines(dedupe_lines(error_lines) + dedupe_lines(stderr_lines)),
        has_stdout_markers=bool(warning_lines or error_lines),
    )


def is_stderr_line(line: str) -> bool:
    return line.startswith(STDERR_PREFIX)
