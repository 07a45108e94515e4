"""Unit tests for build output classification (xcodebuild_mcp_server.utils.output)."""

from __future__ import annotations

import pytest

from xcodebuild_mcp_server.utils.output import classify_build_output, dedupe_lines


class TestDedupeLines:
    @pytest.mark.unit
    def test_trims_drops_empty_and_keeps_first_seen_order(self):
        assert dedupe_lines(["  b ", "a", "", "   ", "b", "a ", "c"]) == ["b", "a", "c"]


class TestClassifyBuildOutput:
    @pytest.mark.unit
    def test_splits_warnings_and_errors(self):
        stdout = "\n".join([
            "Compiling main.swift",
            "main.swift:3:5: warning: unused variable 'x'",
            "main.swift:7:1: error: cannot find 'foo' in scope",
            "** BUILD FAILED **",
        ])
        classified = classify_build_output(stdout, None)
        assert classified.warnings == ["main.swift:3:5: warning: unused variable 'x'"]
        assert classified.errors == ["main.swift:7:1: error: cannot find 'foo' in scope"]
        assert classified.has_stdout_markers

    @pytest.mark.unit
    def test_markers_are_case_insensitive(self):
        classified = classify_build_output("WARNING: deprecated\nError: boom", "")
        assert classified.warnings == ["WARNING: deprecated"]
        assert classified.errors == ["Error: boom"]

    @pytest.mark.unit
    def test_line_with_both_markers_is_a_warning_only(self):
        line = "a.swift:1:1: warning: treating error: as warning"
        classified = classify_build_output(line, None)
        assert classified.warnings == [line]
        assert classified.errors == []

    @pytest.mark.unit
    def test_duplicates_removed_within_each_list(self):
        stdout = "\n".join([
            "x.swift:1: warning: w1",
            "  x.swift:1: warning: w1  ",
            "x.swift:2: error: e1",
            "x.swift:2: error: e1",
        ])
        classified = classify_build_output(stdout, "boom\nboom\n")
        assert classified.warnings == ["x.swift:1: warning: w1"]
        assert classified.errors == ["x.swift:2: error: e1", "[stderr] boom"]

    @pytest.mark.unit
    def test_stderr_lines_follow_stdout_errors(self):
        classified = classify_build_output("f.m:1: error: bad", "first\n\n  second  \n")
        assert classified.errors == ["f.m:1: error: bad", "[stderr] first", "[stderr] second"]

    @pytest.mark.unit
    def test_stderr_only_does_not_count_as_stdout_markers(self):
        classified = classify_build_output("BUILD FAILED", "Compilation error")
        assert classified.errors == ["[stderr] Compilation error"]
        assert classified.warnings == []
        assert not classified.has_stdout_markers

    @pytest.mark.unit
    def test_substring_match_in_paths_is_kept(self):
        # "error:" inside an unrelated token still classifies the line
        line = "Copying /tmp/build-error:cache/file.txt"
        assert classify_build_output(line, None).errors == [line]

    @pytest.mark.unit
    def test_empty_inputs(self):
        classified = classify_build_output("", None)
        assert classified.warnings == []
        assert classified.errors == []
        assert not classified.has_stdout_markers
