"""Tests for the MCP tool layer.

Tests cover:
- Registration of every tool on the FastMCP server
- Platform-specific logic functions with a mock executor
- Conversion of responses into tool results and raised errors
- Notification history and escalation
"""

from __future__ import annotations

import errno

import pytest

import xcodebuild_mcp_server
import xcodebuild_mcp_server.tools  # noqa: F401
from xcodebuild_mcp_server import config as config_module
from xcodebuild_mcp_server.config import BuildConfig
from xcodebuild_mcp_server.exceptions import InvalidParameterError, XCodeMCPError
from xcodebuild_mcp_server.models import BuildRequest, ToolResponse, XcodePlatform, create_text_response, text_content
from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.tools import build_macos as build_macos_module
from xcodebuild_mcp_server.tools import build_sim as build_sim_module
from xcodebuild_mcp_server.tools.build_device import build_device_logic
from xcodebuild_mcp_server.tools.build_macos import build_macos, build_macos_error, build_macos_logic
from xcodebuild_mcp_server.tools.build_sim import build_sim, build_sim_logic
from xcodebuild_mcp_server.tools.clean import clean_logic
from xcodebuild_mcp_server.tools.debug_list_notification_history import format_notification_history
from xcodebuild_mcp_server.tools.swift_package_build import (
    build_swift_command,
    swift_package_build,
    swift_package_build_logic,
)
from xcodebuild_mcp_server.tools.version import version
from xcodebuild_mcp_server.utils.log import log
from xcodebuild_mcp_server.utils.notifications import get_notification_history, show_error_notification

EXPECTED_TOOLS = {
    "build_macos", "build_macos_quiet", "build_macos_error",
    "build_sim", "build_sim_quiet", "build_sim_error",
    "build_device", "build_device_quiet", "build_device_error",
    "build_run_macos", "build_run_macos_quiet", "build_run_macos_error",
    "build_run_sim", "build_run_sim_quiet", "build_run_sim_error",
    "clean", "swift_package_build", "debug_list_notification_history", "version",
}


def _request(**overrides) -> BuildRequest:
    values = {"project_path": "/p.xcodeproj", "scheme": "S"}
    values.update(overrides)
    return BuildRequest(**values)


def _destination(command):
    return command[command.index("-destination") + 1]


@pytest.fixture
def active_config():
    saved = config_module._ACTIVE_CONFIG
    config_module._ACTIVE_CONFIG = BuildConfig(use_xcbeautify=False)
    yield config_module._ACTIVE_CONFIG
    config_module._ACTIVE_CONFIG = saved


class TestRegistration:
    @pytest.mark.asyncio
    async def test_all_tools_registered(self):
        names = {tool.name for tool in await mcp.list_tools()}
        assert EXPECTED_TOOLS <= names

    @pytest.mark.unit
    def test_version(self):
        assert version() == xcodebuild_mcp_server.__version__


@pytest.mark.unit
class TestToolResult:
    def test_success_joins_blocks(self):
        response = ToolResponse(content=[text_content("one"), text_content("two")])
        assert response.to_tool_result() == "one\n\ntwo"

    def test_error_raises(self):
        with pytest.raises(XCodeMCPError) as exc_info:
            create_text_response("boom", is_error=True).to_tool_result()
        assert exc_info.value.message == "boom"


class TestMacosLogic:
    @pytest.mark.asyncio
    async def test_arch_in_destination(self, make_executor, test_config):
        executor = make_executor(success=True)
        await build_macos_logic(_request(), "x86_64", executor, config=test_config)
        assert _destination(executor.commands[0]) == "platform=macOS,arch=x86_64"

    @pytest.mark.asyncio
    async def test_invalid_arch(self, make_executor, test_config):
        executor = make_executor()
        with pytest.raises(InvalidParameterError):
            await build_macos_logic(_request(), "ppc", executor, config=test_config)
        assert executor.calls == []

    @pytest.mark.asyncio
    async def test_uses_active_config(self, make_executor, active_config):
        executor = make_executor(success=True)
        response = await build_macos_logic(_request(), executor=executor)
        assert response.texts[0] == "✅ macOS Build build succeeded for scheme S."

    @pytest.mark.asyncio
    async def test_tool_variants_pass_quiet_level(self, monkeypatch):
        seen = []

        async def fake_logic(request, arch=None, executor=None, quiet_level=0, config=None):
            seen.append((request.scheme, arch, quiet_level))
            return create_text_response("ok")

        monkeypatch.setattr(build_macos_module, "build_macos_logic", fake_logic)
        assert await build_macos("S", project_path="/p.xcodeproj") == "ok"
        assert await build_macos_error("S", project_path="/p.xcodeproj", arch="arm64") == "ok"
        assert seen == [("S", None, 0), ("S", "arm64", 2)]

    @pytest.mark.asyncio
    async def test_tool_raises_on_failed_build(self, monkeypatch):
        async def fake_logic(request, arch=None, executor=None, quiet_level=0, config=None):
            return ToolResponse(content=[text_content("❌ [stderr] bad"), text_content("❌ failed")],
                                is_error=True)

        monkeypatch.setattr(build_macos_module, "build_macos_logic", fake_logic)
        with pytest.raises(XCodeMCPError, match="bad"):
            await build_macos("S", workspace_path="/w.xcworkspace")


class TestSimulatorLogic:
    @pytest.mark.asyncio
    async def test_by_id_pins_os(self, make_executor, test_config, logger):
        executor = make_executor(success=True)
        await build_sim_logic(_request(), simulator_id="ABC-123", use_latest_os=True,
                              executor=executor, config=test_config)
        assert _destination(executor.commands[0]) == "platform=iOS Simulator,id=ABC-123"

    @pytest.mark.asyncio
    async def test_by_name_defaults_to_latest(self, make_executor, test_config):
        executor = make_executor(success=True)
        await build_sim_logic(_request(), simulator_name="iPhone 16", executor=executor, config=test_config)
        assert _destination(executor.commands[0]) == "platform=iOS Simulator,name=iPhone 16,OS=latest"

    @pytest.mark.asyncio
    async def test_by_name_without_latest(self, make_executor, test_config):
        executor = make_executor(success=True)
        await build_sim_logic(_request(), simulator_name="iPhone 16", use_latest_os=False,
                              executor=executor, config=test_config)
        assert _destination(executor.commands[0]) == "platform=iOS Simulator,name=iPhone 16"

    @pytest.mark.asyncio
    async def test_next_steps_use_simulator_id(self, make_executor, test_config):
        executor = make_executor(success=True)
        response = await build_sim_logic(_request(), simulator_id="ABC-123", executor=executor,
                                         config=test_config)
        assert "get_sim_app_path({ simulatorId: 'ABC-123', scheme: 'S', platform: 'iOS Simulator' })" \
            in response.texts[-1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [
        {},
        {"simulator_id": "ABC", "simulator_name": "iPhone 16"},
        {"simulator_id": " ", "simulator_name": ""},
    ])
    async def test_tool_requires_exactly_one_selector(self, monkeypatch, kwargs):
        async def fail(*args, **kw):
            raise AssertionError("build must not start")

        monkeypatch.setattr(build_sim_module, "build_sim_logic", fail)
        with pytest.raises(InvalidParameterError):
            await build_sim("S", project_path="/p.xcodeproj", **kwargs)


class TestDeviceLogic:
    @pytest.mark.asyncio
    async def test_generic_destination(self, make_executor, test_config):
        executor = make_executor(success=True)
        response = await build_device_logic(_request(), executor=executor, config=test_config)
        assert _destination(executor.commands[0]) == "generic/platform=iOS"
        assert response.texts[0] == "✅ iOS Device Build build succeeded for scheme S."
        assert "get_device_app_path({ scheme: 'S' })" in response.texts[1]

    @pytest.mark.asyncio
    async def test_specific_device(self, make_executor, test_config):
        executor = make_executor(success=True)
        await build_device_logic(_request(), "watchOS", "00008110-XYZ", executor, config=test_config)
        assert _destination(executor.commands[0]) == "platform=watchOS,id=00008110-XYZ"

    @pytest.mark.asyncio
    async def test_rejects_simulator_platform(self, make_executor, test_config):
        with pytest.raises(InvalidParameterError):
            await build_device_logic(_request(), "iOS Simulator", executor=make_executor(), config=test_config)


class TestCleanLogic:
    @pytest.mark.asyncio
    async def test_macos(self, make_executor, test_config):
        executor = make_executor(success=True)
        response = await clean_logic(_request(), executor=executor, config=test_config)
        command = executor.commands[0]
        assert command[-1] == "clean"
        assert _destination(command) == "platform=macOS"
        assert response.texts == ["✅ Clean clean succeeded for scheme S."]

    @pytest.mark.asyncio
    async def test_simulator_platform_uses_generic_destination(self, make_executor, test_config):
        executor = make_executor(success=True)
        await clean_logic(_request(), "iOS Simulator", executor, config=test_config)
        assert _destination(executor.commands[0]) == "generic/platform=iOS"

    @pytest.mark.asyncio
    async def test_watchos_simulator_maps_to_watchos(self, make_executor, test_config):
        executor = make_executor(success=True)
        await clean_logic(_request(), "watchOS Simulator", executor, config=test_config)
        assert _destination(executor.commands[0]) == "generic/platform=watchOS"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("platform", ["Android", "iOS simulator", "Simulator"])
    async def test_unsupported_platform(self, make_executor, test_config, platform):
        executor = make_executor()
        response = await clean_logic(_request(), platform, executor, config=test_config)
        assert response.is_error
        assert response.texts == [f"Unsupported platform: {platform}"]
        assert executor.calls == []

    @pytest.mark.unit
    def test_device_platform_mapping(self):
        assert XcodePlatform.TVOS_SIMULATOR.device_platform == XcodePlatform.TVOS
        assert XcodePlatform.MACOS.device_platform == XcodePlatform.MACOS
        assert XcodePlatform.IOS.device_platform == XcodePlatform.IOS


class TestSwiftPackageBuild:
    @pytest.mark.unit
    def test_command(self, tmp_path):
        command = build_swift_command(str(tmp_path), "Core", "Release", ["arm64", "x86_64"], True)
        assert command == [
            "swift", "build", "--package-path", str(tmp_path), "-c", "release", "--target", "Core",
            "--arch", "arm64", "--arch", "x86_64", "-Xswiftc", "-parse-as-library",
        ]

    @pytest.mark.unit
    def test_debug_is_default(self, tmp_path):
        assert "-c" not in build_swift_command(str(tmp_path), configuration="debug")

    @pytest.mark.asyncio
    async def test_success(self, make_executor, tmp_path):
        executor = make_executor(success=True, output="Compiling Core")
        response = await swift_package_build_logic(str(tmp_path), executor=executor)
        assert not response.is_error
        assert response.texts[0] == "✅ Swift package build succeeded."
        assert response.texts[-1] == "Compiling Core"
        assert executor.calls[0]["log_prefix"] == "Swift Package Build"

    @pytest.mark.asyncio
    async def test_failure(self, make_executor, tmp_path):
        executor = make_executor(success=False, error="error: no such module 'Foo'")
        response = await swift_package_build_logic(str(tmp_path), executor=executor)
        assert response.is_error
        assert response.texts == ["Swift package build failed\nerror: no such module 'Foo'"]

    @pytest.mark.asyncio
    async def test_invalid_configuration(self, make_executor, tmp_path):
        with pytest.raises(InvalidParameterError):
            await swift_package_build_logic(str(tmp_path), configuration="profile", executor=make_executor())

    @pytest.mark.asyncio
    async def test_missing_toolchain_not_escalated(self, make_executor, tmp_path):
        executor = make_executor(raises=FileNotFoundError(errno.ENOENT, "No such file", "swift"))
        response = await swift_package_build_logic(str(tmp_path), executor=executor)
        assert response.is_error
        assert response.texts[0].startswith("Failed to execute swift build:")
        assert get_notification_history() == []

    @pytest.mark.asyncio
    async def test_unexpected_error_escalated(self, make_executor, tmp_path):
        executor = make_executor(raises=RuntimeError("boom"))
        await swift_package_build_logic(str(tmp_path), executor=executor)
        history = get_notification_history()
        assert len(history) == 1
        assert "boom" in history[0]["subtitle"]

    @pytest.mark.asyncio
    async def test_empty_package_path(self):
        with pytest.raises(InvalidParameterError):
            await swift_package_build("  ")


class TestNotifications:
    @pytest.mark.unit
    def test_empty_history(self):
        assert format_notification_history([]) == "No notifications have been posted yet."

    @pytest.mark.unit
    def test_escalation_recorded(self, capsys):
        log("error", "xcodebuild rejected arguments", escalate=True)
        history = get_notification_history()
        assert len(history) == 1
        assert history[0]["message"] == "❌ Internal error"
        assert history[0]["subtitle"] == "xcodebuild rejected arguments"
        assert "[error] xcodebuild rejected arguments" in capsys.readouterr().err

    @pytest.mark.unit
    def test_plain_log_not_recorded(self, capsys):
        log("warning", "build failed")
        assert get_notification_history() == []

    @pytest.mark.unit
    def test_history_format(self):
        show_error_notification("Internal error", details="exit code 64")
        text = format_notification_history(get_notification_history())
        assert text.startswith("Notification History (1 notification):")
        assert "   Title: XcodeBuild MCP" in text
        assert "   Subtitle: exit code 64" in text
        assert "   Message: ❌ Internal error" in text
