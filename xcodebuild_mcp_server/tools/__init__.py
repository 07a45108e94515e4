"""Tool modules. Importing this package registers every tool on the server."""

from xcodebuild_mcp_server.tools import (  # noqa: F401
    build_device,
    build_macos,
    build_run_macos,
    build_run_sim,
    build_sim,
    clean,
    debug_list_notification_history,
    swift_package_build,
    version,
)
