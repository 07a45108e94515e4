#!/usr/bin/env python3
"""debug_list_notification_history tool - List notifications, including escalated internal errors"""

from xcodebuild_mcp_server.server import mcp
from xcodebuild_mcp_server.utils.notifications import get_notification_history


def format_notification_history(history) -> str:
    if not history:
        return "No notifications have been posted yet."

    lines = [f"Notification History ({len(history)} notification{'s' if len(history) != 1 else ''}):", ""]
    for i, notif in enumerate(history, 1):
        lines.append(f"{i}. [{notif['timestamp']}]")
        lines.append(f"   Title: {notif['title']}")
        if notif['subtitle']:
            lines.append(f"   Subtitle: {notif['subtitle']}")
        if notif['message']:
            lines.append(f"   Message: {notif['message']}")
        lines.append("")

    return "\n".join(lines)


@mcp.tool()
def debug_list_notification_history() -> str:
    """
    List all notifications posted since the server started.
    Escalated internal errors (rejected xcodebuild arguments, unexpected
    exceptions) are posted as notifications, so this doubles as an error log.

    Returns:
        A formatted list of notifications with timestamps, titles, subtitles and messages.
    """
    return format_notification_history(get_notification_history())
