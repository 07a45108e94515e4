#!/usr/bin/env python3
"""macOS notification utilities used for operator-visible diagnostics"""

import datetime
import subprocess
from typing import Dict, List

NOTIFICATION_TITLE = "XcodeBuild MCP"

# Global notification setting - initialized by CLI
NOTIFICATIONS_ENABLED = True

# Global notification history - stores all notifications posted
NOTIFICATION_HISTORY: List[Dict[str, str]] = []


def set_notifications_enabled(enabled: bool):
    """Set the global notification setting"""
    global NOTIFICATIONS_ENABLED
    NOTIFICATIONS_ENABLED = enabled


def get_notification_history() -> List[Dict[str, str]]:
    """Get the notification history"""
    return NOTIFICATION_HISTORY.copy()


def clear_notification_history():
    """Clear the notification history"""
    NOTIFICATION_HISTORY.clear()


def escape_applescript_string(s: str) -> str:
    """
    Escape a string for safe use in AppleScript.

    Args:
        s: String to escape

    Returns:
        Escaped string safe for AppleScript
    """
    # Escape backslashes first, then quotes
    s = s.replace("\\", "\\\\")
    s = s.replace('"', '\\"')
    return s


def show_notification(title: str, subtitle: str = None, message: str = None, sound: bool = False):
    """Show a macOS notification if notifications are enabled

    Args:
        title: Notification title
        subtitle: Optional subtitle (shown below title)
        message: Notification message body
        sound: Whether to play a sound (for errors/important events)
    """
    # Record in history (always, even if notifications are disabled)
    NOTIFICATION_HISTORY.append({
        'timestamp': datetime.datetime.now().isoformat(),
        'title': title,
        'subtitle': subtitle or '',
        'message': message or '',
        'sound': str(sound)
    })

    if not NOTIFICATIONS_ENABLED:
        return

    # AppleScript requires a message
    msg = escape_applescript_string(message or subtitle or title)
    script = f'display notification "{msg}" with title "{escape_applescript_string(title)}"'
    if subtitle:
        script += f' subtitle "{escape_applescript_string(subtitle)}"'
    if sound:
        script += ' sound name "Frog"'

    try:
        subprocess.run(['osascript', '-e', script], capture_output=True, timeout=5)
    except (OSError, subprocess.SubprocessError):
        pass  # osascript is missing off macOS


def show_error_notification(message: str, details: str = None):
    """Show an error notification with sound"""
    show_notification(NOTIFICATION_TITLE, subtitle=details, message=f"❌ {message}", sound=True)
