"""Project log entries: live fan-out and the combined activity recorder."""

from .broadcaster import LogBroadcaster, get_log_broadcaster
from .activity import ActivityLog

__all__ = ["LogBroadcaster", "get_log_broadcaster", "ActivityLog"]
