"""
Project activity log.

One call records a project-scoped event three ways: the append-only log in
the store, the live broadcaster, and the process logger.
"""

from typing import Any

from ....core import get_logger
from ....models.entities import LogEntry, LogLevel
from ..storage import ProjectStore
from .broadcaster import LogBroadcaster

logger = get_logger(__name__, component="activity_log")

_LEVEL_TO_LOGGING = {
    LogLevel.DEBUG: "debug",
    LogLevel.INFO: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


class ActivityLog:
    def __init__(self, store: ProjectStore, broadcaster: LogBroadcaster):
        self.store = store
        self.broadcaster = broadcaster

    def record(
        self,
        project_id: str,
        code: str,
        message: str,
        level: LogLevel = LogLevel.INFO,
        **meta: Any,
    ) -> LogEntry:
        entry = LogEntry(
            project_id=project_id,
            level=level,
            code=code,
            message=message,
            meta={k: v for k, v in meta.items() if v is not None},
        )
        self.store.append_log(entry)

        # Live listeners are best effort; the persisted log is authoritative.
        try:
            self.broadcaster.publish(entry)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Log broadcast failed", extra={"code": code, "error": str(exc)})

        log = getattr(logger, _LEVEL_TO_LOGGING[level])
        log(
            f"[{code}] {message}",
            extra={"project_id": project_id, "code": code, "meta": dict(entry.meta)},
        )
        return entry

    def info(self, project_id: str, code: str, message: str, **meta: Any) -> LogEntry:
        return self.record(project_id, code, message, LogLevel.INFO, **meta)

    def warning(self, project_id: str, code: str, message: str, **meta: Any) -> LogEntry:
        return self.record(project_id, code, message, LogLevel.WARNING, **meta)

    def error(self, project_id: str, code: str, message: str, **meta: Any) -> LogEntry:
        return self.record(project_id, code, message, LogLevel.ERROR, **meta)

    def close(self, project_id: str) -> None:
        self.broadcaster.close(project_id)
