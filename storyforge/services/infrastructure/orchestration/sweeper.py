"""
Stuck-project sweeper.

Marks projects that sit in a non-terminal status past a wall-clock timeout as
failed. It does not abort in-flight provider calls. A run still in flight in
this process sees the failed status at its next stage boundary and stops
there; whatever a late call already wrote is picked up by the next retry.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ....core import StuckTimeoutError, get_logger
from ....models.status import ProjectStatus
from ..logs import ActivityLog
from ..storage import ProjectStore

logger = get_logger(__name__, component="stuck_sweeper")


class StuckProjectSweeper:
    def __init__(
        self,
        store: ProjectStore,
        activity: ActivityLog,
        timeout_minutes: int = 30,
        interval_minutes: int = 5,
        is_running: Optional[Callable[[str], bool]] = None,
        enabled: bool = True,
    ):
        self.store = store
        self.activity = activity
        self.timeout_minutes = timeout_minutes
        self.interval_minutes = interval_minutes
        self.enabled = enabled
        self._is_running = is_running or (lambda _project_id: False)

    def run_once(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Fail every stale project once. Returns a small summary."""
        now = now or datetime.now()
        cutoff = now - timedelta(minutes=self.timeout_minutes)
        summary: Dict[str, Any] = {"checked_before": cutoff.isoformat(), "marked_failed": []}

        for project in self.store.find_stale(cutoff):
            stuck = StuckTimeoutError(project.id, project.status.value, self.timeout_minutes)
            try:
                self.store.set_status(project.id, ProjectStatus.FAILED, error=str(stuck))
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Failed to mark stuck project",
                    extra={"project_id": project.id, "error": str(exc)},
                )
                continue
            self.activity.error(
                project.id,
                "PROCESS_STUCK",
                str(stuck),
                status=project.status.value,
                still_running=self._is_running(project.id),
            )
            self.activity.close(project.id)
            summary["marked_failed"].append(project.id)

        if summary["marked_failed"]:
            logger.warning("Stuck projects marked failed", extra=summary)
        return summary

    async def run_periodic(self) -> None:
        """Run the sweep in a periodic background loop."""
        if not self.enabled:
            logger.info("Stuck-project sweeper disabled by environment")
            return

        interval_seconds = self.interval_minutes * 60
        while True:
            try:
                self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.error("Stuck-project sweep failed", extra={"error": str(exc)}, exc_info=True)
            await asyncio.sleep(interval_seconds)
