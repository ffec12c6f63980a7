"""
Project log routes - persisted history and a live SSE stream.
"""

import json
from typing import List

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from ..models import LogEntryResponse
from ..services.infrastructure.logs import get_log_broadcaster
from ..services.infrastructure.storage import get_project_store

router = APIRouter(prefix="/projects", tags=["logs"])

HEARTBEAT_SECONDS = 15.0


def _require_project(project_id: str) -> None:
    if not get_project_store().exists(project_id):
        raise HTTPException(status_code=404, detail="Project not found")


@router.get("/{project_id}/logs", response_model=List[LogEntryResponse])
async def get_logs(project_id: str):
    _require_project(project_id)
    return [LogEntryResponse.from_entry(e) for e in get_project_store().list_logs(project_id)]


@router.get("/{project_id}/logs/stream")
async def stream_logs(project_id: str):
    """Server-sent events: one ``data:`` frame per entry, comment heartbeats while idle.

    The stream ends when the project's current run finishes.
    """
    _require_project(project_id)
    broadcaster = get_log_broadcaster()

    async def event_source():
        async for entry in broadcaster.stream(project_id, heartbeat_seconds=HEARTBEAT_SECONDS):
            if entry is None:
                yield ": keep-alive\n\n"
                continue
            payload = LogEntryResponse.from_entry(entry).model_dump()
            yield f"event: log\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"
        yield "event: end\ndata: {}\n\n"

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
