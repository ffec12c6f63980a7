"""
Project routes - start, (re)generate, inspect and download.
"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, HTTPException
from fastapi.responses import FileResponse

from ..core import (
    ProjectBusyError,
    ProjectNotFoundError,
    ValidationError,
    file_is_present,
    get_logger,
)
from ..models import (
    GenerationResponse,
    ProjectResponse,
    SceneResponse,
    StartProjectRequest,
)
from ..models.entities import Project
from ..services.infrastructure.storage import get_project_store
from ..services.pipeline.orchestrator import get_orchestrator
from ..services.use_cases import StartProjectUseCase, TriggerGenerationUseCase

logger = get_logger(__name__, component="projects_routes")

router = APIRouter(prefix="/projects", tags=["projects"])


def _get_project_or_404(project_id: str) -> Project:
    project = get_project_store().get(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _to_response(project: Project, include_scenes: bool = False) -> ProjectResponse:
    return ProjectResponse.from_project(
        project,
        include_scenes=include_scenes,
        running=get_orchestrator().is_running(project.id),
    )


@router.post("", response_model=ProjectResponse, status_code=201)
async def start_project(request: StartProjectRequest, background_tasks: BackgroundTasks):
    """Create a project and, unless ``auto_generate`` is false, start generating it."""
    try:
        project = await StartProjectUseCase().execute(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if request.auto_generate:
        await TriggerGenerationUseCase().execute(project.id, schedule=background_tasks.add_task)

    return _to_response(project, include_scenes=True)


@router.post("/{project_id}/generate", response_model=GenerationResponse, status_code=202)
async def trigger_generation(project_id: str, background_tasks: BackgroundTasks):
    """(Re)trigger generation; a failed project resumes from its last durable artifact."""
    try:
        return await TriggerGenerationUseCase().execute(project_id, schedule=background_tasks.add_task)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")
    except ProjectBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=List[ProjectResponse])
async def list_projects():
    return [_to_response(p) for p in get_project_store().list_all()]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str):
    return _to_response(_get_project_or_404(project_id), include_scenes=True)


@router.get("/{project_id}/scenes", response_model=List[SceneResponse])
async def get_scenes(project_id: str):
    project = _get_project_or_404(project_id)
    return [SceneResponse.from_scene(s) for s in project.ordered_scenes()]


@router.get("/{project_id}/video")
async def download_video(project_id: str):
    project = _get_project_or_404(project_id)
    if not file_is_present(project.video_path):
        raise HTTPException(status_code=404, detail="Video not available")
    return FileResponse(project.video_path, media_type="video/mp4", filename=f"{project.slug}.mp4")


@router.get("/{project_id}/subtitle")
async def download_subtitle(project_id: str):
    project = _get_project_or_404(project_id)
    if not file_is_present(project.subtitle_path):
        raise HTTPException(status_code=404, detail="Subtitle not available")
    return FileResponse(project.subtitle_path, media_type="application/x-subrip", filename=f"{project.slug}.srt")
