"""
API schemas for project endpoints

Request validation for starting a project, and response shapes for
status, scenes and logs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..config.constants import MAX_SCENE_COUNT
from .entities import (
    ContentType,
    CreationMode,
    ImageProviderType,
    LogEntry,
    Orientation,
    Project,
    Scene,
    SpeechProviderType,
    TextProviderType,
)


class StartProjectRequest(BaseModel):
    """Request to start a project.

    The creation mode is inferred when omitted: ``narrations`` wins over
    ``prompt``, which wins over ``topic``.
    """
    mode: Optional[CreationMode] = None
    topic: Optional[str] = None
    prompt: Optional[str] = None
    narrations: Optional[List[str]] = None
    genre: str = "general"
    language: str = "en"
    voice: Optional[str] = None
    orientation: Orientation = Orientation.PORTRAIT
    scene_count: int = Field(default=5, ge=1, le=MAX_SCENE_COUNT)
    text_provider: Optional[TextProviderType] = None
    speech_provider: Optional[SpeechProviderType] = None
    image_provider: Optional[ImageProviderType] = None
    content_type: ContentType = ContentType.STORY
    image_style: Optional[str] = None
    narrative_tone: Optional[str] = None
    allowed_animations: List[str] = []
    auto_generate: bool = True


class SceneResponse(BaseModel):
    id: str
    order: int
    narration: str
    image_prompt: Optional[str] = None
    prosody: List[Dict[str, str]] = []
    animation: Optional[Dict[str, str]] = None
    image_path: Optional[str] = None
    audio_path: Optional[str] = None
    duration_ms: Optional[int] = None
    start_time_ms: Optional[int] = None
    end_time_ms: Optional[int] = None
    word_boundary_count: int = 0

    @classmethod
    def from_scene(cls, scene: Scene) -> "SceneResponse":
        return cls(
            id=scene.id,
            order=scene.order,
            narration=scene.narration,
            image_prompt=scene.image_prompt,
            prosody=[segment.to_dict() for segment in scene.prosody],
            animation=scene.animation.to_dict() if scene.animation else None,
            image_path=scene.image_path,
            audio_path=scene.audio_path,
            duration_ms=scene.duration_ms,
            start_time_ms=scene.start_time_ms,
            end_time_ms=scene.end_time_ms,
            word_boundary_count=len(scene.word_boundaries),
        )


class ProjectResponse(BaseModel):
    """Project status and metadata"""
    id: str
    slug: str
    mode: str
    status: str
    topic: str
    genre: str
    language: str
    voice: str
    orientation: str
    scene_count: int
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[str] = None
    has_video: bool = False
    has_subtitle: bool = False
    error: Optional[str] = None
    running: bool = False
    created_at: str
    updated_at: str
    scenes: Optional[List[SceneResponse]] = None

    @classmethod
    def from_project(
        cls,
        project: Project,
        include_scenes: bool = False,
        running: bool = False,
    ) -> "ProjectResponse":
        return cls(
            id=project.id,
            slug=project.slug,
            mode=project.mode.value,
            status=project.status.value,
            topic=project.topic,
            genre=project.genre,
            language=project.language,
            voice=project.voice,
            orientation=project.orientation.value,
            scene_count=project.scene_count,
            title=project.title,
            description=project.description,
            tags=project.tags,
            has_video=bool(project.video_path),
            has_subtitle=bool(project.subtitle_path),
            error=project.error,
            running=running,
            created_at=project.created_at,
            updated_at=project.updated_at,
            scenes=[SceneResponse.from_scene(s) for s in project.ordered_scenes()] if include_scenes else None,
        )


class GenerationResponse(BaseModel):
    """Response after (re)triggering generation"""
    project_id: str
    status: str
    message: str


class LogEntryResponse(BaseModel):
    level: str
    code: str
    message: str
    meta: Dict[str, Any] = {}
    timestamp: str

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "LogEntryResponse":
        return cls(
            level=entry.level.value,
            code=entry.code,
            message=entry.message,
            meta=dict(entry.meta),
            timestamp=entry.timestamp,
        )


class VoiceResponse(BaseModel):
    id: str
    name: str
    gender: Optional[str] = None
    locale: Optional[str] = None
    provider: str
