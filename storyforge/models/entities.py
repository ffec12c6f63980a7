"""
Domain records persisted by the project store.

Project and Scene are updatable in place; LogEntry is append-only.
All records round-trip through plain dicts for JSON persistence.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .status import ProjectStatus


def _now() -> str:
    return datetime.now().isoformat()


class CreationMode(str, Enum):
    TOPIC = "topic"
    PROMPT = "prompt"
    NARRATIONS = "narrations"


class Orientation(str, Enum):
    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"


class ContentType(str, Enum):
    STORY = "story"
    EDUCATIONAL = "educational"


class TextProviderType(str, Enum):
    GEMINI = "gemini"
    OLLAMA = "ollama"


class SpeechProviderType(str, Enum):
    EDGE = "edge"
    GEMINI = "gemini"
    POLLINATIONS = "pollinations"


class ImageProviderType(str, Enum):
    POLLINATIONS = "pollinations"
    PLACEHOLDER = "placeholder"


class TransitionAnimation(str, Enum):
    """Entrance/exit effects. Zoom variants render as fades."""

    FADE = "fade"
    ZOOM_IN = "zoom-in"
    ZOOM_OUT = "zoom-out"
    NONE = "none"


class ShowAnimation(str, Enum):
    """Main Ken Burns movement for the body of a clip."""

    PAN_LEFT = "pan-left"
    PAN_RIGHT = "pan-right"
    PAN_UP = "pan-up"
    PAN_DOWN = "pan-down"
    PAN_DIAGONAL_LEFT = "pan-diagonal-left"
    PAN_DIAGONAL_RIGHT = "pan-diagonal-right"
    ZOOM_SLOW = "zoom-slow"
    ZOOM_IN = "zoom-in"
    ZOOM_OUT = "zoom-out"
    ZOOM_PAN_LEFT = "zoom-pan-left"
    ZOOM_PAN_RIGHT = "zoom-pan-right"
    STATIC = "static"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ProsodySegment:
    text: str
    rate: str = "+0%"
    volume: str = "+0%"
    pitch: str = "+0Hz"

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "rate": self.rate, "volume": self.volume, "pitch": self.pitch}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProsodySegment":
        return cls(
            text=str(data.get("text", "")),
            rate=str(data.get("rate", "+0%")),
            volume=str(data.get("volume", "+0%")),
            pitch=str(data.get("pitch", "+0Hz")),
        )


@dataclass
class WordBoundary:
    """Provider word timing, in 100ns ticks relative to the clip start."""

    text: str
    offset_hns: int
    duration_hns: int

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "offset_hns": self.offset_hns, "duration_hns": self.duration_hns}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordBoundary":
        return cls(
            text=str(data["text"]),
            offset_hns=int(data["offset_hns"]),
            duration_hns=int(data["duration_hns"]),
        )


@dataclass
class AnimationPlan:
    entrance: TransitionAnimation = TransitionAnimation.FADE
    show: ShowAnimation = ShowAnimation.ZOOM_SLOW
    exit: TransitionAnimation = TransitionAnimation.FADE

    def to_dict(self) -> Dict[str, str]:
        return {"in": self.entrance.value, "show": self.show.value, "out": self.exit.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnimationPlan":
        return cls(
            entrance=TransitionAnimation(data.get("in", "fade")),
            show=ShowAnimation(data.get("show", "zoom-slow")),
            exit=TransitionAnimation(data.get("out", "fade")),
        )


@dataclass
class Scene:
    id: str
    project_id: str
    order: int
    narration: str
    image_prompt: Optional[str] = None
    prosody: List[ProsodySegment] = field(default_factory=list)
    animation: Optional[AnimationPlan] = None
    image_path: Optional[str] = None
    audio_path: Optional[str] = None
    duration_ms: Optional[int] = None
    start_time_ms: Optional[int] = None
    end_time_ms: Optional[int] = None
    word_boundaries: List[WordBoundary] = field(default_factory=list)

    @property
    def has_timing(self) -> bool:
        return self.start_time_ms is not None and self.end_time_ms is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "order": self.order,
            "narration": self.narration,
            "image_prompt": self.image_prompt,
            "prosody": [segment.to_dict() for segment in self.prosody],
            "animation": self.animation.to_dict() if self.animation else None,
            "image_path": self.image_path,
            "audio_path": self.audio_path,
            "duration_ms": self.duration_ms,
            "start_time_ms": self.start_time_ms,
            "end_time_ms": self.end_time_ms,
            "word_boundaries": [wb.to_dict() for wb in self.word_boundaries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scene":
        animation = data.get("animation")
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            order=int(data["order"]),
            narration=data.get("narration", ""),
            image_prompt=data.get("image_prompt"),
            prosody=[ProsodySegment.from_dict(s) for s in data.get("prosody") or []],
            animation=AnimationPlan.from_dict(animation) if animation else None,
            image_path=data.get("image_path"),
            audio_path=data.get("audio_path"),
            duration_ms=data.get("duration_ms"),
            start_time_ms=data.get("start_time_ms"),
            end_time_ms=data.get("end_time_ms"),
            word_boundaries=[WordBoundary.from_dict(w) for w in data.get("word_boundaries") or []],
        )


@dataclass
class Project:
    id: str
    slug: str
    mode: CreationMode
    topic: str
    genre: str
    language: str
    voice: str
    orientation: Orientation
    scene_count: int
    prompt: Optional[str] = None
    text_provider: Optional[TextProviderType] = None
    speech_provider: SpeechProviderType = SpeechProviderType.EDGE
    image_provider: ImageProviderType = ImageProviderType.POLLINATIONS
    content_type: ContentType = ContentType.STORY
    image_style: Optional[str] = None
    narrative_tone: Optional[str] = None
    allowed_animations: List[str] = field(default_factory=list)
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[str] = None
    character_descriptions: Optional[str] = None
    status: ProjectStatus = ProjectStatus.CREATED
    video_path: Optional[str] = None
    subtitle_path: Optional[str] = None
    error: Optional[str] = None
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)
    scenes: List[Scene] = field(default_factory=list)

    def ordered_scenes(self) -> List[Scene]:
        return sorted(self.scenes, key=lambda s: s.order)

    def scene_by_order(self, order: int) -> Optional[Scene]:
        return next((s for s in self.scenes if s.order == order), None)

    def to_dict(self, include_scenes: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "mode": self.mode.value,
            "topic": self.topic,
            "prompt": self.prompt,
            "genre": self.genre,
            "language": self.language,
            "voice": self.voice,
            "orientation": self.orientation.value,
            "scene_count": self.scene_count,
            "text_provider": self.text_provider.value if self.text_provider else None,
            "speech_provider": self.speech_provider.value,
            "image_provider": self.image_provider.value,
            "content_type": self.content_type.value,
            "image_style": self.image_style,
            "narrative_tone": self.narrative_tone,
            "allowed_animations": list(self.allowed_animations),
            "title": self.title,
            "description": self.description,
            "tags": self.tags,
            "character_descriptions": self.character_descriptions,
            "status": self.status.value,
            "video_path": self.video_path,
            "subtitle_path": self.subtitle_path,
            "error": self.error,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_scenes:
            data["scenes"] = [scene.to_dict() for scene in self.ordered_scenes()]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        text_provider = data.get("text_provider")
        return cls(
            id=data["id"],
            slug=data["slug"],
            mode=CreationMode(data["mode"]),
            topic=data.get("topic", ""),
            prompt=data.get("prompt"),
            genre=data.get("genre", ""),
            language=data.get("language", "en"),
            voice=data.get("voice", ""),
            orientation=Orientation(data.get("orientation", "PORTRAIT")),
            scene_count=int(data.get("scene_count", 0)),
            text_provider=TextProviderType(text_provider) if text_provider else None,
            speech_provider=SpeechProviderType(data.get("speech_provider", "edge")),
            image_provider=ImageProviderType(data.get("image_provider", "pollinations")),
            content_type=ContentType(data.get("content_type", "story")),
            image_style=data.get("image_style"),
            narrative_tone=data.get("narrative_tone"),
            allowed_animations=list(data.get("allowed_animations") or []),
            title=data.get("title"),
            description=data.get("description"),
            tags=data.get("tags"),
            character_descriptions=data.get("character_descriptions"),
            status=ProjectStatus(data.get("status", "created")),
            video_path=data.get("video_path"),
            subtitle_path=data.get("subtitle_path"),
            error=data.get("error"),
            created_at=data.get("created_at", _now()),
            updated_at=data.get("updated_at", _now()),
            scenes=[Scene.from_dict(s) for s in data.get("scenes") or []],
        )


@dataclass(frozen=True)
class LogEntry:
    project_id: str
    level: LogLevel
    code: str
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "level": self.level.value,
            "code": self.code,
            "message": self.message,
            "meta": dict(self.meta),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            project_id=data["project_id"],
            level=LogLevel(data.get("level", "info")),
            code=data.get("code", ""),
            message=data.get("message", ""),
            meta=dict(data.get("meta") or {}),
            timestamp=data.get("timestamp", _now()),
        )
