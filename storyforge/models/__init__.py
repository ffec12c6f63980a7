"""Domain records, status DAG and API schemas."""

from .status import ProjectStatus, ACTIVE_STATUSES, forward_chain
from .entities import (
    AnimationPlan,
    ContentType,
    CreationMode,
    ImageProviderType,
    LogEntry,
    LogLevel,
    Orientation,
    Project,
    ProsodySegment,
    Scene,
    ShowAnimation,
    SpeechProviderType,
    TextProviderType,
    TransitionAnimation,
    WordBoundary,
)
from .projects import (
    StartProjectRequest,
    SceneResponse,
    ProjectResponse,
    GenerationResponse,
    LogEntryResponse,
    VoiceResponse,
)

__all__ = [
    "ProjectStatus",
    "ACTIVE_STATUSES",
    "forward_chain",
    "AnimationPlan",
    "ContentType",
    "CreationMode",
    "ImageProviderType",
    "LogEntry",
    "LogLevel",
    "Orientation",
    "Project",
    "ProsodySegment",
    "Scene",
    "ShowAnimation",
    "SpeechProviderType",
    "TextProviderType",
    "TransitionAnimation",
    "WordBoundary",
    "StartProjectRequest",
    "SceneResponse",
    "ProjectResponse",
    "GenerationResponse",
    "LogEntryResponse",
    "VoiceResponse",
]
