"""
Core Exceptions
Error taxonomy shared by the pipeline, the providers and the HTTP layer.
"""

from typing import Optional


class StoryForgeError(Exception):
    """Base exception for all application errors."""
    pass


class ValidationError(StoryForgeError):
    """Request rejected before any stage runs."""
    pass


class ProjectNotFoundError(StoryForgeError):
    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class ProjectBusyError(StoryForgeError):
    """Generation is already running for this project in this process."""

    def __init__(self, project_id: str):
        super().__init__(f"Generation already running for project {project_id}")
        self.project_id = project_id


class ProviderError(StoryForgeError):
    """Base exception for external collaborator failures (text, speech, image)."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class TransientProviderError(ProviderError):
    """Network, timeout or 5xx failure. Safe to retry."""
    pass


class FatalProviderError(ProviderError):
    """Auth or quota failure. Never retried."""
    pass


class PipelineError(StoryForgeError):
    """Base exception for processing pipeline errors."""
    pass


class PipelineInvariantError(PipelineError):
    """A stage found an artifact of an earlier stage missing."""
    pass


class RenderError(PipelineError):
    """ffmpeg failed to render or assemble a clip."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class StageFailedError(PipelineError):
    """A stage exhausted its retry budget or hit a fatal error."""

    def __init__(self, stage: str, message: str, scene_order: Optional[int] = None):
        location = f" (scene {scene_order})" if scene_order is not None else ""
        super().__init__(f"Stage '{stage}' failed{location}: {message}")
        self.stage = stage
        self.scene_order = scene_order
        self.reason = message


class GenerationAbandonedError(PipelineError):
    """The project was marked failed by someone else while a run was in progress."""

    def __init__(self, project_id: str, reason: Optional[str] = None):
        super().__init__(f"Project {project_id} was marked failed during generation: {reason or 'no reason given'}")
        self.project_id = project_id
        self.reason = reason


class StuckTimeoutError(StoryForgeError):
    """Recorded by the sweeper when a project sits in a non-terminal state too long."""

    def __init__(self, project_id: str, status: str, minutes: int):
        super().__init__(
            f"Process stuck in {status} for more than {minutes} minutes. "
            f"Marked as failed."
        )
        self.project_id = project_id
        self.status = status
        self.minutes = minutes
