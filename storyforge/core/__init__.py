"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Error taxonomy
    - runtime.py: Environment parsing and tool checks
    - retry.py: Bounded retry with growing delay
    - files.py: Slugs and directory helpers
    - media.py: ffprobe durations and image readability
    - auth.py: Optional API key guard

Usage:
    from storyforge.core import get_logger, slugify, retry_async
"""

from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_project_id,
    set_stage,
    clear_context,
    LogTimer,
)

from .exceptions import (
    StoryForgeError,
    ValidationError,
    ProjectNotFoundError,
    ProjectBusyError,
    ProviderError,
    TransientProviderError,
    FatalProviderError,
    PipelineError,
    PipelineInvariantError,
    RenderError,
    StageFailedError,
    GenerationAbandonedError,
    StuckTimeoutError,
)

from .runtime import (
    parse_bool_env,
    env_int,
    env_float,
    env_list,
    missing_runtime_tools,
    REQUIRED_RENDER_TOOLS,
)

from .retry import retry_async

from .files import (
    slugify,
    unique_slug,
    ensure_directory,
    file_is_present,
)

from .media import (
    probe_duration_seconds,
    probe_duration_ms,
    is_readable_image,
)

from .auth import (
    is_auth_enabled,
    is_public_path,
    is_request_authenticated,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_project_id",
    "set_stage",
    "clear_context",
    "LogTimer",
    "StoryForgeError",
    "ValidationError",
    "ProjectNotFoundError",
    "ProjectBusyError",
    "ProviderError",
    "TransientProviderError",
    "FatalProviderError",
    "PipelineError",
    "PipelineInvariantError",
    "RenderError",
    "StageFailedError",
    "GenerationAbandonedError",
    "StuckTimeoutError",
    "parse_bool_env",
    "env_int",
    "env_float",
    "env_list",
    "missing_runtime_tools",
    "REQUIRED_RENDER_TOOLS",
    "retry_async",
    "slugify",
    "unique_slug",
    "ensure_directory",
    "file_is_present",
    "probe_duration_seconds",
    "probe_duration_ms",
    "is_readable_image",
    "is_auth_enabled",
    "is_public_path",
    "is_request_authenticated",
]
