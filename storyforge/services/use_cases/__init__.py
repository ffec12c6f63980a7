"""
Use Cases package - one business operation per class, independent of HTTP.

Modules:
- base: Base use case abstract class
- project_use_case: start a project, trigger generation, list voices
"""

from .base import UseCase
from .project_use_case import (
    StartProjectUseCase,
    TriggerGenerationUseCase,
    infer_mode,
    list_voices,
    resolve_topic,
    validate_request,
)

__all__ = [
    "UseCase",
    "StartProjectUseCase",
    "TriggerGenerationUseCase",
    "infer_mode",
    "list_voices",
    "resolve_topic",
    "validate_request",
]
