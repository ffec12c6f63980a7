"""
Project status constants and the forward-only stage DAG.
"""

from enum import Enum
from typing import List


class ProjectStatus(Enum):
    """Lifecycle of a project, in pipeline order."""

    CREATED = "created"
    METADATA_READY = "metadata_ready"
    NARRATION_READY = "narration_ready"
    PROMPTS_READY = "prompts_ready"
    PROSODY_PLAN_READY = "prosody_plan_ready"
    MEDIA_READY = "media_ready"
    RENDERED = "rendered"
    SUBTITLED = "subtitled"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        """Position in the forward chain. FAILED sits outside it (-1)."""
        if self is ProjectStatus.FAILED:
            return -1
        return _FORWARD_CHAIN.index(self)

    def is_terminal(self) -> bool:
        return self in (ProjectStatus.COMPLETED, ProjectStatus.FAILED)

    def is_in_progress(self) -> bool:
        """Any non-terminal state, including CREATED."""
        return not self.is_terminal()

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        """Forward-only moves, plus FAILED from any non-terminal state.

        A failed project may re-enter the chain at any stage, which is how a
        retry resumes from its last durable artifact.
        """
        if target is ProjectStatus.FAILED:
            return self is not ProjectStatus.COMPLETED
        if self is ProjectStatus.FAILED:
            return True
        if self is ProjectStatus.COMPLETED:
            return False
        return target.rank > self.rank


_FORWARD_CHAIN: List[ProjectStatus] = [
    ProjectStatus.CREATED,
    ProjectStatus.METADATA_READY,
    ProjectStatus.NARRATION_READY,
    ProjectStatus.PROMPTS_READY,
    ProjectStatus.PROSODY_PLAN_READY,
    ProjectStatus.MEDIA_READY,
    ProjectStatus.RENDERED,
    ProjectStatus.SUBTITLED,
    ProjectStatus.COMPLETED,
]

ACTIVE_STATUSES = frozenset(s for s in ProjectStatus if s.is_in_progress())


def forward_chain() -> List[ProjectStatus]:
    return list(_FORWARD_CHAIN)


__all__ = [
    "ProjectStatus",
    "ACTIVE_STATUSES",
    "forward_chain",
]
