"""
Stage preconditions over persisted state

Each check answers "is this stage's output already present?" with ``Done``
or ``Pending(missing=<scene orders>)``. Stages do only the missing subset.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union

from ...core import file_is_present, is_readable_image
from ...models.entities import ContentType, Project, Scene


@dataclass(frozen=True)
class Done:
    pass


@dataclass(frozen=True)
class Pending:
    missing: Tuple[int, ...] = ()
    reason: str = ""


Precondition = Union[Done, Pending]

DONE = Done()


def _scenes_lacking(project: Project, has_output: Callable[[Scene], bool], reason: str) -> Precondition:
    if not project.scenes:
        return Pending(reason="no scenes")
    missing = tuple(s.order for s in project.ordered_scenes() if not has_output(s))
    return Pending(missing=missing, reason=reason) if missing else DONE


def metadata_ready(project: Project) -> Precondition:
    if project.title and project.description is not None:
        return DONE
    return Pending(reason="title/description missing")


def narration_ready(project: Project) -> Precondition:
    expected = tuple(range(1, project.scene_count + 1))
    orders = tuple(s.order for s in project.ordered_scenes())
    if orders != expected:
        present = set(orders)
        return Pending(missing=tuple(o for o in expected if o not in present), reason="scene rows missing")
    return _scenes_lacking(project, lambda s: bool(s.narration and s.narration.strip()), "narration missing")


def characters_ready(project: Project) -> Precondition:
    if project.content_type is ContentType.EDUCATIONAL or project.character_descriptions:
        return DONE
    return Pending(reason="character descriptions missing")


def image_prompts_ready(project: Project) -> Precondition:
    return _scenes_lacking(project, lambda s: bool(s.image_prompt and s.image_prompt.strip()), "image prompt missing")


def prosody_ready(project: Project) -> Precondition:
    return _scenes_lacking(project, lambda s: bool(s.prosody) and s.animation is not None, "prosody/animation missing")


def images_ready(project: Project) -> Precondition:
    return _scenes_lacking(project, lambda s: is_readable_image(s.image_path), "image missing")


def audio_ready(project: Project) -> Precondition:
    return _scenes_lacking(
        project,
        lambda s: file_is_present(s.audio_path) and bool(s.duration_ms),
        "audio missing",
    )


def timing_ready(project: Project) -> Precondition:
    """Every scene timed, starting at 0 with no gaps or overlaps."""
    if not project.scenes:
        return Pending(reason="no scenes")
    cursor = 0
    missing = []
    for scene in project.ordered_scenes():
        if not scene.has_timing or scene.start_time_ms != cursor or scene.duration_ms is None \
                or scene.end_time_ms != scene.start_time_ms + scene.duration_ms:
            missing.append(scene.order)
        if scene.duration_ms is not None:
            cursor += scene.duration_ms
    return Pending(missing=tuple(missing), reason="timing missing") if missing else DONE


def media_ready(project: Project) -> Precondition:
    return combine(images_ready(project), audio_ready(project), timing_ready(project))


def render_ready(project: Project) -> Precondition:
    return DONE if file_is_present(project.video_path) else Pending(reason="final video missing")


def subtitle_ready(project: Project) -> Precondition:
    return DONE if file_is_present(project.subtitle_path) else Pending(reason="subtitle missing")


def combine(*checks: Precondition) -> Precondition:
    pending = [c for c in checks if isinstance(c, Pending)]
    if not pending:
        return DONE
    return Pending(
        missing=tuple(sorted({order for check in pending for order in check.missing})),
        reason="; ".join(c.reason for c in pending if c.reason),
    )


def missing_orders(check: Precondition) -> Iterable[int]:
    return check.missing if isinstance(check, Pending) else ()
