"""
Ken Burns animation choices

The allowed set of a project narrows the full enumeration; a suggested plan
is coerced into that set before it is stored.
"""

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ....models.entities import AnimationPlan, ShowAnimation, TransitionAnimation

SHOW_ANIMATIONS: List[str] = [
    ShowAnimation.PAN_LEFT.value,
    ShowAnimation.PAN_RIGHT.value,
    ShowAnimation.PAN_UP.value,
    ShowAnimation.PAN_DOWN.value,
    ShowAnimation.PAN_DIAGONAL_LEFT.value,
    ShowAnimation.PAN_DIAGONAL_RIGHT.value,
    ShowAnimation.ZOOM_SLOW.value,
    ShowAnimation.ZOOM_IN.value,
    ShowAnimation.ZOOM_OUT.value,
    ShowAnimation.ZOOM_PAN_LEFT.value,
    ShowAnimation.ZOOM_PAN_RIGHT.value,
]

TRANSITION_ANIMATIONS: List[str] = [t.value for t in TransitionAnimation]

ANIMATION_DESCRIPTIONS = {
    "pan-left": "Camera moves from right to left - good for action, movement",
    "pan-right": "Camera moves from left to right - good for journey, progress",
    "pan-up": "Camera moves from bottom to top - good for revealing, inspiration",
    "pan-down": "Camera moves from top to bottom - good for descending, suspense",
    "pan-diagonal-left": "Diagonal movement top-right to bottom-left - dynamic",
    "pan-diagonal-right": "Diagonal movement top-left to bottom-right - dynamic",
    "zoom-slow": "Very slow zoom in - good for suspense, contemplation",
    "zoom-in": "Zoom in towards the center - good for focus, emphasis",
    "zoom-out": "Zoom out from the center - good for reveals, endings",
    "zoom-pan-left": "Zoom in while panning left - cinematic",
    "zoom-pan-right": "Zoom in while panning right - cinematic",
}


@dataclass(frozen=True)
class AllowedAnimations:
    show: List[str]
    transitions: List[str]

    @classmethod
    def from_project(cls, allowed: Optional[Sequence[str]]) -> "AllowedAnimations":
        if not allowed:
            return cls(show=list(SHOW_ANIMATIONS), transitions=list(TRANSITION_ANIMATIONS))

        show = [a for a in SHOW_ANIMATIONS if a in allowed] or [ShowAnimation.ZOOM_SLOW.value]
        transitions = [a for a in TRANSITION_ANIMATIONS if a in allowed] or [TransitionAnimation.FADE.value]
        return cls(show=show, transitions=transitions)


def coerce_animation_plan(
    suggestion: Dict[str, Any],
    allowed: AllowedAnimations,
    rng: Optional[random.Random] = None,
) -> AnimationPlan:
    """Map a suggested ``{animationIn, animationShow, animationOut}`` onto the allowed set.

    Entrance/exit default to fade and fall back to the first allowed
    transition. A missing, ``none``, ``static`` or disallowed show animation
    is replaced by a random allowed one.
    """
    rng = rng or random
    entrance = suggestion.get("animationIn") or suggestion.get("in") or TransitionAnimation.FADE.value
    show = suggestion.get("animationShow") or suggestion.get("show")
    exit_ = suggestion.get("animationOut") or suggestion.get("out") or TransitionAnimation.FADE.value

    if entrance not in allowed.transitions:
        entrance = allowed.transitions[0]
    if exit_ not in allowed.transitions:
        exit_ = allowed.transitions[0]
    if not show or show in ("none", ShowAnimation.STATIC.value) or show not in allowed.show:
        show = rng.choice(allowed.show)

    return AnimationPlan(
        entrance=TransitionAnimation(entrance),
        show=ShowAnimation(show),
        exit=TransitionAnimation(exit_),
    )


def describe_show_animations(allowed: AllowedAnimations) -> str:
    return "\n  * ".join(f"{a}: {ANIMATION_DESCRIPTIONS.get(a, a)}" for a in allowed.show)
