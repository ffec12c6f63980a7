"""
Tests for storyforge.services.pipeline.script.animations
"""

import random

from storyforge.models.entities import ShowAnimation, TransitionAnimation
from storyforge.services.pipeline.script import (
    SHOW_ANIMATIONS,
    TRANSITION_ANIMATIONS,
    AllowedAnimations,
    coerce_animation_plan,
)


class TestAllowedAnimations:

    def test_empty_allows_everything(self):
        allowed = AllowedAnimations.from_project([])
        assert allowed.show == SHOW_ANIMATIONS
        assert allowed.transitions == TRANSITION_ANIMATIONS

    def test_filters_and_keeps_enumeration_order(self):
        allowed = AllowedAnimations.from_project(["zoom-in", "pan-left", "fade"])
        assert allowed.show == ["pan-left", "zoom-in"]
        assert allowed.transitions == ["fade"]

    def test_falls_back_when_a_group_is_empty(self):
        allowed = AllowedAnimations.from_project(["static"])
        assert allowed.show == ["zoom-slow"]
        assert allowed.transitions == ["fade"]


class TestCoerceAnimationPlan:

    def test_allowed_suggestion_kept(self):
        plan = coerce_animation_plan(
            {"animationIn": "zoom-in", "animationShow": "pan-up", "animationOut": "none"},
            AllowedAnimations.from_project([]),
        )
        assert plan.entrance is TransitionAnimation.ZOOM_IN
        assert plan.show is ShowAnimation.PAN_UP
        assert plan.exit is TransitionAnimation.NONE

    def test_disallowed_values_replaced(self):
        allowed = AllowedAnimations.from_project(["pan-left", "fade"])
        plan = coerce_animation_plan(
            {"animationIn": "zoom-in", "animationShow": "zoom-out", "animationOut": "none"},
            allowed,
        )
        assert plan.entrance is TransitionAnimation.FADE
        assert plan.show is ShowAnimation.PAN_LEFT
        assert plan.exit is TransitionAnimation.FADE

    def test_static_or_missing_show_gets_random_allowed(self):
        allowed = AllowedAnimations.from_project([])
        rng = random.Random(7)
        for suggestion in ({}, {"animationShow": "static"}, {"animationShow": "none"}):
            plan = coerce_animation_plan(suggestion, allowed, rng=rng)
            assert plan.show.value in SHOW_ANIMATIONS
            assert plan.entrance is TransitionAnimation.FADE

    def test_short_keys_accepted(self):
        plan = coerce_animation_plan({"in": "fade", "show": "zoom-slow", "out": "fade"}, AllowedAnimations.from_project([]))
        assert plan.show is ShowAnimation.ZOOM_SLOW
