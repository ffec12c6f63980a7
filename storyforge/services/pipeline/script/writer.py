"""
Story writer - everything the pipeline asks of the text generator

Metadata, narrations, character sheets, image prompts and animation
suggestions. Each method sends one templated prompt (image prompts go in
batches) and validates the parsed reply before handing it back.
"""

import json
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ....config import TOPIC_MAX_LENGTH
from ....core import TransientProviderError, get_logger
from ....models.entities import AnimationPlan, ContentType, CreationMode, Project
from ...infrastructure.parsing import extract_json
from ...llm import GenerationConfig, TextGenerator
from . import prompts
from .animations import AllowedAnimations, coerce_animation_plan, describe_show_animations

logger = get_logger(__name__, component="story_writer")

PREVIOUS_SCENES_CONTEXT_COUNT = 2
CONTEXT_PREVIEW_LENGTH = 200


@dataclass
class StoryMetadata:
    title: str
    description: str
    tags: str
    suggested_topic: Optional[str] = None


class StoryWriter:
    """Text-generation calls for one project's script"""

    def __init__(self, generator: TextGenerator, batch_size: int = 5, rng: Optional[random.Random] = None):
        self.generator = generator
        self.batch_size = max(1, batch_size)
        self.rng = rng or random.Random()

    async def _ask_json(self, prompt: str, expect_array: bool = False) -> Any:
        text = await self.generator.generate(prompt, GenerationConfig(json_output=not expect_array))
        return extract_json(text, expect_array=expect_array, provider=self.generator.name)

    # ------------------------------------------------------------------ metadata

    async def generate_metadata(self, project: Project, narrations: Sequence[str] = ()) -> StoryMetadata:
        if project.mode is CreationMode.NARRATIONS:
            prompt = prompts.NARRATIONS_METADATA.format(
                narrations="\n".join(f"Scene {i}: {n}" for i, n in enumerate(narrations, start=1)),
                genre=project.genre,
                language=project.language,
                topic_max_length=TOPIC_MAX_LENGTH,
            )
        elif project.mode is CreationMode.PROMPT:
            prompt = prompts.PROMPT_METADATA.format(
                prompt=project.prompt or project.topic,
                genre=project.genre,
                language=project.language,
                topic_max_length=TOPIC_MAX_LENGTH,
            )
        else:
            prompt = prompts.TOPIC_METADATA.format(
                topic=project.topic, genre=project.genre, language=project.language
            )

        data = await self._ask_json(prompt)
        if not isinstance(data, dict) or not data.get("title"):
            raise TransientProviderError("Metadata reply has no title", provider=self.generator.name)

        suggested = str(data.get("suggestedTopic") or "").strip()[:TOPIC_MAX_LENGTH] or None
        return StoryMetadata(
            title=str(data["title"]).strip(),
            description=str(data.get("description", "")).strip(),
            tags=str(data.get("hashtags", "")).strip(),
            suggested_topic=suggested,
        )

    # ---------------------------------------------------------------- narration

    async def generate_narrations(self, project: Project) -> List[str]:
        """Return exactly ``project.scene_count`` narrations in scene order."""
        tone = f" with a {project.narrative_tone} tone" if project.narrative_tone else ""
        content_kind = "lesson" if project.content_type is ContentType.EDUCATIONAL else "story"

        if project.mode is CreationMode.PROMPT and project.prompt:
            prompt = prompts.PROMPT_NARRATIONS.format(
                scene_count=project.scene_count,
                prompt=project.prompt,
                genre=project.genre,
                language=project.language,
                tone=tone,
                content_kind=content_kind,
                language_rules=prompts.LANGUAGE_RULES,
            )
        else:
            prompt = prompts.TOPIC_NARRATIONS.format(
                scene_count=project.scene_count,
                topic=project.topic,
                genre=project.genre,
                language=project.language,
                tone=tone,
                content_kind=content_kind,
                language_rules=prompts.LANGUAGE_RULES,
            )

        items = await self._ask_json(prompt, expect_array=True)
        ordered: List[Tuple[int, str]] = []
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                continue
            text = str(item.get("narration") or "").strip()
            if text:
                ordered.append((_as_order(item.get("order"), index), text))
        ordered.sort(key=lambda pair: pair[0])

        if len(ordered) < project.scene_count:
            raise TransientProviderError(
                f"Expected {project.scene_count} narrations, got {len(ordered)}",
                provider=self.generator.name,
            )
        return [text for _, text in ordered[: project.scene_count]]

    # --------------------------------------------------------------- characters

    async def generate_character_descriptions(self, project: Project, narrations: Sequence[str]) -> str:
        prompt = prompts.CHARACTER_DESCRIPTIONS.format(
            topic=project.topic,
            narrations="\n".join(narrations),
            style=f" in {project.image_style} style" if project.image_style else "",
        )
        data = await self._ask_json(prompt)
        if not isinstance(data, dict):
            raise TransientProviderError("Character reply is not an object", provider=self.generator.name)
        return json.dumps(data, ensure_ascii=False, indent=2)

    # ------------------------------------------------------------ image prompts

    async def generate_image_prompts(
        self,
        project: Project,
        scenes: Sequence[Tuple[int, str]],
        previous: Sequence[Tuple[int, str]] = (),
        on_batch: Optional[Callable[[Dict[int, str]], None]] = None,
    ) -> Dict[int, str]:
        """Image prompts for ``(order, narration)`` pairs, batched.

        ``previous`` holds ``(order, image_prompt)`` of scenes that already
        have one and seeds the continuity context. A scene the batch reply
        leaves out gets a single-scene prompt instead. ``on_batch`` receives
        each finished batch before the next one is requested.
        """
        results: Dict[int, str] = {}
        context: List[Tuple[int, str]] = list(previous)
        style = f" in {project.image_style} style" if project.image_style else ""
        character_context = (
            f"\n\nCHARACTER DESCRIPTIONS (use these for consistent character appearances):\n"
            f"{project.character_descriptions}\n"
            if project.character_descriptions else ""
        )

        for start in range(0, len(scenes), self.batch_size):
            batch = list(scenes[start:start + self.batch_size])
            logger.info(f"Processing image prompts batch {start // self.batch_size + 1}: scenes {[o for o, _ in batch]}")

            recent = context[-PREVIOUS_SCENES_CONTEXT_COUNT:]
            previous_context = ""
            if recent:
                previous_context = "\n\nPREVIOUS SCENES (for continuity):\n" + "\n".join(
                    f'Scene {order} image prompt: "{text[:CONTEXT_PREVIEW_LENGTH]}..."' for order, text in recent
                ) + "\n"

            try:
                batch_results = await self._image_prompt_batch(batch, style, character_context, previous_context)
            except TransientProviderError as exc:
                logger.warning(f"Image prompt batch failed, generating individually: {exc}")
                batch_results = {}

            finished: Dict[int, str] = {}
            for order, narration in batch:
                text = batch_results.get(order)
                if not text:
                    text = await self._image_prompt_single(narration, style, character_context, context[-1:] or None)
                finished[order] = text
                context.append((order, text))

            results.update(finished)
            if on_batch is not None:
                on_batch(finished)

        return results

    async def _image_prompt_batch(
        self,
        batch: Sequence[Tuple[int, str]],
        style: str,
        character_context: str,
        previous_context: str,
    ) -> Dict[int, str]:
        prompt = prompts.IMAGE_PROMPTS_BATCH.format(
            style=style,
            character_context=character_context,
            previous_context=previous_context,
            narrations="\n".join(f'Scene {order}: "{narration}"' for order, narration in batch),
            count=len(batch),
        )
        items = await self._ask_json(prompt, expect_array=True)
        wanted = {order for order, _ in batch}
        found: Dict[int, str] = {}
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            order = _as_order(item.get("order"), batch[index][0] if index < len(batch) else -1)
            text = str(item.get("imagePrompt") or "").strip()
            if order in wanted and text:
                found[order] = text
        return found

    async def _image_prompt_single(
        self,
        narration: str,
        style: str,
        character_context: str,
        previous: Optional[List[Tuple[int, str]]],
    ) -> str:
        previous_context = ""
        if previous:
            order, text = previous[0]
            previous_context = f'\n\nPREVIOUS SCENE (for continuity):\nScene {order} image prompt: "{text}"\n'
        prompt = prompts.IMAGE_PROMPT_SINGLE.format(
            narration=narration,
            style=style,
            character_context=character_context,
            previous_context=previous_context,
        )
        text = (await self.generator.generate(prompt)).strip()
        if not text:
            raise TransientProviderError("Empty image prompt", provider=self.generator.name)
        return text

    # ---------------------------------------------------------------- animation

    async def suggest_animation(
        self,
        narration: str,
        allowed: AllowedAnimations,
        previous_show: Optional[str] = None,
    ) -> AnimationPlan:
        prompt = prompts.ANIMATION_PLAN.format(
            narration=narration,
            transitions=", ".join(allowed.transitions),
            show_options=describe_show_animations(allowed),
            previous_show=previous_show or "none",
            first_show=allowed.show[0],
        )
        try:
            suggestion = await self._ask_json(prompt)
        except TransientProviderError as exc:
            logger.warning(f"Animation suggestion unusable, picking from allowed set: {exc}")
            suggestion = {}
        if not isinstance(suggestion, dict):
            suggestion = {}
        return coerce_animation_plan(suggestion, allowed, rng=self.rng)


def _as_order(value: Any, default: int) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return default
