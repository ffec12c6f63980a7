"""
Shared fixtures and in-memory provider fakes.

Environment is pointed at a throwaway directory before any ``storyforge``
module is imported, so config never touches the working tree.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Set

_TEST_HOME = Path(tempfile.mkdtemp(prefix="storyforge-tests-"))
os.environ["STORYFORGE_HOME"] = str(_TEST_HOME)
os.environ["OUTPUT_DIR"] = str(_TEST_HOME / "outputs")
os.environ["PROJECT_DATA_DIR"] = str(_TEST_HOME / "project_data")
os.environ["SWEEPER_ENABLED"] = "false"
os.environ["API_KEY"] = ""

import pytest
from PIL import Image

from storyforge.core import TransientProviderError
from storyforge.models.entities import (
    CreationMode,
    ImageProviderType,
    Orientation,
    Project,
    SpeechProviderType,
    TextProviderType,
    WordBoundary,
)
from storyforge.services.infrastructure.logs import ActivityLog, LogBroadcaster
from storyforge.services.infrastructure.storage import ProjectStore
from storyforge.services.llm import TextGenerator
from storyforge.services.pipeline.audio import SpeechResult, SpeechSynthesizer, VoiceInfo
from storyforge.services.pipeline.images import ImageGenerator

_SCENE_FILE = re.compile(r"scene_(\d+)\.")


def scene_order_from_path(path: str) -> int:
    return int(_SCENE_FILE.search(Path(path).name).group(1))


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------

class FakeTextGenerator(TextGenerator):
    """Answers each writer prompt by recognising its template."""

    provider_type = TextProviderType.OLLAMA

    def __init__(self):
        self.prompts: List[str] = []

    def is_available(self) -> bool:
        return True

    async def generate(self, prompt, config=None) -> str:
        self.prompts.append(prompt)

        if "Ken Burns" in prompt:
            return json.dumps({"animationIn": "fade", "animationShow": "zoom-in", "animationOut": "fade"})
        if "generate detailed image generation prompts" in prompt:
            orders = [int(o) for o in re.findall(r'^Scene (\d+): "', prompt, re.MULTILINE)]
            return json.dumps([{"order": o, "imagePrompt": f"A lighthouse at dusk, shot {o}"} for o in orders])
        if "Return ONLY the image prompt as plain text" in prompt:
            return "A lighthouse at dusk, single shot"
        if "describe ALL characters" in prompt:
            return json.dumps({"Mira": "A lighthouse keeper in a yellow raincoat"})
        match = re.search(r"(\d+)-scene short video", prompt)
        if match:
            count = int(match.group(1))
            return json.dumps([
                {"order": i, "narration": f"Night {i} falls on the coast. The waves crash on the rocks!"}
                for i in range(1, count + 1)
            ])
        if "title" in prompt:
            return json.dumps({
                "title": "The Last Lighthouse",
                "description": "A keeper faces the storm.",
                "hashtags": "#story #sea",
                "suggestedTopic": "Lighthouse in a storm",
            })
        raise AssertionError(f"Unexpected prompt: {prompt[:80]}")


class FakeSynthesizer(SpeechSynthesizer):
    """Writes a small file per call; scenes in ``failing`` raise a transient error."""

    provider_type = SpeechProviderType.EDGE

    def __init__(self, with_boundaries: bool = True, failing: Optional[Set[int]] = None):
        self.with_boundaries = with_boundaries
        self.failing = set(failing or ())
        self.calls: List[int] = []

    @property
    def emits_word_boundaries(self) -> bool:
        return self.with_boundaries

    async def synthesize(self, content, voice, output_path) -> SpeechResult:
        order = scene_order_from_path(output_path)
        self.calls.append(order)
        if order in self.failing:
            raise TransientProviderError(f"synthesis down for scene {order}", provider="edge")

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"ID3" + content.text.encode("utf-8"))
        boundaries = []
        if self.with_boundaries:
            boundaries = [
                WordBoundary(text="Night", offset_hns=0, duration_hns=4_000_000),
                WordBoundary(text="falls", offset_hns=5_000_000, duration_hns=4_000_000),
            ]
        return SpeechResult(path=output_path, duration_ms=1500 + 100 * order, word_boundaries=boundaries)

    async def list_voices(self):
        return [VoiceInfo(id="fake-voice", name="Fake", gender="female", locale="en-US", provider=self.provider_type)]


class FakeImageGenerator(ImageGenerator):
    provider_type = ImageProviderType.PLACEHOLDER

    def __init__(self):
        self.calls: List[int] = []

    async def generate(self, prompt, output_path, width, height) -> str:
        self.calls.append(scene_order_from_path(output_path))
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (16, 16), (40, 80, 120)).save(output_path, "JPEG")
        return output_path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop process-wide instances so every test builds its own."""
    yield
    from storyforge.services.infrastructure.logs import broadcaster
    from storyforge.services.infrastructure.orchestration import audio_queue
    from storyforge.services.infrastructure.storage import project_repository
    from storyforge.services.llm import clear_provider_cache
    from storyforge.services.pipeline import images, orchestrator
    from storyforge.services.pipeline.audio import clear_synthesizer_cache

    project_repository._store_instance = None
    broadcaster._broadcaster_instance = None
    audio_queue._audio_queue_instance = None
    orchestrator._orchestrator_instance = None
    images._generator_cache.clear()
    clear_provider_cache()
    clear_synthesizer_cache()


@pytest.fixture
def store(tmp_path):
    return ProjectStore(tmp_path / "project_data")


@pytest.fixture
def activity(store):
    return ActivityLog(store, LogBroadcaster())


@pytest.fixture
def make_project(store):
    """Create and persist a project; keyword arguments override defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Project:
        counter["n"] += 1
        fields = dict(
            id=f"project-{counter['n']}",
            slug=f"lighthouse_{counter['n']}",
            mode=CreationMode.TOPIC,
            topic="Lighthouse",
            genre="drama",
            language="en",
            voice="en-US-GuyNeural",
            orientation=Orientation.PORTRAIT,
            scene_count=3,
        )
        fields.update(overrides)
        return store.create(Project(**fields))

    return _make


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def image_generator():
    return FakeImageGenerator()


@pytest.fixture
def failing_synthesizer():
    """Speech provider that is down for scene 2 until ``failing`` is cleared."""
    return FakeSynthesizer(failing={2})
