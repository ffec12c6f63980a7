"""
Speech synthesis interface

A narration reaches a synthesizer in exactly one of two shapes, decided once
by the prosody stage:

* ``StructuredProsody``: ordered segments with rate/volume/pitch each
* ``PlainText``: the narration as-is
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Union

from ....models.entities import ProsodySegment, SpeechProviderType, WordBoundary


@dataclass(frozen=True)
class StructuredProsody:
    segments: List[ProsodySegment]

    @property
    def text(self) -> str:
        return " ".join(segment.text.strip() for segment in self.segments if segment.text.strip())


@dataclass(frozen=True)
class PlainText:
    text: str


SpeechContent = Union[StructuredProsody, PlainText]


@dataclass
class SpeechResult:
    """Outcome of one synthesis call

    ``word_boundaries`` offsets are relative to the start of the clip.
    Providers that cannot report them leave the list empty.
    """
    path: str
    duration_ms: int
    word_boundaries: List[WordBoundary] = field(default_factory=list)


@dataclass
class VoiceInfo:
    id: str
    name: str
    gender: str
    locale: str
    provider: SpeechProviderType


class SpeechSynthesizer(ABC):
    """Abstract base class for text-to-speech engines"""

    provider_type: SpeechProviderType

    @abstractmethod
    async def synthesize(self, content: SpeechContent, voice: str, output_path: str) -> SpeechResult:
        """Render ``content`` to ``output_path``

        Raises:
            TransientProviderError: retryable failure (network, empty stream)
            FatalProviderError: configuration or authorization failure
        """
        pass

    @abstractmethod
    async def list_voices(self) -> List[VoiceInfo]:
        pass

    @property
    def emits_word_boundaries(self) -> bool:
        return False
