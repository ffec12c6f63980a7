"""
Base class for text-generation providers

The pipeline sees one capability: ``generate(prompt) -> text``. Providers map
their own failures onto TransientProviderError / FatalProviderError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...models.entities import TextProviderType


@dataclass
class GenerationConfig:
    """Options for one text-generation request"""
    model: Optional[str] = None
    temperature: float = 0.8
    max_tokens: Optional[int] = None
    json_output: bool = False
    extra_options: Dict[str, Any] = field(default_factory=dict)


class TextGenerator(ABC):
    """Abstract base class for text-generation providers"""

    provider_type: TextProviderType

    @abstractmethod
    async def generate(self, prompt: str, config: Optional[GenerationConfig] = None) -> str:
        """Generate text for ``prompt``

        Raises:
            TransientProviderError: network, timeout or server-side failure
            FatalProviderError: authentication, quota or configuration failure
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @property
    def name(self) -> str:
        return self.provider_type.value
