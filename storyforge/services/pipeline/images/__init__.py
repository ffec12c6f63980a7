"""Still-image providers behind one ImageGenerator interface."""

from typing import Dict, Optional

from ....models.entities import ImageProviderType
from .base import ImageGenerator
from .placeholder import PlaceholderImageGenerator, render_placeholder
from .pollinations import PollinationsImageGenerator

_GENERATORS = {
    ImageProviderType.POLLINATIONS: PollinationsImageGenerator,
    ImageProviderType.PLACEHOLDER: PlaceholderImageGenerator,
}

_generator_cache: Dict[ImageProviderType, ImageGenerator] = {}


def get_image_generator(provider_type: Optional[ImageProviderType] = None) -> ImageGenerator:
    if provider_type is None:
        from ....config import IMAGE_PROVIDER
        provider_type = ImageProviderType(IMAGE_PROVIDER)
    if provider_type not in _generator_cache:
        _generator_cache[provider_type] = _GENERATORS[provider_type]()
    return _generator_cache[provider_type]


__all__ = [
    "ImageGenerator",
    "PlaceholderImageGenerator",
    "PollinationsImageGenerator",
    "get_image_generator",
    "render_placeholder",
]
