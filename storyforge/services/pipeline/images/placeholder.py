"""
Placeholder image provider

Renders a gradient card with the prompt text locally. Used for offline runs
and when no hosted image provider is wanted.
"""

import asyncio
import hashlib
import textwrap
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ....models.entities import ImageProviderType
from .base import ImageGenerator


def _palette(prompt: str):
    digest = hashlib.sha256(prompt.encode("utf-8")).digest()
    top = np.array(digest[0:3], dtype=np.float32)
    bottom = np.array(digest[3:6], dtype=np.float32) * 0.4
    return top, bottom


def render_placeholder(prompt: str, width: int, height: int) -> Image.Image:
    top, bottom = _palette(prompt)
    ramp = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, None, None]
    gradient = top * (1.0 - ramp) + bottom * ramp
    pixels = np.broadcast_to(gradient, (height, width, 3)).astype(np.uint8)
    image = Image.fromarray(np.ascontiguousarray(pixels))

    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default(size=max(16, width // 30))
    wrapped = textwrap.fill(prompt[:400], width=36)
    draw.multiline_text((width // 12, height // 3), wrapped, fill=(255, 255, 255), font=font, spacing=8)
    return image


class PlaceholderImageGenerator(ImageGenerator):
    provider_type = ImageProviderType.PLACEHOLDER

    async def generate(self, prompt: str, output_path: str, width: int, height: int) -> str:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        image = await asyncio.to_thread(render_placeholder, prompt, width, height)
        await asyncio.to_thread(image.save, output_path, "JPEG", quality=90)
        return output_path
