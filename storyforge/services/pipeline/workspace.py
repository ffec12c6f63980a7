"""
Per-project output directory layout

    OUTPUT_DIR/<slug>/
        images/scene_<order>.jpg
        audio/scene_<order>.mp3
        tmp/scene_<order>.mp4
        final/video.mp4
        final/subtitle.srt
"""

import shutil
from pathlib import Path
from typing import Optional

from ...core import ensure_directory


class ProjectWorkspace:
    def __init__(self, root: Path):
        self.root = Path(root)

    @classmethod
    def for_slug(cls, slug: str, output_dir: Optional[Path] = None) -> "ProjectWorkspace":
        if output_dir is None:
            from ...config import OUTPUT_DIR
            output_dir = OUTPUT_DIR
        return cls(Path(output_dir) / slug)

    @property
    def images_dir(self) -> Path:
        return self.root / "images"

    @property
    def audio_dir(self) -> Path:
        return self.root / "audio"

    @property
    def tmp_dir(self) -> Path:
        return self.root / "tmp"

    @property
    def final_dir(self) -> Path:
        return self.root / "final"

    def ensure(self) -> "ProjectWorkspace":
        for directory in (self.images_dir, self.audio_dir, self.tmp_dir, self.final_dir):
            ensure_directory(directory)
        return self

    def image_path(self, order: int) -> str:
        return str(self.images_dir / f"scene_{order}.jpg")

    def audio_path(self, order: int) -> str:
        return str(self.audio_dir / f"scene_{order}.mp3")

    def clip_path(self, order: int) -> str:
        return str(self.tmp_dir / f"scene_{order}.mp4")

    @property
    def video_path(self) -> str:
        return str(self.final_dir / "video.mp4")

    @property
    def subtitle_path(self) -> str:
        return str(self.final_dir / "subtitle.srt")

    def clear_tmp(self) -> None:
        if self.tmp_dir.exists():
            shutil.rmtree(self.tmp_dir)
        ensure_directory(self.tmp_dir)
