"""
Video assembler - stream-copy concatenation of scene clips
"""

from pathlib import Path
from typing import Sequence

from ....core import PipelineInvariantError, get_logger
from .ffmpeg import build_concat_cmd, run_ffmpeg, write_concat_list

logger = get_logger(__name__, component="video_assembler")

CONCAT_LIST_NAME = "filelist.txt"


class VideoAssembler:
    def __init__(self, timeout: float = 900.0):
        self.timeout = timeout

    async def concatenate(self, ordered_clip_paths: Sequence[str], output_path: str) -> str:
        """Join clips in the given order into ``output_path``.

        Raises:
            PipelineInvariantError: a clip is missing (names its 1-based scene index)
            RenderError: ffmpeg fails
        """
        if not ordered_clip_paths:
            raise PipelineInvariantError("No scene clips to concatenate")
        for index, clip in enumerate(ordered_clip_paths, start=1):
            if not Path(clip).is_file():
                raise PipelineInvariantError(f"Missing clip for scene {index}: {clip}")

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        list_path = write_concat_list(ordered_clip_paths, output.parent / CONCAT_LIST_NAME)

        try:
            await run_ffmpeg(build_concat_cmd(str(list_path), str(output)), self.timeout, "Concatenate scenes")
        finally:
            list_path.unlink(missing_ok=True)

        logger.info(f"Assembled {len(ordered_clip_paths)} clips into {output.name}")
        return str(output)
