"""Concurrency coordination: global audio FIFO, bounded worker pool, stuck sweeper."""

from .audio_queue import AudioQueue, get_audio_queue
from .worker_pool import bounded_map
from .sweeper import StuckProjectSweeper

__all__ = ["AudioQueue", "get_audio_queue", "bounded_map", "StuckProjectSweeper"]
