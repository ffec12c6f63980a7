"""
Render and naming constants.

These values are part of the output format: every scene clip is encoded with
the same frame rate, keyframe interval and canvas so clips can be joined with
a stream copy.
"""

VIDEO_FPS = 24
FADE_DURATION = 0.5  # seconds, entrance and exit
KEYFRAME_INTERVAL = VIDEO_FPS * 2

AUDIO_SAMPLE_RATE = 44100
AUDIO_CHANNELS = 2
AUDIO_BITRATE = "192k"

# Canvas every clip is normalized to before any zoom/pan math
RENDER_CANVAS = {
    "PORTRAIT": (1080, 1920),
    "LANDSCAPE": (1920, 1080),
}

# Size requested from the image provider (downscaled at render time)
PROVIDER_IMAGE_SIZE = {
    "PORTRAIT": (2160, 3840),
    "LANDSCAPE": (3840, 2160),
}

# Word boundaries are reported in 100ns ticks
HNS_PER_MS = 10_000

DEFAULT_TOPIC = "Untitled Story"
TOPIC_MAX_LENGTH = 50
SLUG_MAX_LENGTH = 50
DEFAULT_SLUG = "story"
MAX_SCENE_COUNT = 60
