"""
Application configuration and settings
"""

import os
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from ..core.runtime import env_float, env_int, env_list, parse_bool_env
from .constants import (
    VIDEO_FPS,
    FADE_DURATION,
    KEYFRAME_INTERVAL,
    RENDER_CANVAS,
    PROVIDER_IMAGE_SIZE,
    HNS_PER_MS,
    DEFAULT_TOPIC,
    TOPIC_MAX_LENGTH,
    SLUG_MAX_LENGTH,
    DEFAULT_SLUG,
    MAX_SCENE_COUNT,
)

# Base directories
PACKAGE_DIR = Path(__file__).parent.parent
BASE_DIR = Path(os.getenv("STORYFORGE_HOME", str(PACKAGE_DIR.parent)))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(BASE_DIR / "outputs")))
PROJECT_DATA_DIR = Path(os.getenv("PROJECT_DATA_DIR", str(BASE_DIR / "project_data")))

# Ensure directories exist
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
PROJECT_DATA_DIR.mkdir(parents=True, exist_ok=True)

# API settings
API_TITLE = "StoryForge API"
API_DESCRIPTION = "Generate narrated Ken Burns short videos from a topic, a prompt or your own narrations"
API_VERSION = "1.0.0"
API_KEY = os.getenv("API_KEY", "").strip() or None

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if origin.strip()
]

# Provider selection (closed sets, see models.entities)
TEXT_PROVIDER = os.getenv("TEXT_PROVIDER", "").lower() or None  # "gemini" or "ollama"
SPEECH_PROVIDER = os.getenv("SPEECH_PROVIDER", "edge").lower()  # "edge", "gemini" or "pollinations"
IMAGE_PROVIDER = os.getenv("IMAGE_PROVIDER", "pollinations").lower()  # "pollinations" or "placeholder"

# Comma-separated keys are used round-robin; a rejected key fails over to the next
GEMINI_API_KEYS = env_list(os.getenv("GEMINI_API_KEYS"), os.getenv("GEMINI_API_KEY"))
GEMINI_API_KEY = GEMINI_API_KEYS[0] if GEMINI_API_KEYS else None
GEMINI_TTS_API_KEYS = env_list(os.getenv("GEMINI_TTS_API_KEYS")) or GEMINI_API_KEYS
GEMINI_TEXT_MODEL = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
GEMINI_TTS_MODEL = os.getenv("GEMINI_TTS_MODEL", "gemini-2.5-flash-preview-tts")
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma3:12b")
POLLINATIONS_BASE_URL = os.getenv("POLLINATIONS_BASE_URL", "https://image.pollinations.ai")
POLLINATIONS_MODEL = os.getenv("POLLINATIONS_MODEL", "flux")
POLLINATIONS_TTS_BASE_URL = os.getenv("POLLINATIONS_TTS_BASE_URL", "https://text.pollinations.ai")
POLLINATIONS_TTS_MODEL = os.getenv("POLLINATIONS_TTS_MODEL", "openai-audio")
POLLINATIONS_TTS_TIMEOUT_SECONDS = env_float("POLLINATIONS_TTS_TIMEOUT_SECONDS", 60.0, 1.0)

# Pipeline tuning
IMAGE_CONCURRENCY = env_int("IMAGE_CONCURRENCY", 4, 1)
IMAGE_MAX_ATTEMPTS = env_int("IMAGE_MAX_ATTEMPTS", 5, 1)
IMAGE_TIMEOUT_SECONDS = env_float("IMAGE_TIMEOUT_SECONDS", 60.0, 1.0)
IMAGE_PROMPT_BATCH_SIZE = env_int("IMAGE_PROMPT_BATCH_SIZE", 5, 1)
IMAGE_SCENE_ATTEMPTS = env_int("IMAGE_SCENE_ATTEMPTS", 3, 1)
IMAGE_RETRY_BASE_DELAY = env_float("IMAGE_RETRY_BASE_DELAY", 2.0)
STAGE_MAX_ATTEMPTS = env_int("STAGE_MAX_ATTEMPTS", 3, 1)
STAGE_RETRY_BASE_DELAY = env_float("STAGE_RETRY_BASE_DELAY", 2.0)
TTS_MAX_ATTEMPTS = env_int("TTS_MAX_ATTEMPTS", 3, 1)
TTS_RETRY_BASE_DELAY = env_float("TTS_RETRY_BASE_DELAY", 2.0)
RENDER_TIMEOUT_SECONDS = env_float("RENDER_TIMEOUT_SECONDS", 900.0, 10.0)
KEEP_RENDER_TEMP = parse_bool_env(os.getenv("KEEP_RENDER_TEMP"), default=False)

# Stuck-project sweeper
SWEEPER_ENABLED = parse_bool_env(os.getenv("SWEEPER_ENABLED"), default=True)
STUCK_TIMEOUT_MINUTES = env_int("STUCK_TIMEOUT_MINUTES", 30, 1)
SWEEPER_INTERVAL_MINUTES = env_int("SWEEPER_INTERVAL_MINUTES", 5, 1)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
JSON_LOGS = parse_bool_env(os.getenv("JSON_LOGS"), default=False)
