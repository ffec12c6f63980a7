"""
File utilities - project slugs and directory helpers
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9_]")
_UNDERSCORES = re.compile(r"_+")

MAX_SLUG_ATTEMPTS = 100


def slugify(topic: str, max_length: int = 50, default: str = "story") -> str:
    """Turn a topic into a filesystem-safe directory name.

    Lowercases, maps whitespace runs to ``_``, strips anything outside
    ``[a-z0-9_]``, collapses repeated underscores and trims them from both
    ends before truncating.

    Args:
        topic: Free-form topic text
        max_length: Maximum slug length
        default: Slug used when nothing survives the cleanup

    Returns:
        The slug
    """
    slug = _WHITESPACE.sub("_", (topic or "").strip().lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _UNDERSCORES.sub("_", slug).strip("_")
    slug = slug[:max_length]
    return slug or default


def unique_slug(
    topic: str,
    exists: Callable[[str], bool],
    now: Optional[datetime] = None,
    max_length: int = 50,
) -> str:
    """Resolve a slug that ``exists`` does not already claim.

    Collisions get a ``_YYYYMMDD`` suffix first, then ``_YYYYMMDD_<n>``.
    After ``MAX_SLUG_ATTEMPTS`` the current timestamp is used instead.
    """
    now = now or datetime.now()
    base = slugify(topic, max_length=max_length)
    slug = base
    date_str = now.strftime("%Y%m%d")
    counter = 1

    while exists(slug):
        if counter == 1:
            slug = f"{base}_{date_str}"
        else:
            slug = f"{base}_{date_str}_{counter}"
        counter += 1

        if counter > MAX_SLUG_ATTEMPTS:
            slug = f"{base}_{int(now.timestamp() * 1000)}"
            break

    return slug


def ensure_directory(dir_path: Path) -> Path:
    """Ensure directory exists, creating if necessary"""
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def file_is_present(path: Optional[str]) -> bool:
    """True when ``path`` names an existing, non-empty regular file."""
    if not path:
        return False
    candidate = Path(path)
    try:
        return candidate.is_file() and candidate.stat().st_size > 0
    except OSError:
        return False
