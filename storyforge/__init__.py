"""StoryForge - narrated Ken Burns short videos from a topic, a prompt or narrations."""

__version__ = "1.0.0"
