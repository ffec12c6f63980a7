"""Parsing helpers for text-generator output."""

from .json_parser import extract_json, extract_largest_balanced_json

__all__ = ["extract_json", "extract_largest_balanced_json"]
