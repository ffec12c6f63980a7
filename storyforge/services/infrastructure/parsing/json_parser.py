"""
JSON extraction from free-form text-generator output.

Models wrap JSON in prose or markdown fences. ``extract_json`` finds the
largest balanced object or array and decodes it. Unparseable output is
treated as a transient provider failure, since asking again usually works.
"""

import json
import re
from typing import Any, List, Optional

from ....core import TransientProviderError

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_largest_balanced_json(text: str, expect_array: bool = False) -> Optional[str]:
    """Return the largest balanced ``{...}`` or ``[...]`` substring of ``text``.

    String literals and escapes are respected, so braces inside strings do
    not count. With ``expect_array`` only arrays are considered.
    """
    if not text:
        return None

    best: Optional[str] = None
    stack: List[str] = []
    start: Optional[int] = None
    in_string = False
    escaped = False
    pairs = {"}": "{", "]": "["}

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = stack != []
            continue

        if ch in "{[":
            if not stack:
                start = i
            stack.append(ch)
        elif ch in "}]":
            if not stack:
                continue
            if stack[-1] != pairs[ch]:
                stack.clear()
                start = None
                continue
            stack.pop()
            if not stack and start is not None:
                candidate = text[start:i + 1]
                if not (expect_array and candidate[0] != "["):
                    if best is None or len(candidate) > len(best):
                        best = candidate
                start = None

    return best


def extract_json(text: str, expect_array: bool = False, provider: Optional[str] = None) -> Any:
    """Decode the JSON payload embedded in ``text``.

    Raises:
        TransientProviderError: no decodable JSON of the expected shape
    """
    candidates = [m.group(1) for m in _FENCE.finditer(text or "")] + [text or ""]
    for candidate in candidates:
        snippet = extract_largest_balanced_json(candidate, expect_array=expect_array)
        if snippet is None:
            continue
        try:
            value = json.loads(snippet)
        except json.JSONDecodeError:
            continue
        if expect_array and not isinstance(value, list):
            continue
        if not expect_array and not isinstance(value, dict):
            continue
        return value

    shape = "array" if expect_array else "object"
    preview = (text or "")[:200]
    raise TransientProviderError(
        f"Text generator returned no JSON {shape}: {preview!r}",
        provider=provider,
    )
