"""Helpers for decoding JSON objects returned by the classification model."""

from __future__ import annotations

import json
import re

_CODE_FENCE_RE = re.compile(r"^```(?:json)?|```$", flags=re.MULTILINE)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")

_QUOTE_REPLACEMENTS = {
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
}


def _sanitize_json_text(text: str) -> str:
    for bad, good in _QUOTE_REPLACEMENTS.items():
        text = text.replace(bad, good)
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def _try_load(text: str) -> object | None:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _load_object(candidate: str) -> object | None:
    obj = _try_load(candidate)
    if obj is None:
        # Drop trailing prose after the last closing brace that still parses.
        for match in reversed(list(re.finditer(r"}", candidate))):
            obj = _try_load(candidate[: match.end()])
            if obj is not None:
                break
    return obj


def extract_json_object(s: object) -> dict | None:
    """Return the first JSON object embedded in ``s`` or ``None``.

    Well-formed JSON is decoded untouched. Only when that fails are
    typographic quotes and dangling commas repaired before a second attempt.
    """

    if not isinstance(s, str):
        return None

    stripped = _CODE_FENCE_RE.sub("", s.strip())
    start = stripped.find("{")
    if start == -1:
        return None
    candidate = stripped[start:].strip()

    obj = _load_object(candidate)
    if obj is None:
        obj = _load_object(_sanitize_json_text(candidate))

    if not isinstance(obj, dict):
        return None
    return obj


def short_preview_of(value: object, *, max_len: int = 120) -> str:
    """Return a single-line preview suitable for log and error messages."""

    if isinstance(value, str):
        text = re.sub(r"\s+", " ", value.strip())
    else:
        text = str(value or "").strip()
    return text[:max_len]
