"""Utility to pull a JSON object out of free-form LLM output."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*\s*\n?(.*?)```", re.DOTALL)


def extract_json(text: str) -> dict | list:
    """Extract JSON from an LLM response.

    Tries in order:
    1. Direct json.loads on the full text
    2. The body of the first fenced code block (```json ... ```)
    3. The outermost '{' ... '}' span, which drops surrounding prose
    4. The outermost '[' ... ']' span
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected text from LLM, got {type(text).__name__}")
    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    body = strip_code_fences(text)
    if body != text:
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            pass

    for opener, closer in (("{", "}"), ("[", "]")):
        result = _outermost(body, opener, closer)
        if result is not None:
            return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def extract_json_object(text: str) -> dict:
    """Like extract_json, but the result must be a JSON object."""
    data = extract_json(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def strip_code_fences(text: str) -> str:
    """Return the body of the first Markdown code fence, or the text itself."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    # Unterminated fence (truncated output)
    if text.startswith("```"):
        return text.split("\n", 1)[1].strip() if "\n" in text else ""
    return text


def _outermost(text: str, opener: str, closer: str) -> dict | list | None:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return None
