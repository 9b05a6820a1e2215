"""Structured data embedded in interview replies.

During the building interview the assistant appends
``<arete-data>{...}</arete-data>`` blocks to its messages. A block either
carries partial resume data to merge, a ``changeProposal`` for review, or a
``stepComplete`` signal naming the interview section that just finished.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from arete.models.proposal import ChangeProposal

logger = logging.getLogger(__name__)

InterviewStep = Literal["profile", "experience", "education", "skills", "review", "done"]

INTERVIEW_STEPS: tuple[str, ...] = ("profile", "experience", "education", "skills", "review", "done")

_DATA_BLOCK_RE = re.compile(r"<arete-data>(.*?)</arete-data>", re.DOTALL)
_RESUME_KEYS = ("profile", "experience", "education", "skills")


@dataclass
class InterviewReply:
    display_text: str
    data: dict[str, Any] | None = None
    change_proposal: ChangeProposal | None = None
    step_complete: InterviewStep | None = None


def strip_data_blocks(content: str) -> str:
    return _DATA_BLOCK_RE.sub("", content).strip()


def parse_interview_reply(content: str) -> InterviewReply:
    """Split an assistant message into display text and its first data block."""
    reply = InterviewReply(display_text=strip_data_blocks(content))
    match = _DATA_BLOCK_RE.search(content)
    if match is None:
        return reply

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed <arete-data> block")
        return reply
    if not isinstance(data, dict):
        logger.warning("Ignoring non-object <arete-data> block")
        return reply

    step = data.get("stepComplete")
    if step in INTERVIEW_STEPS:
        reply.step_complete = step

    if isinstance(data.get("changeProposal"), dict):
        try:
            reply.change_proposal = ChangeProposal.model_validate(data["changeProposal"])
        except ValidationError:
            logger.warning("Ignoring invalid changeProposal in <arete-data> block")
        return reply

    resume_data = {k: data[k] for k in _RESUME_KEYS if k in data}
    reply.data = resume_data or None
    return reply


def merge_interview_data(document: dict[str, Any], data: dict[str, Any] | None) -> dict[str, Any]:
    """Deep-merge partial resume data into a copy of ``document``.

    Nested dicts merge key by key and lists are concatenated; the input
    document is left untouched.
    """
    if not data:
        return document
    return _deep_merge(document, data)


def _deep_merge(base: Any, incoming: Any) -> Any:
    if isinstance(base, dict) and isinstance(incoming, dict):
        merged = dict(base)
        for key, value in incoming.items():
            merged[key] = _deep_merge(base[key], value) if key in base else value
        return merged
    if isinstance(base, list) and isinstance(incoming, list):
        return [*base, *incoming]
    return incoming
