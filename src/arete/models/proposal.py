"""Pydantic model for a pending, path-addressed resume edit."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ChangeProposal(BaseModel):
    """Previewable edit: the value at ``path`` would become ``new_value``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    path: str  # e.g. "experience[0].achievements"
    old_value: Any = None
    new_value: Any = None
    description: str = ""
