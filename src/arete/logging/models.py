"""Usage logging data models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UsageLog(BaseModel):
    """Single usage log entry for an LLM-backed operation."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)
    mode: str  # "gap_analysis" | "gap_walk" | "interview"
    elapsed_seconds: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    gap_count: int | None = None
    overall_match: int | None = None
    success: bool = True
    error_kind: str | None = None  # validation | timeout | upstream | parse
    error_message: str | None = None
