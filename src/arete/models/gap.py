"""Pydantic models for job-description gap analysis output."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

GapCategory = Literal[
    "technical_skills",
    "soft_skills",
    "experience",
    "education",
    "achievements",
    "summary",
]

GAP_CATEGORIES: tuple[str, ...] = (
    "technical_skills",
    "soft_skills",
    "experience",
    "education",
    "achievements",
    "summary",
)

PRIORITY_LABELS = {1: "High", 2: "Medium", 3: "Low"}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResumeGap(_CamelModel):
    """A single mismatch between the resume and the target job."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    category: GapCategory
    priority: int = Field(ge=1, le=3)  # 1=high, 2=medium, 3=low
    title: str
    description: str = ""
    job_requirement: str = ""
    current_resume_state: str = ""
    suggested_question: str = ""

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS[self.priority]


class PriorityBreakdown(_CamelModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class GapSummary(_CamelModel):
    total_gaps: int = 0
    priority_breakdown: PriorityBreakdown = Field(default_factory=PriorityBreakdown)
    category_breakdown: dict[str, int] = Field(default_factory=dict)
    overall_match: int = Field(default=50, ge=0, le=100)


class GapAnalysisResult(_CamelModel):
    gaps: list[ResumeGap]
    summary: GapSummary

    def to_data(self) -> dict:
        return self.model_dump(by_alias=True)
