"""Pydantic models for the canonical (partial) resume document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class _ResumeModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Profile(_ResumeModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    github: str | None = None
    portfolio: str | None = None
    career_summary: str | None = None


class WorkExperience(_ResumeModel):
    id: str | None = None
    company: str | None = None
    position: str | None = None
    start_date: str | None = None
    end_date: str | None = None  # None for current positions
    location: str | None = None
    achievements: list[str] = []

    @field_validator("achievements", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Education(_ResumeModel):
    id: str | None = None
    institution: str | None = None
    degree: str | None = None
    field_of_study: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    gpa: float | None = None


class Skills(_ResumeModel):
    technical: list[str] = []
    soft: list[str] = []

    @field_validator("technical", "soft", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("technical", "soft")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for item in value:
            if item not in seen:
                seen.append(item)
        return seen


class ResumeDocument(_ResumeModel):
    """A resume that is filled in incrementally; every field may be absent."""

    profile: Profile | None = None
    experience: list[WorkExperience] | None = None
    education: list[Education] | None = None
    skills: Skills | None = None

    @classmethod
    def from_data(cls, data: dict[str, Any] | None) -> ResumeDocument:
        return cls.model_validate(data or {})

    def to_data(self) -> dict[str, Any]:
        """Serialize to the camelCase dict form that paths address."""
        return self.model_dump(by_alias=True, exclude_none=True)


def normalize_document(data: dict[str, Any] | None) -> dict[str, Any]:
    """Validate raw resume data and return it in canonical dict form."""
    return ResumeDocument.from_data(data).to_data()
