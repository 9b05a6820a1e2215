"""Data models for the resume gap-resolution engine."""

from arete.models.gap import (
    GAP_CATEGORIES,
    GapAnalysisResult,
    GapCategory,
    GapSummary,
    PriorityBreakdown,
    ResumeGap,
)
from arete.models.proposal import ChangeProposal
from arete.models.resume import (
    Education,
    Profile,
    ResumeDocument,
    Skills,
    WorkExperience,
    normalize_document,
)

__all__ = [
    "GAP_CATEGORIES",
    "ChangeProposal",
    "Education",
    "GapAnalysisResult",
    "GapCategory",
    "GapSummary",
    "PriorityBreakdown",
    "Profile",
    "ResumeDocument",
    "ResumeGap",
    "Skills",
    "WorkExperience",
    "normalize_document",
]
