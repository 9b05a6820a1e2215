"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from arete.clients.llm_client import LLMClient, LLMResponse
from arete.models.gap import GapAnalysisResult, ResumeGap
from arete.pipeline.gap_analyst import summarize


def make_gap(
    gap_id: str = "gap-1",
    category: str = "technical_skills",
    priority: int = 1,
    title: str = "Missing Docker experience",
) -> ResumeGap:
    return ResumeGap(
        id=gap_id,
        category=category,
        priority=priority,
        title=title,
        description=f"{title} is not shown on the resume.",
        job_requirement="Required by the posting",
        current_resume_state="Not mentioned",
        suggested_question="Can you describe your experience with this?",
    )


def make_analysis(gaps: list[ResumeGap], overall_match: int = 70) -> GapAnalysisResult:
    return GapAnalysisResult(gaps=gaps, summary=summarize(gaps, overall_match))


@pytest.fixture
def sample_document() -> dict:
    return {
        "profile": {
            "fullName": "Jane Doe",
            "email": "jane@example.com",
            "careerSummary": "Backend engineer with five years of experience.",
        },
        "experience": [
            {
                "company": "Acme Corp",
                "position": "Backend Engineer",
                "startDate": "2021-03",
                "achievements": ["Built the billing API."],
            },
            {
                "company": "Globex",
                "position": "Software Engineer",
                "startDate": "2018-06",
                "endDate": "2021-02",
                "achievements": [],
            },
        ],
        "education": [
            {
                "institution": "State University",
                "degree": "BSc",
                "fieldOfStudy": "Computer Science",
            }
        ],
        "skills": {"technical": ["Python", "SQL"], "soft": ["Mentoring"]},
    }


@pytest.fixture
def sample_gaps() -> list[ResumeGap]:
    return [
        make_gap("gap-1", "technical_skills", 1, "Missing Docker experience"),
        make_gap("gap-2", "experience", 1, "No large-scale systems work"),
        make_gap("gap-3", "soft_skills", 2, "Leadership not highlighted"),
        make_gap("gap-4", "summary", 3, "Summary not aligned to the role"),
    ]


@pytest.fixture
def sample_analysis(sample_gaps) -> GapAnalysisResult:
    return make_analysis(sample_gaps, overall_match=70)


@pytest.fixture
def mock_llm_client() -> AsyncMock:
    client = AsyncMock(spec=LLMClient)
    client.generate.return_value = LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    client.get_token_summary.return_value = {
        "input": 100,
        "output": 50,
        "calls": [("claude-sonnet-4-5-20250929", 100, 50)],
    }
    return client
