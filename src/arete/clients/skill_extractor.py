"""Technical-skill extraction backed by the text-generation service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from arete.clients.llm_client import LLMClient
from arete.errors import InputValidationError, UpstreamServiceError
from arete.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)

SKILL_CATEGORIES = (
    "programmingLanguages",
    "frameworksAndLibraries",
    "toolsAndPlatforms",
    "databases",
    "otherTechnologies",
)

SYSTEM_PROMPT = """\
You extract technical skills from free text written by a job seeker.

Return ONLY a JSON object with exactly these keys, each an array of strings:
{
  "programmingLanguages": [],
  "frameworksAndLibraries": [],
  "toolsAndPlatforms": [],
  "databases": [],
  "otherTechnologies": []
}

Rules:
- Include technologies that are mentioned explicitly or clearly implied by the context.
- Use the canonical capitalization of each name (e.g. "JavaScript", "PostgreSQL").
- Use an empty array for a category with no skills."""


@dataclass
class SkillExtractionResult:
    """Outcome of one extraction call.

    ``status`` is "partial" when the service answered but its output could
    not be read as the expected object; ``raw_response`` then keeps the text.
    """

    status: Literal["ok", "partial"]
    skills: list[str] = field(default_factory=list)
    categories: dict[str, list[str]] = field(default_factory=dict)
    raw_response: str | None = None


class SkillExtractor:
    def __init__(self, llm: LLMClient, model: str | None = None):
        self.llm = llm
        self.model = model

    async def extract(self, text: str) -> SkillExtractionResult:
        """Extract categorized technical skills from ``text``."""
        if not text or not text.strip():
            raise InputValidationError("Text content is required for skill extraction.")

        prompt = f'''Extract all technical skills, programming languages, frameworks, tools and technologies from this text:

"""
{text}
"""

Respond with the JSON object only.'''

        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
            )
        except Exception as exc:
            raise UpstreamServiceError(f"Skill extraction service failed: {exc}") from exc

        try:
            data = extract_json_object(response.text)
        except ValueError:
            logger.warning("Skill extraction returned unparseable output")
            return SkillExtractionResult(status="partial", raw_response=response.text)

        categories: dict[str, list[str]] = {}
        skills: list[str] = []
        for key in SKILL_CATEGORIES:
            values = data.get(key) or []
            if not isinstance(values, list):
                continue
            categories[key] = [str(v).strip() for v in values if str(v).strip()]
            for skill in categories[key]:
                if skill not in skills:
                    skills.append(skill)

        logger.debug("Skill extraction found %d skills", len(skills))
        return SkillExtractionResult(status="ok", skills=skills, categories=categories)
