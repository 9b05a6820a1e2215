"""Section update strategies: decide where a gap answer goes and how it is written.

The registry checks strategies in a fixed order (most specific first) and
dispatches to the first one whose ``can_handle`` accepts the answer. The
fallback strategy is always last and accepts everything, so selection is
total.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from arete.clients.skill_extractor import SkillExtractor
from arete.models.gap import ResumeGap
from arete.pipeline.formatting import (
    extract_soft_skills,
    extract_technical_skills,
    find_company_index,
    format_experience_bullets,
    format_summary_paragraph,
)
from arete.utils.paths import get_value, merge_unique

logger = logging.getLogger(__name__)

SUMMARY_PATH = "profile.careerSummary"
TECHNICAL_SKILLS_PATH = "skills.technical"
SOFT_SKILLS_PATH = "skills.soft"


def _has_entries(document: dict, field: str) -> bool:
    entries = document.get(field) if isinstance(document, dict) else None
    return isinstance(entries, list) and len(entries) > 0


class SectionUpdateStrategy(ABC):
    """Classifies a free-text answer to a resume path and formats the value."""

    name: str = "base"

    @abstractmethod
    def can_handle(self, gap: ResumeGap, response: str, document: dict) -> bool: ...

    @abstractmethod
    def get_path(self, gap: ResumeGap, response: str, document: dict) -> str: ...

    @abstractmethod
    async def format_value(self, gap: ResumeGap, response: str, document: dict, path: str) -> Any: ...

    def get_current_value(self, path: str, document: dict) -> Any:
        return get_value(document, path)

    def _merge_bullets(self, response: str, document: dict, path: str) -> list[str]:
        current = self.get_current_value(path, document)
        return merge_unique(
            current if isinstance(current, list) else [],
            format_experience_bullets(response),
        )


class ExperienceUpdateStrategy(SectionUpdateStrategy):
    """Experience gaps, or any answer that names a company already on the resume."""

    name = "experience"

    def can_handle(self, gap, response, document):
        if gap.category == "experience":
            return True
        return find_company_index(response, document.get("experience")) is not None

    def get_path(self, gap, response, document):
        index = find_company_index(response, document.get("experience"))
        if index is not None:
            return f"experience[{index}].achievements"
        if gap.category == "experience" and _has_entries(document, "experience"):
            return "experience[0].achievements"
        return SUMMARY_PATH

    async def format_value(self, gap, response, document, path):
        if path.endswith(".achievements"):
            return self._merge_bullets(response, document, path)
        return response


class SkillsUpdateStrategy(SectionUpdateStrategy):
    """Technical and soft skill gaps."""

    name = "skills"

    def __init__(self, extractor: SkillExtractor | None = None):
        self.extractor = extractor

    def can_handle(self, gap, response, document):
        return gap.category in ("technical_skills", "soft_skills")

    def get_path(self, gap, response, document):
        if gap.category == "technical_skills":
            return TECHNICAL_SKILLS_PATH
        return SOFT_SKILLS_PATH

    async def format_value(self, gap, response, document, path):
        current = self.get_current_value(path, document)
        current = current if isinstance(current, list) else []

        if path == TECHNICAL_SKILLS_PATH:
            skills = await self._extract_with_service(response)
            if not skills:
                logger.warning("No skills from extraction service, using local patterns")
                skills = extract_technical_skills(response)
        else:
            if not response or not response.strip():
                logger.warning("Empty answer for soft skills; keeping current skills")
                return list(current)
            skills = extract_soft_skills(response)

        merged = merge_unique(current, skills)
        logger.debug("Skills at %s: current=%s new=%s merged=%s", path, current, skills, merged)
        return merged

    async def _extract_with_service(self, response: str) -> list[str]:
        """Call the extraction service; any failure resolves to an empty list."""
        if self.extractor is None or not response or not response.strip():
            return []
        try:
            result = await self.extractor.extract(response)
        except Exception:
            logger.warning("Skill extraction service failed", exc_info=True)
            return []
        if result.status != "ok" or not isinstance(result.skills, list):
            logger.warning("Skill extraction returned status=%s", result.status)
            return []
        return [s for s in result.skills if isinstance(s, str) and s.strip()]


class SummaryUpdateStrategy(SectionUpdateStrategy):
    name = "summary"

    def can_handle(self, gap, response, document):
        return gap.category == "summary"

    def get_path(self, gap, response, document):
        return SUMMARY_PATH

    async def format_value(self, gap, response, document, path):
        current = self.get_current_value(path, document)
        return format_summary_paragraph(response, current if isinstance(current, str) else None)


class EducationUpdateStrategy(SectionUpdateStrategy):
    name = "education"

    def can_handle(self, gap, response, document):
        return gap.category == "education"

    def get_path(self, gap, response, document):
        if _has_entries(document, "education"):
            return "education[0].fieldOfStudy"
        return SUMMARY_PATH

    async def format_value(self, gap, response, document, path):
        return response


class AchievementsUpdateStrategy(SectionUpdateStrategy):
    name = "achievements"

    def can_handle(self, gap, response, document):
        return gap.category == "achievements"

    def get_path(self, gap, response, document):
        if _has_entries(document, "experience"):
            return "experience[0].achievements"
        return SUMMARY_PATH

    async def format_value(self, gap, response, document, path):
        if path.endswith(".achievements"):
            return self._merge_bullets(response, document, path)
        return response


class FallbackUpdateStrategy(SectionUpdateStrategy):
    """Appends the raw answer to the career summary."""

    name = "fallback"

    def can_handle(self, gap, response, document):
        return True

    def get_path(self, gap, response, document):
        return SUMMARY_PATH

    async def format_value(self, gap, response, document, path):
        current = self.get_current_value(path, document)
        if current:
            return f"{current}\n\n{response}"
        return response


class UpdateStrategyRegistry:
    """Ordered strategy list with a guaranteed catch-all at the end."""

    def __init__(self, extractor: SkillExtractor | None = None):
        self.fallback: SectionUpdateStrategy = FallbackUpdateStrategy()
        self._strategies: list[SectionUpdateStrategy] = [
            ExperienceUpdateStrategy(),
            SkillsUpdateStrategy(extractor),
            SummaryUpdateStrategy(),
            EducationUpdateStrategy(),
            AchievementsUpdateStrategy(),
        ]

    @property
    def strategies(self) -> list[SectionUpdateStrategy]:
        return [*self._strategies, self.fallback]

    def register(self, strategy: SectionUpdateStrategy) -> None:
        """Add a strategy after the built-in ones but before the fallback."""
        self._strategies.append(strategy)

    def get_strategy(self, gap: ResumeGap, response: str, document: dict | None) -> SectionUpdateStrategy:
        document = document if isinstance(document, dict) else {}
        response = response if isinstance(response, str) else ""
        for strategy in self._strategies:
            try:
                if strategy.can_handle(gap, response, document):
                    return strategy
            except Exception:
                logger.warning("Strategy %s failed in can_handle", strategy.name, exc_info=True)
        return self.fallback
