"""Gap Analyst - compares a structured resume against a job description."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections import Counter
from typing import Any

from pydantic import ValidationError

from arete.clients.llm_client import LLMClient
from arete.errors import (
    AreteError,
    InputValidationError,
    ResponseParseError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)
from arete.logging.cost_calculator import calculate_cost
from arete.logging.models import UsageLog
from arete.logging.usage_store import UsageStore
from arete.models.gap import GapAnalysisResult, GapSummary, PriorityBreakdown, ResumeGap
from arete.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)

MAX_JOB_DESCRIPTION_CHARS = 10_000
ANALYSIS_TIMEOUT_SECONDS = 88.0
LEGACY_OVERALL_MATCH = 50
LEGACY_TITLE_CHARS = 80

SYSTEM_PROMPT = """\
You are an expert career coach and resume strategist. You compare a candidate's
resume (JSON) with a target job description and identify the gaps that matter most.

Return ONLY a JSON object with this structure:
{
  "gaps": [
    {
      "id": "unique-id",
      "category": "technical_skills | soft_skills | experience | education | achievements | summary",
      "priority": 1,
      "title": "Short gap title",
      "description": "Why this is a gap",
      "jobRequirement": "What the job asks for",
      "currentResumeState": "What the resume currently shows",
      "suggestedQuestion": "One targeted question to ask the candidate"
    }
  ],
  "summary": {
    "totalGaps": 1,
    "priorityBreakdown": {"high": 1, "medium": 0, "low": 0},
    "categoryBreakdown": {"technical_skills": 1},
    "overallMatch": 70
  }
}

Guidelines:
- Generate between 3 and 7 gaps, focusing on the most impactful improvements.
- priority is 1 (high), 2 (medium) or 3 (low), by importance to the job.
- Cover missing technical skills, under-emphasised soft skills, missing experience,
  achievements that lack metrics, and summary alignment.
- overallMatch is the percentage match between resume and job (0-100).
- Every gap has a unique id and a specific suggestedQuestion."""


class GapAnalyst:
    """Produces a prioritized GapAnalysisResult for a resume and a job description."""

    def __init__(
        self,
        llm: LLMClient,
        model: str | None = None,
        *,
        timeout: float = ANALYSIS_TIMEOUT_SECONDS,
        max_job_description_chars: int = MAX_JOB_DESCRIPTION_CHARS,
        usage_store: UsageStore | None = None,
        session_id: str = "anonymous",
    ):
        self.llm = llm
        self.model = model
        self.timeout = timeout
        self.max_job_description_chars = max_job_description_chars
        self.usage_store = usage_store
        self.session_id = session_id

    async def analyze(self, resume: dict[str, Any], job_description: str) -> GapAnalysisResult:
        """Run the analysis.

        Raises:
            InputValidationError: empty resume, or missing/oversized job description.
            UpstreamTimeoutError: the generation call exceeded ``timeout``.
            UpstreamServiceError: the generation call failed.
            ResponseParseError: the reply held no usable gap list.
        """
        self._validate(resume, job_description)

        start = time.monotonic()
        result: GapAnalysisResult | None = None
        error: AreteError | None = None
        try:
            text = await self._generate(self._build_prompt(resume, job_description))
            result = self.parse_response(text)
            return result
        except AreteError as exc:
            error = exc
            raise
        finally:
            self._record_usage(time.monotonic() - start, result, error)

    def _validate(self, resume: dict[str, Any], job_description: str) -> None:
        if not isinstance(resume, dict) or not resume:
            raise InputValidationError("Resume data is required before tailoring.")
        if not isinstance(job_description, str) or not job_description.strip():
            raise InputValidationError("Please paste the job description to tailor against.")
        if len(job_description) > self.max_job_description_chars:
            raise InputValidationError(
                f"Job description is too long ({len(job_description):,} characters). "
                f"Please shorten it to {self.max_job_description_chars:,} characters or fewer."
            )

    def _build_prompt(self, resume: dict[str, Any], job_description: str) -> str:
        return "\n\n".join(
            [
                "Resume Data:",
                json.dumps(resume, indent=2, ensure_ascii=False),
                "Job Description:",
                job_description,
                "Respond with the JSON object only.",
            ]
        )

    async def _generate(self, prompt: str) -> str:
        # wait_for cancels the pending request on expiry and always clears its timer.
        try:
            response = await asyncio.wait_for(
                self.llm.generate(prompt=prompt, system=SYSTEM_PROMPT, model=self.model),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Gap analysis timed out after %.0fs", self.timeout)
            raise UpstreamTimeoutError(
                "The analysis took too long. Try shortening the job description and retry."
            ) from exc
        except Exception as exc:
            raise UpstreamServiceError(f"The analysis service failed: {exc}") from exc
        return response.text

    @classmethod
    def parse_response(cls, text: str) -> GapAnalysisResult:
        """Turn raw model output into a sorted, validated GapAnalysisResult."""
        try:
            data = extract_json_object(text)
        except ValueError as exc:
            raise ResponseParseError("The analysis response was not valid JSON.", raw_response=text) from exc

        gaps_data = data.get("gaps")
        if isinstance(gaps_data, list):
            gaps = cls._parse_gaps(gaps_data)
            overall = cls._overall_match(data.get("summary"))
        elif isinstance(data.get("suggestions"), list):
            logger.info("Analysis returned legacy suggestions shape")
            gaps = cls._gaps_from_suggestions(data["suggestions"])
            overall = LEGACY_OVERALL_MATCH
        else:
            raise ResponseParseError("The analysis response did not contain a gap list.", raw_response=text)

        gaps = sorted(gaps, key=lambda g: g.priority)
        return GapAnalysisResult(gaps=gaps, summary=summarize(gaps, overall))

    @staticmethod
    def _parse_gaps(items: list[Any]) -> list[ResumeGap]:
        gaps = []
        seen: set[str] = set()
        for item in items:
            if not isinstance(item, dict):
                logger.warning("Dropping non-object gap entry: %r", item)
                continue
            payload = dict(item)
            gap_id = _normalize_gap_id(payload.get("id"))
            if gap_id in seen:
                logger.warning("Duplicate gap id %r, assigning a new one", gap_id)
                gap_id = None
            payload["id"] = gap_id or _new_gap_id()
            try:
                gap = ResumeGap.model_validate(payload)
            except ValidationError as exc:
                logger.warning("Dropping invalid gap %s: %s", payload["id"], exc.errors()[:1])
                continue
            seen.add(gap.id)
            gaps.append(gap)
        return gaps

    @staticmethod
    def _gaps_from_suggestions(suggestions: list[Any]) -> list[ResumeGap]:
        gaps = []
        for text in suggestions:
            if not isinstance(text, str) or not text.strip():
                continue
            text = text.strip()
            title = text if len(text) <= LEGACY_TITLE_CHARS else text[: LEGACY_TITLE_CHARS - 3] + "..."
            gaps.append(
                ResumeGap(
                    id=_new_gap_id(),
                    category="experience",
                    priority=2,
                    title=title,
                    description=text,
                    job_requirement="See job description",
                    current_resume_state="Not specified",
                    suggested_question=f"Can you tell me more about your experience related to this: {text}",
                )
            )
        return gaps

    @staticmethod
    def _overall_match(summary: Any) -> int:
        value = summary.get("overallMatch") if isinstance(summary, dict) else None
        try:
            return max(0, min(100, int(round(float(value)))))
        except (TypeError, ValueError):
            return LEGACY_OVERALL_MATCH

    def _record_usage(
        self,
        elapsed: float,
        result: GapAnalysisResult | None,
        error: AreteError | None,
    ) -> None:
        if self.usage_store is None:
            return
        tokens = self.llm.get_token_summary()
        log = UsageLog(
            session_id=self.session_id,
            mode="gap_analysis",
            elapsed_seconds=round(elapsed, 3),
            total_input_tokens=tokens["input"],
            total_output_tokens=tokens["output"],
            estimated_cost_usd=calculate_cost(tokens["calls"]),
            gap_count=len(result.gaps) if result else None,
            overall_match=result.summary.overall_match if result else None,
            success=result is not None,
            error_kind=error.kind if error else None,
            error_message=error.message if error else None,
        )
        try:
            self.usage_store.save_log(log)
        except Exception:
            logger.warning("Failed to save usage log", exc_info=True)


def _new_gap_id() -> str:
    return f"gap-{uuid.uuid4().hex[:12]}"


def _normalize_gap_id(value: Any) -> str | None:
    """Model ids arrive as strings or bare numbers; anything else counts as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def summarize(gaps: list[ResumeGap], overall_match: int) -> GapSummary:
    """Recompute summary counts from the gaps actually kept."""
    priorities = Counter(g.priority for g in gaps)
    categories = Counter(g.category for g in gaps)
    return GapSummary(
        total_gaps=len(gaps),
        priority_breakdown=PriorityBreakdown(
            high=priorities.get(1, 0),
            medium=priorities.get(2, 0),
            low=priorities.get(3, 0),
        ),
        category_breakdown=dict(categories),
        overall_match=overall_match,
    )
