"""Resume Structurer - turns extracted resume text into a ResumeDocument."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from arete.clients.llm_client import LLMClient
from arete.errors import (
    InputValidationError,
    ResponseParseError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)
from arete.models.resume import ResumeDocument
from arete.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an expert resume parser. Extract structured data from the raw text of a resume.

Return ONLY a JSON object with this structure:
{
  "profile": {
    "fullName": "...", "email": "...", "phone": "...", "linkedin": "...",
    "github": "...", "portfolio": "...", "careerSummary": "..."
  },
  "experience": [
    {
      "company": "...", "position": "...", "startDate": "...",
      "endDate": "... or null for current positions", "location": "...",
      "achievements": ["..."]
    }
  ],
  "education": [
    {
      "institution": "...", "degree": "...", "fieldOfStudy": "...",
      "startDate": "...", "endDate": "...", "gpa": null
    }
  ],
  "skills": {"technical": ["..."], "soft": ["..."]}
}

Include all information present in the resume. Use null or an empty array for
missing fields. Dates use "YYYY-MM" or "YYYY"."""


class ResumeStructurer:
    def __init__(self, llm: LLMClient, model: str | None = None, *, timeout: float = 88.0):
        self.llm = llm
        self.model = model
        self.timeout = timeout

    async def structure(self, resume_text: str) -> dict[str, Any]:
        """Parse plain resume text into the canonical document dict."""
        if not resume_text or not resume_text.strip():
            raise InputValidationError("The uploaded resume contained no readable text.")

        prompt = f"""Parse this resume:

---
{resume_text}
---

Respond with the JSON object only."""

        try:
            response = await asyncio.wait_for(
                self.llm.generate(prompt=prompt, system=SYSTEM_PROMPT, model=self.model),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError("Parsing the resume took too long. Please retry.") from exc
        except Exception as exc:
            raise UpstreamServiceError(f"The resume parsing service failed: {exc}") from exc

        try:
            data = extract_json_object(response.text)
            document = ResumeDocument.from_data(data)
        except (ValueError, ValidationError) as exc:
            raise ResponseParseError(
                "Could not read the structured resume from the parser response.",
                raw_response=response.text,
            ) from exc

        result = document.to_data()
        logger.info(
            "Structured resume: %d experience, %d education entries",
            len(result.get("experience", [])),
            len(result.get("education", [])),
        )
        return result
