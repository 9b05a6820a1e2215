"""Resume Interviewer - builds a resume through a step-by-step conversation.

Each turn sends the current interview step, the resume collected so far and
the transcript to the model. Data blocks in the reply are merged into the
document, and a ``stepComplete`` signal moves the interview forward.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from arete.clients.llm_client import LLMClient
from arete.errors import InputValidationError, UpstreamServiceError, UpstreamTimeoutError
from arete.models.proposal import ChangeProposal
from arete.pipeline.change_proposal import apply_proposal
from arete.pipeline.interview_data import (
    INTERVIEW_STEPS,
    InterviewReply,
    merge_interview_data,
    parse_interview_reply,
)

logger = logging.getLogger(__name__)

OPENING_QUESTION = (
    "Hello! I'm Arete, your expert career counselor. I'm here to guide you in building "
    "an exceptional resume. Let's start with your basic information. What is your full name?"
)

SYSTEM_PROMPT = """\
You are "Arete", an expert career counselor and resume writer. You run a friendly,
professional interview that gathers what is needed for an ATS-friendly resume.

Follow this flow strictly, one section at a time:
1. profile: full name, email, phone, LinkedIn and a short career summary.
2. experience: most recent job first. Dig for quantifiable achievements.
3. education: institution, degree, field of study, dates.
4. skills: key technical and soft skills.
5. review: summarize what was collected and ask whether anything should change.

Ask one question at a time and keep replies concise. When the resume data already
holds information, acknowledge it ("I see from your resume that...") and ask about
what is missing or could be stronger.

When the user gives you resume information, embed it at the end of your reply as
<arete-data>{...}</arete-data> using the resume JSON shape, for example:
<arete-data>{"experience": [{"company": "Acme Corp", "position": "Engineer", "startDate": "2018"}]}</arete-data>

When a section is complete, add "stepComplete": "<section>" to the data block.

To suggest an edit to existing data, send a block holding only a "changeProposal"
object with "path" (e.g. "experience[0].achievements"), "oldValue", "newValue"
and "description"."""


class ResumeInterviewer:
    """Holds one interview: the current step, the transcript and the document."""

    def __init__(
        self,
        llm: LLMClient,
        document: dict[str, Any] | None = None,
        model: str | None = None,
        *,
        timeout: float = 88.0,
    ):
        self.llm = llm
        self.model = model
        self.timeout = timeout
        self.document: dict[str, Any] = document or {}
        self.step = INTERVIEW_STEPS[0]
        self.transcript: list[tuple[str, str]] = [("assistant", OPENING_QUESTION)]

    @property
    def finished(self) -> bool:
        return self.step == "done"

    async def reply(self, message: str) -> InterviewReply:
        """Send the user's message and fold the assistant's reply into the interview.

        The transcript only grows when the call succeeds, so a failed turn can
        simply be retried.
        """
        if not message or not message.strip():
            raise InputValidationError("Please type a reply.")
        message = message.strip()

        prompt = self._build_prompt(message)
        try:
            response = await asyncio.wait_for(
                self.llm.generate(prompt=prompt, system=SYSTEM_PROMPT, model=self.model, temperature=0.7),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError("The interviewer took too long to answer. Please retry.") from exc
        except Exception as exc:
            raise UpstreamServiceError(f"The interview service failed: {exc}") from exc

        reply = parse_interview_reply(response.text)
        self.transcript.append(("user", message))
        self.transcript.append(("assistant", response.text))
        self.document = merge_interview_data(self.document, reply.data)
        if reply.step_complete:
            self._advance_past(reply.step_complete)
        return reply

    def accept(self, proposal: ChangeProposal) -> dict[str, Any]:
        self.document = apply_proposal(self.document, proposal)
        return self.document

    def _advance_past(self, completed: str) -> None:
        # never move backwards on a late signal for an earlier section
        target = min(INTERVIEW_STEPS.index(completed) + 1, len(INTERVIEW_STEPS) - 1)
        if target > INTERVIEW_STEPS.index(self.step):
            logger.info("Interview step %s complete, moving to %s", completed, INTERVIEW_STEPS[target])
            self.step = INTERVIEW_STEPS[target]

    def _build_prompt(self, message: str) -> str:
        lines = [f"{role.upper()}: {text}" for role, text in self.transcript]
        lines.append(f"USER: {message}")
        return "\n\n".join(
            [
                f'CONTEXT: You are currently in the "{self.step}" phase of the interview. '
                "Focus your questions on this topic.",
                "Resume data so far:",
                json.dumps(self.document, indent=2, ensure_ascii=False),
                "Conversation:",
                "\n".join(lines),
                "Reply as Arete.",
            ]
        )
