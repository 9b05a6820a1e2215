"""Tests for ResumeInterviewer (guided resume-building conversation)."""

from __future__ import annotations

import asyncio

import pytest

from arete.clients.llm_client import LLMResponse
from arete.errors import InputValidationError, UpstreamServiceError, UpstreamTimeoutError
from arete.models.proposal import ChangeProposal
from arete.pipeline.interviewer import OPENING_QUESTION, ResumeInterviewer


def _reply(text: str) -> LLMResponse:
    return LLMResponse(text=text, input_tokens=300, output_tokens=80)


class TestReply:
    async def test_merges_data_and_advances_step(self, mock_llm_client):
        mock_llm_client.generate.return_value = _reply(
            "Nice to meet you, Jane! Tell me about your most recent job."
            '<arete-data>{"profile": {"fullName": "Jane Doe", "email": "jane@example.com"}, '
            '"stepComplete": "profile"}</arete-data>'
        )
        interviewer = ResumeInterviewer(mock_llm_client)

        reply = await interviewer.reply("Jane Doe, jane@example.com")

        assert reply.display_text == "Nice to meet you, Jane! Tell me about your most recent job."
        assert interviewer.document == {"profile": {"fullName": "Jane Doe", "email": "jane@example.com"}}
        assert interviewer.step == "experience"
        assert interviewer.transcript[0] == ("assistant", OPENING_QUESTION)
        assert interviewer.transcript[1] == ("user", "Jane Doe, jane@example.com")

    async def test_prompt_carries_step_document_and_transcript(self, mock_llm_client, sample_document):
        mock_llm_client.generate.return_value = _reply("What did you achieve at Acme?")
        interviewer = ResumeInterviewer(mock_llm_client, sample_document, model="claude-sonnet-4-5-20250929")

        await interviewer.reply("I was a backend engineer")

        kwargs = mock_llm_client.generate.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"
        assert 'currently in the "profile" phase' in kwargs["prompt"]
        assert "Acme Corp" in kwargs["prompt"]
        assert "USER: I was a backend engineer" in kwargs["prompt"]
        assert "<arete-data>" in kwargs["system"]

    async def test_late_signal_does_not_move_backwards(self, mock_llm_client):
        interviewer = ResumeInterviewer(mock_llm_client)
        interviewer.step = "skills"
        mock_llm_client.generate.return_value = _reply('Noted.<arete-data>{"stepComplete": "profile"}</arete-data>')

        await interviewer.reply("one more thing about my email")

        assert interviewer.step == "skills"

    async def test_review_complete_finishes(self, mock_llm_client):
        interviewer = ResumeInterviewer(mock_llm_client)
        interviewer.step = "review"
        mock_llm_client.generate.return_value = _reply('All set!<arete-data>{"stepComplete": "review"}</arete-data>')

        await interviewer.reply("Looks good")

        assert interviewer.finished

    async def test_change_proposal_not_applied_until_accepted(self, mock_llm_client, sample_document):
        mock_llm_client.generate.return_value = _reply(
            "Want me to add Docker?"
            '<arete-data>{"changeProposal": {"path": "skills.technical", "oldValue": ["Python", "SQL"], '
            '"newValue": ["Docker"], "description": "Add Docker"}}</arete-data>'
        )
        interviewer = ResumeInterviewer(mock_llm_client, sample_document)

        reply = await interviewer.reply("I use Docker daily")
        assert interviewer.document["skills"]["technical"] == ["Python", "SQL"]

        interviewer.accept(reply.change_proposal)
        assert interviewer.document["skills"]["technical"] == ["Python", "SQL", "Docker"]

    async def test_empty_message_rejected(self, mock_llm_client):
        with pytest.raises(InputValidationError):
            await ResumeInterviewer(mock_llm_client).reply("   ")
        mock_llm_client.generate.assert_not_called()

    async def test_failed_call_leaves_transcript_untouched(self, mock_llm_client):
        mock_llm_client.generate.side_effect = RuntimeError("overloaded")
        interviewer = ResumeInterviewer(mock_llm_client)

        with pytest.raises(UpstreamServiceError):
            await interviewer.reply("Jane Doe")

        assert interviewer.transcript == [("assistant", OPENING_QUESTION)]
        assert interviewer.document == {}

    async def test_timeout(self, mock_llm_client):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        mock_llm_client.generate.side_effect = slow
        interviewer = ResumeInterviewer(mock_llm_client, timeout=0.01)

        with pytest.raises(UpstreamTimeoutError):
            await interviewer.reply("Jane Doe")


class TestAccept:
    def test_accept_into_empty_document(self, mock_llm_client):
        interviewer = ResumeInterviewer(mock_llm_client)
        interviewer.accept(ChangeProposal(path="profile.careerSummary", new_value="Backend engineer"))
        assert interviewer.document == {"profile": {"careerSummary": "Backend engineer"}}
