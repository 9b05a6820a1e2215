"""Tests for ChangeProposalBuilder and apply_proposal."""

from __future__ import annotations

import pytest

from arete.errors import ProposalGenerationError
from arete.models.proposal import ChangeProposal
from arete.pipeline.change_proposal import ChangeProposalBuilder, apply_proposal
from arete.pipeline.update_strategies import SummaryUpdateStrategy, UpdateStrategyRegistry
from arete.utils.paths import get_value
from conftest import make_gap


class TestChangeProposalBuilder:
    async def test_builds_experience_proposal(self, sample_document):
        gap = make_gap(category="experience", title="No large-scale systems work")
        proposal = await ChangeProposalBuilder().build(
            gap, "At Globex I designed the order routing system for peak traffic.", sample_document
        )

        assert proposal.path == "experience[1].achievements"
        assert proposal.old_value == []
        assert proposal.new_value == ["Developed at Globex I designed the order routing system for peak traffic."]
        assert proposal.description == "Update based on gap: No large-scale systems work"

    async def test_old_value_reflects_document(self, sample_document):
        gap = make_gap(category="technical_skills")
        proposal = await ChangeProposalBuilder().build(gap, "Docker", sample_document)
        assert proposal.path == "skills.technical"
        assert proposal.old_value == ["Python", "SQL"]
        assert proposal.new_value == ["Python", "SQL", "Docker"]

    async def test_document_not_mutated(self, sample_document):
        before = sample_document["skills"]["technical"]
        await ChangeProposalBuilder().build(make_gap(category="technical_skills"), "Docker", sample_document)
        assert sample_document["skills"]["technical"] is before
        assert before == ["Python", "SQL"]

    async def test_strategy_failure_is_typed(self, sample_document):
        class ExplodingSummary(SummaryUpdateStrategy):
            async def format_value(self, gap, response, document, path):
                raise RuntimeError("formatter crashed")

        registry = UpdateStrategyRegistry()
        registry._strategies = [ExplodingSummary()]
        builder = ChangeProposalBuilder(registry)

        with pytest.raises(ProposalGenerationError, match="formatter crashed"):
            await builder.build(make_gap(category="summary"), "Anything at all", sample_document)


class TestApplyProposal:
    def test_sets_scalar(self, sample_document):
        proposal = ChangeProposal(path="profile.careerSummary", new_value="New summary.")
        updated = apply_proposal(sample_document, proposal)
        assert get_value(updated, "profile.careerSummary") == "New summary."
        assert sample_document["profile"]["careerSummary"] != "New summary."

    def test_list_merge_keeps_order_without_duplicates(self, sample_document):
        proposal = ChangeProposal(
            path="skills.technical",
            old_value=["Python"],
            new_value=["Docker", "Python", "Docker"],
        )
        updated = apply_proposal(sample_document, proposal)
        assert updated["skills"]["technical"] == ["Python", "SQL", "Docker"]

    def test_list_into_missing_field(self):
        proposal = ChangeProposal(path="experience[0].achievements", new_value=["A.", "A.", "B."])
        updated = apply_proposal({}, proposal)
        assert updated == {"experience": [{"achievements": ["A.", "B."]}]}

    def test_accepting_twice_is_idempotent(self, sample_document):
        proposal = ChangeProposal(path="skills.soft", new_value=["Mentoring", "Ownership"])
        once = apply_proposal(sample_document, proposal)
        twice = apply_proposal(once, proposal)
        assert once == twice
