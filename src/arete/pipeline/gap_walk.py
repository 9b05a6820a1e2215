"""Gap walk: step through analysis gaps, collect answers, accept or reject edits.

The walk state is an immutable ``WalkState``. Each transition is a pure
function that takes a state and returns the next one, raising
``InvalidTransitionError`` when the action is not allowed. ``GapWalkController``
binds those transitions to the live resume document and the proposal builder.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Literal

from arete.errors import AreteError, InputValidationError, InvalidTransitionError
from arete.models.gap import GapAnalysisResult, ResumeGap
from arete.models.proposal import ChangeProposal
from arete.pipeline.change_proposal import ChangeProposalBuilder, apply_proposal

logger = logging.getLogger(__name__)

# Total improvement available when every gap is addressed at weight 1.
MAX_IMPROVEMENT_POINTS = 30

ResponseType = Literal["relevant", "similar", "none"]


class WalkPhase(str, Enum):
    IDLE = "idle"
    PRESENTING_GAP = "presenting_gap"
    AWAITING_RESPONSE = "awaiting_response"
    PROPOSAL_PENDING = "proposal_pending"
    COMPLETE = "complete"


@dataclass(frozen=True)
class WalkState:
    analysis: GapAnalysisResult | None = None
    phase: WalkPhase = WalkPhase.IDLE
    gap_index: int = 0
    addressed_ids: frozenset[str] = frozenset()
    skipped_ids: frozenset[str] = frozenset()
    pending_proposal: ChangeProposal | None = None
    match_percentage: int = 0
    error: str | None = None

    @property
    def gaps(self) -> list[ResumeGap]:
        return self.analysis.gaps if self.analysis else []

    @property
    def current_gap(self) -> ResumeGap | None:
        if self.phase in (WalkPhase.IDLE, WalkPhase.COMPLETE):
            return None
        if 0 <= self.gap_index < len(self.gaps):
            return self.gaps[self.gap_index]
        return None

    @property
    def is_first(self) -> bool:
        return self.gap_index == 0

    @property
    def is_last(self) -> bool:
        return self.gap_index >= len(self.gaps) - 1


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_match_percentage(analysis: GapAnalysisResult, addressed_ids: frozenset[str] | set[str]) -> int:
    """Base match plus (30 / gap count) * (4 - priority) per addressed gap, capped at 100."""
    base = analysis.summary.overall_match
    total = len(analysis.gaps)
    if total == 0:
        return min(100, base)
    improvement = sum(
        (MAX_IMPROVEMENT_POINTS / total) * (4 - gap.priority)
        for gap in analysis.gaps
        if gap.id in addressed_ids
    )
    return min(100, max(base, round_half_up(base + improvement)))


def _require(state: WalkState, *phases: WalkPhase, action: str) -> None:
    if state.phase not in phases:
        raise InvalidTransitionError(f"Cannot {action} while the walk is {state.phase.value}.")


def _present(state: WalkState, index: int) -> WalkState:
    return replace(
        state,
        phase=WalkPhase.PRESENTING_GAP,
        gap_index=index,
        pending_proposal=None,
        error=None,
    )


def _advance(state: WalkState) -> WalkState:
    if state.is_last:
        return replace(state, phase=WalkPhase.COMPLETE, pending_proposal=None, error=None)
    return _present(state, state.gap_index + 1)


def start(analysis: GapAnalysisResult) -> WalkState:
    state = WalkState(analysis=analysis, match_percentage=compute_match_percentage(analysis, frozenset()))
    if not analysis.gaps:
        return replace(state, phase=WalkPhase.COMPLETE)
    return _present(state, 0)


def begin_response(state: WalkState) -> WalkState:
    _require(state, WalkPhase.PRESENTING_GAP, WalkPhase.AWAITING_RESPONSE, action="submit a response")
    return replace(state, phase=WalkPhase.AWAITING_RESPONSE, error=None)


def propose(state: WalkState, proposal: ChangeProposal) -> WalkState:
    _require(state, WalkPhase.AWAITING_RESPONSE, action="attach a proposal")
    return replace(state, phase=WalkPhase.PROPOSAL_PENDING, pending_proposal=proposal, error=None)


def fail(state: WalkState, message: str) -> WalkState:
    """Record a proposal failure; the walk stays on the same gap."""
    _require(state, WalkPhase.AWAITING_RESPONSE, action="record a failure")
    return replace(state, error=message)


def _address(state: WalkState, gap_id: str) -> WalkState:
    addressed = state.addressed_ids | {gap_id}
    return replace(
        state,
        addressed_ids=addressed,
        match_percentage=compute_match_percentage(state.analysis, addressed),
    )


def accept(state: WalkState) -> WalkState:
    _require(state, WalkPhase.PROPOSAL_PENDING, action="accept a proposal")
    return _advance(_address(state, state.current_gap.id))


def reject(state: WalkState) -> WalkState:
    _require(state, WalkPhase.PROPOSAL_PENDING, action="reject a proposal")
    return _advance(replace(state, pending_proposal=None))


def address_without_change(state: WalkState) -> WalkState:
    """The user has nothing to add for this gap; count it as addressed and move on."""
    _require(state, WalkPhase.PRESENTING_GAP, WalkPhase.AWAITING_RESPONSE, action="answer this gap")
    return _advance(_address(state, state.current_gap.id))


def skip(state: WalkState) -> WalkState:
    _require(state, WalkPhase.PRESENTING_GAP, WalkPhase.AWAITING_RESPONSE, action="skip a gap")
    skipped = state.skipped_ids | {state.current_gap.id}
    return _advance(replace(state, skipped_ids=skipped))


def select(state: WalkState, index: int) -> WalkState:
    _require(
        state,
        WalkPhase.PRESENTING_GAP,
        WalkPhase.AWAITING_RESPONSE,
        WalkPhase.PROPOSAL_PENDING,
        action="select a gap",
    )
    if not 0 <= index < len(state.gaps):
        raise InvalidTransitionError(f"Gap {index} does not exist (there are {len(state.gaps)}).")
    return _present(state, index)


def navigate(state: WalkState, direction: Literal["prev", "next"]) -> WalkState:
    if direction not in ("prev", "next"):
        raise InvalidTransitionError(f"Unknown direction {direction!r}.")
    _require(
        state,
        WalkPhase.PRESENTING_GAP,
        WalkPhase.AWAITING_RESPONSE,
        WalkPhase.PROPOSAL_PENDING,
        action="navigate",
    )
    index = state.gap_index
    if direction == "prev" and not state.is_first:
        index -= 1
    elif direction == "next" and not state.is_last:
        index += 1
    return _present(state, index)


def finalize(state: WalkState) -> WalkState:
    if state.phase == WalkPhase.IDLE:
        raise InvalidTransitionError("Cannot finalize before a gap analysis is loaded.")
    return replace(state, phase=WalkPhase.COMPLETE, pending_proposal=None, error=None)


class GapWalkController:
    """Drives one gap walk against the user's live resume document."""

    def __init__(self, document: dict[str, Any], builder: ChangeProposalBuilder | None = None):
        self.document = document
        self.builder = builder or ChangeProposalBuilder()
        self.state = WalkState()
        self._submitting = False

    def start_gap_walk(self, analysis: GapAnalysisResult) -> WalkState:
        self.state = start(analysis)
        logger.info(
            "Gap walk started: %d gaps, base match %d%%",
            len(analysis.gaps),
            analysis.summary.overall_match,
        )
        return self.state

    async def submit_response(self, text: str, response_type: ResponseType = "relevant") -> WalkState:
        """Turn an answer for the current gap into a pending proposal.

        A failing strategy leaves the walk on the same gap with ``error`` set,
        so the user can resubmit.
        """
        if self._submitting:
            raise InvalidTransitionError("A response is already being processed.")
        if response_type == "none":
            self.state = address_without_change(self.state)
            return self.state
        if not isinstance(text, str) or not text.strip():
            raise InputValidationError("Please enter a response before submitting.")

        awaiting = begin_response(self.state)
        self.state = awaiting
        gap = awaiting.current_gap
        self._submitting = True
        try:
            proposal = await self.builder.build(gap, text.strip(), self.document)
        except Exception as exc:
            message = exc.message if isinstance(exc, AreteError) else str(exc) or type(exc).__name__
            logger.warning("Proposal generation failed for gap %s: %s", gap.id, message)
            if self.state is awaiting:
                self.state = fail(awaiting, message)
            return self.state
        finally:
            self._submitting = False

        if self.state is not awaiting:
            logger.info("Discarding proposal for gap %s; the walk moved on", gap.id)
            return self.state
        self.state = propose(awaiting, proposal)
        return self.state

    def accept_proposal(self) -> WalkState:
        next_state = accept(self.state)
        self.document = apply_proposal(self.document, self.state.pending_proposal)
        logger.info("Accepted proposal at %s", self.state.pending_proposal.path)
        self.state = next_state
        return self.state

    def reject_proposal(self) -> WalkState:
        self.state = reject(self.state)
        return self.state

    def skip_current_gap(self) -> WalkState:
        self.state = skip(self.state)
        return self.state

    def navigate(self, direction: Literal["prev", "next"]) -> WalkState:
        self.state = navigate(self.state, direction)
        return self.state

    def select_gap(self, index: int) -> WalkState:
        self.state = select(self.state, index)
        return self.state

    def finalize(self) -> WalkState:
        self.state = finalize(self.state)
        logger.info(
            "Gap walk finalized: %d addressed, %d skipped, match %d%%",
            len(self.state.addressed_ids),
            len(self.state.skipped_ids),
            self.state.match_percentage,
        )
        return self.state
