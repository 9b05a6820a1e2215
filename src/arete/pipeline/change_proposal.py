"""Builds change proposals from gap answers and applies accepted ones."""

from __future__ import annotations

import logging
from typing import Any

from arete.errors import ProposalGenerationError
from arete.models.gap import ResumeGap
from arete.models.proposal import ChangeProposal
from arete.pipeline.update_strategies import UpdateStrategyRegistry
from arete.utils.paths import get_value, merge_unique, set_value

logger = logging.getLogger(__name__)


class ChangeProposalBuilder:
    def __init__(self, registry: UpdateStrategyRegistry | None = None):
        self.registry = registry or UpdateStrategyRegistry()

    async def build(self, gap: ResumeGap, response: str, document: dict[str, Any]) -> ChangeProposal:
        """Classify ``response`` and compute the edit it implies.

        Raises ProposalGenerationError when the selected strategy fails while
        formatting the new value.
        """
        strategy = self.registry.get_strategy(gap, response, document)
        path = strategy.get_path(gap, response, document)
        old_value = strategy.get_current_value(path, document)
        logger.info("Gap %s -> strategy=%s path=%s", gap.id, strategy.name, path)

        try:
            new_value = await strategy.format_value(gap, response, document, path)
        except Exception as exc:
            logger.exception("Strategy %s failed to format value for %s", strategy.name, path)
            raise ProposalGenerationError(f"Could not prepare an update for '{gap.title}': {exc}") from exc

        return ChangeProposal(
            path=path,
            old_value=old_value,
            new_value=new_value,
            description=f"Update based on gap: {gap.title}",
        )


def apply_proposal(document: dict[str, Any], proposal: ChangeProposal) -> dict[str, Any]:
    """Return a new document with the proposal merged in.

    List values are merged append-with-dedup against whatever is currently
    at the path, so accepting never drops or duplicates existing entries.
    """
    value = proposal.new_value
    current = get_value(document, proposal.path)
    if isinstance(current, list) and isinstance(value, list):
        value = merge_unique(current, value)
    elif isinstance(value, list):
        value = merge_unique([], value)
    return set_value(document, proposal.path, value)
