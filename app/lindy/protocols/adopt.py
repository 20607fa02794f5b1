"""Adoption protocol: take ownership of an existing marked block.

Adoption only writes the ownership record. Mount state is untouched, and
a failed adoption is reported as is; the block is never re-created.
"""

import logging
from dataclasses import dataclass

from lindy.core.classifier import describe_result
from lindy.core.registry import BlockRegistry
from lindy.helpers.base import PrivilegedHelper
from lindy.models.error import ErrorDetails
from lindy.models.result import AdoptionCandidate, OperationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AdoptDone:
    """The block is now managed."""

    block_id: str
    result: OperationResult


@dataclass(frozen=True, slots=True)
class AdoptFailed:
    """The ownership record could not be written."""

    block_id: str
    details: ErrorDetails
    result: OperationResult


AdoptOutcome = AdoptDone | AdoptFailed


class AdoptionProtocol:
    """Adopts blocks by id and refreshes the registry afterwards."""

    def __init__(self, helper: PrivilegedHelper, registry: BlockRegistry) -> None:
        self._helper = helper
        self._registry = registry

    def adopt(self, candidate: AdoptionCandidate | str) -> AdoptOutcome:
        """Adopt a candidate block (or a block given by id).

        Args:
            candidate: Candidate from an adoptable apply, or a bare block id.

        Returns:
            AdoptDone or AdoptFailed.
        """
        block_id = candidate if isinstance(candidate, str) else candidate.id
        logger.info("Adopting block %s", block_id)
        result = self._helper.adopt_block(block_id)

        if result.ok:
            outcome: AdoptOutcome = AdoptDone(block_id=block_id, result=result)
        else:
            logger.warning("Adoption of %s failed: %s %s", block_id, result.code, result.message)
            outcome = AdoptFailed(block_id=block_id, details=describe_result(result), result=result)

        self._registry.refresh()
        return outcome
