"""Apply protocol: turn pending mappings into one managed block.

State machine::

    idle -> submitted -> done
                      -> adoption_offered
                      -> failed
    idle -> rejected            (nothing to apply, or target in flight)

The protocol never edits the block registry; it asks for a refresh once
the helper has answered.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from lindy.core.classifier import describe_result
from lindy.core.fstab import bind_line, device_line, render_block
from lindy.core.identifiers import generate_block_id, validate_partition_id
from lindy.core.registry import BlockRegistry
from lindy.core.remediation import manual_apply_command
from lindy.core.tasks import SubmissionGuard
from lindy.helpers.base import PrivilegedHelper
from lindy.models.error import ErrorDetails
from lindy.models.mapping import Mapping
from lindy.models.request import ApplyRequest
from lindy.models.result import AdoptionCandidate, ErrorCode, OperationResult, OperationStatus

logger = logging.getLogger(__name__)


class ApplyState(str, Enum):
    """Where an apply run currently stands."""

    IDLE = "idle"
    SUBMITTED = "submitted"
    DONE = "done"
    ADOPTION_OFFERED = "adoption_offered"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class ApplyDone:
    """The block was appended and mounted."""

    request: ApplyRequest
    result: OperationResult


@dataclass(frozen=True, slots=True)
class ApplyAdoptionOffered:
    """A target already lives in a marked block; adopting it is offered."""

    request: ApplyRequest
    candidate: AdoptionCandidate
    result: OperationResult


@dataclass(frozen=True, slots=True)
class ApplyFailed:
    """The helper reported an error. No retry happens automatically.

    Attributes:
        manual_command: Command the user can run by hand, when elevation
            itself was the problem.
    """

    request: ApplyRequest
    details: ErrorDetails
    result: OperationResult
    manual_command: str | None = None


@dataclass(frozen=True, slots=True)
class ApplyRejected:
    """Refused locally; the helper was never called."""

    reason: str


ApplyOutcome = ApplyDone | ApplyAdoptionOffered | ApplyFailed | ApplyRejected


def build_apply_request(
    mappings: Sequence[Mapping],
    partition_uuid: str | None,
    base_mount: str | None,
    skip_partition_mount: bool,
    block_id: str | None = None,
) -> ApplyRequest | None:
    """Assemble the block for a set of mappings.

    A device line is added once, and only when the partition mount is not
    skipped and the identifier validates. Incomplete mappings are ignored.

    Args:
        mappings: Session mappings.
        partition_uuid: Partition identifier, may be blank.
        base_mount: Mount point for the device line.
        skip_partition_mount: Leave the device line out.
        block_id: Fixed id, generated when omitted.

    Returns:
        ApplyRequest, or None if no mapping is complete.
    """
    complete = [m for m in mappings if m.is_complete]
    if not complete:
        return None

    block_id = block_id or generate_block_id()
    uuid = (partition_uuid or "").strip()
    base = (base_mount or "").strip()
    add_device = not skip_partition_mount and bool(uuid) and bool(base)
    if add_device and not validate_partition_id(uuid):
        logger.warning("Partition id %r does not validate, leaving out the device line", uuid)
        add_device = False

    lines: list[str] = []
    if add_device:
        lines.append(device_line(uuid, base))

    targets: list[str] = []
    for mapping in complete:
        src = (mapping.src or "").strip()
        target = (mapping.target or "").strip()
        lines.append(bind_line(src, target))
        targets.append(target)

    return ApplyRequest(
        block=render_block(block_id, lines),
        id=block_id,
        targets=tuple(targets),
        partition_uuid=uuid if add_device else None,
        base_mount=base if add_device else None,
        add_partition_line=add_device,
    )


class ApplyProtocol:
    """Submits new blocks and interprets the helper's answer.

    Args:
        helper: Privileged helper.
        registry: Block registry refreshed after each answer.
        guard: Shared in-flight target tracker.
        fstab_path: Mount table named in manual commands.
    """

    def __init__(
        self,
        helper: PrivilegedHelper,
        registry: BlockRegistry,
        guard: SubmissionGuard | None = None,
        fstab_path: str = "/etc/fstab",
    ) -> None:
        self._helper = helper
        self._registry = registry
        self._guard = guard or SubmissionGuard()
        self._fstab_path = fstab_path
        self.state = ApplyState.IDLE

    def apply(
        self,
        mappings: Sequence[Mapping],
        partition_uuid: str | None,
        base_mount: str | None,
        skip_partition_mount: bool,
    ) -> ApplyOutcome:
        """Build one block from the mappings and submit it."""
        request = build_apply_request(mappings, partition_uuid, base_mount, skip_partition_mount)
        if request is None:
            self.state = ApplyState.REJECTED
            return ApplyRejected(reason="No complete mapping to apply")
        return self.submit(request)

    def submit(self, request: ApplyRequest) -> ApplyOutcome:
        """Send a prepared request as one atomic helper call."""
        if not self._guard.try_acquire(request.targets):
            self.state = ApplyState.REJECTED
            return ApplyRejected(reason="Another operation on these folders is still running")

        self.state = ApplyState.SUBMITTED
        logger.info("Applying block %s for %s", request.id, ", ".join(request.targets))
        try:
            result = self._helper.apply_block(request)
        finally:
            self._guard.release(request.targets)

        outcome = self._interpret(request, result)
        self._registry.refresh()
        return outcome

    def _interpret(self, request: ApplyRequest, result: OperationResult) -> ApplyOutcome:
        if result.status == OperationStatus.OK:
            self.state = ApplyState.DONE
            return ApplyDone(request=request, result=result)

        candidate = result.adoption_candidate
        if candidate is not None:
            self.state = ApplyState.ADOPTION_OFFERED
            logger.info("Block %s can be adopted instead of duplicated", candidate.id)
            return ApplyAdoptionOffered(request=request, candidate=candidate, result=result)

        self.state = ApplyState.FAILED
        manual = None
        if result.error_code in (ErrorCode.SPAWN_PKEXEC_FAILED, ErrorCode.PKEXEC_FAILED):
            manual = manual_apply_command(request.block, self._fstab_path)
        logger.warning("Apply of block %s failed: %s %s", request.id, result.code, result.message)
        return ApplyFailed(
            request=request,
            details=describe_result(result),
            result=result,
            manual_command=manual,
        )
