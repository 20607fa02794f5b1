"""Removal protocol: unmount a managed block and drop it from the table.

State machine::

    idle -> submitted -> done
                      -> busy_retry_offered -> submitted (force=True)
                      -> failed

A busy unmount is never retried on its own. The caller has to confirm the
forced (lazy) retry explicitly through ``retry_with_force``.
"""

import json
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum

from lindy.core.classifier import describe_result
from lindy.core.registry import BlockRegistry
from lindy.core.remediation import busy_hint, manual_remove_command
from lindy.core.tasks import SubmissionGuard
from lindy.helpers.base import PrivilegedHelper
from lindy.models.error import ErrorDetails
from lindy.models.request import RemoveRequest
from lindy.models.result import ErrorCode, OperationResult, OperationStatus

logger = logging.getLogger(__name__)


class RemovalState(str, Enum):
    """Where a removal currently stands."""

    IDLE = "idle"
    SUBMITTED = "submitted"
    DONE = "done"
    BUSY_RETRY_OFFERED = "busy_retry_offered"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class RemovalDone:
    """Block unmounted and removed."""

    request: RemoveRequest
    result: OperationResult


@dataclass(frozen=True, slots=True)
class RemovalBusyRetryOffered:
    """A mount was busy; a forced retry may be confirmed by the caller."""

    request: RemoveRequest
    hint: str
    result: OperationResult


@dataclass(frozen=True, slots=True)
class RemovalFailed:
    """Removal failed.

    Attributes:
        manual_command: Break-glass command, when elevation was unavailable.
    """

    request: RemoveRequest
    details: ErrorDetails
    result: OperationResult
    manual_command: str | None = None


@dataclass(frozen=True, slots=True)
class RemovalRejected:
    """Refused locally; the helper was never called."""

    request: RemoveRequest
    reason: str


RemovalOutcome = RemovalDone | RemovalBusyRetryOffered | RemovalFailed | RemovalRejected


class RemovalProtocol:
    """Removes blocks and handles the busy/force escalation.

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
        self._lock = threading.Lock()
        self._pending_force: RemoveRequest | None = None
        self.state = RemovalState.IDLE

    @property
    def pending_force(self) -> RemoveRequest | None:
        """Request waiting for a confirmed forced retry, if any."""
        with self._lock:
            return self._pending_force

    def remove(
        self,
        target: str | None = None,
        block_id: str | None = None,
        force: bool = False,
    ) -> RemovalOutcome:
        """Remove the block owning ``target`` (preferred) or ``block_id``.

        Raises:
            ValueError: If neither target nor block id is given.
        """
        return self.submit(RemoveRequest(target=target, block_id=block_id, force=force))

    def retry_with_force(self, offer: RemovalBusyRetryOffered) -> RemovalOutcome:
        """Confirmed forced retry after a busy unmount.

        Raises:
            ValueError: If the offer is not the pending one.
        """
        with self._lock:
            pending = self._pending_force
        if pending is None or pending != offer.request:
            msg = "No forced retry is pending for this removal"
            raise ValueError(msg)
        return self.submit(offer.request.with_force())

    def submit(self, request: RemoveRequest) -> RemovalOutcome:
        targets = self._guarded_targets(request)
        if not self._guard.try_acquire(targets):
            self.state = RemovalState.REJECTED
            return RemovalRejected(
                request=request,
                reason="Another operation on this folder is still running",
            )

        self.state = RemovalState.SUBMITTED
        logger.info("Removing %s (force=%s)", request.subject, request.force)
        try:
            result = self._helper.remove(request)
        finally:
            self._guard.release(targets)

        outcome = self._interpret(request, result)
        self._registry.refresh()
        return outcome

    def _guarded_targets(self, request: RemoveRequest) -> list[str]:
        if request.target:
            return [request.target]
        block = self._registry.find_by_id(request.block_id or "")
        if block is not None and block.targets:
            return list(block.targets)
        return [f"block:{request.block_id}"]

    def _interpret(self, request: RemoveRequest, result: OperationResult) -> RemovalOutcome:
        if result.status == OperationStatus.OK:
            self._set_pending(None)
            self.state = RemovalState.DONE
            return RemovalDone(request=request, result=result)

        code = result.error_code if result.status == OperationStatus.ERROR else None

        if code == ErrorCode.SPAWN_PKEXEC_FAILED:
            self.state = RemovalState.FAILED
            block_id = self._resolve_block_id(request)
            manual = manual_remove_command(block_id, self._fstab_path) if block_id else None
            return RemovalFailed(
                request=request,
                details=describe_result(result),
                result=result,
                manual_command=manual,
            )

        if code == ErrorCode.PKEXEC_FAILED:
            if result.mentions_busy() and not request.force:
                self._set_pending(request)
                self.state = RemovalState.BUSY_RETRY_OFFERED
                logger.info("Removal of %s hit a busy mount, offering forced retry", request.subject)
                return RemovalBusyRetryOffered(
                    request=request,
                    hint=busy_hint(request.target or request.subject),
                    result=result,
                )
            self._set_pending(None)
            self.state = RemovalState.FAILED
            return RemovalFailed(request=request, details=describe_result(result), result=result)

        # Anything else is surfaced verbatim
        self.state = RemovalState.FAILED
        details = describe_result(result)
        verbatim = result.raw or json.dumps(result.to_dict(), indent=2)
        return RemovalFailed(request=request, details=replace(details, technical=verbatim), result=result)

    def _resolve_block_id(self, request: RemoveRequest) -> str | None:
        if request.block_id:
            return request.block_id
        block = self._registry.find_by_target(request.target or "")
        return block.id if block is not None else None

    def _set_pending(self, request: RemoveRequest | None) -> None:
        with self._lock:
            self._pending_force = request
