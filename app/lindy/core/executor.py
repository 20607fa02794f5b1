"""Helper factory and history recording.

Shared by the CLI commands: builds the privileged helper from the config
and records protocol outcomes in the operations history.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lindy.core.config import LindyConfig
from lindy.core.state import StateManager
from lindy.helpers.pkexec import PkexecHelper
from lindy.models.history import HistoryActionType, HistoryEntry, create_history_entry
from lindy.protocols.adopt import AdoptDone, AdoptFailed
from lindy.protocols.apply import ApplyDone, ApplyFailed
from lindy.protocols.automap import AutoMapFailed, AutoMapSucceeded
from lindy.protocols.remove import RemovalBusyRetryOffered, RemovalDone, RemovalFailed
from lindy.utils.formatting import print_warning

if TYPE_CHECKING:
    from lindy.helpers.base import PrivilegedHelper

logger = logging.getLogger(__name__)


def get_helper(config: LindyConfig | None = None) -> PrivilegedHelper:
    """Create the privileged helper for a configuration.

    Args:
        config: Loaded configuration. Defaults are used when None.

    Returns:
        A ready-to-use helper.
    """
    return PkexecHelper(config or LindyConfig())


def history_entry_for(outcome: object, command: str = "") -> HistoryEntry | None:
    """Build the history entry for a protocol outcome.

    Outcomes that changed nothing (rejections, adoption offers) are not
    recorded.

    Args:
        outcome: Any apply, adopt, remove or auto-map outcome.
        command: Command string stored in the entry metadata.

    Returns:
        HistoryEntry, or None if the outcome is not recorded.
    """
    metadata: dict[str, Any] = {"command": command} if command else {}

    if isinstance(outcome, ApplyDone):
        return create_history_entry(
            HistoryActionType.APPLY,
            block_id=outcome.request.id,
            targets=outcome.request.targets,
            metadata=metadata,
        )
    if isinstance(outcome, ApplyFailed):
        metadata.update(code=outcome.result.code, message=outcome.result.message)
        return create_history_entry(
            HistoryActionType.APPLY,
            block_id=outcome.request.id,
            targets=outcome.request.targets,
            success=False,
            metadata=metadata,
        )
    if isinstance(outcome, AdoptDone):
        return create_history_entry(HistoryActionType.ADOPT, block_id=outcome.block_id, metadata=metadata)
    if isinstance(outcome, AdoptFailed):
        metadata.update(code=outcome.result.code, message=outcome.result.message)
        return create_history_entry(
            HistoryActionType.ADOPT,
            block_id=outcome.block_id,
            success=False,
            metadata=metadata,
        )
    if isinstance(outcome, RemovalDone):
        metadata["force"] = outcome.request.force
        return create_history_entry(
            HistoryActionType.REMOVE,
            block_id=outcome.result.block_id or outcome.request.block_id,
            targets=outcome.result.targets or _request_targets(outcome.request.target),
            metadata=metadata,
        )
    if isinstance(outcome, RemovalBusyRetryOffered | RemovalFailed):
        metadata.update(
            force=outcome.request.force,
            code=outcome.result.code,
            busy=isinstance(outcome, RemovalBusyRetryOffered),
        )
        return create_history_entry(
            HistoryActionType.REMOVE,
            block_id=outcome.request.block_id,
            targets=_request_targets(outcome.request.target),
            success=False,
            metadata=metadata,
        )
    if isinstance(outcome, AutoMapSucceeded):
        metadata.update(mount_point=outcome.mount_point, username=outcome.username)
        return create_history_entry(
            HistoryActionType.AUTOMAP,
            targets=[m.target or "" for m in outcome.mappings],
            metadata=metadata,
        )
    if isinstance(outcome, AutoMapFailed):
        metadata["code"] = outcome.code
        return create_history_entry(HistoryActionType.AUTOMAP, success=False, metadata=metadata)
    return None


def record_operation_to_history(outcome: object, command: str = "") -> None:
    """Record a protocol outcome in the history file.

    Errors during history recording are logged but do **not** interrupt
    the calling command's flow.

    Args:
        outcome: Any apply, adopt, remove or auto-map outcome.
        command: Command string stored in the entry metadata.
    """
    entry = history_entry_for(outcome, command)
    if entry is None:
        return
    try:
        StateManager().record_action(entry)
        logger.debug("Recorded %s entry %s to history", entry.action_type.value, entry.id)
    except (OSError, RuntimeError) as e:
        logger.warning("Failed to record operation to history: %s", str(e))
        print_warning(f"Could not record operation to history: {e}")


def _request_targets(target: str | None) -> list[str]:
    return [target] if target else []
