"""Privileged operation result models.

Every privileged helper call resolves to one OperationResult. Helper
payloads arrive as JSON objects (or their text); anything that cannot be
read as one becomes an error result with the raw text preserved.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class OperationStatus(str, Enum):
    """Top-level outcome of a privileged operation."""

    OK = "ok"
    ADOPTABLE = "adoptable"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Closed taxonomy of operation codes.

    Attributes:
        SPAWN_PKEXEC_FAILED: The elevation mechanism could not be started.
        PKEXEC_FAILED: Elevation started but the privileged command failed.
        ADOPTABLE_EXISTING_BLOCK: A requested target already lives in a marked block.
        NO_WINDOWS_PARTITIONS: No NTFS/exFAT partition was found.
        NO_USERS_DETECTED: The Windows partition has no user profiles.
        NO_MAPPINGS_FOUND: No standard folder pair exists on both sides.
        MOUNT_FAILED: Mounting the Windows partition failed.
        NOT_FOUND: No block matches the requested id or target.
        TARGET_CONFLICT: A target is used by an unmarked mount-table line.
        INVALID_REQUEST: The request was rejected before any change.
        UNRECOGNIZED_RESPONSE: The helper answered with something unreadable.
    """

    SPAWN_PKEXEC_FAILED = "spawn_pkexec_failed"
    PKEXEC_FAILED = "pkexec_failed"
    ADOPTABLE_EXISTING_BLOCK = "adoptable_existing_block"
    NO_WINDOWS_PARTITIONS = "no_windows_partitions"
    NO_USERS_DETECTED = "no_users_detected"
    NO_MAPPINGS_FOUND = "no_mappings_found"
    MOUNT_FAILED = "mount_failed"
    NOT_FOUND = "not_found"
    TARGET_CONFLICT = "target_conflict"
    INVALID_REQUEST = "invalid_request"
    UNRECOGNIZED_RESPONSE = "unrecognized_response"

    @classmethod
    def parse(cls, value: object) -> "ErrorCode | None":
        """Look up a code, returning None for unknown or missing values."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class AdoptionCandidate:
    """An existing marked block the user may take ownership of.

    Attributes:
        id: Block identifier.
        block: Full block text.
        targets: Bind targets inside the block.
    """

    id: str
    block: str
    targets: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of one privileged helper call.

    Attributes:
        status: ok, adoptable or error.
        code: Operation code as sent by the helper (may be outside ErrorCode).
        message: Human-readable message from the helper.
        block_id: Block id on adoptable results.
        block: Block text on adoptable results.
        targets: Block targets on adoptable results.
        stdout: Captured standard output of the privileged command.
        stderr: Captured standard error of the privileged command.
        raw: The payload exactly as received.
    """

    status: OperationStatus
    code: str | None = None
    message: str = ""
    block_id: str | None = None
    block: str | None = None
    targets: tuple[str, ...] = ()
    stdout: str = ""
    stderr: str = ""
    raw: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.OK

    @property
    def error_code(self) -> ErrorCode | None:
        """The code as a known ErrorCode, or None if unknown."""
        return ErrorCode.parse(self.code)

    @property
    def adoption_candidate(self) -> AdoptionCandidate | None:
        """Candidate block for adoptable results."""
        if self.status != OperationStatus.ADOPTABLE or not self.block_id:
            return None
        return AdoptionCandidate(id=self.block_id, block=self.block or "", targets=self.targets)

    def mentions_busy(self) -> bool:
        """Case-insensitive search for 'busy' in every text field."""
        haystack = f"{self.stderr}\n{self.stdout}\n{self.message}".lower()
        return "busy" in haystack

    @classmethod
    def from_payload(cls, payload: "dict[str, Any] | str") -> "OperationResult":
        """Build a result from a helper payload.

        Args:
            payload: Decoded JSON object or its text form.

        Returns:
            OperationResult; unreadable payloads become an error result with
            code unrecognized_response and the raw text preserved.
        """
        if isinstance(payload, str):
            raw = payload
            try:
                data = json.loads(payload)
            except json.JSONDecodeError:
                logger.debug("Unparseable helper payload: %r", payload)
                return cls._unrecognized(raw, "Helper returned a non-JSON response")
        else:
            data = payload
            raw = json.dumps(payload, default=str)

        if not isinstance(data, dict):
            return cls._unrecognized(raw, "Helper returned an unexpected response")

        try:
            status = OperationStatus(data.get("status"))
        except ValueError:
            return cls._unrecognized(raw, f"Unknown status: {data.get('status')!r}")

        targets = data.get("targets") or []
        return cls(
            status=status,
            code=data.get("code"),
            message=str(data.get("message") or ""),
            block_id=data.get("id"),
            block=data.get("block"),
            targets=tuple(str(t) for t in targets) if isinstance(targets, list) else (),
            stdout=str(data.get("stdout") or ""),
            stderr=str(data.get("stderr") or ""),
            raw=raw,
        )

    @classmethod
    def _unrecognized(cls, raw: str, message: str) -> "OperationResult":
        return cls(
            status=OperationStatus.ERROR,
            code=ErrorCode.UNRECOGNIZED_RESPONSE.value,
            message=message,
            raw=raw,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the helper payload shape."""
        result: dict[str, Any] = {"status": self.status.value}
        if self.code is not None:
            result["code"] = self.code
        if self.message:
            result["message"] = self.message
        if self.block_id is not None:
            result["id"] = self.block_id
        if self.block is not None:
            result["block"] = self.block
        if self.targets:
            result["targets"] = list(self.targets)
        if self.stdout:
            result["stdout"] = self.stdout
        if self.stderr:
            result["stderr"] = self.stderr
        return result
