"""Unit tests for the auto-map orchestrator."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from lindy.core.registry import BlockRegistry
from lindy.core.session import MappingSession
from lindy.models.automap import AutoMapError, AutoMapSuccess, CandidateModel, WindowsPartitionRef
from lindy.models.folder import FolderCandidate
from lindy.models.result import OperationResult
from lindy.protocols.apply import ApplyDone, ApplyProtocol, ApplyRejected
from lindy.protocols.automap import (
    AutoMapFailed,
    AutoMapOrchestrator,
    AutoMapSucceeded,
    candidates_to_mappings,
)

CANDIDATES = [
    FolderCandidate(
        folder_type="Documents",
        linux_path="/home/bob/Documents",
        windows_path="/mnt/windows/Users/bob/Documents",
    )
]


@pytest.fixture
def session() -> MappingSession:
    """Empty session."""
    return MappingSession()


@pytest.fixture
def orchestrator(mock_helper: MagicMock, session: MappingSession) -> AutoMapOrchestrator:
    """Orchestrator over the mocked helper."""
    registry = BlockRegistry(mock_helper)
    return AutoMapOrchestrator(mock_helper, session, ApplyProtocol(mock_helper, registry))


def test_candidates_to_mappings() -> None:
    """Windows folders become sources, Linux folders targets."""
    mapping = candidates_to_mappings(CANDIDATES)[0]

    assert mapping.src == "/mnt/windows/Users/bob/Documents"
    assert mapping.target == "/home/bob/Documents"


class TestGuidedFlow:
    """Tests for suggest and confirm."""

    def test_suggest(self, orchestrator: AutoMapOrchestrator, mock_helper: MagicMock) -> None:
        """Suggestions come from the helper for the given base."""
        mock_helper.suggest_folder_mappings.return_value = CANDIDATES

        assert orchestrator.suggest("/mnt/windows", "bob") == CANDIDATES
        mock_helper.suggest_folder_mappings.assert_called_once_with(Path("/mnt/windows"), "bob")

    def test_confirm_applies_one_block(
        self,
        orchestrator: AutoMapOrchestrator,
        mock_helper: MagicMock,
        ok_result: OperationResult,
    ) -> None:
        """Confirmed pairs are applied together."""
        mock_helper.apply_block.return_value = ok_result

        outcome = orchestrator.confirm(CANDIDATES, None, "/mnt/windows")

        assert isinstance(outcome, ApplyDone)
        assert outcome.request.targets == ("/home/bob/Documents",)

    def test_confirm_nothing(self, orchestrator: AutoMapOrchestrator) -> None:
        """An empty selection is rejected."""
        assert isinstance(orchestrator.confirm([], None, "/mnt/windows"), ApplyRejected)


class TestAutomaticFlow:
    """Tests for run."""

    def test_success_queues_mappings(
        self,
        orchestrator: AutoMapOrchestrator,
        mock_helper: MagicMock,
        session: MappingSession,
    ) -> None:
        """Success sets base mount and partition and appends the mappings."""
        session.add_mapping("/data/a", "/home/bob/a")
        mock_helper.auto_mount_and_map.return_value = AutoMapSuccess(
            status="ok",
            mount_point="/mnt/windows",
            windows_partition=WindowsPartitionRef(uuid="{01D9A1B2C3D4E5F6}", label="Windows"),
            username="bob",
            mappings=[
                CandidateModel(
                    folder_type="Documents",
                    linux_path="/home/bob/Documents",
                    windows_path="/mnt/windows/Users/bob/Documents",
                )
            ],
        )

        outcome = orchestrator.run("/mnt/windows")

        assert isinstance(outcome, AutoMapSucceeded)
        assert outcome.partition_uuid == "01d9a1b2c3d4e5f6"
        assert outcome.partition_label == "Windows"
        assert session.base_mount == "/mnt/windows"
        assert [m.target for m in session.mappings] == ["/home/bob/a", "/home/bob/Documents"]
        mock_helper.apply_block.assert_not_called()

    def test_failure_leaves_session(
        self,
        orchestrator: AutoMapOrchestrator,
        mock_helper: MagicMock,
        session: MappingSession,
    ) -> None:
        """A failed run explains itself and changes nothing."""
        mock_helper.auto_mount_and_map.return_value = AutoMapError(
            status="error", code="no_users_detected", message="no profiles"
        )

        outcome = orchestrator.run()

        assert isinstance(outcome, AutoMapFailed)
        assert outcome.code == "no_users_detected"
        assert outcome.details.title
        assert session.mappings == []
