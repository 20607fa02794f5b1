"""Unit tests for the partitions and blocks commands."""

import json
from unittest.mock import MagicMock, patch

import pytest
from lindy.cli.main import app
from lindy.core.config import LindyConfig
from lindy.models.block import FstabBind, FstabBlock
from lindy.models.partition import Partition
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def helper_patches(mock_helper: MagicMock):
    """Route both listing commands to the mocked helper."""
    with (
        patch("lindy.cli.commands.partitions.load_config", return_value=LindyConfig()),
        patch("lindy.cli.commands.partitions.get_helper", return_value=mock_helper),
        patch("lindy.cli.commands.blocks.load_config", return_value=LindyConfig()),
        patch("lindy.cli.commands.blocks.get_helper", return_value=mock_helper),
    ):
        yield mock_helper


class TestPartitionsCommand:
    """Tests for lindy partitions."""

    def test_table(self, helper_patches: MagicMock) -> None:
        """Partitions are listed in a table."""
        helper_patches.list_partitions.return_value = [
            Partition(name="sda3", fstype="ntfs", label="Windows")
        ]

        result = runner.invoke(app, ["partitions"])

        assert result.exit_code == 0
        assert "sda3" in result.stdout
        assert "Windows" in result.stdout

    def test_windows_only_json(self, helper_patches: MagicMock) -> None:
        """--windows filters to NTFS and exFAT."""
        helper_patches.list_partitions.return_value = [
            Partition(name="sda1", fstype="ext4"),
            Partition(name="sda3", fstype="ntfs"),
        ]

        result = runner.invoke(app, ["partitions", "--windows", "--json"])

        assert [p["name"] for p in json.loads(result.stdout)] == ["sda3"]

    def test_scan_failure(self, helper_patches: MagicMock) -> None:
        """A failing scan exits non-zero."""
        helper_patches.list_partitions.side_effect = RuntimeError("lsblk missing")

        result = runner.invoke(app, ["partitions"])

        assert result.exit_code == 1
        assert "Could not list partitions" in result.output


class TestBlocksCommand:
    """Tests for lindy blocks."""

    @pytest.fixture
    def found(self, helper_patches: MagicMock) -> MagicMock:
        """One managed and one foreign block."""
        helper_patches.list_blocks.return_value = [
            FstabBlock(
                id="k3x9q2ab",
                text="...",
                targets=("/home/bob/a",),
                binds=(FstabBind(src="/data/a", target="/home/bob/a"),),
                managed=True,
            ),
            FstabBlock(id="f0r3ign1", text="..."),
        ]
        return helper_patches

    def test_table_with_hint(self, found: MagicMock) -> None:
        """Foreign blocks come with an adoption hint."""
        result = runner.invoke(app, ["blocks"])

        assert result.exit_code == 0
        assert "k3x9q2ab" in result.stdout
        assert "f0r3ign1" in result.stdout
        assert "lindy adopt ID" in result.stdout

    def test_managed_only_json(self, found: MagicMock) -> None:
        """--managed-only hides foreign blocks."""
        result = runner.invoke(app, ["blocks", "--managed-only", "--json"])

        data = json.loads(result.stdout)
        assert [b["id"] for b in data] == ["k3x9q2ab"]
        assert data[0]["managed"] is True

    def test_empty(self, helper_patches: MagicMock) -> None:
        """No blocks prints a message."""
        result = runner.invoke(app, ["blocks"])

        assert "No marked blocks found" in result.stdout
