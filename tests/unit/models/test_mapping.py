"""Unit tests for mapping, partition and request models."""

import pytest
from lindy.models.mapping import Mapping, new_mapping_id
from lindy.models.partition import Partition, canonicalize_uuid
from lindy.models.request import ApplyRequest, RemoveRequest


class TestMapping:
    """Tests for Mapping."""

    def test_ids_are_unique(self) -> None:
        """Each mapping gets its own id."""
        assert Mapping().id != Mapping().id
        assert new_mapping_id() != new_mapping_id()

    @pytest.mark.parametrize(
        ("src", "target", "expected"),
        [
            ("/mnt/windows/Users/bob/Documents", "/home/bob/Documents", True),
            ("/mnt/windows/Users/bob/Documents", None, False),
            (None, "/home/bob/Documents", False),
            ("   ", "/home/bob/Documents", False),
            ("/a", "  ", False),
        ],
    )
    def test_is_complete(self, src: str | None, target: str | None, expected: bool) -> None:
        """Both sides must be non-blank."""
        assert Mapping(src=src, target=target).is_complete is expected

    def test_mutable(self) -> None:
        """Sessions edit mappings in place."""
        mapping = Mapping(src="/a")
        mapping.target = "/b"

        assert mapping.is_complete

    def test_parse(self) -> None:
        """SRC:TARGET is split into both sides."""
        mapping = Mapping.parse("/mnt/windows/Users/bob/Music:/home/bob/Music")

        assert mapping.src == "/mnt/windows/Users/bob/Music"
        assert mapping.target == "/home/bob/Music"

    def test_parse_splits_on_last_colon(self) -> None:
        """Sources containing a colon are kept whole."""
        mapping = Mapping.parse("/mnt/c:/Users:/home/bob/x")

        assert mapping.src == "/mnt/c:/Users"
        assert mapping.target == "/home/bob/x"

    @pytest.mark.parametrize("spec", ["/only/one/side", ":/home/bob", "/mnt/a:", ""])
    def test_parse_invalid(self, spec: str) -> None:
        """Arguments without two non-empty sides are rejected."""
        with pytest.raises(ValueError, match="expected SRC:TARGET"):
            Mapping.parse(spec)


class TestPartition:
    """Tests for Partition and canonicalize_uuid."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("  ABCD-1234 ", "abcd-1234"),
            ("{53337BDA-2DC1-4A14-A8D9-C1702DDD33D6}", "53337bda-2dc1-4a14-a8d9-c1702ddd33d6"),
            ("(01D9A1B2C3D4E5F6)", "01d9a1b2c3d4e5f6"),
            ("   ", None),
            (None, None),
        ],
    )
    def test_canonicalize_uuid(self, raw: str | None, expected: str | None) -> None:
        """Whitespace and braces are stripped and the id lower-cased."""
        assert canonicalize_uuid(raw) == expected

    def test_empty_name_rejected(self) -> None:
        """Partitions need a device name."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            Partition(name="")

    @pytest.mark.parametrize(
        ("fstype", "expected"),
        [("ntfs", True), ("NTFS3", True), ("exfat", True), ("ext4", False), (None, False)],
    )
    def test_is_windows(self, fstype: str | None, expected: bool) -> None:
        """NTFS and exFAT count as Windows filesystems."""
        assert Partition(name="sda1", fstype=fstype).is_windows is expected

    def test_display_name(self) -> None:
        """The label wins over the device name."""
        assert Partition(name="sda1", label="Windows").display_name == "Windows"
        assert Partition(name="sda1").display_name == "sda1"

    def test_is_mounted(self) -> None:
        """A partition with a mount point is mounted."""
        assert Partition(name="sda1", mountpoint="/mnt/windows").is_mounted
        assert not Partition(name="sda1").is_mounted


class TestRemoveRequest:
    """Tests for RemoveRequest."""

    def test_needs_target_or_id(self) -> None:
        """A request must address a block somehow."""
        with pytest.raises(ValueError, match="needs a target or a block id"):
            RemoveRequest()

    def test_subject_prefers_target(self) -> None:
        """The target names the request when both are given."""
        request = RemoveRequest(target="/home/bob/Documents", block_id="k3x9q2ab")

        assert request.subject == "/home/bob/Documents"

    def test_with_force(self) -> None:
        """with_force keeps the address and sets force."""
        request = RemoveRequest(block_id="k3x9q2ab").with_force()

        assert request == RemoveRequest(block_id="k3x9q2ab", force=True)


class TestApplyRequest:
    """Tests for ApplyRequest."""

    def test_to_dict(self) -> None:
        """Targets serialize as a list."""
        request = ApplyRequest(block="...", id="k3x9q2ab", targets=("/home/bob/Music",))

        assert request.to_dict() == {
            "block": "...",
            "id": "k3x9q2ab",
            "targets": ["/home/bob/Music"],
            "partition_uuid": None,
            "base_mount": None,
            "add_partition_line": False,
        }
