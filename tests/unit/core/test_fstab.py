"""Unit tests for the mount-table block format."""

from lindy.core.fstab import (
    bind_line,
    device_line,
    device_mountpoint,
    find_block_for_target,
    find_unmarked_entry,
    generate_fstab_line,
    parse_bind_line,
    render_block,
    scan_blocks,
    strip_block,
)
from lindy.models.block import FstabBind


class TestLines:
    """Tests for line builders."""

    def test_device_line(self) -> None:
        """Device lines use automount options and pass 2."""
        line = device_line("01D9A1B2C3D4E5F6", "/mnt/windows")

        assert line == (
            "UUID=01D9A1B2C3D4E5F6 /mnt/windows auto "
            "defaults,noatime,nofail,x-systemd.automount,x-systemd.device-timeout=10 0 2"
        )

    def test_bind_line(self) -> None:
        """Bind lines use type none and option bind."""
        assert bind_line("/a", "/b") == "/a /b none bind 0 0"

    def test_render_block(self) -> None:
        """Blocks are wrapped in markers and end with one newline."""
        text = render_block("k3x9q2ab", ["/a /b none bind 0 0"])

        assert text == "# lindy BEGIN: k3x9q2ab\n/a /b none bind 0 0\n# lindy END: k3x9q2ab\n"

    def test_generate_fstab_line_with_device(self) -> None:
        """A device line precedes the bind line when a uuid is given."""
        text = generate_fstab_line("A1B2-C3D4", "/mnt/data", "/mnt/data/x", "/home/bob/x", False)

        assert text.splitlines() == [
            device_line("A1B2-C3D4", "/mnt/data"),
            bind_line("/mnt/data/x", "/home/bob/x"),
        ]

    def test_generate_fstab_line_skipped(self) -> None:
        """Skipping the partition mount leaves only the bind line."""
        text = generate_fstab_line("A1B2-C3D4", "/mnt/data", "/mnt/data/x", "/home/bob/x", True)

        assert text == bind_line("/mnt/data/x", "/home/bob/x")

    def test_generate_fstab_line_without_uuid(self) -> None:
        """No uuid means no device line."""
        assert generate_fstab_line("  ", "/mnt/data", "/s", "/t", False) == "/s /t none bind 0 0"


class TestParseBindLine:
    """Tests for parse_bind_line."""

    def test_bind(self) -> None:
        """Bind lines parse into src and target."""
        assert parse_bind_line("/a   /b\tnone bind 0 0") == FstabBind(src="/a", target="/b")

    def test_not_bind(self) -> None:
        """Device and short lines are not bind lines."""
        assert parse_bind_line(device_line("A1B2-C3D4", "/mnt/x")) is None
        assert parse_bind_line("/a /b none bind") is None


class TestScanBlocks:
    """Tests for scan_blocks."""

    def test_finds_block(self, mock_fstab_text: str) -> None:
        """The marked block is found with its bind targets."""
        blocks = scan_blocks(mock_fstab_text)

        assert [b.id for b in blocks] == ["k3x9q2ab"]
        block = blocks[0]
        assert block.targets == ("/home/bob/Documents", "/home/bob/Pictures")
        assert block.managed is False
        assert block.text.startswith("# lindy BEGIN: k3x9q2ab\n")
        assert block.text.endswith("# lindy END: k3x9q2ab\n")

    def test_multiple_blocks_in_order(self) -> None:
        """Blocks come back in file order."""
        text = render_block("first", ["/a /b none bind 0 0"]) + render_block(
            "second", ["/c /d none bind 0 0"]
        )

        assert [b.id for b in scan_blocks(text)] == ["first", "second"]

    def test_end_for_other_id_does_not_close(self) -> None:
        """Only the END marker with the same id closes a block."""
        text = (
            "# lindy BEGIN: aaa\n"
            "/a /b none bind 0 0\n"
            "# lindy END: bbb\n"
            "/c /d none bind 0 0\n"
            "# lindy END: aaa\n"
        )

        blocks = scan_blocks(text)

        assert len(blocks) == 1
        assert blocks[0].targets == ("/b", "/d")

    def test_unterminated_block_runs_to_end(self) -> None:
        """A BEGIN without END swallows the rest of the file."""
        text = "# lindy BEGIN: aaa\n/a /b none bind 0 0\n/c /d none bind 0 0\n"

        blocks = scan_blocks(text)

        assert blocks[0].targets == ("/b", "/d")

    def test_no_blocks(self) -> None:
        """Tables without markers have no blocks."""
        assert scan_blocks("UUID=x / ext4 defaults 0 1\n") == []


class TestStripBlock:
    """Tests for strip_block."""

    def test_removes_only_that_block(self, mock_fstab_text: str) -> None:
        """Every line outside the block is kept byte for byte."""
        stripped = strip_block(mock_fstab_text, "k3x9q2ab")

        assert "lindy" not in stripped
        assert "/home/bob/Documents" not in stripped
        assert stripped.endswith("/srv/music /home/bob/Music none bind 0 0\n")
        assert stripped.startswith("# /etc/fstab: static file system information.\n")

    def test_unknown_id(self, mock_fstab_text: str) -> None:
        """An unknown id leaves the text unchanged."""
        assert strip_block(mock_fstab_text, "zzzzzzzz") == mock_fstab_text


class TestLookups:
    """Tests for target and mount point lookups."""

    def test_find_block_for_target(self, mock_fstab_text: str) -> None:
        """The block binding a target is found."""
        blocks = scan_blocks(mock_fstab_text)

        assert find_block_for_target(blocks, "/home/bob/Pictures") is blocks[0]
        assert find_block_for_target(blocks, "/home/bob/Music") is None

    def test_find_unmarked_entry(self, mock_fstab_text: str) -> None:
        """Lines outside blocks are found, lines inside are ignored."""
        assert find_unmarked_entry(mock_fstab_text, "/home/bob/Music") == (
            "/srv/music /home/bob/Music none bind 0 0"
        )
        assert find_unmarked_entry(mock_fstab_text, "/home/bob/Documents") is None
        assert find_unmarked_entry(mock_fstab_text, "/boot/efi") is not None

    def test_device_mountpoint(self, mock_fstab_text: str) -> None:
        """The device line's mount point is reported."""
        block = scan_blocks(mock_fstab_text)[0]

        assert device_mountpoint(block.text) == "/mnt/windows"

    def test_device_mountpoint_binds_only(self) -> None:
        """Blocks with only bind lines have no device mount point."""
        assert device_mountpoint(render_block("a", ["/a /b none bind 0 0"])) is None
