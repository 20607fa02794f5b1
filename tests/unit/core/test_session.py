"""Unit tests for the pending mapping session."""

import threading

import pytest
from lindy.core.session import MappingSession, suggest_base_mount
from lindy.models.block import FstabBind, FstabBlock
from lindy.models.mapping import Mapping
from lindy.models.partition import Partition


def _block(*binds: tuple[str, str]) -> FstabBlock:
    parsed = tuple(FstabBind(src=s, target=t) for s, t in binds)
    return FstabBlock(
        id="k3x9q2ab",
        text="...",
        targets=tuple(b.target for b in parsed),
        binds=parsed,
        managed=True,
    )


class TestSuggestBaseMount:
    """Tests for suggest_base_mount."""

    def test_label(self) -> None:
        """Labels are used with unsafe characters replaced."""
        assert suggest_base_mount(Partition(name="sda3", label="My Windows!")) == "/mnt/My_Windows"

    def test_uuid_prefix(self) -> None:
        """Without a label the first eight uuid characters are used."""
        partition = Partition(name="sda3", uuid="01d9a1b2c3d4e5f6")

        assert suggest_base_mount(partition) == "/mnt/01d9a1b2"

    def test_device_name(self) -> None:
        """Without label or uuid the device name is used."""
        assert suggest_base_mount(Partition(name="sda3", label="!!!")) == "/mnt/sda3"


class TestMappingSession:
    """Tests for MappingSession."""

    @pytest.fixture
    def session(self) -> MappingSession:
        """Session with the default base mount."""
        return MappingSession("/mnt/shared")

    def test_defaults(self, session: MappingSession) -> None:
        """A new session is empty and uses the default base mount."""
        assert session.mappings == []
        assert session.base_mount == "/mnt/shared"
        assert session.partition_uuid is None
        assert session.skip_partition_mount is False

    def test_mappings_is_a_copy(self, session: MappingSession) -> None:
        """Mutating the returned list does not touch the session."""
        session.add_mapping("/a", "/b")
        session.mappings.clear()

        assert len(session.mappings) == 1

    def test_update_mapping(self, session: MappingSession) -> None:
        """update_mapping sets only the given sides."""
        mapping = session.add_mapping(src="/a")
        session.update_mapping(mapping.id, target="/b")

        assert session.complete_mappings()[0].src == "/a"
        assert session.complete_mappings()[0].target == "/b"

    def test_update_unknown(self, session: MappingSession) -> None:
        """Unknown ids raise KeyError."""
        with pytest.raises(KeyError):
            session.update_mapping("nope", src="/a")

    def test_remove_mapping(self, session: MappingSession) -> None:
        """remove_mapping drops exactly that mapping."""
        keep = session.add_mapping("/a", "/b")
        drop = session.add_mapping("/c", "/d")
        session.remove_mapping(drop.id)

        assert [m.id for m in session.mappings] == [keep.id]

    def test_set_partition_uuid_canonicalizes(self, session: MappingSession) -> None:
        """Identifiers are stored in canonical form."""
        session.set_partition_uuid(" {01D9A1B2C3D4E5F6} ")

        assert session.partition_uuid == "01d9a1b2c3d4e5f6"

    def test_set_base_mount(self, session: MappingSession) -> None:
        """The base mount is replaced as given."""
        session.set_base_mount("/mnt/win")

        assert session.base_mount == "/mnt/win"

    def test_set_base_mount_waits_for_lock(self, session: MappingSession) -> None:
        """A writer on another thread waits while the session is locked."""
        with session._lock:
            writer = threading.Thread(target=session.set_base_mount, args=("/mnt/win",))
            writer.start()
            writer.join(timeout=0.1)
            assert writer.is_alive()
            assert session.base_mount == "/mnt/shared"
        writer.join(timeout=5)

        assert session.base_mount == "/mnt/win"

    def test_select_partition_suggests_base(self, session: MappingSession) -> None:
        """The default base mount is replaced with a suggestion."""
        session.select_partition(Partition(name="sda3", label="Windows", uuid="01d9a1b2c3d4e5f6"))

        assert session.base_mount == "/mnt/Windows"
        assert session.partition_uuid == "01d9a1b2c3d4e5f6"

    def test_select_partition_keeps_custom_base(self, session: MappingSession) -> None:
        """A base mount the user typed is kept."""
        session.base_mount = "/media/win"
        session.select_partition(Partition(name="sda3", label="Windows"))

        assert session.base_mount == "/media/win"

    def test_select_partition_fills_blank_base(self, session: MappingSession) -> None:
        """A blank base mount is replaced with a suggestion."""
        session.base_mount = " "
        session.select_partition(Partition(name="sda3", uuid="abcd1234efgh"))

        assert session.base_mount == "/mnt/abcd1234"

    def test_restore_from_blocks(self, session: MappingSession) -> None:
        """Installed binds seed an empty session."""
        restored = session.restore_from_blocks([_block(("/w/Docs", "/home/bob/Docs"))])

        assert restored == 1
        assert session.mappings[0].src == "/w/Docs"
        assert session.mappings[0].target == "/home/bob/Docs"

    def test_restore_replaces_incomplete_rows(self, session: MappingSession) -> None:
        """Incomplete rows do not block restoring."""
        session.add_mapping(src="/half")
        session.restore_from_blocks([_block(("/w/Docs", "/home/bob/Docs"))])

        assert [m.src for m in session.mappings] == ["/w/Docs"]

    def test_restore_never_overwrites_work(self, session: MappingSession) -> None:
        """A complete mapping in progress is kept."""
        session.extend([Mapping(src="/a", target="/b")])

        assert session.restore_from_blocks([_block(("/w/Docs", "/home/bob/Docs"))]) == 0
        assert [m.src for m in session.mappings] == ["/a"]

    def test_restore_nothing_keeps_rows(self, session: MappingSession) -> None:
        """With nothing to restore the session is untouched."""
        session.add_mapping(src="/half")

        assert session.restore_from_blocks([]) == 0
        assert len(session.mappings) == 1

    def test_clear(self, session: MappingSession) -> None:
        """clear() drops all mappings."""
        session.add_mapping("/a", "/b")
        session.clear()

        assert session.mappings == []
