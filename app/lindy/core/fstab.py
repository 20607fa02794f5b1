"""Mount-table block format.

Blocks managed by lindy look like this inside /etc/fstab::

    # lindy BEGIN: k3x9q2ab
    UUID=<uuid> <base> auto defaults,noatime,nofail,x-systemd.automount,x-systemd.device-timeout=10 0 2
    <src> <target> none bind 0 0
    # lindy END: k3x9q2ab

The device line is optional and appears at most once. Everything in this
module is pure text processing; reading and writing the table happens in
the scanners and the privileged helper.
"""

from collections.abc import Iterable, Sequence

from lindy.core.paths import APP_NAME
from lindy.models.block import FstabBind, FstabBlock

BEGIN_PREFIX = f"# {APP_NAME} BEGIN:"
END_PREFIX = f"# {APP_NAME} END:"

DEVICE_MOUNT_OPTIONS = "defaults,noatime,nofail,x-systemd.automount,x-systemd.device-timeout=10"


def begin_marker(block_id: str) -> str:
    return f"{BEGIN_PREFIX} {block_id}"


def end_marker(block_id: str) -> str:
    return f"{END_PREFIX} {block_id}"


def device_line(uuid: str, base_mount: str) -> str:
    """Mount line for the source partition itself."""
    return f"UUID={uuid} {base_mount} auto {DEVICE_MOUNT_OPTIONS} 0 2"


def bind_line(src: str, target: str) -> str:
    return f"{src} {target} none bind 0 0"


def render_block(block_id: str, lines: Iterable[str]) -> str:
    """Wrap entry lines in BEGIN/END markers.

    Args:
        block_id: Block identifier.
        lines: Device and bind lines, in order.

    Returns:
        Block text ending in a single newline.
    """
    body = [begin_marker(block_id), *lines, end_marker(block_id)]
    return "\n".join(body) + "\n"


def parse_bind_line(line: str) -> FstabBind | None:
    """Parse a bind-mount line.

    A bind line has at least six whitespace-separated fields with ``none``
    as filesystem type and ``bind`` as options.

    Returns:
        FstabBind, or None if the line is not a bind line.
    """
    parts = line.split()
    if len(parts) >= 6 and parts[2] == "none" and parts[3] == "bind":
        return FstabBind(src=parts[0], target=parts[1])
    return None


def _marker_id(line: str, prefix: str) -> str | None:
    pos = line.find(prefix)
    if pos < 0:
        return None
    return line[pos + len(prefix) :].strip()


def _make_block(block_id: str, lines: Sequence[str]) -> FstabBlock:
    binds = tuple(b for b in (parse_bind_line(line) for line in lines[1:]) if b is not None)
    return FstabBlock(
        id=block_id,
        text="\n".join(lines) + "\n",
        targets=tuple(b.target for b in binds),
        binds=binds,
    )


def scan_blocks(text: str) -> list[FstabBlock]:
    """Find every marked block in mount-table text.

    A block runs from a BEGIN marker to the END marker carrying the same id.
    Whatever sits between them belongs to the block, however it is
    formatted. A BEGIN without a matching END runs to the end of the text.

    Args:
        text: Mount-table content.

    Returns:
        Blocks in file order, all with managed=False.
    """
    blocks: list[FstabBlock] = []
    current_id: str | None = None
    current: list[str] = []

    for line in text.splitlines():
        if current_id is None:
            block_id = _marker_id(line, BEGIN_PREFIX)
            if block_id:
                current_id = block_id
                current = [line]
            continue

        current.append(line)
        if _marker_id(line, END_PREFIX) == current_id:
            blocks.append(_make_block(current_id, current))
            current_id = None
            current = []

    if current_id is not None:
        blocks.append(_make_block(current_id, current))

    return blocks


def strip_block(text: str, block_id: str) -> str:
    """Remove one block (markers included) from mount-table text.

    Every line outside the block is kept as is.

    Args:
        text: Mount-table content.
        block_id: Id of the block to drop.

    Returns:
        The content without the block.
    """
    kept: list[str] = []
    inside = False
    for line in text.splitlines(keepends=True):
        if not inside and _marker_id(line, BEGIN_PREFIX) == block_id:
            inside = True
            continue
        if inside:
            if _marker_id(line, END_PREFIX) == block_id:
                inside = False
            continue
        kept.append(line)
    return "".join(kept)


def find_block_for_target(blocks: Iterable[FstabBlock], target: str) -> FstabBlock | None:
    """First block with a bind line mounting onto ``target``."""
    wanted = target.strip()
    for block in blocks:
        if wanted in block.targets:
            return block
    return None


def find_unmarked_entry(text: str, target: str) -> str | None:
    """Find a mount-table line outside any marked block that uses ``target``.

    Args:
        text: Mount-table content.
        target: Mount point to look for.

    Returns:
        The offending line, or None.
    """
    wanted = target.strip()
    current_id: str | None = None
    for line in text.splitlines():
        if current_id is None:
            block_id = _marker_id(line, BEGIN_PREFIX)
            if block_id:
                current_id = block_id
                continue
        else:
            if _marker_id(line, END_PREFIX) == current_id:
                current_id = None
            continue

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        parts = stripped.split()
        if len(parts) >= 2 and parts[1] == wanted:
            return line
    return None


def device_mountpoint(block_text: str) -> str | None:
    """Mount point of the first non-bind entry inside a block.

    Args:
        block_text: Text of one block.

    Returns:
        Absolute mount point, or None if the block only holds bind lines.
    """
    for line in block_text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if parse_bind_line(stripped) is not None:
            continue
        parts = stripped.split()
        if len(parts) >= 2 and parts[1].startswith("/"):
            return parts[1]
    return None


def generate_fstab_line(
    partition_uuid: str,
    base_mount: str,
    src: str,
    target: str,
    skip_partition_mount: bool,
) -> str:
    """Mount-table line(s) for one mapping.

    Only the bind line is produced when the partition mount is skipped or
    no identifier is known; otherwise the device line comes first.
    """
    line = bind_line(src, target)
    if skip_partition_mount or not partition_uuid.strip():
        return line
    return f"{device_line(partition_uuid.strip(), base_mount)}\n{line}"
