"""Break-glass commands shown when the privileged helper is unusable.

The user can paste these into a terminal to finish the operation by hand.
Each is one ``sudo sh -c "..."`` line, so everything the outer double
quotes would expand is escaped for the inner shell.
"""

from lindy.core.fstab import BEGIN_PREFIX, END_PREFIX
from lindy.core.paths import APP_NAME

_TMP = '\\"\\$t\\"'


def _escape(text: str) -> str:
    for char in ("\\", "$", "`", '"'):
        text = text.replace(char, "\\" + char)
    return text


def manual_apply_command(block: str, fstab_path: str = "/etc/fstab") -> str:
    """Command that appends a block and mounts it.

    The block goes through a ``mktemp`` file so the table is only touched
    once the whole block has been written.

    Args:
        block: Full block text including markers.
        fstab_path: Mount table to append to.

    Returns:
        A single sudo command line.
    """
    escaped = _escape(block.rstrip("\n"))
    return (
        f"sudo sh -c \"set -e; t=\\$(mktemp); cat > {_TMP} <<'EOF'\n{escaped}\nEOF\n"
        f'cat {_TMP} >> {fstab_path}; rm -f {_TMP}; mount -a"'
    )


def manual_remove_command(block_id: str, fstab_path: str = "/etc/fstab") -> str:
    """Command that backs up the table, strips one block and remounts.

    Args:
        block_id: Id of the block to remove.
        fstab_path: Mount table to edit.

    Returns:
        A single sudo command line.
    """
    backup = f"{fstab_path}.{APP_NAME}.manual.bak.\\$(date +%s)"
    begin = f"^{BEGIN_PREFIX} {block_id}"
    end = f"^{END_PREFIX} {block_id}"
    return (
        f'sudo sh -c "set -e; t=\\$(mktemp); cp {fstab_path} {backup}; '
        f"sed -e '/{begin}/,/{end}/d' {fstab_path} > {_TMP}; "
        f'cp {_TMP} {fstab_path}; rm -f {_TMP}; sync; mount -a"'
    )


def busy_hint(target: str) -> str:
    """Next step for a removal blocked by a busy mount."""
    return (
        f"Use `sudo fuser -mv {target}` to list processes holding the mount, "
        "or retry with Force (lazy unmount)."
    )
