"""Mount-table scanner implementation.

Reads the mount table and the ownership records without elevation and
reports every marked block, flagging the ones lindy owns.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from lindy.core.fstab import scan_blocks
from lindy.core.paths import DEFAULT_FSTAB_PATH, DEFAULT_METADATA_DIR
from lindy.models.block import BlockMetadata, FstabBind, FstabBlock
from lindy.scanners.base import Scanner

logger = logging.getLogger(__name__)


class FstabScanner(Scanner[FstabBlock]):
    """Scanner for marked blocks in the mount table.

    A block is managed when ``<metadata_dir>/<id>.json`` exists. Records
    whose block is missing from the table (e.g. a write that never made
    it to disk) are reported as managed metadata-only blocks.

    Args:
        fstab_path: Mount table to read.
        metadata_dir: Directory with ownership records.
    """

    def __init__(
        self,
        fstab_path: Path = DEFAULT_FSTAB_PATH,
        metadata_dir: Path = DEFAULT_METADATA_DIR,
    ) -> None:
        self._fstab_path = fstab_path
        self._metadata_dir = metadata_dir

    @property
    def name(self) -> str:
        return "fstab"

    def is_available(self) -> bool:
        return self._fstab_path.exists() or self._metadata_dir.is_dir()

    def read_text(self) -> str | None:
        """Mount-table content, or None if it cannot be read.

        Bytes that are not UTF-8 (e.g. a Latin-1 comment) are kept as
        surrogate escapes so a rewritten table gets them back unchanged.
        """
        try:
            return self._fstab_path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            # No elevation here: fall back to ownership records only
            logger.warning("Cannot read %s: %s", self._fstab_path, e)
            return None

    def scan(self) -> Iterator[FstabBlock]:
        """Yield blocks in table order, then metadata-only records.

        Yields:
            FstabBlock for each marked block.
        """
        text = self.read_text()
        blocks = scan_blocks(text) if text is not None else []
        records = {record.id: record for record in self.load_metadata()}

        for block in blocks:
            record = records.pop(block.id, None)
            if record is None:
                yield block
                continue
            yield FstabBlock(
                id=block.id,
                text=record.block or block.text,
                targets=block.targets,
                binds=block.binds,
                managed=True,
            )

        for record in records.values():
            logger.debug("Block %s has a record but is not in %s", record.id, self._fstab_path)
            yield FstabBlock(
                id=record.id,
                text=record.block or "(managed by lindy)",
                targets=record.targets,
                binds=_binds_from_record(record),
                managed=True,
            )

    def load_metadata(self) -> list[BlockMetadata]:
        """Read every ownership record, skipping unreadable ones.

        Returns:
            Records sorted by file name.
        """
        if not self._metadata_dir.is_dir():
            return []

        records: list[BlockMetadata] = []
        for path in sorted(self._metadata_dir.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                records.append(BlockMetadata.from_dict(data))
            except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable metadata record %s: %s", path, e)
                continue
        return records

    def find_record_for_targets(self, targets: Iterable[str]) -> BlockMetadata | None:
        """First ownership record that lists any of the given targets."""
        wanted = set(targets)
        return next((r for r in self.load_metadata() if wanted.intersection(r.targets)), None)


def _binds_from_record(record: BlockMetadata) -> tuple[FstabBind, ...]:
    blocks = scan_blocks(record.block) if record.block else []
    if blocks:
        return blocks[0].binds
    return ()
