"""Block ID remover for stripping unused ``^block-id`` tags from their lines."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..analyzer.extractor import BlockDefinition, match_block_id
from ..analyzer.vault import DocumentNotFoundError, DocumentStore
from .snapshots import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class RemovalReport:
    """Outcome of one removal run."""
    removed_count: int = 0
    modified_files: List[str] = field(default_factory=list)
    drifted: List[BlockDefinition] = field(default_factory=list)  # Line changed since the scan
    missing_files: List[str] = field(default_factory=list)
    snapshot_ids: List[str] = field(default_factory=list)


def strip_block_id(line: str, block_id: str) -> Optional[str]:
    """Remove a trailing ``<whitespace>^block_id`` from one line.

    Only an exact tag match is stripped; anything before it is kept, as is
    a trailing ``\\r``.

    Returns:
        The edited line, or None if the line does not end with that tag
    """
    match = match_block_id(line)
    if match is None or match.group('block_id') != block_id:
        return None
    return line[:match.start()] + match.group('eol')


def group_by_file(batch: Iterable[BlockDefinition]) -> Dict[str, List[BlockDefinition]]:
    """Group definitions by document, keeping first-seen document order."""
    groups: Dict[str, List[BlockDefinition]] = {}
    for definition in batch:
        groups.setdefault(definition.file_path, []).append(definition)
    return groups


class BlockIdRemover:
    """Removes confirmed unused block IDs from live documents.

    The remover does not decide what is unused; it trusts the batch and only
    re-validates each recorded line against current content before editing.
    """

    def __init__(self, store: DocumentStore, snapshots: Optional[SnapshotStore] = None):
        """Initialize block ID remover.

        Args:
            store: Document store to read from and write to
            snapshots: Optional store receiving each document's text before
                it is rewritten
        """
        self.store = store
        self.snapshots = snapshots

    def apply_to_content(self, content: str,
                         definitions: Iterable[BlockDefinition]) -> Tuple[str, List[BlockDefinition], List[BlockDefinition]]:
        """Strip the tags for one document's definitions from its text.

        Args:
            content: Current document text
            definitions: Definitions recorded against this document

        Returns:
            Tuple of (new_content, removed, drifted)
        """
        lines = content.split('\n')
        removed = []
        drifted = []

        for definition in definitions:
            index = definition.line_index
            edited = None
            if 0 <= index < len(lines):
                edited = strip_block_id(lines[index], definition.block_id)

            if edited is None:
                logger.debug(
                    "Skipping ^%s in %s: line %d no longer ends with that tag",
                    definition.block_id, definition.file_path, definition.line_number
                )
                drifted.append(definition)
                continue

            lines[index] = edited
            removed.append(definition)

        return '\n'.join(lines), removed, drifted

    async def remove(self, batch: Iterable[BlockDefinition]) -> RemovalReport:
        """Remove every block ID in the batch that still matches its line.

        Each document is read fresh and written at most once, and only when
        something changed. A document that no longer exists is skipped. Any
        other error propagates; documents written before it stay written.

        Args:
            batch: Definitions the caller confirmed for deletion

        Returns:
            RemovalReport with the number of tags removed
        """
        report = RemovalReport()

        for file_path, definitions in group_by_file(batch).items():
            try:
                content = await self.store.read(file_path)
            except DocumentNotFoundError:
                logger.debug("Skipping %s: document no longer exists", file_path)
                report.missing_files.append(file_path)
                continue

            new_content, removed, drifted = self.apply_to_content(content, definitions)
            report.drifted.extend(drifted)

            if not removed:
                continue

            # No awaits between the read above and the write below
            if self.snapshots is not None:
                report.snapshot_ids.append(self.snapshots.snapshot(file_path, content))

            try:
                await self.store.write(file_path, new_content)
            except DocumentNotFoundError:
                logger.debug("Skipping %s: document removed before write", file_path)
                report.missing_files.append(file_path)
                continue
            report.removed_count += len(removed)
            report.modified_files.append(file_path)

        return report
