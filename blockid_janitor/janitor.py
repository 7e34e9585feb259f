"""Scan, delete and locate operations over a document store."""
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .analyzer.extractor import BlockDefinition, BlockIdExtractor, match_block_id
from .analyzer.link_resolver import VaultLinkResolver
from .analyzer.reference_tracker import ReferenceTracker
from .analyzer.vault import DocumentStore, list_scannable_documents
from .reaper.block_remover import BlockIdRemover, RemovalReport
from .reaper.snapshots import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Unused block IDs found by one scan, plus scan totals."""
    unused: List[BlockDefinition] = field(default_factory=list)
    files_scanned: int = 0
    definitions_found: int = 0
    references_found: int = 0
    unresolved_references: int = 0

    @property
    def nothing_found(self) -> bool:
        return not self.unused


class BlockIdJanitor:
    """Finds block IDs that nothing links to and removes them on request.

    Presentation and confirmation are left to the caller: ``scan`` returns
    plain results and ``delete`` acts on whatever selection it is given.
    """

    def __init__(self, store: DocumentStore, excluded_extensions: Iterable[str] = (),
                 snapshots: Optional[SnapshotStore] = None):
        """Initialize janitor.

        Args:
            store: Document store for the vault
            excluded_extensions: Document suffixes that are not scanned
            snapshots: Optional pre-edit snapshot store used by ``delete``
        """
        self.store = store
        self.excluded_extensions = list(excluded_extensions)
        self.snapshots = snapshots

    async def scan(self, on_document: Optional[Callable[[str, int], None]] = None) -> ScanResult:
        """Collect definitions and references across the vault and diff them.

        Args:
            on_document: Called with (file_path, total) after each document

        Returns:
            ScanResult; ``nothing_found`` is True when no unused IDs exist
        """
        self.store.invalidate()
        all_documents, documents = await list_scannable_documents(self.store, self.excluded_extensions)
        extractor = BlockIdExtractor(VaultLinkResolver(all_documents))

        results = []
        for file_path in documents:
            content = await self.store.cached_read(file_path)
            results.append(extractor.extract(content, file_path))
            if on_document:
                on_document(file_path, len(documents))

        tracker = ReferenceTracker.from_results(results)

        unused = tracker.find_unused()
        logger.debug(
            "Scanned %d documents: %d block IDs, %d references, %d unused",
            tracker.files_scanned, len(tracker.definitions), len(tracker.references), len(unused)
        )

        return ScanResult(
            unused=unused,
            files_scanned=tracker.files_scanned,
            definitions_found=len(tracker.definitions),
            references_found=len(tracker.references),
            unresolved_references=tracker.unresolved_count,
        )

    async def delete(self, selection: Iterable[BlockDefinition]) -> RemovalReport:
        """Remove the selected block IDs from their documents."""
        return await BlockIdRemover(self.store, self.snapshots).remove(selection)

    async def locate(self, definition: BlockDefinition) -> int:
        """Find the current zero-based line of a block ID for navigation.

        Falls back to 0 when the tag is no longer in the document.
        """
        content = await self.store.read(definition.file_path)
        index = find_block_line(content, definition.block_id, hint=definition.line_index)
        return index if index is not None else 0


def find_block_line(content: str, block_id: str, hint: int = -1) -> Optional[int]:
    """Find the line carrying ``^block_id`` in a document.

    Args:
        content: Document text
        block_id: Identifier to look for
        hint: Line index recorded at scan time; checked first

    Returns:
        Zero-based line index, or None if no line ends with that tag
    """
    lines = content.split('\n')

    def has_tag(index: int) -> bool:
        match = match_block_id(lines[index])
        return match is not None and match.group('block_id') == block_id

    if 0 <= hint < len(lines) and has_tag(hint):
        return hint
    for index in range(len(lines)):
        if has_tag(index):
            return index
    return None
