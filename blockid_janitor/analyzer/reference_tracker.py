"""Reference tracker for diffing block ID definitions against inbound links."""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Set, Tuple

from .extractor import BlockDefinition, ExtractionResult, ReferenceKey


def find_unused_block_ids(definitions: Iterable[BlockDefinition],
                          references: Iterable[ReferenceKey]) -> List[BlockDefinition]:
    """Return definitions with no matching reference, in input order.

    The match key is always (file_path, block_id): the same identifier text
    in two documents never suppresses across documents.

    Args:
        definitions: Definitions in document order, then discovery order
        references: Resolved (target_file_path, block_id) pairs

    Returns:
        Unused definitions
    """
    referenced = references if isinstance(references, (set, frozenset)) else set(references)
    return [definition for definition in definitions if definition.key not in referenced]


@dataclass(frozen=True)
class ReferenceTracker:
    """Immutable accumulator folded over per-document extraction results.

    Example:
        tracker = ReferenceTracker.from_results(results)
        unused = tracker.find_unused()

    ``merge`` adds a single document and copies the accumulated state, so
    whole scans go through ``from_results``.
    """
    definitions: Tuple[BlockDefinition, ...] = ()
    references: FrozenSet[ReferenceKey] = field(default_factory=frozenset)
    files_scanned: int = 0
    unresolved_count: int = 0

    def merge(self, result: ExtractionResult) -> 'ReferenceTracker':
        """Return a new tracker that includes one more document's results."""
        return ReferenceTracker(
            definitions=self.definitions + result.definitions,
            references=self.references | result.references,
            files_scanned=self.files_scanned + 1,
            unresolved_count=self.unresolved_count + result.unresolved_count,
        )

    @classmethod
    def from_results(cls, results: Iterable[ExtractionResult]) -> 'ReferenceTracker':
        """Build a tracker from all per-document results in one pass."""
        results = list(results)
        definitions: List[BlockDefinition] = []
        references: Set[ReferenceKey] = set()
        for result in results:
            definitions.extend(result.definitions)
            references.update(result.references)
        return cls(
            definitions=tuple(definitions),
            references=frozenset(references),
            files_scanned=len(results),
            unresolved_count=sum(result.unresolved_count for result in results),
        )

    def is_referenced(self, definition: BlockDefinition) -> bool:
        return definition.key in self.references

    def find_unused(self) -> List[BlockDefinition]:
        return find_unused_block_ids(self.definitions, self.references)
