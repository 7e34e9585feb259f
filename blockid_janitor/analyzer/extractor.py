"""Block ID definition and reference extraction from a single document."""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Resolves a written link target against the document that contains the link.
# Returns the vault path of the destination document, or None if unknown.
LinkResolverFn = Callable[[str, str], Optional[str]]

# (target_file_path, block_id)
ReferenceKey = Tuple[str, str]

# ASCII so that \w means [A-Za-z0-9_] and nothing wider.
BLOCK_ID_PATTERN = re.compile(r"(?P<space>\s*)\^(?P<block_id>[\w-]+)(?P<eol>\r?)$", re.ASCII)

# [[target#^id]], [[target#^id|display]], [[target#^id | display]]
# The target may be empty ([[#^id]]), which links into the same document.
BLOCK_REF_PATTERN = re.compile(
    r"\[\["
    r"(?P<target>[^\[\]|#]*)"
    r"#\^(?P<block_id>[\w-]+)"
    r"\s*(?:\|.*?)?"
    r"\]\]",
    re.ASCII,
)

VALID_BLOCK_ID = re.compile(r"[\w-]+", re.ASCII)


def is_valid_block_id(block_id: str) -> bool:
    """Check that a captured identifier consists only of token characters."""
    return bool(block_id) and VALID_BLOCK_ID.fullmatch(block_id) is not None


def match_block_id(line: str) -> Optional[re.Match]:
    """Match a trailing ``^block-id`` tag on a single line.

    Args:
        line: One physical line, without its ``\\n`` terminator

    Returns:
        The match (groups ``space``, ``block_id``, ``eol``) or None
    """
    match = BLOCK_ID_PATTERN.search(line)
    if match and is_valid_block_id(match.group("block_id")):
        return match
    return None


@dataclass(frozen=True)
class BlockDefinition:
    """A ``^block-id`` tag observed on a line of a document."""
    block_id: str
    file_path: str  # Vault-relative POSIX path
    line_index: int  # Zero-based, at scan time
    line: str  # Raw line text at scan time

    @property
    def key(self) -> ReferenceKey:
        return (self.file_path, self.block_id)

    @property
    def line_number(self) -> int:
        """One-based line number for display."""
        return self.line_index + 1

    @property
    def display_line(self) -> str:
        return self.line.strip()

    def to_dict(self) -> Dict:
        return {
            'id': self.block_id,
            'file': self.file_path,
            'line': self.display_line,
            'line_index': self.line_index,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Definitions and resolved references found in one document."""
    file_path: str
    definitions: Tuple[BlockDefinition, ...] = ()
    references: FrozenSet[ReferenceKey] = frozenset()
    unresolved_count: int = 0


class BlockIdExtractor:
    """Extract block ID definitions and block references from document text.

    The extractor is stateless: each call to :meth:`extract` looks at one
    document in isolation and returns immutable results, so documents can be
    folded in any order by the caller.
    """

    def __init__(self, resolve_link: LinkResolverFn):
        """Initialize extractor.

        Args:
            resolve_link: Maps (link target, source file path) to the
                destination file path, or None when the target is unknown
        """
        self.resolve_link = resolve_link

    def extract(self, content: str, file_path: str) -> ExtractionResult:
        """Scan a document line by line for definitions and references.

        Duplicate identifiers within one document: the last occurrence wins.
        The earlier definition is dropped from the working map, so removal
        will only ever target the most recently seen line for that id.

        Args:
            content: Full document text
            file_path: Vault path of the document being scanned

        Returns:
            ExtractionResult for this document
        """
        definitions: Dict[str, BlockDefinition] = {}
        references: Set[ReferenceKey] = set()
        unresolved = 0

        for index, line in enumerate(content.split('\n')):
            match = match_block_id(line)
            if match:
                block_id = match.group('block_id')
                if block_id in definitions:
                    logger.debug(
                        "Duplicate block ID ^%s in %s (line %d replaces line %d)",
                        block_id, file_path, index + 1, definitions[block_id].line_number
                    )
                definitions[block_id] = BlockDefinition(
                    block_id=block_id,
                    file_path=file_path,
                    line_index=index,
                    line=line,
                )

            for target, block_id in self.find_references(line):
                destination = self.resolve_link(target, file_path)
                if destination is None:
                    unresolved += 1
                    logger.debug("Unresolved link target %r in %s", target, file_path)
                    continue
                references.add((destination, block_id))

        return ExtractionResult(
            file_path=file_path,
            definitions=tuple(definitions.values()),
            references=frozenset(references),
            unresolved_count=unresolved,
        )

    @staticmethod
    def find_references(line: str) -> List[Tuple[str, str]]:
        """Find every ``[[target#^id]]`` link on a line.

        Returns:
            List of (target, block_id) pairs in order of appearance
        """
        return [
            (match.group('target').strip(), match.group('block_id'))
            for match in BLOCK_REF_PATTERN.finditer(line)
        ]
