"""Wiki-link target resolution against the set of documents in a vault.

Resolution order for a written target such as ``Projects/Plan`` or ``Plan``:

1. Empty target (``[[#^id]]``) resolves to the linking document itself.
2. Exact vault path match (``.md`` appended unless already present).
3. Path relative to the linking document's folder.
4. Suffix match on the file name / partial path. When several documents
   match, the shortest path wins, then alphabetical order.

Matching is case-insensitive, as in Obsidian.
"""
import posixpath
from typing import Dict, Iterable, List, Optional

DOCUMENT_SUFFIX = '.md'


class VaultLinkResolver:
    """Resolve link targets to vault-relative document paths."""

    def __init__(self, document_paths: Iterable[str]):
        """Build lookup indexes once per scan.

        Args:
            document_paths: Vault-relative POSIX paths of every known document
        """
        self.by_path: Dict[str, str] = {}
        self.by_name: Dict[str, List[str]] = {}

        for path in sorted(document_paths):
            lowered = path.lower()
            self.by_path.setdefault(lowered, path)
            name = posixpath.basename(lowered)
            self.by_name.setdefault(name, []).append(path)

    def __contains__(self, path: str) -> bool:
        return path.lower() in self.by_path

    def resolve(self, target: str, source_path: str) -> Optional[str]:
        """Resolve a link target written inside ``source_path``.

        Args:
            target: Link target as written, without ``#`` subpath
            source_path: Vault path of the document containing the link

        Returns:
            Vault path of the destination document, or None
        """
        target = target.strip()
        if not target:
            return source_path if source_path in self else None

        lowered = target.lstrip('/').lower()
        if not lowered.endswith(DOCUMENT_SUFFIX):
            lowered += DOCUMENT_SUFFIX

        exact = self.by_path.get(posixpath.normpath(lowered))
        if exact:
            return exact

        source_dir = posixpath.dirname(source_path.lower())
        if source_dir:
            relative = posixpath.normpath(posixpath.join(source_dir, lowered))
            if relative in self.by_path:
                return self.by_path[relative]

        candidates = [
            path for path in self.by_name.get(posixpath.basename(lowered), [])
            if path.lower() == lowered or path.lower().endswith('/' + lowered)
        ]
        if not candidates:
            return None

        return min(candidates, key=lambda path: (len(path), path))

    __call__ = resolve
