"""Document stores: where document text is listed, read and written.

All store methods are coroutines. The scan and the removal run are each one
asynchronous unit of work that suspends only on these calls.
"""
import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from ..config import is_excluded

# Undecodable bytes become lone surrogates on read and the same bytes on write.
TEXT_ERRORS = 'surrogateescape'


class DocumentNotFoundError(FileNotFoundError):
    """Raised when a document path no longer resolves to a live document."""

    def __init__(self, file_path: str):
        super().__init__(f"Document not found: {file_path}")
        self.file_path = file_path


class DocumentStore(Protocol):
    async def list_documents(self) -> List[str]:
        """All document paths, vault-relative POSIX, in stable order."""

    async def cached_read(self, file_path: str) -> str:
        """Document text; may be a copy cached since the last ``invalidate``."""

    async def read(self, file_path: str) -> str:
        """Authoritative current document text."""

    async def write(self, file_path: str, content: str) -> None:
        """Replace the full text of a document."""

    async def exists(self, file_path: str) -> bool:
        ...

    def invalidate(self, file_path: Optional[str] = None) -> None:
        """Drop cached text for one document, or for all of them."""


async def list_scannable_documents(store: DocumentStore,
                                   excluded_extensions: Iterable[str] = ()) -> Tuple[List[str], List[str]]:
    """Split the store's documents into (all documents, documents to scan).

    Every document is a valid link destination; only the scannable ones are
    searched for definitions and references.
    """
    documents = await store.list_documents()
    excluded = list(excluded_extensions)
    return documents, [path for path in documents if not is_excluded(path, excluded)]


class FileSystemVault:
    """A directory of Markdown files.

    Dot-directories (``.obsidian``, ``.git``, ``.janitor_trash``) are skipped.
    Files are read and written as UTF-8 with newlines untouched, so lines
    other than the edited ones stay byte-identical. Bytes that are not valid
    UTF-8 survive a read and write unchanged.
    """

    SUFFIX = '.md'

    def __init__(self, root: str | Path):
        """Initialize vault.

        Args:
            root: Vault root directory

        Raises:
            ValueError: If root is not a directory
        """
        self.root = Path(root).resolve()
        if not self.root.is_dir():
            raise ValueError(f"Vault path is not a directory: {self.root}")
        self._cache: Dict[str, str] = {}

    def path_for(self, file_path: str) -> Path:
        return self.root.joinpath(*file_path.split('/'))

    def _list(self) -> List[str]:
        documents = []
        for path in self.root.rglob(f'*{self.SUFFIX}'):
            relative = path.relative_to(self.root)
            if any(part.startswith('.') for part in relative.parts[:-1]):
                continue
            if path.is_file():
                documents.append(relative.as_posix())
        return sorted(documents)

    def _read(self, file_path: str) -> str:
        path = self.path_for(file_path)
        try:
            with open(path, 'r', encoding='utf-8', errors=TEXT_ERRORS, newline='') as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise DocumentNotFoundError(file_path)

    def _write(self, file_path: str, content: str):
        path = self.path_for(file_path)
        if not path.is_file():
            raise DocumentNotFoundError(file_path)
        with open(path, 'w', encoding='utf-8', errors=TEXT_ERRORS, newline='') as f:
            f.write(content)

    async def list_documents(self) -> List[str]:
        return await asyncio.to_thread(self._list)

    async def cached_read(self, file_path: str) -> str:
        if file_path not in self._cache:
            self._cache[file_path] = await asyncio.to_thread(self._read, file_path)
        return self._cache[file_path]

    async def read(self, file_path: str) -> str:
        content = await asyncio.to_thread(self._read, file_path)
        self._cache[file_path] = content
        return content

    async def write(self, file_path: str, content: str) -> None:
        await asyncio.to_thread(self._write, file_path, content)
        self._cache[file_path] = content

    async def exists(self, file_path: str) -> bool:
        return await asyncio.to_thread(self.path_for(file_path).is_file)

    def invalidate(self, file_path: Optional[str] = None):
        """Drop cached text for one document, or for all of them."""
        if file_path is None:
            self._cache.clear()
        else:
            self._cache.pop(file_path, None)


class MemoryVault:
    """In-process document store backed by a dict.

    Keeps a log of written paths so callers can see which documents a run
    actually rewrote.
    """

    def __init__(self, documents: Optional[Dict[str, str]] = None):
        self.documents: Dict[str, str] = dict(documents or {})
        self.writes: List[str] = []

    async def list_documents(self) -> List[str]:
        return list(self.documents)

    async def cached_read(self, file_path: str) -> str:
        return await self.read(file_path)

    async def read(self, file_path: str) -> str:
        try:
            return self.documents[file_path]
        except KeyError:
            raise DocumentNotFoundError(file_path)

    async def write(self, file_path: str, content: str) -> None:
        if file_path not in self.documents:
            raise DocumentNotFoundError(file_path)
        self.documents[file_path] = content
        self.writes.append(file_path)

    async def exists(self, file_path: str) -> bool:
        return file_path in self.documents

    def invalidate(self, file_path: Optional[str] = None):
        """Nothing is cached."""
