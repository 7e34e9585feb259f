"""Tests for the filesystem and in-memory document stores."""
import asyncio

import pytest

from blockid_janitor.analyzer.vault import (
    DocumentNotFoundError,
    FileSystemVault,
    MemoryVault,
    list_scannable_documents,
)


class TestFileSystemVault:

    def test_lists_markdown_documents_sorted(self, make_vault):
        root = make_vault({
            'b.md': "",
            'a.md': "",
            'sub/c.md': "",
            'image.png': "",
            '.obsidian/workspace.md': "",
            '.janitor_trash/x/a.md.snapshot': "",
        })
        vault = FileSystemVault(root)

        assert asyncio.run(vault.list_documents()) == ['a.md', 'b.md', 'sub/c.md']

    def test_rejects_missing_root(self, tmp_path):
        with pytest.raises(ValueError):
            FileSystemVault(tmp_path / 'nope')

    def test_read_preserves_crlf(self, make_vault):
        root = make_vault({'a.md': "one\r\ntwo ^x\r\n"})
        vault = FileSystemVault(root)

        assert asyncio.run(vault.read('a.md')) == "one\r\ntwo ^x\r\n"

    def test_write_is_byte_exact(self, make_vault):
        root = make_vault({'a.md': "old"})
        vault = FileSystemVault(root)

        asyncio.run(vault.write('a.md', "one\r\ntwo\n"))

        assert (root / 'a.md').read_bytes() == b"one\r\ntwo\n"

    def test_cached_read_vs_read(self, make_vault):
        root = make_vault({'a.md': "first"})
        vault = FileSystemVault(root)

        assert asyncio.run(vault.cached_read('a.md')) == "first"
        (root / 'a.md').write_text("second", encoding='utf-8')

        assert asyncio.run(vault.cached_read('a.md')) == "first"
        assert asyncio.run(vault.read('a.md')) == "second"

    def test_invalidate_drops_cached_text(self, make_vault):
        root = make_vault({'a.md': "first", 'b.md': "other"})
        vault = FileSystemVault(root)
        asyncio.run(vault.cached_read('a.md'))
        asyncio.run(vault.cached_read('b.md'))
        (root / 'a.md').write_text("second", encoding='utf-8')
        (root / 'b.md').write_text("changed", encoding='utf-8')

        vault.invalidate('a.md')
        assert asyncio.run(vault.cached_read('a.md')) == "second"
        assert asyncio.run(vault.cached_read('b.md')) == "other"

        vault.invalidate()
        assert asyncio.run(vault.cached_read('b.md')) == "changed"

    def test_non_utf8_bytes_survive_read_and_write(self, make_vault):
        root = make_vault({'legacy.md': b"caf\xe9 note ^old\r\nkeep \xff\r\n"})
        vault = FileSystemVault(root)

        content = asyncio.run(vault.read('legacy.md'))
        asyncio.run(vault.write('legacy.md', content.replace(" ^old", "")))

        assert (root / 'legacy.md').read_bytes() == b"caf\xe9 note\r\nkeep \xff\r\n"

    def test_missing_document(self, make_vault):
        vault = FileSystemVault(make_vault({'a.md': ""}))

        with pytest.raises(DocumentNotFoundError):
            asyncio.run(vault.read('gone.md'))
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(vault.write('gone.md', "text"))
        assert asyncio.run(vault.exists('gone.md')) is False
        assert asyncio.run(vault.exists('a.md')) is True

    def test_document_not_found_is_file_not_found(self):
        assert issubclass(DocumentNotFoundError, FileNotFoundError)


class TestMemoryVault:

    def test_write_log(self):
        vault = MemoryVault({'a.md': "x", 'b.md': "y"})
        asyncio.run(vault.write('b.md', "z"))

        assert vault.writes == ['b.md']
        assert asyncio.run(vault.read('b.md')) == "z"

    def test_invalidate_is_harmless(self):
        vault = MemoryVault({'a.md': "x"})
        vault.invalidate()
        assert asyncio.run(vault.cached_read('a.md')) == "x"

    def test_missing_document(self):
        vault = MemoryVault()
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(vault.read('a.md'))


class TestScannableDocuments:

    def test_excluded_extensions_are_still_link_targets(self):
        vault = MemoryVault({'a.md': "", 'Drawing.excalidraw.md': "", 'b.md': ""})

        all_docs, scannable = asyncio.run(list_scannable_documents(vault, ['.excalidraw.md']))

        assert all_docs == ['a.md', 'Drawing.excalidraw.md', 'b.md']
        assert scannable == ['a.md', 'b.md']

    def test_empty_entries_exclude_nothing(self):
        vault = MemoryVault({'a.md': ""})
        _, scannable = asyncio.run(list_scannable_documents(vault, ['', ' ']))
        assert scannable == ['a.md']
