#!/usr/bin/env python3
"""Performance benchmarking script for the Block ID Janitor."""

import asyncio
import random
import sys
import tempfile
import time
from pathlib import Path

from blockid_janitor.analyzer.vault import FileSystemVault
from blockid_janitor.janitor import BlockIdJanitor


def build_vault(root: Path, documents: int, ids_per_document: int, seed: int = 7):
    """Write a synthetic vault where roughly half of the block IDs are linked."""
    rng = random.Random(seed)
    for doc in range(documents):
        lines = []
        for block in range(ids_per_document):
            lines.append(f"Paragraph {block} of note {doc}. ^n{doc}-b{block}")
            target_doc = rng.randrange(documents)
            target_block = rng.randrange(ids_per_document)
            lines.append(f"See [[Note {target_doc}#^n{target_doc}-b{target_block}|here]].")
        folder = root / f"folder{doc % 10}"
        folder.mkdir(parents=True, exist_ok=True)
        (folder / f"Note {doc}.md").write_text("\n".join(lines), encoding="utf-8")


def benchmark_scan(documents: int, ids_per_document: int) -> dict:
    """Build a vault and time one scan over it."""
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        build_vault(root, documents, ids_per_document)
        janitor = BlockIdJanitor(FileSystemVault(root))

        start = time.time()
        result = asyncio.run(janitor.scan())
        elapsed = time.time() - start

    return {
        'documents': documents,
        'block_ids': result.definitions_found,
        'unused': len(result.unused),
        'total_time': elapsed,
        'per_document': elapsed / documents if documents else 0,
    }


if __name__ == "__main__":
    sizes = [(100, 20), (1000, 20), (5000, 10)]
    if len(sys.argv) > 1:
        sizes = [(int(sys.argv[1]), int(sys.argv[2]) if len(sys.argv) > 2 else 20)]

    results = [benchmark_scan(documents, ids) for documents, ids in sizes]

    print("\n" + "="*80)
    print("SCAN BENCHMARK")
    print("="*80)
    print(f"{'Documents':<12} {'Block IDs':<12} {'Unused':<10} {'Total Time':<12} {'Per Doc':<12} {'Status':<10}")
    print("-"*80)

    for r in results:
        status = "PASS" if r['per_document'] < 0.01 else "SLOW"
        print(f"{r['documents']:<12} {r['block_ids']:<12} {r['unused']:<10} "
              f"{r['total_time']:<12.2f} {r['per_document']:<12.5f} {status:<10}")

    print("-"*80)
    print("\nTHRESHOLD: scan must stay under 10ms per document\n")
