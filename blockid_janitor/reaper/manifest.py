"""Snapshot manifest management for restoring documents edited by the janitor."""
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional


class Manifest:
    """Manage the JSON manifest that records document snapshots."""

    VERSION = "1.0"

    def __init__(self, trash_dir: str | Path):
        """Initialize manifest.

        Args:
            trash_dir: Path to trash directory
        """
        self.trash_dir = Path(trash_dir)
        self.manifest_path = self.trash_dir / "manifest.json"
        self._ensure_manifest_exists()

    def _ensure_manifest_exists(self):
        """Create manifest file if it doesn't exist."""
        self.trash_dir.mkdir(parents=True, exist_ok=True)

        if not self.manifest_path.exists():
            self._write_manifest({"version": self.VERSION, "snapshots": []})

    def _read_manifest(self) -> Dict:
        """Read manifest from disk.

        Returns:
            Manifest dictionary
        """
        try:
            with open(self.manifest_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (IOError, json.JSONDecodeError):
            return {"version": self.VERSION, "snapshots": []}

    def _write_manifest(self, data: Dict):
        """Write manifest to disk atomically.

        Args:
            data: Manifest dictionary to write
        """
        temp_path = self.manifest_path.with_suffix('.tmp')
        with open(temp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        temp_path.replace(self.manifest_path)

    def add_snapshot(self, snapshot_id: str, file_path: str, trash_path: str,
                     reason: str, content_hash: str):
        """Add snapshot record to manifest.

        Args:
            snapshot_id: Unique snapshot identifier
            file_path: Vault-relative path of the snapshotted document
            trash_path: Path of the copy in the trash directory
            reason: Why the snapshot was taken (e.g., 'block_id_removal')
            content_hash: SHA256 of the snapshotted text
        """
        manifest = self._read_manifest()

        manifest.setdefault("snapshots", []).append({
            "id": snapshot_id,
            "file_path": file_path,
            "trash_path": str(trash_path),
            "created_at": datetime.now().isoformat(),
            "reason": reason,
            "content_hash": content_hash,
            "restored": False
        })
        self._write_manifest(manifest)

    def get_snapshot(self, snapshot_id: str) -> Optional[Dict]:
        """Get snapshot record by ID, or None if not found."""
        for snapshot in self.get_all_snapshots():
            if snapshot["id"] == snapshot_id:
                return snapshot
        return None

    def mark_restored(self, snapshot_id: str):
        manifest = self._read_manifest()

        for snapshot in manifest.get("snapshots", []):
            if snapshot["id"] == snapshot_id:
                snapshot["restored"] = True
                break

        self._write_manifest(manifest)

    def get_all_snapshots(self) -> List[Dict]:
        return self._read_manifest().get("snapshots", [])

    def get_unrestored_snapshots(self) -> List[Dict]:
        return [s for s in self.get_all_snapshots() if not s.get("restored", False)]

    @staticmethod
    def calculate_content_hash(content: str) -> str:
        """Calculate SHA256 hash of document text.

        Returns:
            SHA256 hash as hex string
        """
        return hashlib.sha256(content.encode('utf-8', 'surrogateescape')).hexdigest()
