"""Pre-edit document snapshots with restoration."""
import secrets
from datetime import datetime
from pathlib import Path
from typing import List

from ..analyzer.vault import TEXT_ERRORS
from .manifest import Manifest


class SnapshotStore:
    """Keeps a copy of each document's text before the janitor rewrites it.

    Snapshots are a manual safety net, not a transaction: nothing is restored
    automatically when a run fails part-way.
    """

    def __init__(self, vault_root: str | Path, trash_dir: str | Path = ".janitor_trash"):
        """Initialize snapshot store.

        Args:
            vault_root: Vault root; snapshot paths are relative to it
            trash_dir: Path to trash directory (default: .janitor_trash)
        """
        self.vault_root = Path(vault_root)
        self.trash_dir = Path(trash_dir)
        self.trash_dir.mkdir(parents=True, exist_ok=True)
        self.manifest = Manifest(self.trash_dir)

    def snapshot(self, file_path: str, content: str, reason: str = "block_id_removal") -> str:
        """Copy a document's current text into the trash.

        Args:
            file_path: Vault-relative document path
            content: Text as it was read, before editing
            reason: Reason recorded in the manifest

        Returns:
            Snapshot ID for restoration
        """
        snapshot_id = self._generate_snapshot_id()

        snapshot_dir = self.trash_dir / snapshot_id
        snapshot_dir.mkdir(parents=True, exist_ok=True)
        # Suffix keeps snapshot copies out of any document scan
        trash_path = snapshot_dir / f"{Path(file_path).name}.snapshot"

        with open(trash_path, 'w', encoding='utf-8', errors=TEXT_ERRORS, newline='') as f:
            f.write(content)

        self.manifest.add_snapshot(
            snapshot_id=snapshot_id,
            file_path=file_path,
            trash_path=str(trash_path),
            reason=reason,
            content_hash=Manifest.calculate_content_hash(content)
        )

        return snapshot_id

    def restore(self, snapshot_id: str):
        """Write a snapshot back over its original document.

        Args:
            snapshot_id: Snapshot identifier

        Raises:
            ValueError: If snapshot ID not found
            IOError: If the snapshot copy is missing
        """
        record = self.manifest.get_snapshot(snapshot_id)

        if not record:
            raise ValueError(f"Snapshot ID not found: {snapshot_id}")

        # Restoring twice is a no-op
        if record.get("restored", False):
            return

        trash_path = Path(record["trash_path"])
        if not trash_path.exists():
            raise IOError(f"Snapshot not found in trash: {trash_path}")

        with open(trash_path, 'r', encoding='utf-8', errors=TEXT_ERRORS, newline='') as f:
            content = f.read()

        original_path = self.vault_root.joinpath(*record["file_path"].split('/'))
        original_path.parent.mkdir(parents=True, exist_ok=True)
        with open(original_path, 'w', encoding='utf-8', errors=TEXT_ERRORS, newline='') as f:
            f.write(content)

        self.manifest.mark_restored(snapshot_id)

    def restore_all(self, snapshot_ids: List[str]):
        """Restore multiple snapshots.

        Raises:
            IOError: If any restoration fails (will attempt to restore all)
        """
        errors = []

        for snapshot_id in snapshot_ids:
            try:
                self.restore(snapshot_id)
            except (ValueError, IOError) as e:
                errors.append(f"{snapshot_id}: {e}")

        if errors:
            raise IOError("Failed to restore some snapshots:\n" + "\n".join(errors))

    def get_trash_info(self) -> dict:
        all_snapshots = self.manifest.get_all_snapshots()
        unrestored = self.manifest.get_unrestored_snapshots()

        return {
            "total_snapshots": len(all_snapshots),
            "unrestored_count": len(unrestored),
            "restored_count": len(all_snapshots) - len(unrestored),
            "trash_dir": str(self.trash_dir),
            "snapshots": all_snapshots,
        }

    def _generate_snapshot_id(self) -> str:
        """Generate unique snapshot ID in format YYYYMMDD_HHMMSS_randomhex."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{timestamp}_{secrets.token_hex(3)}"
