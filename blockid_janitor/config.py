"""Configuration management for the Block ID Janitor.

Loads environment variables (optionally from a ``.env`` file in the vault)
and the persisted settings file holding the excluded extensions.
"""
import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from dotenv import load_dotenv

__version__ = "1.0.0"

DEFAULT_EXCLUDED_EXTENSIONS = ['.excalidraw.md']


def parse_extensions(value: str) -> List[str]:
    """Split a comma-separated extension list and trim each entry.

    Example:
        ".excalidraw.md, .canvas.md" -> ['.excalidraw.md', '.canvas.md']
    """
    return [ext.strip() for ext in value.split(',')]


def is_excluded(file_path: str, excluded_extensions: Iterable[str]) -> bool:
    """Check a document path against the extension deny-list.

    Empty entries are ignored; an empty list excludes nothing.
    """
    return any(file_path.endswith(ext) for ext in excluded_extensions if ext)


@dataclass
class Settings:
    """User settings persisted as JSON next to the vault."""
    excluded_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_EXTENSIONS)
    )


def load_settings(settings_path: str | Path) -> Settings:
    """Load settings, with stored values taking precedence over defaults.

    A missing or unreadable file yields the defaults.
    """
    settings_path = Path(settings_path)
    data = {}
    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (IOError, json.JSONDecodeError):
        pass

    settings = Settings()
    extensions = data.get('excluded_extensions') if isinstance(data, dict) else None
    if isinstance(extensions, list):
        settings.excluded_extensions = [str(ext) for ext in extensions]
    return settings


def save_settings(settings: Settings, settings_path: str | Path):
    """Write settings to disk atomically."""
    settings_path = Path(settings_path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = settings_path.with_suffix('.tmp')
    with open(temp_path, 'w', encoding='utf-8') as f:
        json.dump(asdict(settings), f, indent=2, ensure_ascii=False)

    temp_path.replace(settings_path)


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, vault_root: str | Path = "."):
        """Initialize config by loading the vault's .env file, if any.

        Args:
            vault_root: Vault root directory
        """
        self.vault_root = Path(vault_root)
        load_dotenv(self.vault_root / ".env")

    @property
    def trash_path(self) -> Path:
        """Directory holding pre-edit snapshots.

        Relative values are taken from the vault root.
        """
        return self.vault_root / os.getenv("BLOCKID_JANITOR_TRASH_PATH", ".janitor_trash")

    @property
    def settings_path(self) -> Path:
        return self.vault_root / os.getenv("BLOCKID_JANITOR_SETTINGS_FILE", ".blockid-janitor.json")

    @property
    def excluded_extensions_override(self) -> Optional[List[str]]:
        """Excluded extensions from BLOCKID_JANITOR_EXCLUDED_EXTENSIONS.

        Returns:
            Parsed list, or None if the variable is unset
        """
        value = os.getenv("BLOCKID_JANITOR_EXCLUDED_EXTENSIONS")
        if value is None:
            return None
        return parse_extensions(value)

    def load_settings(self) -> Settings:
        return load_settings(self.settings_path)

    def save_settings(self, settings: Settings):
        save_settings(settings, self.settings_path)

    def excluded_extensions(self, cli_value: Optional[str] = None) -> List[str]:
        """Resolve the effective deny-list.

        Priority:
        1. Command line value
        2. BLOCKID_JANITOR_EXCLUDED_EXTENSIONS
        3. Settings file (defaults if absent)
        """
        if cli_value is not None:
            return parse_extensions(cli_value)
        override = self.excluded_extensions_override
        if override is not None:
            return override
        return self.load_settings().excluded_extensions
