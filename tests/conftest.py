"""Shared fixtures for vault-based tests."""
import pytest

ENV_VARS = (
    "BLOCKID_JANITOR_TRASH_PATH",
    "BLOCKID_JANITOR_SETTINGS_FILE",
    "BLOCKID_JANITOR_EXCLUDED_EXTENSIONS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Start every test without janitor variables and undo any .env loading."""
    for name in ENV_VARS:
        # setenv first so teardown removes values that load_dotenv may add
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def make_vault(tmp_path):
    """Create Markdown files under tmp_path from a {relative_path: text or bytes} dict."""
    def _make(documents):
        for relative, text in documents.items():
            path = tmp_path.joinpath(*relative.split('/'))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(text if isinstance(text, bytes) else text.encode('utf-8'))
        return tmp_path
    return _make
