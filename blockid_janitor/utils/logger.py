"""Terminal-safe output helpers and logging setup.

Detects terminal encoding and provides ASCII alternatives for the Unicode
icons used in CLI output, so non-UTF-8 terminals don't crash on them.
"""
import locale
import logging
import sys

from rich.logging import RichHandler

# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    '✓': '[OK]',     # check mark
    '✗': '[FAIL]',   # ballot x
    '⚠': '[WARN]',   # warning sign
    '⚡': '[!]',      # high voltage
    '→': '->',
    '←': '<-',
    '…': '...',
    '•': '*',
    '│': '|',
    '─': '-',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        pass

    return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str, utf8_capable: bool = None) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons
        utf8_capable: Override terminal detection

    Returns:
        str: Sanitized text safe for current terminal
    """
    if utf8_capable is None:
        utf8_capable = is_utf8_capable()
    if utf8_capable:
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)

    return sanitized


def printable(text: str) -> str:
    """Replace undecodable bytes carried as lone surrogates with U+FFFD for display."""
    return text.encode('utf-8', 'surrogateescape').decode('utf-8', 'replace')


def configure_logging(verbose: bool = False, console=None):
    """Route library logging through Rich.

    Args:
        verbose: DEBUG level when True, WARNING otherwise
        console: Rich console to log to (defaults to stderr)
    """
    handler = RichHandler(console=console, show_path=False, markup=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
