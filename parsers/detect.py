"""Script format detection from filename extension and content signature."""

from pathlib import PurePath

from core.models import ScriptFormat

FDX_EXTENSIONS = frozenset({".fdx"})
FOUNTAIN_EXTENSIONS = frozenset({".fountain", ".txt", ".spmd"})


def _suffix(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def is_supported_filename(filename: str) -> bool:
    """Return True if *filename* has a recognized script extension."""
    return _suffix(filename) in FDX_EXTENSIONS | FOUNTAIN_EXTENSIONS


def detect_format(content: str, filename: str | None = None) -> ScriptFormat:
    """Choose the parser for a script.

    Order: filename extension, then an XML declaration or ``<FinalDraft``
    root in the content, then Fountain as the fallback.  Never raises.
    """
    if filename:
        ext = _suffix(filename)
        if ext in FDX_EXTENSIONS:
            return ScriptFormat.FDX
        if ext in FOUNTAIN_EXTENSIONS:
            return ScriptFormat.FOUNTAIN

    if content.lstrip("\ufeff").lstrip().startswith("<?xml") or "<FinalDraft" in content:
        return ScriptFormat.FDX

    return ScriptFormat.FOUNTAIN
