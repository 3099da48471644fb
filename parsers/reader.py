"""Read a screenplay file from disk and parse it."""

import asyncio
import logging
from pathlib import Path

from core.config import Settings, get_settings
from core.exceptions import FileReadException, ParsingException
from core.models import ParsedDocument
from parsers.base import parse_screenplay
from parsers.detect import is_supported_filename

logger = logging.getLogger(__name__)

# PDFs go through text extraction before they reach this library
_EXTRACTION_REQUIRED = frozenset({".pdf"})


def _read_text(path: Path, max_size: int) -> str:
    size = path.stat().st_size
    if size > max_size:
        raise ParsingException(
            f"Script file exceeds size limit ({size} > {max_size} bytes)",
            details={"path": str(path), "size": size, "max_size": max_size},
        )
    return path.read_text(encoding="utf-8-sig", errors="replace")


async def read_screenplay_file(
    path: str | Path, settings: Settings | None = None
) -> ParsedDocument:
    """Read *path* as text and parse it with format detection.

    Raises ``FileReadException`` if the file cannot be read and
    ``ParsingException`` for PDFs, oversized files or unparsable FDX.
    """
    settings = settings or get_settings()
    path = Path(path)

    if path.suffix.lower() in _EXTRACTION_REQUIRED:
        logger.warning("Rejected %s: PDF scripts need text extraction first", path.name)
        raise ParsingException(
            "PDF scripts must be converted to text before parsing",
            details={"path": str(path), "format": "pdf"},
        )

    if not is_supported_filename(path.name):
        logger.debug("Unrecognized extension on %s, detecting format from content", path.name)

    try:
        content = await asyncio.to_thread(_read_text, path, settings.parser_max_file_size)
    except OSError as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        raise FileReadException(
            "Failed to read file",
            details={"path": str(path), "reason": str(exc)},
        ) from exc

    return parse_screenplay(content, path.name)
