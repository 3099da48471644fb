"""Fountain / plain-text screenplay parser.

Plain text carries no markup, so structure is inferred from line shape:

    INT. OFFICE - DAY          scene heading (INT./EXT./I/E. prefix or a
                               leading "." forcing a heading)
    JOHN (V.O.)                character cue: all caps, short
    (quietly)                  parenthetical inside a dialogue block
    Hello there.               dialogue until a blank line
    He leaves.                 anything else is action

A short all-caps action beat is read as a character cue.  That is a known
limit of the heuristic and is left as is.  Parsing never fails: input
without any scene heading becomes a single scene with an empty heading.
"""

import logging
import re
import time

from core.config import Settings, get_settings
from core.models import ParsedDocument, Scene, ScriptFormat, normalize_character_name
from parsers.base import ParserBase
from parsers.builder import DocumentBuilder, SceneBuilder

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(
    r"^(?:INT\./EXT\.|INT/EXT\.|EXT\./INT\.|EXT/INT\.|I/E\.|INT\.|EXT\.|\.(?=[^.\s]))",
    re.IGNORECASE,
)

# ASCII and Latin-1 capitals
_CAPS = "A-ZÀ-ÖØ-Þ"
_CUE_RE = re.compile(rf"^[{_CAPS}][{_CAPS}\s]+(?:\s*\(.*\))?$")

_TITLE_RE = re.compile(r"^Title:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
_AUTHOR_RE = re.compile(r"^Authors?:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
_CREDIT_RE = re.compile(r"^(?:Credit|By):[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)

_TITLE_PAGE_KEY_RE = re.compile(
    r"^(?:Title|Credit|Authors?|By|Source|Draft date|Date|Contact|Copyright|Notes):",
    re.IGNORECASE,
)


def _is_heading(line: str) -> bool:
    return bool(_HEADING_RE.match(line))


def _metadata_value(text: str, pattern: re.Pattern[str]) -> str | None:
    """Return the value of a title page key, following indented continuation lines."""
    match = pattern.search(text)
    if match is None:
        return None
    value = match.group(1).strip()
    if value:
        return value

    continuation: list[str] = []
    for line in text[match.end() :].split("\n")[1:]:
        if not line.strip() or not line[:1].isspace():
            break
        continuation.append(line.strip())
    return " ".join(continuation) or None


def _drop_title_page(lines: list[str]) -> list[str]:
    """Remove a leading ``Key: value`` title page block."""
    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or not _TITLE_PAGE_KEY_RE.match(lines[start].strip()):
        return lines
    end = start
    while end < len(lines) and lines[end].strip():
        end += 1
    return lines[end:]


def _render_raw_text(scenes: list[Scene]) -> str:
    return "\n".join(scene.content for scene in scenes)


class FountainParser(ParserBase):
    """Heuristic parser for Fountain and plain-text screenplays."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.FOUNTAIN

    def parse(self, content: str) -> ParsedDocument:
        """Parse plain text into a ``ParsedDocument``.  Never raises."""
        t0 = time.monotonic()

        text = content.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
        lines = text.split("\n")

        body_start = next(
            (i for i, line in enumerate(lines) if _is_heading(line.strip())), None
        )
        if body_start is None:
            preamble = text
            body = _drop_title_page(lines)
        else:
            preamble = "\n".join(lines[:body_start])
            body = lines[body_start:]

        title = _metadata_value(preamble, _TITLE_RE)
        author = _metadata_value(preamble, _AUTHOR_RE) or _metadata_value(preamble, _CREDIT_RE)

        builder = DocumentBuilder(format=ScriptFormat.FOUNTAIN)
        self._walk_lines(body, builder)
        document = builder.finish(title=title, author=author, render_raw_text=_render_raw_text)

        elapsed = time.monotonic() - t0
        logger.info(
            "Fountain parsed: %d scenes, %d characters in %.2fs",
            document.total_scenes,
            len(document.characters),
            elapsed,
        )
        return document

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_cue(self, line: str) -> bool:
        return 0 < len(line) < self._settings.parser_max_cue_length and bool(
            _CUE_RE.match(line)
        )

    def _walk_lines(self, lines: list[str], builder: DocumentBuilder) -> None:
        """Fold body lines into *builder*."""
        i = 0
        while i < len(lines):
            line = lines[i].strip()

            if _is_heading(line):
                heading = line[1:].strip() if line.startswith(".") else line
                scene = builder.open_scene(heading)
                scene.append_content(f"{heading}\n\n")
                i += 1
                continue

            if not line:
                i += 1
                continue

            scene = builder.current
            if scene is None:
                # Only reachable when the document has no scene heading at all
                scene = builder.open_scene("")

            if self._is_cue(line):
                name = normalize_character_name(line)
                builder.add_character(name)
                scene.append_content(f"{line}\n")
                i = self._read_dialogue_block(lines, i + 1, name, scene)
                continue

            scene.add_action(line)
            scene.append_content(f"{line}\n")
            i += 1

    def _read_dialogue_block(
        self, lines: list[str], i: int, character: str, scene: SceneBuilder
    ) -> int:
        """Consume the dialogue block after a cue and return the next line index.

        Only one parenthetical is kept per block; a later one replaces an
        earlier one.
        """
        parenthetical: str | None = None
        parts: list[str] = []

        while i < len(lines):
            line = lines[i].strip()

            if line.startswith("(") and line.endswith(")"):
                parenthetical = line[1:-1].strip() or None
                scene.append_content(f"{line}\n")
                i += 1
                continue

            if not line or _is_heading(line) or self._is_cue(line):
                break

            parts.append(line)
            scene.append_content(f"{line}\n")
            i += 1

        if parts:
            scene.add_dialogue(character, " ".join(parts), parenthetical)
        scene.append_content("\n")
        return i


def parse_fountain(content: str) -> ParsedDocument:
    """Parse Fountain / plain text directly, bypassing format detection."""
    return FountainParser().parse(content)
