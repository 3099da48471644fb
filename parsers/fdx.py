"""Final Draft XML (.fdx) parser.

Extracts scenes, characters, dialogue and action text from FDX files using
``defusedxml`` for secure XML parsing.
"""

import logging
import re
import time
from collections.abc import Iterator
from enum import Enum
from xml.etree.ElementTree import Element

from core.config import Settings, get_settings
from core.exceptions import ParsingException
from core.models import ParsedDocument, Scene, ScriptFormat, normalize_character_name
from parsers.base import ParserBase
from parsers.builder import DocumentBuilder
from parsers.secure_xml import parse_xml_safe

logger = logging.getLogger(__name__)

# "Written by", "Screenplay by", "by" lines on a Final Draft title page
_BY_LINE_RE = re.compile(r"^(?:(?:written|screenplay|story|teleplay)\s+)?by\s*:?$", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\s*\n\s*")


class ParagraphType(str, Enum):
    """FDX paragraph types the parser understands."""

    SCENE_HEADING = "Scene Heading"
    ACTION = "Action"
    CHARACTER = "Character"
    DIALOGUE = "Dialogue"
    PARENTHETICAL = "Parenthetical"
    TRANSITION = "Transition"


def _paragraph_type(para: Element) -> ParagraphType | None:
    try:
        return ParagraphType((para.get("Type") or "").strip())
    except ValueError:
        return None


def _paragraph_text(para: Element) -> str:
    """Extract the full text content of a ``<Paragraph>`` element.

    Final Draft splits a paragraph into several ``<Text>`` runs whenever the
    styling changes; the runs carry their own spacing and are concatenated.
    """
    return "".join(text_el.text or "" for text_el in para.findall("Text")).strip()


def _strip_brackets(text: str) -> str:
    if text.startswith("(") and text.endswith(")"):
        return text[1:-1].strip()
    return text


def _render_raw_text(scenes: list[Scene]) -> str:
    return "\n\n".join(f"{scene.heading}\n\n{scene.content}" for scene in scenes)


class FDXParser(ParserBase):
    """Parser for Final Draft XML (.fdx) screenplay files."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.FDX

    def parse(self, content: str | bytes) -> ParsedDocument:
        """Parse FDX text into a ``ParsedDocument``.

        Raises ``ParsingException`` for malformed or unsafe XML and for
        documents that are not Final Draft files.  No partial result is
        returned.
        """
        t0 = time.monotonic()

        root = parse_xml_safe(content, max_size=self._settings.parser_max_xml_size)
        self._validate_fdx_root(root)

        title, author = self._extract_title_page(root)
        builder = DocumentBuilder(format=ScriptFormat.FDX)
        self._walk_paragraphs(self._iter_paragraphs(root), builder)
        document = builder.finish(title=title, author=author, render_raw_text=_render_raw_text)

        elapsed = time.monotonic() - t0
        logger.info(
            "FDX parsed: %d scenes, %d characters in %.2fs",
            document.total_scenes,
            len(document.characters),
            elapsed,
        )
        return document

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_fdx_root(root: Element) -> None:
        """Ensure the root element looks like a valid FDX document."""
        if root.tag != "FinalDraft":
            raise ParsingException(
                f"Not a valid FDX file: expected root <FinalDraft>, got <{root.tag}>",
                details={"root_tag": root.tag},
            )
        if root.find("Content") is None:
            raise ParsingException(
                "FDX file has no <Content> element",
                details={"root_tag": root.tag},
            )

    @staticmethod
    def _extract_title_page(root: Element) -> tuple[str | None, str | None]:
        """Return ``(title, author)`` from the ``<TitlePage>`` section.

        Elements typed ``Title``/``Author`` win.  Otherwise the first title
        page paragraph is the title and the paragraph after a "Written by"
        line is the author.
        """
        title_page = root.find("TitlePage")
        if title_page is None:
            return None, None

        title: str | None = None
        author: str | None = None
        for el in title_page.iter():
            el_type = el.get("Type")
            if el_type not in ("Title", "Author"):
                continue
            text = "".join(el.itertext()).strip()
            if not text:
                continue
            if el_type == "Title" and title is None:
                title = text
            elif el_type == "Author" and author is None:
                author = text

        texts = [t for t in (_paragraph_text(p) for p in title_page.iter("Paragraph")) if t]
        if title is None:
            title = next((t for t in texts if not _BY_LINE_RE.match(t)), None)
        if author is None:
            for previous, following in zip(texts, texts[1:]):
                if _BY_LINE_RE.match(previous):
                    author = following
                    break

        return title, author

    @staticmethod
    def _iter_paragraphs(root: Element) -> Iterator[Element]:
        """Yield body ``<Paragraph>`` elements in document order.

        Includes paragraphs nested inside ``<DualDialogue>`` blocks.
        """
        content = root.find("Content")
        if content is None:
            return
        yield from content.iter("Paragraph")

    @staticmethod
    def _walk_paragraphs(paragraphs: Iterator[Element], builder: DocumentBuilder) -> None:
        """Fold paragraphs into *builder*, one scene at a time."""
        last_character: str | None = None
        skipped = 0

        for para in paragraphs:
            kind = _paragraph_type(para)
            text = _paragraph_text(para)
            if not text:
                continue
            if kind is None:
                skipped += 1
                continue

            scene = builder.current

            if kind is ParagraphType.SCENE_HEADING:
                builder.open_scene(text)
                last_character = None
            elif kind is ParagraphType.ACTION:
                last_character = None
                if scene is not None:
                    scene.add_action(text)
                    scene.append_content(f"{text}\n\n")
            elif kind is ParagraphType.CHARACTER:
                last_character = normalize_character_name(text) or None
                if last_character:
                    builder.add_character(last_character)
                if scene is not None:
                    scene.append_content(f"{text}\n")
            elif kind is ParagraphType.DIALOGUE:
                if scene is not None:
                    if last_character:
                        scene.add_dialogue(last_character, _LINE_BREAK_RE.sub(" ", text))
                    scene.append_content(f"{text}\n\n")
            elif kind is ParagraphType.PARENTHETICAL:
                note = _strip_brackets(text)
                if scene is not None:
                    scene.set_last_parenthetical(note)
                    scene.append_content(f"({note})\n")
            elif kind is ParagraphType.TRANSITION:
                last_character = None
                if scene is not None:
                    scene.append_content(f"{text}\n\n")

        if skipped:
            logger.debug("Skipped %d FDX paragraphs of unsupported type", skipped)


def parse_fdx(content: str | bytes) -> ParsedDocument:
    """Parse Final Draft XML directly, bypassing format detection."""
    return FDXParser().parse(content)
