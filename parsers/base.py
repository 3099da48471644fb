"""Abstract base class for script parsers, parser factory and dispatcher."""

import logging
from abc import ABC, abstractmethod

from core.exceptions import ParsingException
from core.models import ParsedDocument, ScriptFormat

logger = logging.getLogger(__name__)


class ParserBase(ABC):
    """Interface that every script parser must implement.

    Parsing is synchronous and pure: the same input always yields the same
    ``ParsedDocument``.
    """

    @abstractmethod
    def parse(self, content: str) -> ParsedDocument:
        """Parse script text and return a ``ParsedDocument``."""

    @property
    @abstractmethod
    def supported_format(self) -> ScriptFormat:
        """The ``ScriptFormat`` this parser handles."""


def get_parser(fmt: str | ScriptFormat) -> ParserBase:
    """Return the appropriate parser for *fmt* (e.g. ``"fdx"``, ``"fountain"``).

    Raises ``ParsingException`` for unsupported formats.
    """
    from parsers.fdx import FDXParser
    from parsers.fountain import FountainParser

    _registry: dict[str, type[ParserBase]] = {
        ScriptFormat.FDX.value: FDXParser,
        ScriptFormat.FOUNTAIN.value: FountainParser,
    }

    key = fmt.value if isinstance(fmt, ScriptFormat) else fmt.lower()
    parser_cls = _registry.get(key)
    if parser_cls is None:
        raise ParsingException(
            f"Unsupported script format: {fmt}",
            details={"format": str(fmt), "supported": list(_registry.keys())},
        )
    return parser_cls()


def parse_screenplay(content: str, filename: str | None = None) -> ParsedDocument:
    """Detect the format of *content* and parse it.

    A ``.fdx`` filename always selects the FDX parser, so non-XML content
    under that name raises ``ParsingException``.  Without a known extension,
    content starting with ``<?xml`` is also routed to the FDX parser; well
    formed XML whose root is not ``<FinalDraft>`` therefore raises
    ``ParsingException`` instead of yielding an empty document.
    """
    from parsers.detect import detect_format

    fmt = detect_format(content, filename)
    logger.debug("Dispatching %s to %s parser", filename or "<content>", fmt.value)
    return get_parser(fmt).parse(content)
