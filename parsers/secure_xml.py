"""Secure XML parsing utilities.

Every FDX document is read through ``parse_xml_safe`` so that DTDs, entity
expansion and external references are refused before any element reaches
the parser.
"""

import logging
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as SafeET
from defusedxml.common import DTDForbidden, EntitiesForbidden, ExternalReferenceForbidden

from core.exceptions import ParsingException

logger = logging.getLogger(__name__)

MAX_XML_SIZE = 10 * 1024 * 1024

_VIOLATIONS: dict[type[Exception], tuple[str, str]] = {
    DTDForbidden: ("dtd_forbidden", "XML contains forbidden DTD declaration"),
    EntitiesForbidden: (
        "entities_forbidden",
        "XML contains forbidden entity definitions (possible entity expansion attack)",
    ),
    ExternalReferenceForbidden: (
        "external_reference_forbidden",
        "XML contains forbidden external references (possible XXE attack)",
    ),
}


def _payload_size(content: str | bytes) -> int:
    return len(content.encode("utf-8")) if isinstance(content, str) else len(content)


def parse_xml_safe(content: str | bytes, *, max_size: int = MAX_XML_SIZE) -> Element:
    """Parse an XML document with defusedxml and return its root element.

    Raises ``ParsingException`` for oversized payloads, security violations
    and malformed markup; the underlying error is chained.
    """
    size = _payload_size(content)
    if size > max_size:
        raise ParsingException(
            f"XML payload exceeds size limit ({size} > {max_size} bytes)",
            details={"size": size, "max_size": max_size},
        )

    if isinstance(content, str):
        content = content.lstrip("\ufeff")

    try:
        return SafeET.fromstring(content, forbid_dtd=True)
    except (DTDForbidden, EntitiesForbidden, ExternalReferenceForbidden) as exc:
        reason, message = _VIOLATIONS[type(exc)]
        logger.warning("Rejected XML payload: %s", reason)
        raise ParsingException(message, details={"reason": reason}) from exc
    except SafeET.ParseError as exc:
        raise ParsingException(
            f"Malformed XML: {exc}",
            details={"reason": "parse_error"},
        ) from exc
    except ValueError as exc:
        raise ParsingException(
            f"XML parsing failed: {exc}",
            details={"reason": "unknown"},
        ) from exc
