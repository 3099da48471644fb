"""Custom exceptions for the screenplay parser."""

from typing import Any


class ScreenplayParserException(Exception):
    """Base exception for the screenplay parser."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ParsingException(ScreenplayParserException):
    """Raised when a script cannot be parsed."""

    pass


class FileReadException(ScreenplayParserException):
    """Raised when a script file cannot be read."""

    pass
