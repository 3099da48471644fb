"""Script parsers for FDX (Final Draft XML) and Fountain / plain-text formats."""

from parsers.base import ParserBase, get_parser, parse_screenplay
from parsers.detect import detect_format
from parsers.fdx import FDXParser, parse_fdx
from parsers.fountain import FountainParser, parse_fountain
from parsers.reader import read_screenplay_file
from parsers.scene_heading import HeadingComponents, parse_scene_heading

__all__ = [
    "FDXParser",
    "FountainParser",
    "HeadingComponents",
    "ParserBase",
    "detect_format",
    "get_parser",
    "parse_fdx",
    "parse_fountain",
    "parse_scene_heading",
    "parse_screenplay",
    "read_screenplay_file",
]
