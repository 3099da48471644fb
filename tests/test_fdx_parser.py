"""Tests for the FDX parser and secure XML parsing."""

import json
from pathlib import Path

import pytest

from core.config import Settings
from core.exceptions import ParsingException
from core.models import DEFAULT_TITLE, LocationType, ParsedDocument, ScriptFormat, TimeOfDay
from parsers.fdx import FDXParser, parse_fdx
from parsers.secure_xml import parse_xml_safe

FIXTURES = Path(__file__).parent / "fixtures" / "fdx"


def _read_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


def _fdx(*paragraphs: tuple[str, str]) -> str:
    body = "".join(
        f'<Paragraph Type="{ptype}"><Text>{text}</Text></Paragraph>' for ptype, text in paragraphs
    )
    return f'<?xml version="1.0"?><FinalDraft><Content>{body}</Content></FinalDraft>'


# ===================================================================
# Secure XML Parser
# ===================================================================


class TestSecureXML:
    """Tests for parsers.secure_xml.parse_xml_safe."""

    def test_valid_xml(self):
        el = parse_xml_safe(b"<root><child>text</child></root>")
        assert el.tag == "root"

    def test_accepts_str_with_declaration(self):
        el = parse_xml_safe('<?xml version="1.0" encoding="UTF-8"?><root/>')
        assert el.tag == "root"

    def test_oversized_xml_rejected(self):
        with pytest.raises(ParsingException, match="exceeds size limit"):
            parse_xml_safe(b"<r>" + b"x" * 100 + b"</r>", max_size=50)

    def test_xxe_attack_blocked(self):
        with pytest.raises(ParsingException) as exc_info:
            parse_xml_safe(_read_fixture("xxe_attack.fdx"))
        assert exc_info.value.details["reason"] == "dtd_forbidden"

    def test_entity_bomb_blocked(self):
        with pytest.raises(ParsingException):
            parse_xml_safe(_read_fixture("entity_bomb.fdx"))

    def test_malformed_xml_raises(self):
        with pytest.raises(ParsingException, match="Malformed XML") as exc_info:
            parse_xml_safe(_read_fixture("malformed.fdx"))
        assert exc_info.value.details["reason"] == "parse_error"
        assert exc_info.value.__cause__ is not None


# ===================================================================
# FDX Parser
# ===================================================================


class TestFDXParser:
    """Tests for parsers.fdx.FDXParser."""

    def test_simple_scene(self):
        result = FDXParser().parse(_read_fixture("simple_scene.fdx"))

        assert isinstance(result, ParsedDocument)
        assert result.format == ScriptFormat.FDX
        assert result.title == DEFAULT_TITLE
        assert result.author is None
        assert result.total_scenes == 1

        scene = result.scenes[0]
        assert scene.scene_number == 1
        assert scene.heading == "INT. OFFICE - DAY"
        assert scene.location == "OFFICE"
        assert scene.int_ext == LocationType.INT
        assert scene.time_of_day == TimeOfDay.DAY
        assert scene.actions == ("Anna sits at her desk, staring at the screen.",)
        assert len(scene.dialogue) == 1
        assert scene.dialogue[0].character == "ANNA"
        assert scene.dialogue[0].text == "Not again."
        assert result.characters == ("ANNA",)

    def test_simple_scene_content_and_raw_text(self):
        result = parse_fdx(_read_fixture("simple_scene.fdx"))
        scene = result.scenes[0]

        assert scene.content == (
            "Anna sits at her desk, staring at the screen.\n\n"
            "ANNA\n"
            "Not again.\n\n"
        )
        assert result.raw_text == f"INT. OFFICE - DAY\n\n{scene.content}"

    def test_multi_scene(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))

        assert result.total_scenes == 5
        assert [s.scene_number for s in result.scenes] == [1, 2, 3, 4, 5]
        assert [s.location for s in result.scenes] == [
            "PARK",
            "RESTAURANT",
            "STREET",
            "CAR",
            "BEACH",
        ]
        assert result.scenes[2].time_of_day == TimeOfDay.CONTINUOUS
        assert result.scenes[3].int_ext == LocationType.INT_EXT
        assert result.scenes[3].time_of_day == TimeOfDay.LATER
        assert result.scenes[4].time_of_day == TimeOfDay.DAWN

    def test_characters_deduplicated_without_extensions(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))

        assert result.characters == ("DAVID", "MARIA")
        park = result.scenes[0]
        assert [(d.character, d.text) for d in park.dialogue] == [
            ("DAVID", "Morning, Maria!"),
            ("MARIA", "You're late."),
        ]

    def test_parenthetical_attaches_to_last_dialogue_line(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))
        restaurant = result.scenes[1]

        maria_line, david_line = restaurant.dialogue
        assert maria_line.character == "MARIA"
        assert maria_line.parenthetical == "nervous"
        assert david_line.character == "DAVID"
        assert david_line.parenthetical is None
        assert "(nervous)\n" in restaurant.content

    def test_paragraphs_before_first_heading_dropped(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))
        assert "FADE IN:" not in result.raw_text

    def test_transition_only_touches_content(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))
        park = result.scenes[0]

        assert park.content.endswith("CUT TO:\n\n")
        assert "CUT TO:" not in park.actions

    def test_unsupported_and_empty_paragraphs_skipped(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))

        assert result.scenes[2].actions == ("Rain begins to fall.",)
        assert "CLOSE ON MARIA" not in result.scenes[2].content
        assert result.scenes[3].actions == ()
        assert result.scenes[3].content == ""

    def test_raw_text_joins_headings_and_content(self):
        result = parse_fdx(_read_fixture("multi_scene.fdx"))
        expected = "\n\n".join(f"{s.heading}\n\n{s.content}" for s in result.scenes)
        assert result.raw_text == expected

    def test_character_then_dialogue(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. OFFICE - DAY"),
                ("Character", "JOHN"),
                ("Dialogue", "Hello there."),
            )
        )
        assert len(result.scenes[0].dialogue) == 1
        line = result.scenes[0].dialogue[0]
        assert line.character == "JOHN"
        assert line.text == "Hello there."
        assert line.parenthetical is None

    def test_extension_stripped_from_speaker(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. BOOTH - NIGHT"),
                ("Character", "SARAH (V.O.)"),
                ("Dialogue", "Can you hear me?"),
            )
        )
        assert result.characters == ("SARAH",)
        assert result.scenes[0].dialogue[0].character == "SARAH"
        assert "SARAH (V.O.)\n" in result.scenes[0].content

    def test_extensions_on_separate_lines_stripped(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. ROOM - DAY"),
                ("Character", "JOHN (V.O.)\n(CONT'D)"),
                ("Dialogue", "Still here."),
            )
        )
        assert result.characters == ("JOHN",)
        assert result.scenes[0].dialogue[0].character == "JOHN"

    def test_dialogue_after_action_has_no_speaker(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. OFFICE - DAY"),
                ("Character", "JOHN"),
                ("Action", "He pauses."),
                ("Dialogue", "Orphaned line."),
            )
        )
        scene = result.scenes[0]
        assert scene.dialogue == ()
        assert "Orphaned line.\n\n" in scene.content

    def test_parenthetical_before_any_dialogue_is_content_only(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. OFFICE - DAY"),
                ("Character", "JOHN"),
                ("Parenthetical", "(whispering)"),
                ("Dialogue", "Hello."),
            )
        )
        scene = result.scenes[0]
        assert scene.dialogue[0].character == "JOHN"
        assert scene.dialogue[0].parenthetical is None
        assert scene.content == "JOHN\n(whispering)\nHello.\n\n"

    def test_multiline_dialogue_joined(self):
        result = parse_fdx(
            _fdx(
                ("Scene Heading", "INT. OFFICE - DAY"),
                ("Character", "JOHN"),
                ("Dialogue", "First line\n   second line"),
            )
        )
        assert result.scenes[0].dialogue[0].text == "First line second line"

    def test_title_page_paragraphs(self):
        result = parse_fdx(_read_fixture("title_page.fdx"))

        assert result.title == "THE LONG ROAD"
        assert result.author == "Jane Doe"
        assert result.total_scenes == 1
        assert result.scenes[0].time_of_day == TimeOfDay.MORNING

    def test_typed_title_page(self):
        result = parse_fdx(_read_fixture("typed_title_page.fdx"))

        assert result.title == "Night Shift"
        assert result.author == "Sam Rivera"
        assert result.scenes[0].location == "HOSPITAL CORRIDOR"

    def test_dual_dialogue(self):
        result = parse_fdx(_read_fixture("dual_dialogue.fdx"))

        assert result.characters == ("TOM", "LISA")
        assert [(d.character, d.text) for d in result.scenes[0].dialogue] == [
            ("TOM", "Surprise!"),
            ("LISA", "Happy birthday!"),
        ]

    def test_empty_content(self):
        result = parse_fdx("<FinalDraft><Content/></FinalDraft>")

        assert result.scenes == ()
        assert result.characters == ()
        assert result.raw_text == ""
        assert result.title == DEFAULT_TITLE

    def test_deterministic(self):
        content = _read_fixture("multi_scene.fdx")
        assert parse_fdx(content) == parse_fdx(content)

    def test_malformed_raises(self):
        with pytest.raises(ParsingException):
            parse_fdx(_read_fixture("malformed.fdx"))

    def test_fountain_text_raises(self):
        with pytest.raises(ParsingException):
            parse_fdx("INT. OFFICE - DAY\n\nJOHN\nHello there.\n")

    def test_invalid_root_tag_raises(self):
        with pytest.raises(ParsingException, match="Not a valid FDX file"):
            parse_fdx("<NotFinalDraft><Content></Content></NotFinalDraft>")

    def test_missing_content_raises(self):
        with pytest.raises(ParsingException, match="no <Content> element"):
            parse_fdx("<FinalDraft></FinalDraft>")

    def test_xxe_attack_blocked(self):
        with pytest.raises(ParsingException):
            parse_fdx(_read_fixture("xxe_attack.fdx"))

    def test_size_limit_from_settings(self):
        parser = FDXParser(Settings(_env_file=None, parser_max_xml_size=64))
        with pytest.raises(ParsingException, match="exceeds size limit"):
            parser.parse(_read_fixture("simple_scene.fdx"))

    def test_parsed_document_serializable(self):
        result = parse_fdx(_read_fixture("simple_scene.fdx"))
        dumped = result.model_dump(mode="json", by_alias=True)

        loaded = json.loads(json.dumps(dumped))
        assert loaded["scenes"][0]["sceneNumber"] == 1
        assert loaded["scenes"][0]["intExt"] == "INT"
        assert loaded["scenes"][0]["timeOfDay"] == "DAY"
        assert loaded["rawText"] == result.raw_text
        assert loaded["format"] == "fdx"
