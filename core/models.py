"""Pydantic models for parsed screenplay documents.

All models are frozen: a ``ParsedDocument`` is produced in full by one parse
call and never mutated afterwards.  Fields serialize under camelCase aliases
(``sceneNumber``, ``timeOfDay``, ``intExt``, ``rawText``) with
``model_dump(by_alias=True)``.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "Untitled Screenplay"

# Trailing character extensions such as "(V.O.)" or "(CONT'D)", which may
# be spread over several lines in FDX text runs
_EXTENSION_RE = re.compile(r"\s*\(.*\)\s*$", re.DOTALL)


def normalize_character_name(cue: str) -> str:
    """Strip a trailing parenthetical extension and upper-case a character cue."""
    return _EXTENSION_RE.sub("", cue).strip().upper()


class ScriptFormat(str, Enum):
    """Supported script formats."""

    FDX = "fdx"  # Final Draft XML (structured markup)
    FOUNTAIN = "fountain"  # Fountain / plain text (line oriented)


class LocationType(str, Enum):
    """Interior/exterior designation from scene headings."""

    INT = "INT"
    EXT = "EXT"
    INT_EXT = "INT/EXT"
    NONE = ""


class TimeOfDay(str, Enum):
    """Time-of-day tag extracted from scene headings."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    DUSK = "DUSK"
    DAWN = "DAWN"
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    CONTINUOUS = "CONTINUOUS"
    LATER = "LATER"
    SAME = "SAME"
    NONE = ""


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DialogueLine(_FrozenModel):
    """A single dialogue line spoken by a character."""

    character: str = Field(..., description="Speaking character name, extension stripped")
    parenthetical: str | None = Field(
        None, description="Parenthetical direction, stored without its outer brackets"
    )
    text: str = Field(..., description="Dialogue text joined onto one line")


class Scene(_FrozenModel):
    """A single parsed scene."""

    scene_number: int = Field(..., ge=1, description="1-based scene number in encounter order")
    heading: str = Field(..., description="Original scene heading text")
    location: str = Field(..., description="Heading without INT/EXT prefix and time of day")
    time_of_day: TimeOfDay = Field(TimeOfDay.NONE, description="Time of day")
    int_ext: LocationType = Field(LocationType.NONE, description="INT/EXT designation")
    content: str = Field(default="", description="Accumulated scene text in source order")
    dialogue: tuple[DialogueLine, ...] = Field(default=(), description="Dialogue lines")
    actions: tuple[str, ...] = Field(default=(), description="Action paragraphs")


class ParsedDocument(_FrozenModel):
    """Complete parsed screenplay."""

    title: str = Field(default=DEFAULT_TITLE, description="Script title")
    author: str | None = Field(None, description="Script author if available")
    format: ScriptFormat = Field(..., description="Source format (fdx/fountain)")
    scenes: tuple[Scene, ...] = Field(default=(), description="Scenes in script order")
    characters: tuple[str, ...] = Field(
        default=(), description="Distinct character names in order of first appearance"
    )
    raw_text: str = Field(default="", description="Concatenated scene text")

    @model_validator(mode="after")
    def validate_structure(self) -> "ParsedDocument":
        """Enforce dense scene numbering and a clean character roster."""
        for index, scene in enumerate(self.scenes):
            if scene.scene_number != index + 1:
                raise ValueError(
                    f"Scene at position {index} has number {scene.scene_number}, "
                    f"expected {index + 1}"
                )

        if len(set(self.characters)) != len(self.characters):
            raise ValueError("Character roster contains duplicate names")
        for name in self.characters:
            if _EXTENSION_RE.search(name):
                raise ValueError(f"Character name carries an extension: {name!r}")

        return self

    @property
    def total_scenes(self) -> int:
        return len(self.scenes)

    def dialogue_for(self, character: str) -> list[DialogueLine]:
        """Return every line spoken by *character*, in script order."""
        name = normalize_character_name(character)
        return [
            line
            for scene in self.scenes
            for line in scene.dialogue
            if line.character == name
        ]
