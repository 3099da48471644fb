"""Accumulators shared by the FDX and Fountain parsers.

A parse walks its input once with a single ``DocumentBuilder``.  The builder
moves through three states: no open scene, an open ``SceneBuilder``, and
sealing the open scene when the next heading arrives or the input ends.
Sealed scenes are frozen ``Scene`` values and are never touched again.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from core.models import (
    DEFAULT_TITLE,
    DialogueLine,
    ParsedDocument,
    Scene,
    ScriptFormat,
)
from parsers.scene_heading import parse_scene_heading


@dataclass(slots=True)
class _PendingLine:
    character: str
    text: str
    parenthetical: str | None = None


@dataclass(slots=True)
class SceneBuilder:
    """Mutable accumulator for the scene currently being read."""

    scene_number: int
    heading: str
    content_parts: list[str] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)
    dialogue: list[_PendingLine] = field(default_factory=list)

    def append_content(self, text: str) -> None:
        self.content_parts.append(text)

    def add_action(self, text: str) -> None:
        self.actions.append(text)

    def add_dialogue(
        self, character: str, text: str, parenthetical: str | None = None
    ) -> None:
        self.dialogue.append(_PendingLine(character, text, parenthetical))

    def set_last_parenthetical(self, parenthetical: str) -> bool:
        """Attach *parenthetical* to the most recent dialogue line, if any."""
        if not self.dialogue:
            return False
        self.dialogue[-1].parenthetical = parenthetical
        return True

    def seal(self) -> Scene:
        """Freeze the accumulated state into a ``Scene``."""
        hc = parse_scene_heading(self.heading)
        return Scene(
            scene_number=self.scene_number,
            heading=self.heading,
            location=hc.location,
            time_of_day=hc.time_of_day,
            int_ext=hc.location_type,
            content="".join(self.content_parts),
            dialogue=tuple(
                DialogueLine(
                    character=d.character,
                    parenthetical=d.parenthetical,
                    text=d.text,
                )
                for d in self.dialogue
            ),
            actions=tuple(self.actions),
        )


@dataclass(slots=True)
class DocumentBuilder:
    """Per-parse accumulator for scenes and the character roster."""

    format: ScriptFormat
    scenes: list[Scene] = field(default_factory=list)
    current: SceneBuilder | None = None
    # dict keys double as an insertion-ordered set
    _characters: dict[str, None] = field(default_factory=dict)

    @property
    def characters(self) -> tuple[str, ...]:
        return tuple(self._characters)

    def add_character(self, name: str) -> None:
        if name:
            self._characters.setdefault(name, None)

    def open_scene(self, heading: str) -> SceneBuilder:
        """Seal any open scene and start the next one."""
        self.seal_current()
        self.current = SceneBuilder(scene_number=len(self.scenes) + 1, heading=heading)
        return self.current

    def seal_current(self) -> None:
        if self.current is not None:
            self.scenes.append(self.current.seal())
            self.current = None

    def finish(
        self,
        *,
        title: str | None,
        author: str | None,
        render_raw_text: Callable[[list[Scene]], str],
    ) -> ParsedDocument:
        """Seal the last scene and build the immutable ``ParsedDocument``."""
        self.seal_current()
        return ParsedDocument(
            title=title or DEFAULT_TITLE,
            author=author or None,
            format=self.format,
            scenes=tuple(self.scenes),
            characters=self.characters,
            raw_text=render_raw_text(self.scenes),
        )
