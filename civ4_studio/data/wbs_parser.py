"""Parser for Civilization IV WorldBuilder scenario files.

This module turns a ``.CivBeyondSwordWBSave`` stream into a ``Scenario``
tree and serializes a tree back into bytes. Parsing is a line-driven state
machine: ``Begin<X>`` opens a section, every other line inside it is
tokenized and applied to the open entity, and ``End<X>`` hands the finished
entity to its parent. Cities and units nest one level inside a plot.

Any malformed line fails the whole parse; there is no partial recovery.
"""

import io
import logging
from enum import Enum
from typing import IO, Iterable, Optional, Union

from civ4_studio.data.wbs_errors import (
    IncompleteScenarioError,
    ScenarioParseError,
    StructuralError,
)
from civ4_studio.data.wbs_generator import ScenarioGenerator
from civ4_studio.data.wbs_structs import (
    BEGIN_CITY,
    BEGIN_GAME,
    BEGIN_MAP,
    BEGIN_PLAYER,
    BEGIN_PLOT,
    BEGIN_TEAM,
    BEGIN_UNIT,
    DEFAULT_VERSION,
    END_CITY,
    END_GAME,
    END_MAP,
    END_PLAYER,
    END_PLOT,
    END_TEAM,
    END_UNIT,
    VERSION_PREFIX,
    City,
    Game,
    MapProperties,
    Player,
    Plot,
    Scenario,
    Team,
    Unit,
    WbsEntity,
    to_int,
)
from civ4_studio.data.wbs_tokenizer import tokenize_line

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "latin-1"


class ParserState(Enum):
    GLOBAL = "global"
    INSIDE_GAME = "game"
    INSIDE_TEAM = "team"
    INSIDE_PLAYER = "player"
    INSIDE_MAP = "map"
    INSIDE_PLOT = "plot"
    INSIDE_CITY = "city"
    INSIDE_UNIT = "unit"


# Sections that may be opened from the global context
_GLOBAL_SECTIONS = {
    BEGIN_GAME: (ParserState.INSIDE_GAME, Game),
    BEGIN_TEAM: (ParserState.INSIDE_TEAM, Team),
    BEGIN_PLAYER: (ParserState.INSIDE_PLAYER, Player),
    BEGIN_MAP: (ParserState.INSIDE_MAP, MapProperties),
    BEGIN_PLOT: (ParserState.INSIDE_PLOT, Plot),
}

# Sections that may be opened inside a plot
_PLOT_SECTIONS = {
    BEGIN_CITY: (ParserState.INSIDE_CITY, City),
    BEGIN_UNIT: (ParserState.INSIDE_UNIT, Unit),
}

_STRUCTURAL_TAGS = frozenset(
    [
        BEGIN_GAME, END_GAME, BEGIN_TEAM, END_TEAM, BEGIN_PLAYER, END_PLAYER,
        BEGIN_MAP, END_MAP, BEGIN_PLOT, END_PLOT, BEGIN_CITY, END_CITY,
        BEGIN_UNIT, END_UNIT,
    ]
)


class ScenarioParser:
    """Stateful line consumer building a ``Scenario``.

    Feed physical lines with ``feed_line`` and call ``finish`` at end of
    input. One parser instance reads one file.
    """

    def __init__(self, default_version: int = DEFAULT_VERSION) -> None:
        """Initialize parser state.

        Args:
            default_version: Version used when the file has no Version line
        """
        self.scenario = Scenario(version=default_version)
        self.state = ParserState.GLOBAL
        self.line_number = 0
        self._entity: Optional[WbsEntity] = None
        self._plot: Optional[Plot] = None
        self._game_closed = False
        self._last_content: Optional[str] = None

    def feed_line(self, raw_line: str) -> None:
        """Consume one physical line.

        Raises:
            ScenarioParseError: On any malformed content, with line context
        """
        self.line_number += 1
        content = raw_line.strip(" \t\r\n")
        if not content or content.startswith("#"):
            return

        self._last_content = content

        if self.state is ParserState.GLOBAL:
            self._handle_global(content)
        else:
            self._handle_section(content)

    def finish(self) -> Scenario:
        """Check the end-of-input conditions and return the tree.

        Raises:
            StructuralError: If a section is still open
            IncompleteScenarioError: If no game section was closed
        """
        if self.state is not ParserState.GLOBAL:
            raise StructuralError(
                f"unexpected end of input inside {self.state.value} section",
                self.line_number,
                self._last_content,
            )

        if not self._game_closed:
            raise IncompleteScenarioError(
                "no game info specified", self.line_number or None, self._last_content
            )

        real_players, placeholders = self.scenario.count_players()
        logger.info(f"Loaded {len(self.scenario.teams)} teams")
        logger.info(f"Loaded {real_players} players (+ {placeholders} player placeholders)")
        logger.info(f"Loaded {len(self.scenario.plots)} plots")

        return self.scenario

    def _handle_global(self, content: str) -> None:
        if content.startswith(VERSION_PREFIX):
            try:
                self.scenario.version = to_int("Version", content[len(VERSION_PREFIX):])
            except ScenarioParseError as e:
                raise e.with_context(self.line_number, content)
            return

        if content in _GLOBAL_SECTIONS:
            self.state, entity_class = _GLOBAL_SECTIONS[content]
            self._entity = entity_class()
            return

        if content in _STRUCTURAL_TAGS:
            raise StructuralError(
                f"'{content}' without an open section", self.line_number, content
            )

        raise StructuralError(
            f"cannot parse line in global context: '{content}'", self.line_number, content
        )

    def _handle_section(self, content: str) -> None:
        entity = self._entity

        if content == entity.END_TAG:
            self._close_section(content)
            return

        if self.state is ParserState.INSIDE_PLOT and content in _PLOT_SECTIONS:
            self._plot = entity
            self.state, entity_class = _PLOT_SECTIONS[content]
            self._entity = entity_class()
            return

        if content in _STRUCTURAL_TAGS:
            raise StructuralError(
                f"unexpected '{content}' inside {self.state.value} section",
                self.line_number,
                content,
            )

        pairs = tokenize_line(content, self.line_number)
        try:
            entity.unpack(pairs)
        except ScenarioParseError as e:
            raise e.with_context(self.line_number, content)

    def _close_section(self, content: str) -> None:
        entity = self._entity
        try:
            entity.validate()
        except ScenarioParseError as e:
            raise e.with_context(self.line_number, content)

        if self.state in (ParserState.INSIDE_CITY, ParserState.INSIDE_UNIT):
            if isinstance(entity, City):
                self._plot.cities.append(entity)
            else:
                self._plot.units.append(entity)
            self._entity = self._plot
            self._plot = None
            self.state = ParserState.INSIDE_PLOT
            return

        if isinstance(entity, Game):
            if self._game_closed:
                logger.warning(f"Line {self.line_number}: second game section replaces the first")
            self.scenario.game = entity
            self._game_closed = True
        elif isinstance(entity, MapProperties):
            if self.scenario.map is not None:
                logger.warning(f"Line {self.line_number}: second map section replaces the first")
            self.scenario.map = entity
        elif isinstance(entity, Team):
            self.scenario.teams.append(entity)
        elif isinstance(entity, Player):
            self.scenario.players.append(entity)
        elif isinstance(entity, Plot):
            self.scenario.plots.append(entity)

        logger.debug(f"Closed {self.state.value} section at line {self.line_number}")
        self._entity = None
        self.state = ParserState.GLOBAL


def parse_scenario(
    stream: Union[IO[bytes], IO[str], Iterable[Union[bytes, str]]],
    encoding: str = DEFAULT_ENCODING,
    default_version: int = DEFAULT_VERSION,
) -> Scenario:
    """Parse a WorldBuilder scenario from a stream.

    The caller owns the stream and is responsible for closing it.

    Args:
        stream: Binary or text file object, or any iterable of lines
        encoding: Encoding used to decode byte lines
        default_version: Version assigned when no Version line is present

    Returns:
        Parsed scenario tree

    Raises:
        ScenarioParseError: If the content is malformed or incomplete
    """
    logger.info("Parsing scenario contents...")

    parser = ScenarioParser(default_version=default_version)
    for raw_line in stream:
        if isinstance(raw_line, bytes):
            raw_line = raw_line.decode(encoding)
        parser.feed_line(raw_line)

    return parser.finish()


def parse_scenario_text(text: str, default_version: int = DEFAULT_VERSION) -> Scenario:
    """Parse a scenario held in memory as a string."""
    return parse_scenario(io.StringIO(text), default_version=default_version)


def serialize_scenario(scenario: Scenario, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Serialize a scenario tree into WorldBuilder file bytes.

    Args:
        scenario: Tree to write
        encoding: Output text encoding

    Returns:
        File content, tab-indented with one newline per line
    """
    generator = ScenarioGenerator()
    scenario.write_to(generator)
    data = generator.to_bytes(encoding)
    logger.debug(f"Generated {len(data)} bytes of scenario data")
    return data
