"""Scenario tree and entity codecs for the WorldBuilder save format.

Each entity knows its own field grammar: the closed set of keys it accepts
(``FIELDS``), how one tokenized line is applied to it (``unpack``) and the
fixed order in which it writes itself back (``write_to``). The write order is
what the game expects and must not change.

Field descriptions are taken from the Civilization IV modding wiki
(modiki.civfanatics.com) and Dale's "In depth look at the WBS file".
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Tuple

from civ4_studio.data.wbs_errors import (
    StructuralError,
    UnknownKeyError,
    ValueConversionError,
)
from civ4_studio.data.wbs_generator import ScenarioGenerator

VERSION_PREFIX = "Version="
DEFAULT_VERSION = 11

BEGIN_GAME = "BeginGame"
END_GAME = "EndGame"
BEGIN_TEAM = "BeginTeam"
END_TEAM = "EndTeam"
BEGIN_PLAYER = "BeginPlayer"
END_PLAYER = "EndPlayer"
BEGIN_MAP = "BeginMap"
END_MAP = "EndMap"
BEGIN_PLOT = "BeginPlot"
END_PLOT = "EndPlot"
BEGIN_CITY = "BeginCity"
END_CITY = "EndCity"
BEGIN_UNIT = "BeginUnit"
END_UNIT = "EndUnit"

# CivType/LeaderType of an empty player slot
NONE_PLAYER = "NONE"

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")


class PlotHeight:
    """PlotType values."""

    PEAK = 0
    HILLS = 1
    FLAT = 2
    WATER = 3


class RiverDirection:
    """RiverNSDirection / RiverWEDirection values (direction of flow)."""

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3


def to_str(key: str, raw: str) -> str:
    return raw


def to_int(key: str, raw: str) -> int:
    """Strict base-10 integer conversion.

    Raises:
        ValueConversionError: If ``raw`` is not an integer literal
    """
    try:
        if not _INT_PATTERN.match(raw):
            raise ValueError(f"invalid integer literal: {raw!r}")
        return int(raw, 10)
    except ValueError as e:
        raise ValueConversionError(key, raw, "integer") from e


def to_uint(key: str, raw: str) -> int:
    value = to_int(key, raw)
    if value < 0:
        raise ValueConversionError(key, raw, "non-negative integer")
    return value


def to_bool(key: str, raw: str) -> bool:
    """Only the literal ``1`` is true."""
    return raw == "1"


@dataclass(frozen=True)
class WbsField:
    """One key of an entity's field grammar."""

    key: str
    attr: str
    convert: Callable[[str, str], Any] = to_str
    repeated: bool = False


def _fields(*fields: WbsField) -> Dict[str, WbsField]:
    return {f.key: f for f in fields}


class WbsEntity:
    """Common unpack logic shared by all scenario sections.

    ``unpack`` validates and converts every pair of a line before touching
    the entity, so a line with an unknown key or a bad value leaves the
    entity unchanged.
    """

    SECTION: ClassVar[str] = ""
    BEGIN_TAG: ClassVar[str] = ""
    END_TAG: ClassVar[str] = ""
    FIELDS: ClassVar[Dict[str, WbsField]] = {}

    def lookup_field(self, key: str) -> Optional[WbsField]:
        return self.FIELDS.get(key)

    def unpack(self, pairs: Iterable[Tuple[str, str]]) -> None:
        """Apply one tokenized line to this entity.

        Args:
            pairs: (key, value) pairs from ``tokenize_line``

        Raises:
            UnknownKeyError: If a key is not part of this entity's grammar
            ValueConversionError: If a value cannot be converted
        """
        staged = []
        for key, raw in pairs:
            wbs_field = self.lookup_field(key)
            if wbs_field is None:
                raise UnknownKeyError(key, self.SECTION)
            staged.append((wbs_field, wbs_field.convert(key, raw)))

        for wbs_field, value in staged:
            self._apply(wbs_field, value)

    def _apply(self, wbs_field: WbsField, value: Any) -> None:
        if wbs_field.repeated:
            getattr(self, wbs_field.attr).append(value)
        else:
            setattr(self, wbs_field.attr, value)

    def validate(self) -> None:
        """Check cross-field constraints once the section is closed."""

    def write_to(self, generator: ScenarioGenerator) -> None:
        raise NotImplementedError

    def to_wbs_format(self) -> str:
        """Serialize this entity alone, as its own section."""
        generator = ScenarioGenerator()
        self.write_to(generator)
        return generator.getvalue()


def _check_aligned(section: str, first_key: str, first: List[Any], second_key: str, second: List[Any]) -> None:
    if len(first) != len(second):
        raise StructuralError(
            f"{section} has {len(first)} {first_key} but {len(second)} {second_key} entries"
        )


@dataclass
class Game(WbsEntity):
    """Scenario-wide settings (``BeginGame`` section).

    Era, Speed and Calendar reference CIV4EraInfos.xml,
    CIV4GameSpeedInfo.xml and CIV4BasicInfos.xml. Defining any Victory locks
    out every other victory type. StartYear is negative for BC dates.
    """

    SECTION: ClassVar[str] = "game"
    BEGIN_TAG: ClassVar[str] = BEGIN_GAME
    END_TAG: ClassVar[str] = END_GAME
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("Era", "era"),
        WbsField("Speed", "speed"),
        WbsField("Calendar", "calendar"),
        WbsField("Victory", "victory_conditions", repeated=True),
        WbsField("GameTurn", "game_turn", to_uint),
        WbsField("MaxCityElimination", "max_city_elimination", to_uint),
        WbsField("NumAdvancedStartPoints", "num_advanced_start_points", to_uint),
        WbsField("TargetScore", "target_score", to_uint),
        WbsField("StartYear", "start_year", to_int),
        WbsField("Description", "description"),
        WbsField("ModPath", "mod_path"),
        WbsField("Tutorial", "tutorial", to_bool),
        WbsField("Option", "options", repeated=True),
        WbsField("MPOption", "mp_options", repeated=True),
        WbsField("ForceControl", "force_controls", repeated=True),
        WbsField("MaxTurns", "max_turns", to_uint),
    )

    era: str = ""
    speed: str = ""
    calendar: str = ""
    victory_conditions: List[str] = field(default_factory=list)
    game_turn: Optional[int] = None
    max_city_elimination: Optional[int] = None
    num_advanced_start_points: Optional[int] = None
    target_score: Optional[int] = None
    start_year: Optional[int] = None
    description: str = ""
    mod_path: str = ""
    tutorial: bool = False
    options: List[str] = field(default_factory=list)
    mp_options: List[str] = field(default_factory=list)
    force_controls: List[str] = field(default_factory=list)
    max_turns: Optional[int] = None

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_GAME, END_GAME)
        generator.add_key_value("Era", self.era)
        generator.add_key_value("Speed", self.speed)
        generator.add_key_value("Calendar", self.calendar)
        generator.add_key_value_list("Victory", self.victory_conditions)
        generator.add_key_value("GameTurn", self.game_turn)
        generator.add_key_value("MaxCityElimination", self.max_city_elimination)
        generator.add_key_value("NumAdvancedStartPoints", self.num_advanced_start_points)
        generator.add_key_value("TargetScore", self.target_score)
        generator.add_key_value("StartYear", self.start_year)
        generator.add_key_value("Description", self.description)
        generator.add_key_value("ModPath", self.mod_path)
        generator.add_key_value_bool("Tutorial", self.tutorial)
        generator.add_key_value_list("Option", self.options)
        generator.add_key_value_list("MPOption", self.mp_options)
        generator.add_key_value_list("ForceControl", self.force_controls)
        generator.add_key_value("MaxTurns", self.max_turns)
        generator.end_section()


@dataclass
class Team(WbsEntity):
    """Team relations (``BeginTeam`` section).

    Relation lists hold team ids. The ids are not resolved against the
    scenario's teams.
    """

    SECTION: ClassVar[str] = "team"
    BEGIN_TAG: ClassVar[str] = BEGIN_TEAM
    END_TAG: ClassVar[str] = END_TEAM
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("TeamID", "team_id", to_uint),
        WbsField("Tech", "techs", repeated=True),
        WbsField("ContactWithTeam", "contact_with_teams", to_uint, repeated=True),
        WbsField("AtWar", "at_war", to_uint, repeated=True),
        WbsField("PermanentWarPeace", "permanent_war_peace", to_uint, repeated=True),
        WbsField("OpenBordersWithTeam", "open_borders_with_teams", to_uint, repeated=True),
        WbsField("DefensivePactWithTeam", "defensive_pact_with_teams", to_uint, repeated=True),
        WbsField("ProjectType", "project_types", repeated=True),
        WbsField("RevealMap", "reveal_map", to_bool),
    )

    team_id: Optional[int] = None
    techs: List[str] = field(default_factory=list)
    contact_with_teams: List[int] = field(default_factory=list)
    at_war: List[int] = field(default_factory=list)
    permanent_war_peace: List[int] = field(default_factory=list)
    open_borders_with_teams: List[int] = field(default_factory=list)
    defensive_pact_with_teams: List[int] = field(default_factory=list)
    project_types: List[str] = field(default_factory=list)
    reveal_map: bool = False

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_TEAM, END_TEAM)
        generator.add_key_value("TeamID", self.team_id)
        generator.add_key_value_list("Tech", self.techs)
        generator.add_key_value_list("ContactWithTeam", self.contact_with_teams)
        generator.add_key_value_list("AtWar", self.at_war)
        generator.add_key_value_list("PermanentWarPeace", self.permanent_war_peace)
        generator.add_key_value_list("OpenBordersWithTeam", self.open_borders_with_teams)
        generator.add_key_value_list("DefensivePactWithTeam", self.defensive_pact_with_teams)
        generator.add_key_value_list("ProjectType", self.project_types)
        generator.add_key_value_bool("RevealMap", self.reveal_map)
        generator.end_section()


@dataclass
class Player(WbsEntity):
    """One civilization slot (``BeginPlayer`` section).

    ``attitude_players[i]`` and ``attitude_extras[i]`` form one record: the
    attitude change towards that player.
    """

    SECTION: ClassVar[str] = "player"
    BEGIN_TAG: ClassVar[str] = BEGIN_PLAYER
    END_TAG: ClassVar[str] = END_PLAYER
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("CivDesc", "civ_desc"),
        WbsField("CivShortDesc", "civ_short_desc"),
        WbsField("LeaderName", "leader_name"),
        WbsField("CivAdjective", "civ_adjective"),
        WbsField("FlagDecal", "flag_decal"),
        WbsField("WhiteFlag", "white_flag", to_bool),
        WbsField("LeaderType", "leader_type"),
        WbsField("CivType", "civ_type"),
        WbsField("Team", "team", to_uint),
        WbsField("Handicap", "handicap"),
        WbsField("Color", "color"),
        WbsField("ArtStyle", "art_style"),
        WbsField("PlayableCiv", "playable_civ", to_bool),
        WbsField("MinorNationStatus", "minor_nation_status", to_bool),
        WbsField("StartingGold", "starting_gold", to_int),
        WbsField("RandomStartLocation", "random_start_location", to_bool),
        WbsField("StartingX", "starting_x", to_int),
        WbsField("StartingY", "starting_y", to_int),
        WbsField("StateReligion", "state_religion"),
        WbsField("StartingEra", "starting_era"),
        WbsField("CityList", "city_list", repeated=True),
        WbsField("CivicOption", "civic_options", repeated=True),
        WbsField("Civic", "civics", repeated=True),
        WbsField("AttitudePlayer", "attitude_players", to_uint, repeated=True),
        WbsField("AttitudeExtra", "attitude_extras", to_int, repeated=True),
    )

    civ_desc: str = ""
    civ_short_desc: str = ""
    leader_name: str = ""
    civ_adjective: str = ""
    flag_decal: str = ""
    white_flag: bool = False
    leader_type: str = ""
    civ_type: str = ""
    team: Optional[int] = None
    handicap: str = ""
    color: str = ""
    art_style: str = ""
    playable_civ: bool = False
    minor_nation_status: bool = False
    starting_gold: Optional[int] = None
    random_start_location: bool = False
    starting_x: Optional[int] = None
    starting_y: Optional[int] = None
    state_religion: str = ""
    starting_era: str = ""
    city_list: List[str] = field(default_factory=list)
    civic_options: List[str] = field(default_factory=list)
    civics: List[str] = field(default_factory=list)
    attitude_players: List[int] = field(default_factory=list)
    attitude_extras: List[int] = field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        """True for an empty slot (both civilization and leader are NONE)."""
        return self.civ_type == NONE_PLAYER and self.leader_type == NONE_PLAYER

    @property
    def attitudes(self) -> List[Tuple[int, int]]:
        return list(zip(self.attitude_players, self.attitude_extras))

    def validate(self) -> None:
        _check_aligned(
            "player", "AttitudePlayer", self.attitude_players, "AttitudeExtra", self.attitude_extras
        )

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_PLAYER, END_PLAYER)
        generator.add_key_value("CivDesc", self.civ_desc)
        generator.add_key_value("CivShortDesc", self.civ_short_desc)
        generator.add_key_value("LeaderName", self.leader_name)
        generator.add_key_value("CivAdjective", self.civ_adjective)
        generator.add_key_value("FlagDecal", self.flag_decal)
        generator.add_key_value_bool("WhiteFlag", self.white_flag)
        generator.add_key_value("LeaderType", self.leader_type)
        generator.add_key_value("CivType", self.civ_type)
        generator.add_key_value("Team", self.team)
        generator.add_key_value("Handicap", self.handicap)
        generator.add_key_value("Color", self.color)
        generator.add_key_value("ArtStyle", self.art_style)
        generator.add_key_value_bool("PlayableCiv", self.playable_civ)
        generator.add_key_value_bool("MinorNationStatus", self.minor_nation_status)
        generator.add_key_value("StartingGold", self.starting_gold)
        generator.add_key_value_bool("RandomStartLocation", self.random_start_location)
        generator.add_key_value_group(("StartingX", self.starting_x), ("StartingY", self.starting_y))
        generator.add_key_value("StateReligion", self.state_religion)
        generator.add_key_value("StartingEra", self.starting_era)
        generator.add_key_value_list("CityList", self.city_list)
        generator.add_key_value_list("CivicOption", self.civic_options)
        generator.add_key_value_list("Civic", self.civics)
        generator.add_key_value_list("AttitudePlayer", self.attitude_players)
        generator.add_key_value_list("AttitudeExtra", self.attitude_extras)
        generator.end_section()


@dataclass
class MapProperties(WbsEntity):
    """Map dimensions and world settings (``BeginMap`` section).

    This section uses lower-case keys with spaces, e.g. ``grid width``.
    """

    SECTION: ClassVar[str] = "map"
    BEGIN_TAG: ClassVar[str] = BEGIN_MAP
    END_TAG: ClassVar[str] = END_MAP
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("grid width", "grid_width", to_uint),
        WbsField("grid height", "grid_height", to_uint),
        WbsField("top latitude", "top_latitude", to_int),
        WbsField("bottom latitude", "bottom_latitude", to_int),
        WbsField("wrap X", "wrap_x", to_int),
        WbsField("wrap Y", "wrap_y", to_int),
        WbsField("world size", "world_size"),
        WbsField("climate", "climate"),
        WbsField("sealevel", "sea_level"),
        WbsField("num plots written", "num_plots_written", to_uint),
        WbsField("num signs written", "num_signs_written", to_uint),
        WbsField("Randomize Resources", "randomize_resources", to_bool),
    )

    grid_width: Optional[int] = None
    grid_height: Optional[int] = None
    top_latitude: Optional[int] = None
    bottom_latitude: Optional[int] = None
    wrap_x: Optional[int] = None
    wrap_y: Optional[int] = None
    world_size: str = ""
    climate: str = ""
    sea_level: str = ""
    num_plots_written: Optional[int] = None
    num_signs_written: Optional[int] = None
    randomize_resources: bool = False

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_MAP, END_MAP)
        generator.add_key_value("grid width", self.grid_width)
        generator.add_key_value("grid height", self.grid_height)
        generator.add_key_value("top latitude", self.top_latitude)
        generator.add_key_value("bottom latitude", self.bottom_latitude)
        generator.add_key_value("wrap X", self.wrap_x)
        generator.add_key_value("wrap Y", self.wrap_y)
        generator.add_key_value("world size", self.world_size)
        generator.add_key_value("climate", self.climate)
        generator.add_key_value("sealevel", self.sea_level)
        generator.add_key_value("num plots written", self.num_plots_written)
        generator.add_key_value("num signs written", self.num_signs_written)
        generator.add_key_value_bool("Randomize Resources", self.randomize_resources)
        generator.end_section()


@dataclass
class Unit(WbsEntity):
    """A unit placed on a plot (``BeginUnit`` inside ``BeginPlot``)."""

    SECTION: ClassVar[str] = "unit"
    BEGIN_TAG: ClassVar[str] = BEGIN_UNIT
    END_TAG: ClassVar[str] = END_UNIT
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("UnitType", "unit_type"),
        WbsField("UnitOwner", "unit_owner", to_int),
        WbsField("Level", "level", to_int),
        WbsField("Experience", "experience", to_int),
        WbsField("PromotionType", "promotion_types", repeated=True),
        WbsField("UnitAIType", "unit_ai_type"),
        WbsField("Damage", "damage", to_uint),
        WbsField("FacingDirection", "facing_direction", to_int),
    )

    unit_type: str = ""
    unit_owner: Optional[int] = None
    level: Optional[int] = None
    experience: Optional[int] = None
    promotion_types: List[str] = field(default_factory=list)
    unit_ai_type: str = ""
    damage: Optional[int] = None
    facing_direction: Optional[int] = None

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_UNIT, END_UNIT)
        generator.add_key_value_group(("UnitType", self.unit_type), ("UnitOwner", self.unit_owner))
        generator.add_key_value_group(("Level", self.level), ("Experience", self.experience))
        generator.add_key_value_list("PromotionType", self.promotion_types)
        generator.add_key_value("UnitAIType", self.unit_ai_type)
        generator.add_key_value("Damage", self.damage)
        generator.add_key_value("FacingDirection", self.facing_direction)
        generator.end_section()


_PLAYER_CULTURE_PATTERN = re.compile(r"^Player([0-9]+)Culture$")


@dataclass
class City(WbsEntity):
    """A city placed on a plot (``BeginCity`` inside ``BeginPlot``).

    Only one production target is used by the game. ``player_culture`` maps
    a player id to that player's culture points in the city, written as
    ``Player<N>Culture=<points>``.
    """

    SECTION: ClassVar[str] = "city"
    BEGIN_TAG: ClassVar[str] = BEGIN_CITY
    END_TAG: ClassVar[str] = END_CITY
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("CityOwner", "city_owner", to_uint),
        WbsField("CityName", "city_name"),
        WbsField("CityPopulation", "city_population", to_uint),
        WbsField("ProductionUnit", "production_unit"),
        WbsField("ProductionBuilding", "production_building"),
        WbsField("ProductionProject", "production_project"),
        WbsField("ProductionProcess", "production_process"),
        WbsField("BuildingType", "building_types", repeated=True),
        WbsField("ReligionType", "religion_types", repeated=True),
        WbsField("HolyCityReligionType", "holy_city_religion_types", repeated=True),
        WbsField("ScriptData", "script_data"),
    )

    city_owner: Optional[int] = None
    city_name: str = ""
    city_population: Optional[int] = None
    production_unit: str = ""
    production_building: str = ""
    production_project: str = ""
    production_process: str = ""
    building_types: List[str] = field(default_factory=list)
    religion_types: List[str] = field(default_factory=list)
    holy_city_religion_types: List[str] = field(default_factory=list)
    script_data: str = ""
    player_culture: Dict[int, int] = field(default_factory=dict)

    def unpack(self, pairs: Iterable[Tuple[str, str]]) -> None:
        regular = []
        culture = []
        for key, raw in pairs:
            match = _PLAYER_CULTURE_PATTERN.match(key)
            if match:
                culture.append((int(match.group(1)), to_uint(key, raw)))
            else:
                regular.append((key, raw))

        # raises before any culture entry is stored
        super().unpack(regular)

        for player_id, points in culture:
            self.player_culture[player_id] = points

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_CITY, END_CITY)
        generator.add_key_value("CityOwner", self.city_owner)
        generator.add_key_value("CityName", self.city_name)
        generator.add_key_value("CityPopulation", self.city_population)
        generator.add_key_value("ProductionUnit", self.production_unit)
        generator.add_key_value("ProductionBuilding", self.production_building)
        generator.add_key_value("ProductionProject", self.production_project)
        generator.add_key_value("ProductionProcess", self.production_process)
        generator.add_key_value_list("BuildingType", self.building_types)
        generator.add_key_value_list("ReligionType", self.religion_types)
        generator.add_key_value_list("HolyCityReligionType", self.holy_city_religion_types)
        generator.add_key_value("ScriptData", self.script_data)
        for player_id in sorted(self.player_culture):
            generator.add_key_value(f"Player{player_id}Culture", self.player_culture[player_id])
        generator.end_section()


@dataclass
class Plot(WbsEntity):
    """One map tile (``BeginPlot`` section) with its units and cities.

    Plot coordinates use lower-case ``x``/``y`` keys; (0, 0) is the bottom
    left tile. ``isNOfRiver`` puts a river on the bottom edge and pairs with
    ``RiverWEDirection``; ``isWOfRiver`` puts one on the right edge and pairs
    with ``RiverNSDirection``. ``feature_types[i]`` and
    ``feature_varieties[i]`` describe one terrain feature.
    """

    SECTION: ClassVar[str] = "plot"
    BEGIN_TAG: ClassVar[str] = BEGIN_PLOT
    END_TAG: ClassVar[str] = END_PLOT
    FIELDS: ClassVar[Dict[str, WbsField]] = _fields(
        WbsField("x", "x", to_uint),
        WbsField("y", "y", to_uint),
        WbsField("Landmark", "landmark"),
        WbsField("ScriptData", "script_data"),
        WbsField("isNOfRiver", "is_n_of_river", to_bool),
        WbsField("isWOfRiver", "is_w_of_river", to_bool),
        WbsField("RiverNSDirection", "river_ns_direction", to_int),
        WbsField("RiverWEDirection", "river_we_direction", to_int),
        WbsField("StartingPlot", "starting_plot", to_bool),
        WbsField("BonusType", "bonus_type"),
        WbsField("ImprovementType", "improvement_type"),
        WbsField("FeatureType", "feature_types", repeated=True),
        WbsField("FeatureVariety", "feature_varieties", repeated=True),
        WbsField("RouteType", "route_type"),
        WbsField("TerrainType", "terrain_type"),
        WbsField("PlotType", "plot_type", to_uint),
        WbsField("TeamReveal", "team_reveal", to_uint, repeated=True),
    )

    x: Optional[int] = None
    y: Optional[int] = None
    landmark: str = ""
    script_data: str = ""
    is_n_of_river: bool = False
    is_w_of_river: bool = False
    river_ns_direction: Optional[int] = None
    river_we_direction: Optional[int] = None
    starting_plot: bool = False
    bonus_type: str = ""
    improvement_type: str = ""
    feature_types: List[str] = field(default_factory=list)
    feature_varieties: List[str] = field(default_factory=list)
    route_type: str = ""
    terrain_type: str = ""
    plot_type: Optional[int] = None
    team_reveal: List[int] = field(default_factory=list)
    units: List[Unit] = field(default_factory=list)
    cities: List[City] = field(default_factory=list)

    @property
    def features(self) -> List[Tuple[str, str]]:
        return list(zip(self.feature_types, self.feature_varieties))

    def validate(self) -> None:
        _check_aligned(
            "plot", "FeatureType", self.feature_types, "FeatureVariety", self.feature_varieties
        )

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.start_section(BEGIN_PLOT, END_PLOT)
        generator.add_key_value_group(("x", self.x), ("y", self.y))
        generator.add_key_value("Landmark", self.landmark)
        generator.add_key_value("ScriptData", self.script_data)
        generator.add_flag("isNOfRiver", self.is_n_of_river)
        generator.add_key_value("RiverWEDirection", self.river_we_direction)
        generator.add_flag("isWOfRiver", self.is_w_of_river)
        generator.add_key_value("RiverNSDirection", self.river_ns_direction)
        generator.add_key_value_bool("StartingPlot", self.starting_plot)
        generator.add_key_value("BonusType", self.bonus_type)
        generator.add_key_value("ImprovementType", self.improvement_type)
        # both members are always written, even when empty
        for feature_type, feature_variety in self.features:
            generator.add_comma_separated_values(
                f"FeatureType={feature_type}", f"FeatureVariety={feature_variety}"
            )
        generator.add_key_value("RouteType", self.route_type)
        generator.add_key_value("TerrainType", self.terrain_type)
        generator.add_key_value("PlotType", self.plot_type)
        for unit in self.units:
            unit.write_to(generator)
        for city in self.cities:
            city.write_to(generator)
        generator.add_key_value_list("TeamReveal", self.team_reveal)
        generator.end_section()


@dataclass
class Scenario:
    """Root of a parsed WorldBuilder file.

    Sections are written in the order the game expects: version, game,
    teams, players, map, plots.
    """

    version: int = DEFAULT_VERSION
    game: Game = field(default_factory=Game)
    teams: List[Team] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)
    map: Optional[MapProperties] = None
    plots: List[Plot] = field(default_factory=list)

    @classmethod
    def new(cls, version: int = DEFAULT_VERSION) -> "Scenario":
        """Create an empty scenario with a blank game section."""
        return cls(version=version, game=Game())

    def count_players(self) -> Tuple[int, int]:
        """Return (real players, placeholder slots)."""
        placeholders = sum(1 for player in self.players if player.is_placeholder)
        return len(self.players) - placeholders, placeholders

    def plot_at(self, x: int, y: int) -> Optional[Plot]:
        for plot in self.plots:
            if plot.x == x and plot.y == y:
                return plot
        return None

    def write_to(self, generator: ScenarioGenerator) -> None:
        generator.add_line(f"{VERSION_PREFIX}{self.version}")
        self.game.write_to(generator)
        for team in self.teams:
            team.write_to(generator)
        for player in self.players:
            player.write_to(generator)
        if self.map is not None:
            self.map.write_to(generator)
        for plot in self.plots:
            plot.write_to(generator)

    def to_wbs_format(self) -> str:
        generator = ScenarioGenerator()
        self.write_to(generator)
        return generator.getvalue()
