"""Tests for scenario entity unpacking and serialization.

Test Strategy:
- Each entity accepts exactly its own keys
- Failing lines leave the entity unchanged (validate then apply)
- Serialization follows the fixed field order and omission rules
"""

import pytest

from civ4_studio.data.wbs_errors import (
    StructuralError,
    UnknownKeyError,
    ValueConversionError,
)
from civ4_studio.data.wbs_structs import (
    City,
    Game,
    MapProperties,
    Player,
    Plot,
    PlotHeight,
    RiverDirection,
    Scenario,
    Team,
    Unit,
    to_bool,
    to_int,
    to_uint,
)


class TestConverters:
    """Tests for field value conversion."""

    def test_to_int(self) -> None:
        assert to_int("StartYear", "-4000") == -4000
        assert to_int("StartYear", "+12") == 12

    def test_to_int_rejects_non_integers(self) -> None:
        """Test strict conversion and cause chaining."""
        for raw in ["", "1.5", "abc", " 1", "1_000"]:
            with pytest.raises(ValueConversionError) as exc_info:
                to_int("GameTurn", raw)
            assert isinstance(exc_info.value.__cause__, ValueError)
            assert exc_info.value.key == "GameTurn"
            assert exc_info.value.value == raw

    def test_to_uint_rejects_negative(self) -> None:
        with pytest.raises(ValueConversionError, match="non-negative"):
            to_uint("TeamID", "-1")

    def test_to_bool(self) -> None:
        """Test only the literal 1 is true."""
        assert to_bool("Tutorial", "1") is True
        assert to_bool("Tutorial", "0") is False
        assert to_bool("Tutorial", "") is False
        assert to_bool("Tutorial", "true") is False


class TestGame:
    """Tests for the game section codec."""

    def test_unpack_scalars_and_lists(self) -> None:
        game = Game()
        game.unpack([("Era", "ERA_MEDIEVAL")])
        game.unpack([("Victory", "VICTORY_TIME")])
        game.unpack([("Victory", "VICTORY_TIME")])
        game.unpack([("StartYear", "-4000")])
        game.unpack([("Tutorial", "1")])

        assert game.era == "ERA_MEDIEVAL"
        assert game.victory_conditions == ["VICTORY_TIME", "VICTORY_TIME"]
        assert game.start_year == -4000
        assert game.tutorial is True

    def test_unknown_key(self) -> None:
        game = Game()
        with pytest.raises(UnknownKeyError, match="unknown key 'Foo'") as exc_info:
            game.unpack([("Foo", "1")])
        assert exc_info.value.key == "Foo"

    def test_failed_line_does_not_mutate(self) -> None:
        """Test valid pairs before an unknown key are not applied."""
        game = Game()
        with pytest.raises(UnknownKeyError):
            game.unpack([("Era", "ERA_ANCIENT"), ("Victory", "VICTORY_TIME"), ("Bogus", "x")])

        assert game == Game()

    def test_failed_conversion_does_not_mutate(self) -> None:
        game = Game()
        with pytest.raises(ValueConversionError):
            game.unpack([("Speed", "GAMESPEED_EPIC"), ("MaxTurns", "many")])

        assert game.speed == ""
        assert game.max_turns is None

    def test_serialize_order(self) -> None:
        """Test fields follow the declared order regardless of assignment order."""
        game = Game(max_turns=300, era="ERA_ANCIENT", options=["GAMEOPTION_NO_BARBARIANS"], tutorial=True)

        assert game.to_wbs_format() == (
            "BeginGame\n"
            "\tEra=ERA_ANCIENT\n"
            "\tTutorial=1\n"
            "\tOption=GAMEOPTION_NO_BARBARIANS\n"
            "\tMaxTurns=300\n"
            "EndGame\n"
        )

    def test_empty_game(self) -> None:
        assert Game().to_wbs_format() == "BeginGame\nEndGame\n"


class TestTeam:
    """Tests for the team section codec."""

    def test_relation_lists(self) -> None:
        team = Team()
        team.unpack([("TeamID", "0")])
        team.unpack([("AtWar", "1")])
        team.unpack([("AtWar", "2")])
        team.unpack([("RevealMap", "0")])

        assert team.team_id == 0
        assert team.at_war == [1, 2]
        assert team.reveal_map is False

    def test_serialize(self) -> None:
        team = Team(team_id=1, techs=["TECH_MINING"], contact_with_teams=[0], reveal_map=True)

        assert team.to_wbs_format() == (
            "BeginTeam\n"
            "\tTeamID=1\n"
            "\tTech=TECH_MINING\n"
            "\tContactWithTeam=0\n"
            "\tRevealMap=1\n"
            "EndTeam\n"
        )


class TestPlayer:
    """Tests for the player section codec."""

    def test_starting_position_pair(self) -> None:
        player = Player()
        player.unpack([("StartingX", "5"), ("StartingY", "7")])

        assert (player.starting_x, player.starting_y) == (5, 7)
        assert "\tStartingX=5,StartingY=7\n" in player.to_wbs_format()

    def test_attitude_alignment(self) -> None:
        player = Player()
        player.unpack([("AttitudePlayer", "1")])
        player.unpack([("AttitudePlayer", "3")])
        player.unpack([("AttitudeExtra", "-2")])
        player.unpack([("AttitudeExtra", "4")])
        player.validate()

        assert player.attitudes == [(1, -2), (3, 4)]

    def test_attitude_mismatch(self) -> None:
        player = Player(attitude_players=[1, 2], attitude_extras=[5])
        with pytest.raises(StructuralError, match="AttitudePlayer"):
            player.validate()

    def test_placeholder(self) -> None:
        assert Player(civ_type="NONE", leader_type="NONE").is_placeholder is True
        assert Player(civ_type="CIVILIZATION_ROME", leader_type="NONE").is_placeholder is False

    def test_flags_omitted_when_false(self) -> None:
        player = Player(civ_type="CIVILIZATION_ROME", white_flag=False, playable_civ=True)
        text = player.to_wbs_format()

        assert "WhiteFlag" not in text
        assert "\tPlayableCiv=1\n" in text


class TestMapProperties:
    """Tests for the map section codec."""

    def test_lowercase_keys(self) -> None:
        map_props = MapProperties()
        map_props.unpack([("grid width", "64")])
        map_props.unpack([("wrap X", "1")])
        map_props.unpack([("sealevel", "SEALEVEL_LOW")])

        assert map_props.grid_width == 64
        assert map_props.wrap_x == 1
        assert map_props.sea_level == "SEALEVEL_LOW"

    def test_camel_case_key_rejected(self) -> None:
        with pytest.raises(UnknownKeyError):
            MapProperties().unpack([("GridWidth", "64")])

    def test_serialize(self) -> None:
        map_props = MapProperties(grid_width=2, grid_height=2, randomize_resources=True)

        assert map_props.to_wbs_format() == (
            "BeginMap\n"
            "\tgrid width=2\n"
            "\tgrid height=2\n"
            "\tRandomize Resources=1\n"
            "EndMap\n"
        )


class TestPlot:
    """Tests for the plot section codec."""

    def test_river_and_coordinates(self) -> None:
        plot = Plot()
        plot.unpack([("x", "3"), ("y", "4")])
        plot.unpack([("isNOfRiver", "1")])
        plot.unpack([("RiverWEDirection", str(RiverDirection.SOUTH))])

        assert plot == Plot(x=3, y=4, is_n_of_river=True, river_we_direction=2)

    def test_uppercase_coordinates_rejected(self) -> None:
        with pytest.raises(UnknownKeyError):
            Plot().unpack([("X", "3")])

    def test_features(self) -> None:
        plot = Plot()
        plot.unpack([("FeatureType", "FEATURE_FOREST"), ("FeatureVariety", "1")])
        plot.unpack([("FeatureType", "FEATURE_ICE"), ("FeatureVariety", "0")])
        plot.validate()

        assert plot.features == [("FEATURE_FOREST", "1"), ("FEATURE_ICE", "0")]

    def test_feature_with_empty_variety(self) -> None:
        """Test both members of a feature pair are written even when empty."""
        plot = Plot(feature_types=["FEATURE_FOREST"], feature_varieties=[""])

        assert "\tFeatureType=FEATURE_FOREST,FeatureVariety=\n" in plot.to_wbs_format()

    def test_feature_mismatch(self) -> None:
        plot = Plot(feature_types=["FEATURE_FOREST"])
        with pytest.raises(StructuralError, match="FeatureVariety"):
            plot.validate()

    def test_serialize_with_children(self) -> None:
        """Test the full plot layout including nested units and cities."""
        plot = Plot(
            x=3,
            y=4,
            is_n_of_river=True,
            river_we_direction=2,
            feature_types=["FEATURE_FOREST"],
            feature_varieties=["1"],
            terrain_type="TERRAIN_GRASS",
            plot_type=PlotHeight.FLAT,
            team_reveal=[0, 1],
            units=[Unit(unit_type="UNIT_WARRIOR", unit_owner=0, level=1, experience=0)],
            cities=[City(city_owner=0, city_name="Rome")],
        )

        assert plot.to_wbs_format() == (
            "BeginPlot\n"
            "\tx=3,y=4\n"
            "\tisNOfRiver\n"
            "\tRiverWEDirection=2\n"
            "\tFeatureType=FEATURE_FOREST,FeatureVariety=1\n"
            "\tTerrainType=TERRAIN_GRASS\n"
            "\tPlotType=2\n"
            "\tBeginUnit\n"
            "\t\tUnitType=UNIT_WARRIOR,UnitOwner=0\n"
            "\t\tLevel=1,Experience=0\n"
            "\tEndUnit\n"
            "\tBeginCity\n"
            "\t\tCityOwner=0\n"
            "\t\tCityName=Rome\n"
            "\tEndCity\n"
            "\tTeamReveal=0\n"
            "\tTeamReveal=1\n"
            "EndPlot\n"
        )


class TestCity:
    """Tests for the city section codec."""

    def test_player_culture(self) -> None:
        city = City()
        city.unpack([("Player3Culture", "100")])
        city.unpack([("Player0Culture", "5")])

        assert city.player_culture == {3: 100, 0: 5}

    def test_player_culture_serialized_in_player_order(self) -> None:
        city = City(city_name="Rome", player_culture={3: 100, 0: 5})

        assert city.to_wbs_format() == (
            "BeginCity\n"
            "\tCityName=Rome\n"
            "\tPlayer0Culture=5\n"
            "\tPlayer3Culture=100\n"
            "EndCity\n"
        )

    def test_bad_culture_value_does_not_mutate(self) -> None:
        city = City()
        with pytest.raises(ValueConversionError):
            city.unpack([("CityName", "Rome"), ("Player1Culture", "lots")])

        assert city == City()

    def test_unknown_key_keeps_culture_untouched(self) -> None:
        city = City()
        with pytest.raises(UnknownKeyError):
            city.unpack([("Player1Culture", "10"), ("CityMood", "happy")])

        assert city.player_culture == {}

    def test_malformed_culture_key_is_unknown(self) -> None:
        with pytest.raises(UnknownKeyError):
            City().unpack([("PlayerXCulture", "10")])

    def test_repeated_buildings(self) -> None:
        city = City()
        city.unpack([("BuildingType", "BUILDING_PALACE")])
        city.unpack([("BuildingType", "BUILDING_WALLS")])

        assert city.building_types == ["BUILDING_PALACE", "BUILDING_WALLS"]


class TestUnit:
    """Tests for the unit section codec."""

    def test_unpack(self) -> None:
        unit = Unit()
        unit.unpack([("UnitType", "UNIT_ARCHER"), ("UnitOwner", "1")])
        unit.unpack([("Level", "2"), ("Experience", "7")])
        unit.unpack([("FacingDirection", "4")])

        assert unit == Unit(
            unit_type="UNIT_ARCHER", unit_owner=1, level=2, experience=7, facing_direction=4
        )

    def test_serialize_groups(self) -> None:
        unit = Unit(unit_type="UNIT_ARCHER", unit_owner=1, level=2, experience=7, damage=0)

        assert unit.to_wbs_format() == (
            "BeginUnit\n"
            "\tUnitType=UNIT_ARCHER,UnitOwner=1\n"
            "\tLevel=2,Experience=7\n"
            "\tDamage=0\n"
            "EndUnit\n"
        )


class TestScenario:
    """Tests for the scenario root."""

    def test_new_scenario(self) -> None:
        scenario = Scenario.new(version=11)

        assert scenario.version == 11
        assert scenario.game == Game()
        assert scenario.teams == []
        assert scenario.map is None

    def test_serialize_minimal(self) -> None:
        scenario = Scenario.new()
        scenario.game.era = "ERA_ANCIENT"

        assert scenario.to_wbs_format() == "Version=11\nBeginGame\n\tEra=ERA_ANCIENT\nEndGame\n"

    def test_plot_at(self) -> None:
        scenario = Scenario(plots=[Plot(x=0, y=0), Plot(x=1, y=0)])

        assert scenario.plot_at(1, 0) is scenario.plots[1]
        assert scenario.plot_at(5, 5) is None

    def test_count_players(self) -> None:
        scenario = Scenario(
            players=[
                Player(civ_type="CIVILIZATION_ROME", leader_type="LEADER_CAESAR"),
                Player(civ_type="NONE", leader_type="NONE"),
            ]
        )

        assert scenario.count_players() == (1, 1)

    def test_entities_do_not_share_containers(self) -> None:
        """Test list and dict fields are created per instance."""
        first, second = City(), City()
        first.player_culture[0] = 1

        assert second.player_culture == {}
