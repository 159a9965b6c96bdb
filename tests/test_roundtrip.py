"""End-to-end tests: parse a full scenario and write it back.

Test Strategy:
- A canonically laid out file regenerates byte for byte
- Non-canonical input (comments, spacing, trailing commas) normalizes to an
  equal tree
- The normalize script round trips files on disk
"""

import io
from pathlib import Path

import pytest

from civ4_studio.config import TestConfig
from civ4_studio.data.wbs_parser import parse_scenario, parse_scenario_text, serialize_scenario
from civ4_studio.data.wbs_structs import RiverDirection
from scripts.inspect_scenario import summarize
from scripts.normalize_scenario import normalize_scenario


@pytest.fixture
def sample_scenario_path() -> Path:
    """Path to sample scenario fixture."""
    return Path(__file__).parent / "fixtures" / "sample_scenario.CivBeyondSwordWBSave"


@pytest.fixture
def sample_bytes(sample_scenario_path: Path) -> bytes:
    return sample_scenario_path.read_bytes()


def test_sample_scenario_fixture_exists(sample_scenario_path: Path) -> None:
    """Verify test fixture exists."""
    assert sample_scenario_path.exists(), f"Test fixture not found: {sample_scenario_path}"


class TestSampleScenario:
    """Tests against the sample scenario fixture."""

    def test_byte_exact_regeneration(self, sample_bytes: bytes) -> None:
        scenario = parse_scenario(io.BytesIO(sample_bytes))

        assert serialize_scenario(scenario) == sample_bytes

    def test_reparse_is_equal(self, sample_bytes: bytes) -> None:
        scenario = parse_scenario(io.BytesIO(sample_bytes))
        reparsed = parse_scenario(io.BytesIO(serialize_scenario(scenario)))

        assert reparsed == scenario

    def test_tree_contents(self, sample_bytes: bytes) -> None:
        scenario = parse_scenario(io.BytesIO(sample_bytes))

        assert scenario.game.start_year == -4000
        assert scenario.game.victory_conditions == [
            "VICTORY_TIME",
            "VICTORY_CONQUEST",
            "VICTORY_DOMINATION",
        ]

        rome = scenario.players[0]
        assert rome.attitudes == [(1, -2), (2, 3)]
        assert (rome.starting_x, rome.starting_y) == (0, 1)
        assert scenario.players[2].is_placeholder

        assert scenario.map.grid_width == 2
        assert scenario.map.randomize_resources is True

        capital = scenario.plot_at(0, 1)
        assert capital.landmark == "Capitol Hill"
        assert [u.unit_type for u in capital.units] == ["UNIT_WARRIOR", "UNIT_SETTLER"]
        assert capital.units[0].promotion_types == [
            "PROMOTION_COMBAT1",
            "PROMOTION_CITY_GARRISON1",
        ]
        assert capital.cities[0].player_culture == {0: 120, 1: 15}

        river = scenario.plot_at(1, 0)
        assert river.is_w_of_river
        assert river.river_ns_direction == RiverDirection.SOUTH
        assert river.features == [("FEATURE_FOREST", "1"), ("FEATURE_JUNGLE", "0")]

        assert scenario.plot_at(5, 5) is None


class TestNormalization:
    """Tests for non-canonical input."""

    def test_non_canonical_input(self) -> None:
        messy = (
            "# hand edited\n"
            "BeginGame\n"
            "  Speed=GAMESPEED_QUICK\n"
            "  Era=ERA_ANCIENT\n"
            "EndGame\n"
            "\n"
            "BeginPlot\n"
            "  TeamReveal=0,\n"
            "  PlotType=2, TerrainType=TERRAIN_DESERT\n"
            "  y=1, x=0\n"
            "EndPlot\n"
        )
        scenario = parse_scenario_text(messy)
        text = serialize_scenario(scenario).decode("latin-1")

        assert text == (
            "Version=11\n"
            "BeginGame\n"
            "\tEra=ERA_ANCIENT\n"
            "\tSpeed=GAMESPEED_QUICK\n"
            "EndGame\n"
            "BeginPlot\n"
            "\tx=0,y=1\n"
            "\tTerrainType=TERRAIN_DESERT\n"
            "\tPlotType=2\n"
            "\tTeamReveal=0\n"
            "EndPlot\n"
        )
        assert parse_scenario_text(text) == scenario

    def test_empty_feature_variety_round_trips(self) -> None:
        text = (
            "BeginGame\nEndGame\n"
            "BeginPlot\n"
            "x=0,y=0\n"
            "FeatureType=FEATURE_FOREST,FeatureVariety=\n"
            "EndPlot\n"
        )
        scenario = parse_scenario_text(text)
        reparsed = parse_scenario(io.BytesIO(serialize_scenario(scenario)))

        assert reparsed == scenario
        assert reparsed.plots[0].features == [("FEATURE_FOREST", "")]

    def test_empty_repeated_values_round_trip(self) -> None:
        """Test empty elements of repeated fields keep their position."""
        text = (
            "BeginGame\n"
            "Victory=\n"
            "Victory=VICTORY_SCORE\n"
            "Option=\n"
            "EndGame\n"
            "BeginPlayer\n"
            "CityList=Rome\n"
            "CityList=\n"
            "EndPlayer\n"
        )
        scenario = parse_scenario_text(text)
        reparsed = parse_scenario(io.BytesIO(serialize_scenario(scenario)))

        assert reparsed == scenario
        assert reparsed.game.victory_conditions == ["", "VICTORY_SCORE"]
        assert reparsed.game.options == [""]
        assert reparsed.players[0].city_list == ["Rome", ""]

    def test_last_value_wins_for_scalars(self) -> None:
        scenario = parse_scenario_text("BeginGame\nEra=ERA_ANCIENT\nEra=ERA_MEDIEVAL\nEndGame\n")

        assert scenario.game.era == "ERA_MEDIEVAL"


class TestNormalizeScript:
    """Tests for normalize_scenario() in the normalize script."""

    def test_check_only_leaves_file(self, tmp_path: Path, sample_bytes: bytes) -> None:
        source = tmp_path / "sample.CivBeyondSwordWBSave"
        source.write_bytes(sample_bytes.replace(b"\tEra=", b"   Era="))

        assert normalize_scenario(source, None, True, TestConfig()) is True
        assert b"   Era=" in source.read_bytes()

    def test_writes_output(self, tmp_path: Path, sample_bytes: bytes) -> None:
        source = tmp_path / "sample.CivBeyondSwordWBSave"
        output = tmp_path / "clean.CivBeyondSwordWBSave"
        source.write_bytes(sample_bytes.replace(b"\tEra=", b"   Era="))

        assert normalize_scenario(source, output, False, TestConfig()) is True
        assert output.read_bytes() == sample_bytes


def test_summarize_sample(sample_bytes: bytes) -> None:
    """Test the inspect script's headline numbers."""
    summary = summarize(parse_scenario(io.BytesIO(sample_bytes)))

    assert summary["teams"] == 3
    assert summary["players"] == 2
    assert summary["placeholders"] == 1
    assert summary["plots"] == 4
    assert summary["cities"] == 1
    assert summary["units"] == 2
    assert summary["map_size"] == "2x2"
    assert summary["description"] == "Two rivers and a hill"
