#!/usr/bin/env python3
"""Print a summary of a WorldBuilder scenario file.

Usage:
    python scripts/inspect_scenario.py FILE [--verbose]

Examples:
    # Summarize a scenario from PublicMaps
    python scripts/inspect_scenario.py "PublicMaps/Earth18.CivBeyondSwordWBSave"

    # Show per-section parser output
    python scripts/inspect_scenario.py my_map.CivBeyondSwordWBSave --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables BEFORE importing Config
load_dotenv()

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from civ4_studio.config import get_config, get_log_level
from civ4_studio.data.scenario_files import load_scenario
from civ4_studio.data.wbs_errors import ScenarioParseError, truncate_message
from civ4_studio.data.wbs_structs import Scenario

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def summarize(scenario: Scenario) -> dict:
    """Collect the headline numbers of a scenario."""
    real_players, placeholders = scenario.count_players()
    game = scenario.game
    map_props = scenario.map

    return {
        "version": scenario.version,
        "era": game.era or "-",
        "speed": game.speed or "-",
        "calendar": game.calendar or "-",
        "description": game.description or "-",
        "teams": len(scenario.teams),
        "players": real_players,
        "placeholders": placeholders,
        "plots": len(scenario.plots),
        "cities": sum(len(plot.cities) for plot in scenario.plots),
        "units": sum(len(plot.units) for plot in scenario.plots),
        "map_size": (
            f"{map_props.grid_width}x{map_props.grid_height}" if map_props else "-"
        ),
    }


def print_summary(path: Path, summary: dict) -> None:
    print(f"Scenario: {path}")
    for key, value in summary.items():
        print(f"  {key.replace('_', ' ').title():<14} {value}")


def main() -> None:
    """Main function."""
    parser = argparse.ArgumentParser(description="Summarize a WorldBuilder scenario file")

    parser.add_argument("file", type=Path, help="Scenario file to inspect")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    config = get_config()
    setup_logging(get_log_level(config, args.verbose))

    try:
        scenario = load_scenario(args.file, config)
    except FileNotFoundError:
        print(f"File not found: {args.file}", file=sys.stderr)
        sys.exit(1)
    except ScenarioParseError as e:
        print(truncate_message(str(e), config.ERROR_DISPLAY_LENGTH), file=sys.stderr)
        sys.exit(1)

    print_summary(args.file, summarize(scenario))


if __name__ == "__main__":
    main()
