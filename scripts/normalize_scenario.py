#!/usr/bin/env python3
"""Rewrite a WorldBuilder scenario file in canonical layout.

This script:
1. Parses the scenario file
2. Regenerates it with the editor's field order and indentation
3. Re-parses the generated text and checks it matches the original tree
4. Writes the result (unless --check is given)

Usage:
    python scripts/normalize_scenario.py FILE [--output OUT] [--check] [--verbose]

Examples:
    # Normalize in place
    python scripts/normalize_scenario.py my_map.CivBeyondSwordWBSave

    # Write to a new file
    python scripts/normalize_scenario.py my_map.CivBeyondSwordWBSave --output clean.CivBeyondSwordWBSave

    # Only verify that the file survives a round trip
    python scripts/normalize_scenario.py my_map.CivBeyondSwordWBSave --check
"""

import argparse
import io
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables BEFORE importing Config
load_dotenv()

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from civ4_studio.config import Config, get_config, get_log_level
from civ4_studio.data.scenario_files import load_scenario
from civ4_studio.data.wbs_errors import ScenarioParseError, truncate_message
from civ4_studio.data.wbs_parser import parse_scenario, serialize_scenario

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def normalize_scenario(source: Path, output: Path | None, check_only: bool, config: Config) -> bool:
    """Parse, regenerate and verify a scenario file.

    Args:
        source: Scenario file to read
        output: Destination path (default: overwrite source)
        check_only: If True, don't write anything
        config: Codec configuration

    Returns:
        True if the regenerated file parses back to an equal tree

    Raises:
        ScenarioParseError: If the source or regenerated file fails to parse
    """
    scenario = load_scenario(source, config)
    data = serialize_scenario(scenario, encoding=config.WBS_ENCODING)

    reparsed = parse_scenario(
        io.BytesIO(data),
        encoding=config.WBS_ENCODING,
        default_version=config.DEFAULT_VERSION,
    )
    if reparsed != scenario:
        logger.error("Regenerated scenario differs from the original")
        return False

    logger.info(f"✓ Round trip OK ({len(data)} bytes)")

    if check_only:
        return True

    destination = output or source
    with open(destination, "wb") as f:
        f.write(data)
    logger.info(f"✓ Wrote {destination}")

    return True


def main() -> None:
    """Main function."""
    parser = argparse.ArgumentParser(description="Normalize a WorldBuilder scenario file")

    parser.add_argument("file", type=Path, help="Scenario file to normalize")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write to this path instead of overwriting the input",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify the round trip without writing",
    )
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
        ok = normalize_scenario(args.file, args.output, args.check, config)
    except FileNotFoundError:
        logger.error(f"File not found: {args.file}")
        sys.exit(1)
    except ScenarioParseError as e:
        logger.error(truncate_message(str(e), config.ERROR_DISPLAY_LENGTH))
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
