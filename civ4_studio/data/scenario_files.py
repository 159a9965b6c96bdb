"""File-level helpers around the scenario codec.

The codec itself works on streams. These helpers own the file handles,
locate scenario folders inside a game installation and list scenario files.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from civ4_studio.config import Config
from civ4_studio.data.wbs_errors import ScenarioParseError
from civ4_studio.data.wbs_parser import parse_scenario, serialize_scenario
from civ4_studio.data.wbs_structs import Scenario

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_scenario(path: PathLike, config: Optional[Config] = None) -> Scenario:
    """Read and parse a scenario file.

    Args:
        path: Path to a ``.CivBeyondSwordWBSave`` file
        config: Configuration supplying encoding and default version

    Returns:
        Parsed scenario

    Raises:
        FileNotFoundError: If the file does not exist
        ScenarioParseError: If the file content is malformed
    """
    config = config or Config()
    scenario_path = Path(path)

    with open(scenario_path, "rb") as f:
        try:
            scenario = parse_scenario(
                f, encoding=config.WBS_ENCODING, default_version=config.DEFAULT_VERSION
            )
        except ScenarioParseError as e:
            logger.error(f"Failed to parse {scenario_path}: {e}")
            raise

    logger.info(f"Loaded scenario from {scenario_path}")
    return scenario


def save_scenario(scenario: Scenario, path: PathLike, config: Optional[Config] = None) -> int:
    """Serialize a scenario and write it to disk.

    Returns:
        Number of bytes written
    """
    config = config or Config()
    scenario_path = Path(path)

    data = serialize_scenario(scenario, encoding=config.WBS_ENCODING)
    with open(scenario_path, "wb") as f:
        f.write(data)

    logger.info(f"Saved scenario to {scenario_path} ({len(data)} bytes)")
    return len(data)


def find_scenario_files(directory: PathLike, extension: str = Config.SCENARIO_EXTENSION) -> List[Path]:
    """List scenario files in a directory, sorted by name.

    A missing directory yields an empty list.
    """
    folder = Path(directory)
    if not folder.is_dir():
        logger.warning(f"Scenario directory not found: {folder}")
        return []

    return sorted(
        (p for p in folder.iterdir() if p.is_file() and p.name.endswith(extension)),
        key=lambda p: p.name.lower(),
    )


def get_mod_dir(config: Config) -> Path:
    """Return the mod directory if a mod is configured, else the game directory."""
    game_dir = Path(config.GAME_DIR)
    if not config.MOD:
        return game_dir
    return game_dir / config.MODS_DIR / config.MOD


def get_public_maps_dir(config: Config) -> Path:
    return get_mod_dir(config) / config.PUBLIC_MAPS_DIR


def check_game_directory(path: PathLike, config: Optional[Config] = None) -> List[str]:
    """Check that a game directory holds the executable and required folders.

    Returns:
        Names of the missing entries (empty if the directory is complete)
    """
    config = config or Config()
    game_dir = Path(path)

    return [
        name
        for name in (config.GAME_EXE, config.ASSETS_DIR, config.PUBLIC_MAPS_DIR)
        if not (game_dir / name).exists()
    ]
