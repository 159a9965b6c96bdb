"""Configuration settings for Civ4 Studio.

This module contains the scenario codec settings, game directory layout
and display constants. Values come from environment variables; scripts
load a ``.env`` file with python-dotenv before importing this module.
"""

import logging
import os
from pathlib import Path
from typing import List


class Config:
    """Main configuration class for Civ4 Studio."""

    # Scenario codec settings
    WBS_ENCODING = os.getenv("WBS_ENCODING", "latin-1")
    DEFAULT_VERSION = int(os.getenv("WBS_DEFAULT_VERSION", "11"))
    SCENARIO_EXTENSION = ".CivBeyondSwordWBSave"

    # Game installation
    GAME_DIR = os.getenv("CIV4_GAME_DIR", "")
    MOD = os.getenv("CIV4_MOD", "")
    GAME_EXE = "Civ4BeyondSword.exe"
    ASSETS_DIR = "Assets"
    PUBLIC_MAPS_DIR = "PublicMaps"
    MODS_DIR = "Mods"

    # Display
    ERROR_DISPLAY_LENGTH = int(os.getenv("WBS_ERROR_DISPLAY_LENGTH", "200"))
    LOG_LEVEL = os.getenv("CIV4_STUDIO_LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """Development-specific configuration.

    Uses the base settings; CIV4_STUDIO_LOG_LEVEL=DEBUG shows per-section
    parser output.
    """


class TestConfig(Config):
    """Test-specific configuration."""

    GAME_DIR = ""
    MOD = ""
    LOG_LEVEL = "WARNING"


# Configuration mapping
CONFIG_MAP = {
    "development": DevelopmentConfig,
    "testing": TestConfig,
}


def get_config(config_name: str | None = None) -> Config:
    """Get configuration object based on environment.

    Args:
        config_name: Configuration name (development/testing).
                    If None, read from CIV4_STUDIO_ENV (default: development).

    Returns:
        Configuration object (Config subclass instance)
    """
    if config_name is None:
        config_name = os.getenv("CIV4_STUDIO_ENV", "development")

    config_class = CONFIG_MAP.get(config_name, DevelopmentConfig)
    return config_class()


def validate_config(config: Config) -> List[str]:
    """Validate configuration settings.

    Args:
        config: Configuration object to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    try:
        "".encode(config.WBS_ENCODING)
    except LookupError:
        errors.append(f"Unknown scenario encoding: {config.WBS_ENCODING}")

    if config.DEFAULT_VERSION <= 0:
        errors.append("DEFAULT_VERSION must be positive")

    if config.ERROR_DISPLAY_LENGTH <= 3:
        errors.append("ERROR_DISPLAY_LENGTH must be greater than 3")

    if config.GAME_DIR and not Path(config.GAME_DIR).is_dir():
        errors.append(f"Game directory does not exist: {config.GAME_DIR}")

    if not isinstance(logging.getLevelName(config.LOG_LEVEL.upper()), int):
        errors.append(f"Unknown log level: {config.LOG_LEVEL}")

    if config.MOD and not config.GAME_DIR:
        errors.append("CIV4_MOD is set but CIV4_GAME_DIR is not")

    return errors


def get_log_level(config: Config, verbose: bool = False) -> int:
    """Resolve the logging level for a script run.

    Args:
        config: Configuration object supplying LOG_LEVEL
        verbose: If True, always log at DEBUG

    Returns:
        Numeric logging level (INFO if LOG_LEVEL is not a known level name)
    """
    if verbose:
        return logging.DEBUG

    level = logging.getLevelName(config.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO
