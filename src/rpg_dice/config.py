# rpg_dice/config.py
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logger import logger

DEFAULT_SETTINGS_FILE = "rpg_dice.yml"


class DiceSettings(BaseSettings):
    """
    Runtime settings for the dice engine.

    Values come from an optional YAML file, `RPG_DICE_*` environment
    variables and a `.env` file.
    """
    # Upper bound on explode / re-roll / unique loops for a single die
    max_iterations: int = Field(1000, ge=1)
    # Seed for the shared number generator; None means system entropy
    seed: Optional[int] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RPG_DICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def load_settings(path: str = DEFAULT_SETTINGS_FILE) -> DiceSettings:
    """
    Load YAML (if present) and merge with environment variables.

    Args:
        path: Location of the YAML settings file.

    Returns:
        A validated DiceSettings instance.

    Raises:
        yaml.YAMLError: If the file exists but is not valid YAML.
        pydantic.ValidationError: If a value fails validation.
    """
    settings_path = Path(path)
    if not settings_path.is_file():
        return DiceSettings()

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}
        return DiceSettings(**yaml_data)
    except (yaml.YAMLError, ValidationError) as e:
        logger.error(f"Failed to load or validate dice settings from '{path}': {e}")
        raise


# Global instance
settings = load_settings()
logger.setLevel(settings.log_level)
