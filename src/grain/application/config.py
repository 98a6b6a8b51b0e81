"""
Configuration for grain.

Settings are loaded from:
1. Environment variables (GRAIN_*)
2. Config file (<base_dir>/config.json)
3. Defaults

The base directory is ~/.grain unless GRAIN_HOME points elsewhere.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from grain.domain.constants import (
    BACKUP_DIR_NAME,
    BASE_DIR_NAME,
    CONFIG_FILE_NAME,
    DATA_FILE_NAME,
    DEFAULT_BREAK_START,
    DEFAULT_WEEKLY_GOAL,
    HOME_ENV_VAR,
)
from grain.domain.errors import StorageError

logger = logging.getLogger(__name__)

PERSISTED_FIELDS = {"weekly_goal", "break_start"}


class GrainConfig(BaseSettings):
    """
    Weekly goal and break allowance.

    Out-of-range values fall back to the defaults rather than failing,
    so a hand-edited config file never locks the user out.
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAIN_",
        extra="ignore",
        validate_assignment=True,
    )

    weekly_goal: int = DEFAULT_WEEKLY_GOAL
    break_start: int = DEFAULT_BREAK_START

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values (read by JsonConfigSettingsSource) arrive as init kwargs;
        # environment wins over them.
        return (env_settings, init_settings)

    @field_validator("weekly_goal", mode="after")
    @classmethod
    def positive_goal(cls, v: int) -> int:
        if v <= 0:
            logger.warning(f"Invalid weekly_goal {v}, using {DEFAULT_WEEKLY_GOAL}")
            return DEFAULT_WEEKLY_GOAL
        return v

    @field_validator("break_start", mode="after")
    @classmethod
    def non_negative_break_start(cls, v: int) -> int:
        if v < 0:
            logger.warning(f"Invalid break_start {v}, using {DEFAULT_BREAK_START}")
            return DEFAULT_BREAK_START
        return v


@dataclass(frozen=True)
class GrainPaths:
    base_dir: Path
    config_path: Path
    data_path: Path
    backup_dir: Path


def resolve_paths() -> GrainPaths:
    """Locate (and create) the base and backup directories."""
    override = os.environ.get(HOME_ENV_VAR)
    base_dir = Path(override).expanduser() if override else Path.home() / BASE_DIR_NAME
    backup_dir = base_dir / BACKUP_DIR_NAME

    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"could not create directory '{backup_dir}': {e}") from e

    return GrainPaths(
        base_dir=base_dir,
        config_path=base_dir / CONFIG_FILE_NAME,
        data_path=base_dir / DATA_FILE_NAME,
        backup_dir=backup_dir,
    )


def read_config_file(config_path: Path) -> dict[str, Any] | None:
    """
    Return the values stored in the config file, without environment
    overrides. Returns None when the file does not exist yet.
    """
    if not config_path.exists():
        return None

    try:
        source = JsonConfigSettingsSource(
            GrainConfig, json_file=config_path, json_file_encoding="utf-8"
        )
    except OSError as e:
        raise StorageError(f"could not read config file '{config_path}': {e}") from e
    except (ValueError, TypeError) as e:
        # Undecodable JSON or a document that is not an object
        raise StorageError(f"could not parse config file '{config_path}': {e}") from e

    return {k: v for k, v in source.json_data.items() if k in PERSISTED_FIELDS and v is not None}


def load_config(config_path: Path) -> GrainConfig | None:
    """
    Read the config file and apply GRAIN_* overrides on top.
    Returns None when the file does not exist yet.
    """
    file_values = read_config_file(config_path)
    if file_values is None:
        return None

    try:
        return GrainConfig(**file_values)
    except PydanticValidationError as e:
        raise StorageError(f"invalid config file '{config_path}': {e}") from e


def save_config(config_path: Path, values: dict[str, Any]) -> None:
    """Write file-level values; fields not given keep their defaults."""
    payload = {
        "weekly_goal": values.get("weekly_goal", DEFAULT_WEEKLY_GOAL),
        "break_start": values.get("break_start", DEFAULT_BREAK_START),
    }
    try:
        config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise StorageError(f"could not write config file '{config_path}': {e}") from e
    logger.info(f"Saved config to {config_path}")


def update_config_file(config_path: Path, **changes: Any) -> None:
    """
    Change individual fields in the config file.

    Other fields keep what the file holds, so environment overrides
    active in this process are never written back.
    """
    values = read_config_file(config_path) or {}
    values.update(changes)
    save_config(config_path, values)
