"""Group handler configuration loaded from YAML."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hue_controller.const import CONFIG_TRANSITIONTIME, HUE_CONFIG_FILE_PATH
from hue_controller.logging_abstraction import get_logger

__all__ = ["GroupHandlerConfig", "TransitionTimeUpdate", "load_handler_configs"]

logger = get_logger(__name__)


class GroupHandlerConfig(BaseModel):
    """One ``groups:`` entry of the config file."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    group_id: str
    name: str | None = None
    transition_time: int | None = Field(default=None, ge=0, alias=CONFIG_TRANSITIONTIME)


class TransitionTimeUpdate(BaseModel):
    """Runtime configuration change for a handler."""

    transition_time: int = Field(ge=0, alias=CONFIG_TRANSITIONTIME)

    @classmethod
    def from_params(cls, params: Mapping[str, object]) -> TransitionTimeUpdate | None:
        """Parse a parameter mapping; None when it has no transition time key."""
        if CONFIG_TRANSITIONTIME not in params:
            return None
        return cls.model_validate({CONFIG_TRANSITIONTIME: params[CONFIG_TRANSITIONTIME]})


def load_handler_configs(config_file: str | Path = HUE_CONFIG_FILE_PATH) -> list[GroupHandlerConfig]:
    """Parse the YAML config file into group handler configs.

    Args:
        config_file: Path to the YAML configuration file

    Returns:
        Group configs in file order

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the file is not valid YAML or a group entry is invalid

    """
    path = Path(config_file).expanduser()
    if not path.exists():
        msg = f"Configuration file '{path}' not found"
        raise FileNotFoundError(msg)

    logger.debug("Parsing config file: %s", path)
    try:
        with path.open() as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in '{path}': {e}"
        raise ValueError(msg) from e

    if config_data is not None and not isinstance(config_data, dict):
        msg = f"Top level of '{path}' must be a mapping, got {type(config_data).__name__}"
        raise ValueError(msg)  # noqa: TRY004

    if not config_data or "groups" not in config_data:
        logger.warning("No 'groups' section found in config file %s", path)
        return []

    raw_groups = config_data["groups"]
    if not isinstance(raw_groups, list):
        msg = f"'groups' in '{path}' must be a list"
        raise ValueError(msg)  # noqa: TRY004

    configs: list[GroupHandlerConfig] = []
    for index, entry in enumerate(raw_groups):
        try:
            configs.append(GroupHandlerConfig.model_validate(entry))
        except ValidationError as e:
            msg = f"Invalid group entry #{index} in '{path}': {e}"
            raise ValueError(msg) from e

    logger.info("Parsed config: %d groups", len(configs), extra={"config_path": str(path)})
    return configs
