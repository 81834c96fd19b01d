# wikiboot/core/config.py
import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

VERSIONS_CONTROLLER_DAYS = "VersionsController.days"


def _to_config_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_to_config_string(v) for v in value)
    return str(value)


def _flatten(data: Dict[Any, Any], prefix: str = "") -> Dict[str, str]:
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = _to_config_string(value)
    return flat


class ConfigFileLoader:
    """
    Loads an optional YAML file of key/value pairs.

    A missing file is not an error. A file that cannot be read or parsed is
    reported as a warning. load() never raises; it returns whatever could be
    read, possibly an empty dict.
    """

    def __init__(self, config_file_path: str):
        self.config_file_path: str = config_file_path

    def load(self) -> Dict[str, str]:
        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                raw_data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.info(f"No configuration file found ({os.path.abspath(self.config_file_path)})")
            return {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error reading configuration: {e}")
            return {}

        if raw_data is None:
            logger.debug(f"Configuration file '{self.config_file_path}' is empty.")
            return {}
        if not isinstance(raw_data, dict):
            logger.warning(f"Error reading configuration: '{self.config_file_path}' does not contain a mapping of keys to values")
            return {}

        values = _flatten(raw_data)
        logger.debug(f"Loaded {len(values)} configuration values from '{self.config_file_path}'")
        return values


class MergedConfiguration:
    """Flat string-keyed configuration: file values with CLI values laid over them."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._config_data: Dict[str, str] = dict(values or {})

    def get(self, config_key: str, default_value: Optional[str] = None) -> Optional[str]:
        return self._config_data.get(config_key, default_value)

    def set(self, config_key: str, value: str) -> None:
        if config_key in self._config_data:
            logger.debug(f"Command line value for '{config_key}' overrides configuration file value '{self._config_data[config_key]}'")
        self._config_data[config_key] = value

    def get_list(self, config_key: str) -> list:
        """Comma separated value as a list of stripped, non-empty items."""
        raw = self._config_data.get(config_key, "")
        return [item.strip() for item in raw.split(",") if item.strip()]

    def get_all_config(self) -> Dict[str, str]:
        return copy.deepcopy(self._config_data)

    def __contains__(self, config_key: str) -> bool:
        return config_key in self._config_data

    def __repr__(self):
        return f"<MergedConfiguration keys={sorted(self._config_data)}>"


def merge_configuration(file_values: Dict[str, str], arguments) -> MergedConfiguration:
    """
    Overlay command line derived values on the file values.

    Only values explicitly given on the command line are written, so a value
    present only in the file is retained.
    """
    config = MergedConfiguration(file_values)
    if arguments.days_till_versions_expire is not None:
        config.set(VERSIONS_CONTROLLER_DAYS, str(arguments.days_till_versions_expire))
    return config
