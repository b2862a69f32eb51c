import json
import logging
from pathlib import Path
from typing import Dict, Any, Tuple
import pictolaunch.settings as default_settings

log = logging.getLogger(__name__)


class GlobalSync:
    """
    A singleton class that houses all launcher configuration.

    It follows a clear precedence:
    1. Base values from `settings.py` (which already honour `.env`).
    2. Overrides from `overrides.json` for settings in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self) -> None:
        """Initializes the settings object by loading defaults and overrides."""
        self._config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_overrides_from_file()

    def get(self, item: str, default: Any = None) -> Any:
        """Provides dictionary-like access to settings with a default value."""
        return self._config.get(item, default)

    def __getattr__(self, name: str) -> Any:
        """Allows attribute access to settings, raising an AttributeError if not found."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._config:
            return self._config[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

    def _load_defaults(self) -> None:
        """Loads all uppercase attributes from settings.py as the baseline."""
        for key in dir(default_settings):
            if key.isupper():
                self._config[key] = getattr(default_settings, key)

    def _load_overrides_from_file(self) -> None:
        """Loads overrides from the JSON file, ignoring non-modifiable keys."""
        overrides_path = Path(self._config["OVERRIDES_JSON_PATH"])
        if not overrides_path.exists():
            return

        try:
            with overrides_path.open('r') as f:
                overrides = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file: {e}")
            return

        if not isinstance(overrides, dict):
            log.error(f"Ignoring overrides file '{overrides_path}': expected a JSON object.")
            return

        log.debug(f"Loading runtime config overrides from {overrides_path}")
        for key, value in overrides.items():
            if key not in self._config["MODIFIABLE_SETTINGS"]:
                log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                continue
            try:
                self._config[key] = coerce_value(self._config.get(key), value)
            except (ValueError, TypeError) as e:
                log.warning(f"Ignoring override '{key}' = {value!r}: {e}")

    def update_setting(self, key: str, value: Any) -> Tuple[bool, str]:
        """
        Changes a modifiable setting and persists it to the overrides file.

        The new value is coerced to the type of the current value.

        :param key: The setting name (case-insensitive).
        :param value: The new value, usually a string from the command line.
        :return: A tuple of (success, human-readable message).
        """
        key = key.upper()
        if key not in self._config["MODIFIABLE_SETTINGS"]:
            message = f"Setting '{key}' is not modifiable."
            log.warning(f"Rejected config update: {message}")
            return False, message

        try:
            new_value = coerce_value(self._config.get(key), value)
        except (ValueError, TypeError) as e:
            message = f"Could not convert value '{value}' for key '{key}'. Error: {e}"
            log.error(f"Config update failed: {message}")
            return False, message

        self._config[key] = new_value
        self._save_overrides_to_disk()
        message = f"Setting '{key}' updated to '{new_value}'."
        log.info(message)
        return True, message

    def _save_overrides_to_disk(self) -> None:
        """Persists the modifiable parts of the config to overrides.json."""
        overrides_path = Path(self._config["OVERRIDES_JSON_PATH"])
        current_overrides = {
            key: self._config[key]
            for key in sorted(self._config["MODIFIABLE_SETTINGS"])
            if key in self._config and self._config[key] != getattr(default_settings, key, None)
        }
        try:
            overrides_path.parent.mkdir(parents=True, exist_ok=True)
            overrides_path.write_text(json.dumps(current_overrides, indent=4))
        except IOError as e:
            log.error(f"Failed to write overrides to '{overrides_path}': {e}")

    def get_all_settings(self) -> Dict[str, Any]:
        """Returns the entire configuration dictionary."""
        return self._config


def coerce_value(original_value: Any, value: Any) -> Any:
    """Coerces `value` to the type of `original_value`."""
    if isinstance(original_value, bool):
        return str(value).lower() in ('true', '1', 't', 'yes', 'y')
    if original_value is not None:
        return type(original_value)(value)
    return value

# A singleton instance to be imported by other modules
app_globals = GlobalSync()
