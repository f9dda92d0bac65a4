"""Persisted user settings.

The only setting is the installation path, remembered between runs so
it does not have to be passed to every command.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path

from .core.exceptions import ConfigError
from .layout import default_data_root

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = "ks-packer"
SETTINGS_FILE_NAME = "settings.json"


def settings_path(data_root: Path | None = None) -> Path:
    root = data_root if data_root is not None else default_data_root()
    return root / SETTINGS_DIR_NAME / SETTINGS_FILE_NAME


@dataclass
class Settings:
    """User settings stored as JSON in the local data directory."""

    keysight_path: str = ""

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings, returning defaults if none were saved yet.

        Raises:
            ConfigError: If the settings file exists but cannot be parsed
        """
        path = path or settings_path()
        if not path.exists():
            logger.debug("No settings at %s, using defaults", path)
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read settings: {e}", context={"path": path}) from e

        if not isinstance(data, dict) or not isinstance(data.get("keysight_path", ""), str):
            raise ConfigError("Malformed settings file", context={"path": path})

        return cls(keysight_path=data.get("keysight_path", ""))

    def store(self, path: Path | None = None) -> None:
        """Write settings atomically, creating the directory if needed.

        Raises:
            ConfigError: If the file cannot be written
        """
        path = path or settings_path()
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=str(path.parent), suffix=".tmp", delete=False
            ) as f:
                tmp_path = Path(f.name)
                json.dump(asdict(self), f, indent=2)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise ConfigError(f"Failed to write settings: {e}", context={"path": path}) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
        logger.debug("Stored settings at %s", path)
