"""Directory conventions for the installation and the per-user data root.

All paths the packer and unpacker touch are derived from two roots: the
installation directory (read-only defaults) and the local data directory
(the user's saved presets and textures). Both are passed around as an
explicit DataLayout so callers and tests can point them anywhere.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PRESET_SUFFIX = ".json"

# Environment override for the local data directory
DATA_DIR_ENV = "KSPACKER_DATA_DIR"


def default_data_root() -> Path:
    """Return the platform's local application data directory.

    ``KSPACKER_DATA_DIR`` takes precedence, which is how Proton/Wine
    prefixes are targeted.

    Returns:
        Absolute path of the local data directory
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            return Path(local_app_data)
        return Path.home() / "AppData" / "Local"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home)
    return Path.home() / ".local" / "share"


def root_preset_dir(install_root: str | Path) -> Path:
    """Built-in presets shipped with the installation."""
    return Path(install_root) / "Keysight" / "Default presets" / "Standard"


def root_asset_dir(install_root: str | Path) -> Path:
    """Built-in textures shipped with the installation."""
    return Path(install_root) / "Keysight" / "Default textures"


@dataclass(frozen=True)
class DataLayout:
    """The installation root and local data root, plus derived directories.

    Example:
        >>> layout = DataLayout(Path('C:/Games/Keysight'), default_data_root())
        >>> layout.preset_path('Neon')
        PosixPath('.../Keysight/Saved/Presets/Neon.json')
    """

    install_root: Path
    data_root: Path

    @classmethod
    def from_paths(cls, install_root: str | Path, data_root: str | Path | None = None) -> "DataLayout":
        """Build a layout, falling back to the platform data directory."""
        data = Path(data_root) if data_root is not None else default_data_root()
        return cls(install_root=Path(install_root), data_root=data)

    @property
    def root_preset_dir(self) -> Path:
        return root_preset_dir(self.install_root)

    @property
    def root_asset_dir(self) -> Path:
        return root_asset_dir(self.install_root)

    @property
    def saved_dir(self) -> Path:
        return self.data_root / "Keysight" / "Saved"

    @property
    def custom_preset_dir(self) -> Path:
        """The user's saved presets."""
        return self.saved_dir / "Presets"

    def custom_asset_dir(self, random: bool = False) -> Path:
        """The user's textures, or the randomizer-enabled variant."""
        return self.saved_dir / ("Textures (randomizer enabled)" if random else "Textures")

    def preset_path(self, name: str) -> Path:
        return self.custom_preset_dir / f"{name}{PRESET_SUFFIX}"

    def builtin_preset_path(self, name: str) -> Path:
        return self.root_preset_dir / f"{name}{PRESET_SUFFIX}"

    def list_presets(self) -> list[str]:
        """List the names of all saved user presets, sorted.

        Returns:
            Preset names without extension; empty if the directory is missing
        """
        preset_dir = self.custom_preset_dir
        if not preset_dir.is_dir():
            logger.warning("Preset directory does not exist: %s", preset_dir)
            return []

        return sorted(
            entry.stem
            for entry in preset_dir.iterdir()
            if entry.is_file() and entry.suffix.lower() == PRESET_SUFFIX
        )
