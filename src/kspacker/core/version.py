"""Installation and preset version lookup.

Versions are the ``versionForUpdatePurposes`` integer found in every
preset document. It is a fixed-point encoding of the release number and
is only ever compared for equality, never decomposed.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..layout import PRESET_SUFFIX, root_preset_dir
from .exceptions import MalformedInstallationError, NotAnInstallationError

logger = logging.getLogger(__name__)

VERSION_FIELD = "versionForUpdatePurposes"

# Reference preset that every installation ships
REFERENCE_PRESET = "Plain (default)"


def read_preset_version(document: Any) -> int | None:
    """Return the embedded version of a parsed preset document.

    Args:
        document: Decoded preset JSON

    Returns:
        The version integer, or None if absent or not an integer
    """
    if not isinstance(document, dict):
        return None
    version = document.get(VERSION_FIELD)
    # bool is an int subclass but never a valid version
    if isinstance(version, bool) or not isinstance(version, int):
        return None
    return version


def get_installation_version(install_root: str | Path) -> int:
    """Read the installation version from its reference preset.

    Args:
        install_root: Root directory of the installation

    Returns:
        The installation version integer, unchanged

    Raises:
        NotAnInstallationError: If the reference preset is missing
        MalformedInstallationError: If it cannot be parsed or has no version
    """
    path = root_preset_dir(install_root) / f"{REFERENCE_PRESET}{PRESET_SUFFIX}"
    if not path.is_file():
        raise NotAnInstallationError(
            "Unable to find the default presets, please recheck your path",
            context={"path": path},
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInstallationError(
            f"Failed to load default preset file: {e}", context={"path": path}
        ) from e

    version = read_preset_version(document)
    if version is None:
        raise MalformedInstallationError(
            f"Default preset file has no {VERSION_FIELD} field", context={"path": path}
        )

    logger.debug("Installation at %s has version %d", install_root, version)
    return version


def format_version(version: int | None) -> str:
    """Render a version for display, e.g. ``0x640``."""
    if version is None:
        return "Unknown"
    return f"0x{version:X}"
