"""Exception hierarchy for packing and unpacking preset bundles.

Every error carries a human-readable message plus an optional ``context``
mapping with the values that caused it (paths, names, versions), so the
CLI can print a one-line message while scripts can still inspect details.
"""

from typing import Any, Mapping


class KsPackerError(Exception):
    """Base exception for all kspacker errors."""

    context: dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context) if context is not None else {}

    def to_json_error(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {key: str(value) for key, value in self.context.items()},
        }


class ConfigError(KsPackerError):
    """Raised when persisted settings cannot be read or written."""


# ============================================================================
# Environment errors
# ============================================================================


class InstallationError(KsPackerError):
    """Base exception for problems with the installation root."""


class NotAnInstallationError(InstallationError):
    """Raised when the reference preset document is missing from the root."""


class MalformedInstallationError(InstallationError):
    """Raised when the reference preset document cannot be parsed."""


# ============================================================================
# Packing errors
# ============================================================================


class PackError(KsPackerError):
    """Base exception for errors raised while building a bundle."""


class PresetNotFoundError(PackError):
    """Raised when the named preset does not exist in the user preset directory."""


class MalformedPresetError(PackError):
    """Raised when the preset document cannot be read or is not valid JSON."""


class BuiltinPresetError(PackError):
    """Raised when packing a built-in preset without an explicit override."""


class VersionMismatchError(PackError):
    """Raised when the preset was saved by a different installation version."""

    def __init__(self, wanted: int, got: int) -> None:
        super().__init__(
            f"Preset version {got} does not match installation version {wanted}",
            context={"wanted": wanted, "got": got},
        )
        self.wanted = wanted
        self.got = got


class PackIOError(PackError):
    """Raised when the bundle cannot be created or written."""


# ============================================================================
# Unpacking errors
# ============================================================================


class UnpackError(KsPackerError):
    """Base exception for errors raised while reading or extracting a bundle."""


class ArchiveIOError(UnpackError):
    """Raised when the bundle cannot be opened or is not a valid zip file."""


class MalformedMetadataError(UnpackError):
    """Raised when metadata.json is missing, invalid JSON, or violates the schema."""


class AssetMissingInArchiveError(UnpackError):
    """Raised when metadata references a blob the archive does not contain."""


class ExtractionError(UnpackError):
    """Raised when writing extracted files to the local data directory fails."""


__all__ = [
    "KsPackerError",
    "ConfigError",
    "InstallationError",
    "NotAnInstallationError",
    "MalformedInstallationError",
    "PackError",
    "PresetNotFoundError",
    "MalformedPresetError",
    "BuiltinPresetError",
    "VersionMismatchError",
    "PackIOError",
    "UnpackError",
    "ArchiveIOError",
    "MalformedMetadataError",
    "AssetMissingInArchiveError",
    "ExtractionError",
]
