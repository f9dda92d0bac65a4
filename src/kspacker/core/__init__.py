"""Core utilities shared by the packer and unpacker.

This package contains type definitions, the error hierarchy, metadata
schema validation, version lookup and path safety helpers.
"""

from .exceptions import (
    ArchiveIOError,
    AssetMissingInArchiveError,
    BuiltinPresetError,
    ConfigError,
    ExtractionError,
    InstallationError,
    KsPackerError,
    MalformedInstallationError,
    MalformedMetadataError,
    MalformedPresetError,
    NotAnInstallationError,
    PackError,
    PackIOError,
    PresetNotFoundError,
    UnpackError,
    VersionMismatchError,
)
from .safety import sanitize_filename, validate_path_safety
from .types import (
    IMAGE_EXTENSIONS,
    AssetAction,
    AssetReference,
    BundleMetadata,
    ContentEntry,
    ResolvedAsset,
    TextureCategory,
)
from .validator import validate_metadata, validate_metadata_with_error_details
from .version import format_version, get_installation_version, read_preset_version

__all__ = [
    "IMAGE_EXTENSIONS",
    "AssetAction",
    "AssetReference",
    "BundleMetadata",
    "ContentEntry",
    "ResolvedAsset",
    "TextureCategory",
    "format_version",
    "get_installation_version",
    "read_preset_version",
    "sanitize_filename",
    "validate_path_safety",
    "validate_metadata",
    "validate_metadata_with_error_details",
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
