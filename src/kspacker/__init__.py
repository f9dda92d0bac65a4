"""kspacker - portable preset bundles.

This package packs a saved preset together with the custom textures it
references into a single content-deduplicated zip bundle, and imports
such bundles on another machine while reporting conflicts with local data.
"""

# Core library interface
from .extractor import extract_references
from .layout import DataLayout, default_data_root
from .locator import AssetLocator
from .packer import BundleInfo, PackablePreset, Packer, pack_preset
from .unpacker import Conflicts, PackedBundle, open_bundle

# Core utilities
from .core import (
    AssetAction,
    AssetReference,
    BundleMetadata,
    ContentEntry,
    ResolvedAsset,
    TextureCategory,
    format_version,
    get_installation_version,
    validate_metadata,
    validate_metadata_with_error_details,
)
from .core.exceptions import KsPackerError, PackError, UnpackError

# Settings and CLI
from .config import Settings
from .cli import main

__version__ = "0.1.0"

__all__ = [
    # Primary library interface
    "DataLayout",
    "default_data_root",
    "AssetLocator",
    "extract_references",
    "Packer",
    "PackablePreset",
    "BundleInfo",
    "pack_preset",
    "PackedBundle",
    "Conflicts",
    "open_bundle",
    # Core utilities
    "AssetAction",
    "AssetReference",
    "BundleMetadata",
    "ContentEntry",
    "ResolvedAsset",
    "TextureCategory",
    "format_version",
    "get_installation_version",
    "validate_metadata",
    "validate_metadata_with_error_details",
    "KsPackerError",
    "PackError",
    "UnpackError",
    # Settings and CLI
    "Settings",
    "main",
]
