"""Type definitions for preset bundles.

The TypedDict classes mirror the JSON structure of ``metadata.json``
defined in schemas/bundle_metadata.schema.json. The dataclasses describe
in-memory results of extraction and resolution.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypedDict

# Image extensions tried for every logical asset name, in priority order
IMAGE_EXTENSIONS = ("png", "jpg", "jpeg")


class TextureCategory(str, Enum):
    """Which texture directory family an asset belongs to.

    The value is the variant name, which is also how the category is
    written to ``metadata.json``.
    """

    DIFFUSE = "Diffuse"
    EMISSIVE = "Emissive"
    WORLD_STENCIL = "WorldStencil"
    MASK = "Mask"
    METALNESS = "Metalness"
    NORMAL = "Normal"
    ROUGHNESS = "Roughness"
    SHAPE = "Shape"
    SPECULAR = "Specular"
    STENCIL = "Stencil"

    @property
    def path_name(self) -> str:
        """Directory stem holding textures of this category."""
        return _CATEGORY_STEMS[self]


# Two pairs of categories share a directory
_CATEGORY_STEMS = {
    TextureCategory.DIFFUSE: "Colour",
    TextureCategory.EMISSIVE: "Colour",
    TextureCategory.WORLD_STENCIL: "Mask",
    TextureCategory.MASK: "Mask",
    TextureCategory.METALNESS: "Metal",
    TextureCategory.NORMAL: "Normal",
    TextureCategory.ROUGHNESS: "Roughness",
    TextureCategory.SHAPE: "Particle stencil",
    TextureCategory.SPECULAR: "Specular",
    TextureCategory.STENCIL: "Pulse stencil",
}


class AssetAction(Enum):
    """Outcome of resolving an asset reference."""

    IGNORE = "ignore"  # shipped with the installation, never packed
    PACK = "pack"  # user asset, travels inside the bundle
    NOT_FOUND = "not_found"  # referenced but missing everywhere


@dataclass(frozen=True, order=True)
class AssetReference:
    """A logical asset name (without extension) and its category."""

    category: TextureCategory
    name: str


@dataclass(frozen=True)
class ResolvedAsset:
    """An asset reference together with where it was found.

    ``path`` and ``extension`` are None for NOT_FOUND. ``random`` is only
    ever True for PACK assets found in the randomizer directory.
    """

    reference: AssetReference
    action: AssetAction
    path: Path | None = None
    extension: str | None = None
    random: bool = False

    @property
    def name(self) -> str:
        return self.reference.name

    @property
    def category(self) -> TextureCategory:
        return self.reference.category


class ContentEntry(TypedDict):
    """A single packed asset as recorded in metadata.json."""

    hash: str  # Lowercase hex SHA-256 of the asset bytes
    name: str  # Logical asset name, no extension
    extension: str  # Matched image extension (e.g., 'png')
    texture_type: str  # TextureCategory value
    source_was_random: bool  # Found in the randomizer directory


class BundleMetadata(TypedDict):
    """Complete index of a preset bundle."""

    name: str  # Preset name used on import
    author: str
    description: str
    packed: str  # ISO-8601 UTC timestamp
    preset_version: int  # Version embedded in the source preset
    target_version: int  # Installation version at pack time
    assets: list[ContentEntry]


# Archive layout
PRESET_ENTRY = "preset.json"
METADATA_ENTRY = "metadata.json"
ASSET_PREFIX = "assets/"
BUNDLE_SUFFIX = ".kspreset"
