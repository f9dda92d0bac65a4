"""Layered asset lookup.

Textures referenced by a preset can live in three places. The locator
checks them in a fixed order and reports the first match:

1. the installation's default textures (already present everywhere, so
   the asset is ignored),
2. the user's custom textures (packed),
3. the user's randomizer-enabled textures (packed, flagged random).

A custom texture therefore never hides behind an installation default of
the same name, and a randomizer texture is only used when no plain custom
texture exists.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .core.safety import validate_path_safety
from .core.types import (
    IMAGE_EXTENSIONS,
    AssetAction,
    AssetReference,
    ResolvedAsset,
    TextureCategory,
)
from .layout import DataLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchRoot:
    """One entry of the lookup order: a texture root and what a hit means."""

    directory: Path
    action: AssetAction
    random: bool = False
    local: bool = True  # False for installation-provided roots


def find_with_extension(directory: Path, name: str) -> tuple[Path, str] | None:
    """Return the first ``name.<ext>`` file in ``directory``.

    Args:
        directory: Category directory to search
        name: Logical asset name without extension

    Names resolving outside ``directory`` never match.

    Returns:
        Tuple of (path, extension), or None if no candidate exists
    """
    for ext in IMAGE_EXTENSIONS:
        candidate = directory / f"{name}.{ext}"
        try:
            validate_path_safety(candidate, directory)
        except ValueError:
            logger.warning("Ignoring texture name outside its directory: %r", name)
            return None
        if candidate.is_file():
            return candidate, ext
    return None


class AssetLocator:
    """Resolve asset references against the layered texture directories.

    Example:
        >>> locator = AssetLocator(layout)
        >>> resolved = locator.resolve(TextureCategory.EMISSIVE, 'Glow')
        >>> resolved.action, resolved.random
        (<AssetAction.PACK: 'pack'>, True)
    """

    def __init__(self, layout: DataLayout):
        self.layout = layout
        self.roots = [
            SearchRoot(layout.root_asset_dir, AssetAction.IGNORE, local=False),
            SearchRoot(layout.custom_asset_dir(random=False), AssetAction.PACK),
            SearchRoot(layout.custom_asset_dir(random=True), AssetAction.PACK, random=True),
        ]

    def resolve(self, category: TextureCategory, name: str) -> ResolvedAsset:
        """Find where an asset comes from.

        Args:
            category: Texture category of the reference
            name: Logical asset name without extension

        Returns:
            ResolvedAsset with the action of the first root that matched
        """
        reference = AssetReference(category, name)

        for root in self.roots:
            found = find_with_extension(root.directory / category.path_name, name)
            if found is None:
                continue

            path, ext = found
            logger.debug("Resolved %s '%s' to %s (%s)", category.value, name, path, root.action.value)
            return ResolvedAsset(
                reference=reference,
                action=root.action,
                path=path,
                extension=ext,
                random=root.random,
            )

        logger.debug("Asset %s '%s' not found", category.value, name)
        return ResolvedAsset(reference=reference, action=AssetAction.NOT_FOUND)

    def resolve_all(self, references: Iterable[AssetReference]) -> list[ResolvedAsset]:
        """Resolve many references.

        Returns:
            Resolved assets ordered by (category, name)
        """
        return [self.resolve(ref.category, ref.name) for ref in sorted(set(references))]

    def exists_locally(self, category: TextureCategory, name: str) -> bool:
        """Check whether a user texture with this name already exists.

        Only the user directories are searched; installation defaults are
        never overwritten and so never conflict.
        """
        return any(
            find_with_extension(root.directory / category.path_name, name) is not None
            for root in self.roots
            if root.local
        )
