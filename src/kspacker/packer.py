"""Bundle a saved preset together with the custom textures it uses.

Packing happens in two steps so a caller can show what will be packed
before writing anything:

1. ``Packer.collect`` loads the preset, checks it may be packed, and
   resolves every texture it references.
2. ``PackablePreset.pack`` hashes the textures and writes the bundle.

The bundle is a zip with ``preset.json`` (the preset, verbatim),
``metadata.json`` (a BundleMetadata index) and one ``assets/<sha256>``
entry per distinct texture content.
"""

import hashlib
import json
import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from jsonschema import ValidationError

from .core.exceptions import (
    BuiltinPresetError,
    MalformedPresetError,
    PackIOError,
    PresetNotFoundError,
    VersionMismatchError,
)
from .core.types import (
    ASSET_PREFIX,
    METADATA_ENTRY,
    PRESET_ENTRY,
    AssetAction,
    BundleMetadata,
    ContentEntry,
    ResolvedAsset,
)
from .core.validator import validate_metadata
from .core.version import VERSION_FIELD, read_preset_version
from .extractor import extract_references
from .layout import DataLayout
from .locator import AssetLocator

logger = logging.getLogger(__name__)


# Read size used while hashing textures
CHUNK_SIZE = 64 * 1024


@dataclass
class BundleInfo:
    """Free-text metadata supplied by the person packing the preset.

    Attributes:
        name: Name the preset is imported under (defaults to its current name)
        author: Author shown on import
        description: Description shown on import
    """

    name: str | None = None
    author: str = ""
    description: str = ""


def hash_file(path: Path) -> tuple[str, bytes]:
    """Read a file in chunks, hashing as it goes.

    Args:
        path: File to read

    Returns:
        Tuple of (hex SHA-256 digest, file contents)
    """
    hasher = hashlib.sha256()
    buffer = bytearray()
    with path.open("rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            hasher.update(chunk)
            buffer.extend(chunk)
    return hasher.hexdigest(), bytes(buffer)


@dataclass
class PackablePreset:
    """A preset whose textures have been resolved and can be written out.

    Attributes:
        name: Preset name
        path: Path of the preset document
        version: Version embedded in the preset
        target_version: Installation version the preset was checked against
        assets: Resolved textures that will travel in the bundle
        skipped: Resolved textures that will not (installation defaults or missing)
    """

    name: str
    path: Path
    version: int
    target_version: int
    assets: list[ResolvedAsset] = field(default_factory=list)
    skipped: list[ResolvedAsset] = field(default_factory=list)

    def pack(self, output: str | Path, info: BundleInfo | None = None) -> BundleMetadata:
        """Write the bundle to ``output``.

        The archive is written to a temporary file in the output directory
        and moved into place only once complete. On failure no file is left
        at ``output`` (an existing one is left untouched).

        Args:
            output: Destination bundle path
            info: Optional name/author/description for the metadata

        Returns:
            The metadata written into the bundle

        Raises:
            PackIOError: If reading a texture or writing the archive fails
        """
        info = info or BundleInfo()
        output = Path(output)

        entries, blobs = self._hash_assets()

        metadata: BundleMetadata = {
            "name": info.name or self.name,
            "author": info.author,
            "description": info.description,
            "packed": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "preset_version": self.version,
            "target_version": self.target_version,
            "assets": entries,
        }

        try:
            validate_metadata(metadata)
        except ValidationError as e:
            raise PackIOError(f"Refusing to write invalid metadata: {e.message}") from e

        try:
            preset_bytes = self.path.read_bytes()
        except OSError as e:
            raise PackIOError(f"Cannot read preset file: {e}", context={"path": self.path}) from e

        logger.info(
            "Writing bundle %s: %d assets, %d unique blobs", output, len(entries), len(blobs)
        )
        self._write_archive(output, preset_bytes, metadata, blobs)
        return metadata

    def _hash_assets(self) -> tuple[list[ContentEntry], dict[str, bytes]]:
        """Hash every packable texture, deduplicating identical contents."""
        entries: list[ContentEntry] = []
        blobs: dict[str, bytes] = {}

        for asset in self.assets:
            if asset.path is None or asset.extension is None:
                raise PackIOError(
                    f"Texture '{asset.name}' has no resolved file",
                    context={"name": asset.name},
                )
            try:
                digest, data = hash_file(asset.path)
            except OSError as e:
                raise PackIOError(
                    f"Cannot read texture {asset.path}: {e}", context={"path": asset.path}
                ) from e

            if digest in blobs:
                logger.info("Content of %s already packed as %s", asset.path, digest)
            else:
                blobs[digest] = data

            entries.append(
                ContentEntry(
                    hash=digest,
                    name=asset.name,
                    extension=asset.extension,
                    texture_type=asset.category.value,
                    source_was_random=asset.random,
                )
            )

        return entries, blobs

    @staticmethod
    def _write_archive(
        output: Path,
        preset_bytes: bytes,
        metadata: BundleMetadata,
        blobs: dict[str, bytes],
    ) -> None:
        tmp_path: Path | None = None
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{output.name}.", suffix=".tmp", dir=str(output.parent)
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(
                raw, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
            ) as zf:
                zf.writestr(PRESET_ENTRY, preset_bytes)
                zf.writestr(METADATA_ENTRY, json.dumps(metadata, indent=2))
                for digest, data in blobs.items():
                    zf.writestr(f"{ASSET_PREFIX}{digest}", data)
            os.replace(tmp_path, output)
            tmp_path = None
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise PackIOError(f"Cannot write bundle: {e}", context={"path": output}) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)


class Packer:
    """Prepare a saved preset for packing.

    Example:
        >>> version = get_installation_version(layout.install_root)
        >>> packable = Packer(layout, version, 'Neon').collect()
        >>> packable.pack('Neon.kspreset', BundleInfo(author='me'))
    """

    def __init__(self, layout: DataLayout, target_version: int, preset: str):
        """Initialize the packer.

        Args:
            layout: Installation and data roots
            target_version: Version of the current installation
            preset: Name of the saved preset, without extension
        """
        self.layout = layout
        self.target_version = target_version
        self.preset = preset
        self.locator = AssetLocator(layout)

    def is_builtin(self) -> bool:
        """True if the installation ships a preset with this name."""
        return self.layout.builtin_preset_path(self.preset).exists()

    def collect(self, allow_builtin: bool = False) -> PackablePreset:
        """Load the preset and resolve the textures it references.

        Args:
            allow_builtin: Pack the preset even if it shadows a built-in one

        Returns:
            PackablePreset ready to be written

        Raises:
            PresetNotFoundError: If the preset does not exist
            MalformedPresetError: If the preset cannot be read or parsed
            BuiltinPresetError: If the preset is built-in and not allowed
            VersionMismatchError: If the preset version differs from the installation
        """
        preset_path = self.layout.preset_path(self.preset)
        if not preset_path.is_file():
            logger.warning("Preset does not exist: %s", preset_path)
            raise PresetNotFoundError(
                f"Preset '{self.preset}' not found", context={"path": preset_path}
            )

        if not allow_builtin and self.is_builtin():
            raise BuiltinPresetError(
                f"Preset '{self.preset}' is a built-in preset", context={"name": self.preset}
            )

        try:
            with preset_path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedPresetError(
                f"Cannot load preset '{self.preset}': {e}", context={"path": preset_path}
            ) from e

        version = read_preset_version(document)
        if version is None:
            raise MalformedPresetError(
                f"Preset '{self.preset}' has no {VERSION_FIELD} field",
                context={"path": preset_path},
            )
        if version != self.target_version:
            raise VersionMismatchError(wanted=self.target_version, got=version)

        logger.info("Discovering assets of preset '%s'", self.preset)
        resolved = self.locator.resolve_all(extract_references(document))

        packable = PackablePreset(
            name=self.preset,
            path=preset_path,
            version=version,
            target_version=self.target_version,
        )
        for asset in resolved:
            if asset.action is AssetAction.PACK:
                packable.assets.append(asset)
            else:
                packable.skipped.append(asset)

        logger.info(
            "Preset '%s': %d assets to pack, %d skipped",
            self.preset,
            len(packable.assets),
            len(packable.skipped),
        )
        return packable


def pack_preset(
    layout: DataLayout,
    target_version: int,
    preset: str,
    output: str | Path,
    info: BundleInfo | None = None,
    allow_builtin: bool = False,
) -> BundleMetadata:
    """Collect and pack a preset in one call.

    Returns:
        The metadata written into the bundle
    """
    packable = Packer(layout, target_version, preset).collect(allow_builtin=allow_builtin)
    return packable.pack(output, info)
