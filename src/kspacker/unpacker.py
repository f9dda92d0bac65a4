"""Read preset bundles and install them into the local data directory.

Opening a bundle never writes anything. ``PackedBundle.conflicts`` reports
what an import would overwrite; deciding whether to go ahead is up to the
caller. ``PackedBundle.unpack`` then writes the preset and its textures,
overwriting existing files.
"""

import json
import logging
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from jsonschema import ValidationError

from .core.exceptions import (
    ArchiveIOError,
    AssetMissingInArchiveError,
    ExtractionError,
    MalformedMetadataError,
)
from .core.safety import validate_path_safety
from .core.types import (
    ASSET_PREFIX,
    METADATA_ENTRY,
    PRESET_ENTRY,
    BundleMetadata,
    ContentEntry,
    TextureCategory,
)
from .core.validator import validate_metadata
from .layout import DataLayout
from .locator import AssetLocator


logger = logging.getLogger(__name__)

# Raised by zipfile while decompressing damaged or truncated members
ZIP_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


@dataclass
class Conflicts:
    """Local data an import would overwrite.

    Attributes:
        preset_exists: A saved preset with the bundle's name already exists
        assets: Bundle entries whose name and category already exist locally
    """

    preset_exists: bool = False
    assets: list[ContentEntry] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.preset_exists or bool(self.assets)


class PackedBundle:
    """An opened bundle file.

    Metadata is parsed on first access and reused afterwards; the archive
    itself is reopened for each read and never modified.

    Example:
        >>> bundle = open_bundle('Neon.kspreset', layout)
        >>> bundle.metadata['name']
        'Neon'
        >>> if not bundle.conflicts():
        ...     bundle.unpack()
    """

    def __init__(self, path: Path, layout: DataLayout):
        self.path = path
        self.layout = layout
        self.locator = AssetLocator(layout)
        self._metadata: BundleMetadata | None = None

    def __repr__(self) -> str:
        return f"<PackedBundle path={str(self.path)!r}>"

    def _open_zip(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, "r")
        except FileNotFoundError as e:
            raise ArchiveIOError(f"Bundle not found: {self.path}", context={"path": self.path}) from e
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveIOError(f"Unable to read bundle: {e}", context={"path": self.path}) from e

    @property
    def metadata(self) -> BundleMetadata:
        """The parsed metadata.json.

        Raises:
            ArchiveIOError: If the archive cannot be read
            MalformedMetadataError: If metadata.json is missing or invalid
        """
        if self._metadata is None:
            self._metadata = self._load_metadata()
        return self._metadata

    def _load_metadata(self) -> BundleMetadata:
        with self._open_zip() as zf:
            try:
                raw = zf.read(METADATA_ENTRY)
            except KeyError as e:
                raise MalformedMetadataError(
                    f"Bundle has no {METADATA_ENTRY}", context={"path": self.path}
                ) from e
            except (OSError, *ZIP_READ_ERRORS) as e:
                raise ArchiveIOError(
                    f"Unable to read {METADATA_ENTRY}: {e}", context={"path": self.path}
                ) from e

        try:
            metadata = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedMetadataError(
                f"Malformed JSON in {METADATA_ENTRY}: {e}", context={"path": self.path}
            ) from e

        try:
            validate_metadata(metadata)
        except ValidationError as e:
            raise MalformedMetadataError(
                f"Invalid {METADATA_ENTRY}: {e.message}", context={"path": self.path}
            ) from e

        logger.debug("Loaded metadata of %s with %d assets", self.path, len(metadata["assets"]))
        return metadata  # type: ignore[no-any-return]

    @property
    def packed_at(self) -> datetime:
        """Pack timestamp as an aware datetime."""
        try:
            return datetime.fromisoformat(self.metadata["packed"])
        except ValueError as e:
            raise MalformedMetadataError(
                f"Invalid pack timestamp: {self.metadata['packed']!r}"
            ) from e

    def preset_exists(self) -> bool:
        """True if a saved preset with the bundle's name exists locally."""
        return self.layout.preset_path(self.metadata["name"]).exists()

    def conflicts(self) -> Conflicts:
        """Compute which local files an import would overwrite.

        Installation defaults are never considered, only the user's data.
        """
        assets = [
            entry
            for entry in self.metadata["assets"]
            if self.locator.exists_locally(TextureCategory(entry["texture_type"]), entry["name"])
        ]
        return Conflicts(preset_exists=self.preset_exists(), assets=assets)

    def _asset_destination(self, entry: ContentEntry) -> Path:
        category = TextureCategory(entry["texture_type"])
        directory = self.layout.custom_asset_dir(random=False) / category.path_name
        destination = directory / f"{entry['name']}.{entry['extension']}"
        try:
            validate_path_safety(destination, directory)
        except ValueError as e:
            raise MalformedMetadataError(str(e), context={"name": entry["name"]}) from e
        return destination

    def _preset_destination(self) -> Path:
        destination = self.layout.preset_path(self.metadata["name"])
        try:
            validate_path_safety(destination, self.layout.custom_preset_dir)
        except ValueError as e:
            raise MalformedMetadataError(str(e), context={"name": self.metadata["name"]}) from e
        return destination

    def unpack(self) -> None:
        """Install the preset and its textures, overwriting existing files.

        The archive is checked for completeness and CRC integrity before
        anything is written, so a bundle with missing or damaged blobs leaves
        the data directory untouched.
        Failures while writing are not rolled back.

        Raises:
            ArchiveIOError: If the archive cannot be read
            MalformedMetadataError: If metadata is invalid or names unsafe paths
            AssetMissingInArchiveError: If preset.json or a referenced blob is missing
            ExtractionError: If writing local files fails
        """
        metadata = self.metadata
        preset_destination = self._preset_destination()
        destinations = [(entry, self._asset_destination(entry)) for entry in metadata["assets"]]

        with self._open_zip() as zf:
            names = set(zf.namelist())
            if PRESET_ENTRY not in names:
                raise AssetMissingInArchiveError(
                    f"Bundle does not contain {PRESET_ENTRY}", context={"path": self.path}
                )
            for entry in metadata["assets"]:
                if f"{ASSET_PREFIX}{entry['hash']}" not in names:
                    raise AssetMissingInArchiveError(
                        f"Bundle does not contain asset {entry['hash']}",
                        context={"path": self.path, "name": entry["name"]},
                    )

            try:
                corrupt = zf.testzip()
            except (OSError, *ZIP_READ_ERRORS) as e:
                raise ArchiveIOError(f"Corrupt bundle: {e}", context={"path": self.path}) from e
            if corrupt is not None:
                raise ArchiveIOError(
                    f"Corrupt entry {corrupt} in bundle", context={"path": self.path}
                )

            logger.info("Unpacking preset '%s' to %s", metadata["name"], preset_destination)
            self._extract(zf, PRESET_ENTRY, preset_destination)

            for entry, destination in destinations:
                logger.debug("Unpacking asset %s to %s", entry["hash"], destination)
                self._extract(zf, f"{ASSET_PREFIX}{entry['hash']}", destination)

        logger.info("Unpacked %d assets", len(destinations))

    def _extract(self, zf: zipfile.ZipFile, member: str, destination: Path) -> None:
        """Copy one archive member to a local file, closing both before returning."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(
                f"Cannot create {destination.parent}: {e}", context={"path": destination}
            ) from e

        try:
            src = zf.open(member)
        except ZIP_READ_ERRORS as e:
            raise ArchiveIOError(f"Unable to read {member}: {e}", context={"path": self.path}) from e

        with src:
            try:
                with destination.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
            except ZIP_READ_ERRORS as e:
                raise ArchiveIOError(
                    f"Corrupt entry {member}: {e}", context={"path": self.path}
                ) from e
            except OSError as e:
                raise ExtractionError(
                    f"Cannot write {destination}: {e}", context={"path": destination}
                ) from e


def open_bundle(path: str | Path, layout: DataLayout) -> PackedBundle:
    """Open a bundle file for inspection and import.

    Args:
        path: Bundle file
        layout: Installation and data roots used for conflict checks and extraction

    Returns:
        PackedBundle for the file

    Raises:
        ArchiveIOError: If the file does not exist or is not a zip archive
    """
    bundle = PackedBundle(Path(path), layout)
    with bundle._open_zip():
        pass
    return bundle
