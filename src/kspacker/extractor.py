"""Collect the texture references a preset document uses.

The preset document is treated as opaque JSON except for a fixed set of
fields: a number of material objects, each with up to seven texture
slots, plus the particle and pulse effect lists. Nothing here touches the
file system.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .core.types import AssetReference, TextureCategory

logger = logging.getLogger(__name__)

# Material objects, as key paths from the document root
MATERIAL_PATHS: tuple[tuple[str, ...], ...] = (
    ("effects", "keypresses", "keypressMaterial"),
    ("effects", "noteObjects", "noteBorderMaterial"),
    ("effects", "noteObjects", "noteObjectMaterial"),
    ("scene", "backdropMaterial"),
    ("scene", "damperMaterial"),
    ("scene", "octaveMaterial"),
    ("scene", "overlayMaterial"),
    ("scene", "pianoBlackKeyMaterial"),
    ("scene", "pianoWhiteKeyMaterial"),
)


@runtime_checkable
class Texturable(Protocol):
    """Anything exposing the seven optional material texture slots."""

    diffuse: str | None
    emissive: str | None
    mask: str | None
    metalness: str | None
    normal: str | None
    roughness: str | None
    specular: str | None


# Slot attribute -> (document key, category)
TEXTURE_SLOTS: dict[str, tuple[str, TextureCategory]] = {
    "diffuse": ("diffuseTexture", TextureCategory.DIFFUSE),
    "emissive": ("emissiveTexture", TextureCategory.EMISSIVE),
    "mask": ("maskTexture", TextureCategory.MASK),
    "metalness": ("metalnessTexture", TextureCategory.METALNESS),
    "normal": ("normalTexture", TextureCategory.NORMAL),
    "roughness": ("roughnessTexture", TextureCategory.ROUGHNESS),
    "specular": ("specularTexture", TextureCategory.SPECULAR),
}


def _texture_name(value: Any) -> str | None:
    """Return a usable logical name, or None for empty/absent values."""
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class Material:
    """A material object read from the preset document."""

    diffuse: str | None = None
    emissive: str | None = None
    mask: str | None = None
    metalness: str | None = None
    normal: str | None = None
    roughness: str | None = None
    specular: str | None = None

    @classmethod
    def from_document(cls, obj: Any) -> "Material":
        if not isinstance(obj, dict):
            return cls()
        return cls(**{attr: _texture_name(obj.get(key)) for attr, (key, _) in TEXTURE_SLOTS.items()})


def texture_references(material: Texturable) -> Iterator[AssetReference]:
    """Yield a reference for every filled texture slot of a material."""
    for attr, (_, category) in TEXTURE_SLOTS.items():
        name = getattr(material, attr)
        if name:
            yield AssetReference(category, name)


def _lookup(document: Any, path: tuple[str, ...]) -> Any:
    node = document
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _enabled_elements(block: Any, enabled_key: str, list_key: str) -> Iterator[dict[str, Any]]:
    """Yield the active elements of a toggleable effect list.

    Nothing is yielded when the whole block is disabled, regardless of the
    individual elements' flags.
    """
    if not isinstance(block, dict) or block.get(enabled_key) is not True:
        return
    elements = block.get(list_key)
    if not isinstance(elements, list):
        return
    for element in elements:
        if isinstance(element, dict) and element.get("enabled") is True:
            yield element


def iter_materials(document: Any) -> Iterator[Material]:
    for path in MATERIAL_PATHS:
        obj = _lookup(document, path)
        if obj is None:
            logger.debug("Preset has no %s", ".".join(path))
            continue
        yield Material.from_document(obj)


def extract_references(document: Any) -> set[AssetReference]:
    """Collect every texture reference in a parsed preset document.

    Args:
        document: Decoded preset JSON

    Returns:
        Deduplicated set of asset references
    """
    references: set[AssetReference] = set()

    for material in iter_materials(document):
        references.update(texture_references(material))

    particles = _lookup(document, ("effects", "particles"))
    for particle in _enabled_elements(particles, "particlesEnabled", "particleV2Array"):
        name = _texture_name(particle.get("shape"))
        if name:
            references.add(AssetReference(TextureCategory.SHAPE, name))

    pulses = _lookup(document, ("effects", "pulses"))
    for pulse in _enabled_elements(pulses, "pulsesEnabled", "pulseArrayV2"):
        stencil = _texture_name(pulse.get("stencil"))
        if stencil:
            references.add(AssetReference(TextureCategory.STENCIL, stencil))
        world_stencil = _texture_name(pulse.get("worldStencil"))
        if world_stencil:
            references.add(AssetReference(TextureCategory.WORLD_STENCIL, world_stencil))

    logger.debug("Extracted %d texture references", len(references))
    return references
