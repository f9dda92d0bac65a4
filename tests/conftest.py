"""Shared fixtures: a fake installation and local data directory."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from kspacker.core.types import TextureCategory
from kspacker.layout import DataLayout

INSTALL_VERSION = 1500


def make_preset_document(
    version: int = INSTALL_VERSION,
    keypress: dict[str, str] | None = None,
    backdrop: dict[str, str] | None = None,
    particles_enabled: bool = False,
    particles: list[dict[str, Any]] | None = None,
    pulses_enabled: bool = False,
    pulses: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a minimal preset document in the on-disk shape."""
    return {
        "versionForUpdatePurposes": version,
        "effects": {
            "keypresses": {"keypressMaterial": keypress or {}},
            "noteObjects": {"noteBorderMaterial": {}, "noteObjectMaterial": {}},
            "particles": {
                "particlesEnabled": particles_enabled,
                "particleV2Array": particles or [],
            },
            "pulses": {
                "pulsesEnabled": pulses_enabled,
                "pulseArrayV2": pulses or [],
            },
        },
        "scene": {
            "backdropMaterial": backdrop or {},
            "damperMaterial": {},
            "octaveMaterial": {},
            "overlayMaterial": {},
            "pianoBlackKeyMaterial": {},
            "pianoWhiteKeyMaterial": {},
        },
    }


@pytest.fixture
def layout(tmp_path: Path) -> DataLayout:
    """A layout with a valid installation (version 1500) and empty data root."""
    layout = DataLayout(install_root=tmp_path / "install", data_root=tmp_path / "data")
    layout.root_preset_dir.mkdir(parents=True)
    (layout.root_preset_dir / "Plain (default).json").write_text(
        json.dumps(make_preset_document()), encoding="utf-8"
    )
    layout.custom_preset_dir.mkdir(parents=True)
    return layout


@pytest.fixture
def write_preset(layout: DataLayout) -> Callable[..., Path]:
    """Write a preset document into the user preset directory."""

    def _write(name: str, document: dict[str, Any]) -> Path:
        path = layout.preset_path(name)
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_texture(layout: DataLayout) -> Callable[..., Path]:
    """Write a texture into one of the three texture roots.

    ``where`` is 'install', 'custom' or 'random'.
    """

    def _write(
        where: str,
        category: TextureCategory,
        filename: str,
        data: bytes = b"\x89PNG fake",
    ) -> Path:
        roots = {
            "install": layout.root_asset_dir,
            "custom": layout.custom_asset_dir(random=False),
            "random": layout.custom_asset_dir(random=True),
        }
        directory = roots[where] / category.path_name
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def other_layout(tmp_path: Path, layout: DataLayout) -> DataLayout:
    """A second machine: same installation, separate empty data root."""
    other = DataLayout(install_root=layout.install_root, data_root=tmp_path / "other-data")
    return other
