"""Tests for layered asset lookup."""

from kspacker.core.types import AssetAction, AssetReference, TextureCategory
from kspacker.extractor import extract_references
from kspacker.locator import AssetLocator

from .conftest import make_preset_document


class TestCategoryStems:
    """Test the category to directory mapping."""

    def test_shared_stems(self) -> None:
        """Test that the two category pairs share a directory."""
        assert TextureCategory.DIFFUSE.path_name == "Colour"
        assert TextureCategory.EMISSIVE.path_name == "Colour"
        assert TextureCategory.WORLD_STENCIL.path_name == "Mask"
        assert TextureCategory.MASK.path_name == "Mask"

    def test_all_categories_have_stems(self) -> None:
        """Test that the ten categories collapse onto eight directories."""
        stems = {category.path_name for category in TextureCategory}
        assert len(list(TextureCategory)) == 10
        assert len(stems) == 8


class TestResolve:
    """Test resolution priority."""

    def test_installation_default_is_ignored(self, layout, write_texture) -> None:
        """Test that an installation texture resolves to IGNORE."""
        path = write_texture("install", TextureCategory.NORMAL, "Bumps.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.NORMAL, "Bumps")

        assert resolved.action is AssetAction.IGNORE
        assert resolved.path == path
        assert resolved.extension == "png"
        assert resolved.random is False

    def test_installation_wins_over_custom(self, layout, write_texture) -> None:
        """Test that an installation texture shadows a custom one."""
        write_texture("install", TextureCategory.DIFFUSE, "Wood.png")
        write_texture("custom", TextureCategory.DIFFUSE, "Wood.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.DIFFUSE, "Wood")

        assert resolved.action is AssetAction.IGNORE

    def test_custom_is_packed(self, layout, write_texture) -> None:
        """Test that a custom texture resolves to PACK."""
        path = write_texture("custom", TextureCategory.ROUGHNESS, "Grain.jpg")

        resolved = AssetLocator(layout).resolve(TextureCategory.ROUGHNESS, "Grain")

        assert resolved.action is AssetAction.PACK
        assert resolved.path == path
        assert resolved.extension == "jpg"
        assert resolved.random is False

    def test_random_only_is_packed_as_random(self, layout, write_texture) -> None:
        """Test that a randomizer-only texture is packed with the random flag."""
        write_texture("random", TextureCategory.EMISSIVE, "Glow.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.EMISSIVE, "Glow")

        assert resolved.action is AssetAction.PACK
        assert resolved.random is True

    def test_custom_wins_over_random(self, layout, write_texture) -> None:
        """Test that a plain custom texture is preferred to a randomizer one."""
        custom = write_texture("custom", TextureCategory.EMISSIVE, "Glow.png")
        write_texture("random", TextureCategory.EMISSIVE, "Glow.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.EMISSIVE, "Glow")

        assert resolved.path == custom
        assert resolved.random is False

    def test_extension_priority(self, layout, write_texture) -> None:
        """Test that png is tried before jpg and jpeg."""
        write_texture("custom", TextureCategory.SPECULAR, "Shine.jpeg")
        write_texture("custom", TextureCategory.SPECULAR, "Shine.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.SPECULAR, "Shine")

        assert resolved.extension == "png"

    def test_unsupported_extension_not_found(self, layout, write_texture) -> None:
        """Test that other image formats are not considered."""
        write_texture("custom", TextureCategory.SPECULAR, "Shine.tga")

        resolved = AssetLocator(layout).resolve(TextureCategory.SPECULAR, "Shine")

        assert resolved.action is AssetAction.NOT_FOUND
        assert resolved.path is None
        assert resolved.extension is None

    def test_shared_stem_lookup(self, layout, write_texture) -> None:
        """Test that categories sharing a stem find each other's files."""
        write_texture("custom", TextureCategory.DIFFUSE, "Shared.png")

        resolved = AssetLocator(layout).resolve(TextureCategory.EMISSIVE, "Shared")

        assert resolved.action is AssetAction.PACK

    def test_name_outside_category_directory(self, layout, write_texture) -> None:
        """Test that names climbing out of the category directory never resolve."""
        write_texture("custom", TextureCategory.NORMAL, "B.png")
        write_texture("install", TextureCategory.NORMAL, "C.png")
        locator = AssetLocator(layout)

        for name in ("../Normal/B", "../../../Saved/Textures/Normal/B", "../Normal/C"):
            resolved = locator.resolve(TextureCategory.DIFFUSE, name)
            assert resolved.action is AssetAction.NOT_FOUND
            assert resolved.path is None
        assert locator.exists_locally(TextureCategory.DIFFUSE, "../Normal/B") is False

    def test_missing_everywhere(self, layout) -> None:
        """Test that a missing texture resolves to NOT_FOUND."""
        resolved = AssetLocator(layout).resolve(TextureCategory.SHAPE, "Nothing")

        assert resolved.action is AssetAction.NOT_FOUND
        assert resolved.reference == AssetReference(TextureCategory.SHAPE, "Nothing")


class TestResolveAll:
    """Test resolving whole reference sets."""

    def test_resolution_is_idempotent(self, layout, write_texture) -> None:
        """Test that extraction and resolution give identical results twice."""
        write_texture("install", TextureCategory.DIFFUSE, "Wood.png")
        write_texture("custom", TextureCategory.NORMAL, "Bumps.png")
        write_texture("random", TextureCategory.EMISSIVE, "Glow.png")
        document = make_preset_document(
            keypress={
                "diffuseTexture": "Wood",
                "normalTexture": "Bumps",
                "emissiveTexture": "Glow",
                "maskTexture": "Missing",
            }
        )
        locator = AssetLocator(layout)

        first = locator.resolve_all(extract_references(document))
        second = locator.resolve_all(extract_references(document))

        assert first == second
        assert len(first) == 4

    def test_results_are_sorted(self, layout) -> None:
        """Test that results come back ordered by category and name."""
        refs = [
            AssetReference(TextureCategory.STENCIL, "b"),
            AssetReference(TextureCategory.DIFFUSE, "z"),
            AssetReference(TextureCategory.DIFFUSE, "a"),
        ]

        resolved = AssetLocator(layout).resolve_all(refs)

        assert [r.reference for r in resolved] == sorted(refs)


class TestExistsLocally:
    """Test the local-only existence check used for conflicts."""

    def test_installation_texture_is_not_local(self, layout, write_texture) -> None:
        """Test that installation textures never count as local."""
        write_texture("install", TextureCategory.MASK, "Edge.png")

        assert AssetLocator(layout).exists_locally(TextureCategory.MASK, "Edge") is False

    def test_custom_and_random_are_local(self, layout, write_texture) -> None:
        """Test that both user directories count as local."""
        write_texture("custom", TextureCategory.MASK, "Edge.png")
        write_texture("random", TextureCategory.METALNESS, "Steel.jpeg")
        locator = AssetLocator(layout)

        assert locator.exists_locally(TextureCategory.MASK, "Edge") is True
        assert locator.exists_locally(TextureCategory.METALNESS, "Steel") is True
