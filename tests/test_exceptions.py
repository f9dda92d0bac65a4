"""Tests for the error hierarchy."""

from pathlib import Path

from kspacker.core.exceptions import (
    ArchiveIOError,
    KsPackerError,
    PackError,
    PresetNotFoundError,
    UnpackError,
    VersionMismatchError,
)


class TestErrorPayload:
    """Test machine-readable error output."""

    def test_to_json_error(self, tmp_path: Path) -> None:
        """Test that context values are stringified."""
        error = PresetNotFoundError("Preset 'x' not found", context={"path": tmp_path})

        assert error.to_json_error() == {
            "message": "Preset 'x' not found",
            "code": "PresetNotFoundError",
            "context": {"path": str(tmp_path)},
        }

    def test_empty_context(self) -> None:
        assert KsPackerError("boom").context == {}

    def test_version_mismatch_fields(self) -> None:
        error = VersionMismatchError(wanted=1500, got=1600)

        assert (error.wanted, error.got) == (1500, 1600)
        assert error.context == {"wanted": 1500, "got": 1600}
        assert "1600" in str(error)


class TestHierarchy:
    """Test that errors group by operation."""

    def test_pack_and_unpack_branches(self) -> None:
        assert issubclass(VersionMismatchError, PackError)
        assert issubclass(ArchiveIOError, UnpackError)
        assert not issubclass(ArchiveIOError, PackError)
        assert issubclass(UnpackError, KsPackerError)
