"""Path and filename safety checks.

Bundles come from other machines, so names read from metadata.json are
checked before they are turned into local file paths.
"""

import re
from pathlib import Path

# Dangerous characters to remove from filenames
DANGEROUS_FILENAME_CHARS = r'[<>:"|?*\x00-\x1f]'


def sanitize_filename(filename: str) -> str:
    """Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for storage
    """
    sanitized = re.sub(DANGEROUS_FILENAME_CHARS, "", filename)
    sanitized = sanitized.replace("/", "").replace("\\", "")
    return sanitized


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents path traversal through crafted asset or preset names.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if resolved_path == resolved_base or not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")
