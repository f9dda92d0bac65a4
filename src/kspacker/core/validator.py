"""JSON Schema validation for bundle metadata.

This module loads the formal JSON Schema and validates metadata.json both
before it is written into a bundle and after it is read back.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

# kspacker/core/validator.py -> kspacker/schemas/
SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "bundle_metadata.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    """Load the JSON schema from disk.

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if not SCHEMA_PATH.exists():
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_PATH}")

    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_metadata(metadata: Any) -> None:
    """Validate bundle metadata against the JSON Schema.

    Args:
        metadata: The decoded metadata.json content

    Raises:
        ValidationError: If the metadata doesn't conform to the schema
        FileNotFoundError: If schema file is missing
    """
    jsonschema.validate(instance=metadata, schema=load_schema())


def validate_metadata_with_error_details(metadata: Any) -> tuple[bool, str | None]:
    """Validate metadata and return detailed error information.

    Args:
        metadata: The decoded metadata.json content

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_metadata(metadata)
        return True, None
    except ValidationError as e:
        error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
        error_msg = f"Validation error at {error_path}: {e.message}"

        if e.instance:
            error_msg += f"\nInvalid value: {e.instance}"

        return False, error_msg
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
