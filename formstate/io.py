"""Input/output utilities for reading and writing JSON documents."""

import json
from pathlib import Path
from typing import Any


def read_json(path: Path | str) -> Any:
    """Read a JSON document.

    Args:
        path: Path to the JSON file.

    Returns:
        The parsed document.

    Raises:
        ValueError: If the file is not valid JSON.
    """
    with open(path) as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e


def write_json(path: Path | str, document: Any) -> None:
    """Write a JSON document, replacing any existing file.

    Args:
        path: Path to write.
        document: JSON-serializable document.
    """
    with open(path, "w") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
        f.write("\n")
