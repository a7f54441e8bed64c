"""
io_utils.py – JSON helpers for the CLI.

Profiles, overrides, and daily logs are read from JSON files; results can be
written back out.  Parent directories are created automatically.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json_object(path: str | Path) -> dict[str, Any]:
    """
    Load *path* and return its top-level JSON object.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the file is not valid JSON or does not hold an object.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{p} must contain a JSON object, got {type(data).__name__}")
    return data


def write_json(path: str | Path, data: Any, indent: int = 2) -> Path:
    """Serialise *data* to JSON at *path*, creating parents as needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=indent, ensure_ascii=False, default=str)
    return p
