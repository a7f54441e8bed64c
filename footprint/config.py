"""
config.py – Load and validate engine settings from the environment.

Settings are read from environment variables (or a .env file at the
project root).  Call `get_config()` once at startup to obtain a validated
Config object.  Every setting has a default, so an empty environment is a
valid configuration.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from footprint.constants import (
    CATEGORY_SCHEMES,
    DEFAULT_CATEGORY_SCHEME,
    DEFAULT_LOG_LEVEL,
    RECOMMENDATION_LIMIT,
)

# Project root: the directory holding pyproject.toml and .env
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

_env_file = _PROJECT_ROOT / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


@dataclass
class Config:
    """Validated runtime configuration."""

    log_level: str = DEFAULT_LOG_LEVEL
    factors_file: str | None = None
    recommendation_limit: int = RECOMMENDATION_LIMIT
    category_scheme: str = DEFAULT_CATEGORY_SCHEME


def get_config() -> Config:
    """
    Read FOOTPRINT_* environment variables and return a Config.

    Raises
    ------
    EnvironmentError
        If a variable is set to an invalid value.
    """
    errors: list[str] = []

    log_level = os.environ.get("FOOTPRINT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        errors.append(f"FOOTPRINT_LOG_LEVEL={log_level!r} is not a logging level")

    raw_limit = os.environ.get("FOOTPRINT_RECOMMENDATION_LIMIT", str(RECOMMENDATION_LIMIT))
    try:
        limit = int(raw_limit)
        if limit < 1:
            raise ValueError
    except ValueError:
        errors.append(f"FOOTPRINT_RECOMMENDATION_LIMIT={raw_limit!r} must be a positive integer")
        limit = RECOMMENDATION_LIMIT

    scheme = os.environ.get("FOOTPRINT_CATEGORY_SCHEME", DEFAULT_CATEGORY_SCHEME).strip().lower()
    if scheme not in CATEGORY_SCHEMES:
        errors.append(
            f"FOOTPRINT_CATEGORY_SCHEME={scheme!r} must be one of {', '.join(sorted(CATEGORY_SCHEMES))}"
        )

    factors_file = os.environ.get("FOOTPRINT_FACTORS_FILE") or None
    if factors_file and not os.path.isabs(factors_file):
        factors_file = str((_PROJECT_ROOT / factors_file).resolve())

    if errors:
        raise EnvironmentError(
            "Invalid configuration:\n  " + "\n  ".join(errors)
            + "\nSee .env.example for the supported settings."
        )

    return Config(
        log_level=log_level,
        factors_file=factors_file,
        recommendation_limit=limit,
        category_scheme=scheme,
    )
