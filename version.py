"""Version lookup for Modern Poster.

The installed distribution's metadata is authoritative; a source checkout
that was never installed reports ``FALLBACK_VERSION``.
"""
from __future__ import annotations

import os
from importlib import metadata
from typing import Optional

__all__ = ["__version__", "is_dev_build", "DEV_MODE_ENV_VAR"]

DISTRIBUTION_NAME = "modern-poster"
FALLBACK_VERSION = "0.3.0"
DEV_MODE_ENV_VAR = "MODERN_POSTER_DEV_MODE"


def installed_version(distribution: str = DISTRIBUTION_NAME) -> str:
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION


__version__ = installed_version()


def is_dev_build(version: Optional[str] = None) -> bool:
    """Debug logging by default for PEP 440 development releases (``0.4.0.dev1``).

    ``MODERN_POSTER_DEV_MODE`` set to ``1`` or ``0`` overrides the version check.
    """
    override = os.getenv(DEV_MODE_ENV_VAR, "").strip()
    if override in {"0", "1"}:
        return override == "1"
    return ".dev" in (version or __version__).lower()
