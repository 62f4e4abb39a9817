"""
Version string for the escrow host packages.

- ESCROW_VERSION env var is an authoritative override (useful in containers).
- Otherwise DEFAULT_VERSION is reported.
"""

from __future__ import annotations

import os

DEFAULT_VERSION = "0.1.0"

__version__ = os.getenv("ESCROW_VERSION", "").strip() or DEFAULT_VERSION

__all__ = ["__version__", "DEFAULT_VERSION"]
