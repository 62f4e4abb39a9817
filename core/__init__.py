"""
Escrow host core package.

Shared, dependency-free plumbing used by the execution host, the contracts and
their tooling: structured logging and the package version.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the semantic version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
