"""
execution.state — state subsystem (accounts, storage, journal, snapshots).

This package provides the deterministic state layer used by the host. To keep
import-time overhead low and avoid circulars, the common symbols are lazily
re-exported from their submodules on first access.

Submodules:
- accounts:   Account records (balance, code hash)
- storage:    Per-contract storage view (key/value)
- journal:    Journaling writes, checkpoints, revert/commit
- snapshots:  Whole-state export/import (canonical CBOR)
"""

from __future__ import annotations

from importlib import import_module as _imp
from typing import Any, Dict, Tuple

# Map of public attributes → (submodule, symbol)
_exports: Dict[str, Tuple[str, str]] = {
    "Account": ("accounts", "Account"),
    "EMPTY_CODE_HASH": ("accounts", "EMPTY_CODE_HASH"),
    "StorageView": ("storage", "StorageView"),
    "Journal": ("journal", "Journal"),
    "export_state": ("snapshots", "export_state"),
    "import_state": ("snapshots", "import_state"),
}

__all__ = tuple(_exports.keys())


def __getattr__(name: str) -> Any:
    """
    Lazy attribute loader to avoid import-time dependency tangles.
    """
    if name in _exports:
        submod, symbol = _exports[name]
        mod = _imp(f"{__name__}.{submod}")
        return getattr(mod, symbol)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover
    return sorted(list(globals().keys()) + list(__all__))
