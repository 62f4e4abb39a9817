"""
Escrow execution layer — deterministic in-memory host, state journal, events.

This package exposes only lightweight metadata at import time. The host and its
collaborators are imported from their subpackages:

    from execution.runtime.host import Host
    from execution.runtime.contracts import Contract, constructor, message
"""

from core.version import __version__

__all__ = ["__version__"]
