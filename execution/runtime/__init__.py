"""
execution.runtime — contract call orchestration.

Submodules (thin overview)
--------------------------
- host        : the Host — ledger, call boundary, instantiate/call/query/execute
- env         : per-frame contract-facing environment (caller, transfer, events, storage)
- contracts   : Contract base, @constructor/@message, template registry, address derivation
- transfers   : checked value movement between accounts
- event_sink  : append/rollback/filter of contract events

Re-exports
----------
    from execution.runtime import Host, Contract, constructor, message

These are lazily loaded; importing this package does not import the host until
the attributes are first accessed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

__all__ = (
    "host",
    "env",
    "contracts",
    "transfers",
    "event_sink",
)

# Lazy symbol re-exports: name -> (module, attribute)
_EXPORTS: Dict[str, Tuple[str, str]] = {
    "Host": ("host", "Host"),
    "BlockHeightEntropy": ("host", "BlockHeightEntropy"),
    "Env": ("env", "Env"),
    "Contract": ("contracts", "Contract"),
    "constructor": ("contracts", "constructor"),
    "message": ("contracts", "message"),
    "EventSink": ("event_sink", "EventSink"),
    "event_topic": ("event_sink", "event_topic"),
}


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    if name in __all__:
        return import_module(f".{name}", __name__)
    target = _EXPORTS.get(name)
    if target:
        mod, attr = target
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(__all__) + list(_EXPORTS))
