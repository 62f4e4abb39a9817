"""
execution.errors — exceptions raised by the execution host.

Any of these aborts the call that raised it. The host reverts the call's
checkpoint before the exception leaves the frame, so a failed call has no
visible effect on balances, contract fields or the event log.

    ExecError
     ├─ Revert         a contract refused the call (contracts.errors extends it)
     ├─ InvalidAccess  the host refused the call: unknown contract or message,
     │                 re-entrancy, call depth, write from a read-only message
     ├─ StateConflict  an address is already taken
     └─ Trap           a contract raised something other than an ExecError;
                       the original exception is chained as __cause__

This module imports nothing else from `execution`, so the lowest layers
(accounts, journal) can raise these freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def _details(data: Optional[Dict[str, Any]], **named: Any) -> Optional[Dict[str, Any]]:
    # explicit keys in `data` win over the named shortcuts
    merged = {k: v for k, v in named.items() if v is not None}
    merged.update(data or {})
    return merged or None


@dataclass
class ExecError(Exception):
    """
    Base class. `code` is a stable upper-case identifier that callers match
    on; `data` holds JSON-friendly details.
    """

    message: str = "execution error"
    code: str = "EXEC_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        return f"{text} ({self.data})" if self.data else text

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Revert(ExecError):
    """Contract-level refusal, e.g. `raise Revert("bad input", reason="empty")`."""

    def __init__(
        self,
        message: str = "reverted",
        *,
        code: str = "REVERT",
        reason: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, data=_details(data, reason=reason))


class InvalidAccess(ExecError):
    def __init__(
        self,
        message: str = "invalid access",
        *,
        op: Optional[str] = None,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="INVALID_ACCESS", data=_details(data, op=op, address=address))


class StateConflict(ExecError):
    def __init__(
        self,
        message: str = "state conflict",
        *,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="STATE_CONFLICT", data=_details(data, address=address))


class Trap(ExecError):
    def __init__(self, message: str = "contract trapped", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="TRAP", data=data)


_STATUS_BY_TYPE = ((Revert, "revert"), (Trap, "trap"))


def error_to_result_fields(err: ExecError) -> Dict[str, Any]:
    """`{"status": "revert"|"trap"|"error", "error": err.to_dict()}`"""
    status = next((name for cls, name in _STATUS_BY_TYPE if isinstance(err, cls)), "error")
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "ExecError",
    "Revert",
    "InvalidAccess",
    "StateConflict",
    "Trap",
    "error_to_result_fields",
]
