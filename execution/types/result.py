"""
execution.types.result — CallResult container for host calls.

`CallResult` is what `Host.execute` returns to tools: it never raises for a
contract-level failure and instead reports it in `status`/`error`.

Fields
------
* status       : CallStatus — SUCCESS / REVERT / TRAP
* return_value : Any        — message return value (None on failure)
* error        : Optional[dict] — ExecError.to_dict() on failure
* logs         : tuple[LogEvent, ...] — events emitted by the committed call
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .events import LogEvent
from .status import CallStatus


def _jsonable(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _jsonable(x) for k, x in v.items()}
    return v


@dataclass(frozen=True)
class CallResult:
    status: CallStatus
    return_value: Any = None
    error: Optional[Dict[str, Any]] = None
    logs: Tuple[LogEvent, ...] = field(default_factory=tuple)

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a JSON-friendly mapping. Bytes (principals) are rendered
        as 0x-hex, recursively.
        """
        out: Dict[str, Any] = {
            "status": str(self.status),
            "return": _jsonable(self.return_value),
            "logs": [ev.to_dict() for ev in self.logs],
        }
        if self.error is not None:
            out["error"] = self.error
        return out

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"CallResult(status={self.status.code}, logs={len(self.logs)}, error={self.error})"


__all__ = ["CallResult"]
