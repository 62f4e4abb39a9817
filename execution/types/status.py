"""
execution.types.status — canonical call status enum.

CallStatus models the *logical* outcome of a host call:
  - SUCCESS : The message completed and its effects were committed
  - REVERT  : A contract or host rule rejected the call; all effects discarded
  - TRAP    : The contract raised an unexpected exception; all effects discarded

String forms:
  - str(CallStatus.SUCCESS) -> "success"   (good for logs)
  - CallStatus.SUCCESS.code  -> "SUCCESS"  (good for tool output)
"""

from __future__ import annotations

from enum import Enum


class CallStatus(str, Enum):
    SUCCESS = "success"
    REVERT = "revert"
    TRAP = "trap"

    # ---------- convenience ----------

    @property
    def code(self) -> str:
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is CallStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


__all__ = ["CallStatus"]
