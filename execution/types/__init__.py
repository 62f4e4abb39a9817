"""
execution.types — canonical host types for the escrow execution layer.

This package groups small, dependency-light dataclasses and enums that are shared
across the host runtime, the contracts and the tools.

Public surface (re-exported):
    AccountId, Hash               : NewType(bytes) — principals and code hashes
    Balance                       : NewType(int) — checked amounts
    CallStatus                    : Enum — SUCCESS / REVERT / TRAP
    LogEvent                      : Dataclass — (address, topics, data)
    BlockContext, CallFrame       : Dataclasses — execution contexts
    CallResult                    : Dataclass — result of a tool-facing call
"""

from __future__ import annotations

from .address import AccountId, Hash, named_account, parse_account, to_account_id, to_hex
from .balance import Balance, U256_MAX, balance_max, safe_add, safe_sub, to_balance
from .context import BlockContext, CallFrame
from .events import LogEvent
from .result import CallResult
from .status import CallStatus

__all__ = [
    "AccountId",
    "Hash",
    "named_account",
    "parse_account",
    "to_account_id",
    "to_hex",
    "Balance",
    "U256_MAX",
    "balance_max",
    "safe_add",
    "safe_sub",
    "to_balance",
    "CallStatus",
    "LogEvent",
    "BlockContext",
    "CallFrame",
    "CallResult",
]
