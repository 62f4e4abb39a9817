"""
execution.types.context — execution contexts for blocks and call frames.

`BlockContext` carries the chain position every call observes; `CallFrame` is
pushed by the host for each (possibly nested) contract invocation and answers
the contract-facing questions "who called me", "with how much", "who am I".

Conventions
-----------
* `timestamp` is Unix time in seconds (int).
* `caller` and `callee` are raw account ids.
* `value` is the amount transferred into `callee` as part of the call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .address import HexLike, hex_to_bytes, to_hex


@dataclass(frozen=True)
class BlockContext:
    """
    Chain position for executing calls.

    Attributes:
        height:    int >= 0 — block height (genesis = 0)
        timestamp: int >= 0 — Unix seconds
        chain_id:  int >= 1 — chain id number for this network
    """
    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        if self.height < 0:
            raise ValueError("height must be >= 0")
        if self.timestamp < 0:
            raise ValueError("timestamp must be >= 0")
        if self.chain_id <= 0:
            raise ValueError("chain_id must be >= 1")

    def advanced(self, blocks: int = 1, *, block_time: int = 6) -> "BlockContext":
        """Return the context `blocks` blocks later. Height never decreases."""
        if blocks < 0:
            raise ValueError("blocks must be >= 0")
        return BlockContext(
            height=self.height + blocks,
            timestamp=self.timestamp + blocks * block_time,
            chain_id=self.chain_id,
        )

    # --------- (de)serialization ---------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "height": self.height,
            "timestamp": self.timestamp,
            "chainId": self.chain_id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlockContext":
        return cls(
            height=int(d["height"]),
            timestamp=int(d["timestamp"]),
            chain_id=int(d.get("chainId") or d.get("chain_id")),
        )


@dataclass(frozen=True)
class CallFrame:
    """
    One entry of the host call stack.

    Attributes:
        caller: bytes    — immediate caller (account or contract)
        callee: bytes    — contract being executed
        value:  int >= 0 — amount attached to this call
        depth:  int >= 0 — 0 for a top-level call
    """
    caller: bytes
    callee: bytes
    value: int = 0
    depth: int = 0

    def __init__(self, *, caller: HexLike, callee: HexLike, value: int = 0, depth: int = 0):
        if value < 0:
            raise ValueError("value must be >= 0")
        if depth < 0:
            raise ValueError("depth must be >= 0")
        object.__setattr__(self, "caller", hex_to_bytes(caller))
        object.__setattr__(self, "callee", hex_to_bytes(callee))
        object.__setattr__(self, "value", int(value))
        object.__setattr__(self, "depth", int(depth))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "caller": to_hex(self.caller),
            "callee": to_hex(self.callee),
            "value": self.value,
            "depth": self.depth,
        }


__all__ = ["BlockContext", "CallFrame"]
