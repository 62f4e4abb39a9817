"""
execution.types.events — event/log record type.

`LogEvent` is the compact, deterministic container the host uses to record
contract-emitted events.

Conventions
-----------
* `address` is the emitting contract's raw account id.
* `topics` are an ordered tuple of bytes. By convention topic[0] is
  sha3_256(event name) and the remaining topics are indexed field values.
* `data` is the canonical CBOR encoding of the event's fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from .address import HexLike, hex_to_bytes, to_hex


def _normalize_topic(t: HexLike) -> bytes:
    b = hex_to_bytes(t)
    if len(b) == 0:
        raise ValueError("topic must not be empty")
    return b


@dataclass(frozen=True)
class LogEvent:
    """
    A single event emitted during a call.

    Attributes:
        address: bytes — emitter address
        topics:  tuple[bytes, ...] — ordered topics
        data:    bytes — payload
    """

    address: bytes
    topics: Tuple[bytes, ...]
    data: bytes

    def __init__(
        self, address: HexLike, topics: Sequence[HexLike] = (), data: HexLike = b""
    ):
        addr_b = hex_to_bytes(address)
        if len(addr_b) < 8:
            raise ValueError(f"address length too small: {len(addr_b)} bytes")
        object.__setattr__(self, "address", addr_b)
        object.__setattr__(self, "topics", tuple(_normalize_topic(t) for t in topics))
        object.__setattr__(self, "data", hex_to_bytes(data))

    def matches(self, topics: Sequence[HexLike | None]) -> bool:
        """
        Positional topic match; `None` entries are wildcards. A filter longer
        than the event's topic list never matches.
        """
        if len(topics) > len(self.topics):
            return False
        for want, have in zip(topics, self.topics):
            if want is None:
                continue
            if hex_to_bytes(want) != have:
                return False
        return True

    # --------------------- conversions & representations ---------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": to_hex(self.address),
            "topics": [to_hex(t) for t in self.topics],
            "data": to_hex(self.data),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LogEvent":
        topics = d.get("topics", [])
        if not isinstance(topics, (tuple, list)):
            raise TypeError("topics must be a list/tuple")
        return cls(address=d["address"], topics=list(topics), data=d.get("data", b""))

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        addr = to_hex(self.address)
        ts = ", ".join(to_hex(t)[:12] + "…" for t in self.topics)
        return f"LogEvent(address={addr[:12]}…, topics=[{ts}], data={len(self.data)}B)"


__all__ = ["LogEvent"]
