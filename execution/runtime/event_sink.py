"""
execution.runtime.event_sink — append, roll back and query contract events.

The host owns one EventSink for its whole life. Every call records a mark
before running and truncates back to it when the call fails, so the sink only
ever holds events of committed calls.

Topics convention
-----------------
topic[0] is `event_topic(name)` = sha3_256(name); the remaining topics are the
raw bytes of the event's indexed fields in declaration order. Queries match
topics positionally with `None` as a wildcard, e.g.

    sink.filter(topics=[event_topic("EscrowDeployed"), None, creator])
"""

from __future__ import annotations

import hashlib
from typing import Iterable, List, Optional, Sequence

from ..types.address import HexLike, hex_to_bytes
from ..types.events import LogEvent


def event_topic(name: str | bytes) -> bytes:
    """topic[0] for an event name."""
    if isinstance(name, str):
        name = name.encode("utf-8")
    return hashlib.sha3_256(bytes(name)).digest()


class EventSink:
    """
    Collects LogEvent entries in emission order.

    Typical use:
        sink = EventSink()
        m = sink.mark()
        sink.emit(addr, [topic0, topic1], data)
        sink.truncate(m)          # drop everything after the mark
    """

    __slots__ = ["_logs"]

    def __init__(self) -> None:
        self._logs: List[LogEvent] = []

    # ------------------------ mutation ------------------------

    def emit(self, address: bytes, topics: Sequence[bytes], data: bytes) -> int:
        """Append a new log entry. Returns the index of the appended log."""
        self._logs.append(LogEvent(address=address, topics=topics, data=data))
        return len(self._logs) - 1

    def append(self, ev: LogEvent) -> int:
        self._logs.append(ev)
        return len(self._logs) - 1

    def extend(self, entries: Iterable[LogEvent]) -> None:
        self._logs.extend(entries)

    def mark(self) -> int:
        """Current length; pass back to `truncate` to roll back."""
        return len(self._logs)

    def truncate(self, mark: int) -> None:
        if mark < 0 or mark > len(self._logs):
            raise ValueError(f"invalid event mark {mark} (have {len(self._logs)})")
        del self._logs[mark:]

    def clear(self) -> None:
        self._logs.clear()

    # ------------------------ accessors ------------------------

    def all(self) -> List[LogEvent]:
        return list(self._logs)

    def since(self, mark: int) -> List[LogEvent]:
        return self._logs[mark:]

    def filter(
        self,
        *,
        address: Optional[HexLike] = None,
        topics: Optional[Sequence[Optional[HexLike]]] = None,
    ) -> List[LogEvent]:
        """Events emitted by `address` (if given) whose topics match `topics`."""
        addr = hex_to_bytes(address) if address is not None else None
        out: List[LogEvent] = []
        for ev in self._logs:
            if addr is not None and ev.address != addr:
                continue
            if topics and not ev.matches(topics):
                continue
            out.append(ev)
        return out

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._logs)


__all__ = ["EventSink", "event_topic"]
