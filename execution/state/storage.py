"""
execution.state.storage — committed contract storage.

Holds the persisted key/value fields of every contract as
`{address: {key: value}}`, all bytes. Contract keys are readable names such as
b"escrow:deposited". An empty value means "absent": writing one deletes the
key, and an account whose last key goes away disappears from the view.

The journal stages writes on top of this view; snapshots export and import it
one contract at a time.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, MutableMapping, Optional, Tuple

BytesLike = bytes | bytearray | memoryview


def _raw(x: BytesLike, what: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{what} must be bytes-like")
    return bytes(x)


class StorageView:
    """
    Per-contract key/value store.

    `backend` lets a caller supply the outer mapping (e.g. to share it with a
    test); by default the view owns a fresh dict.
    """

    __slots__ = ("_data",)

    def __init__(self, backend: Optional[MutableMapping[bytes, Dict[bytes, bytes]]] = None) -> None:
        self._data: MutableMapping[bytes, Dict[bytes, bytes]] = {} if backend is None else backend

    def get(self, address: BytesLike, key: BytesLike, default: bytes = b"") -> bytes:
        fields = self._data.get(_raw(address, "address"))
        if not fields:
            return default
        return fields.get(_raw(key, "key"), default)

    def has(self, address: BytesLike, key: BytesLike) -> bool:
        return _raw(key, "key") in self._data.get(_raw(address, "address"), {})

    def set(self, address: BytesLike, key: BytesLike, value: BytesLike) -> None:
        addr, k, v = _raw(address, "address"), _raw(key, "key"), _raw(value, "value")
        if not v:
            self.delete(addr, k)
            return
        self._data.setdefault(addr, {})[k] = v

    def delete(self, address: BytesLike, key: BytesLike) -> bool:
        """Remove a key; True if it existed."""
        addr = _raw(address, "address")
        fields = self._data.get(addr)
        if fields is None or fields.pop(_raw(key, "key"), None) is None:
            return False
        if not fields:
            del self._data[addr]
        return True

    def items(self, address: BytesLike) -> Iterator[Tuple[bytes, bytes]]:
        """(key, value) pairs of one contract, sorted by key."""
        fields = self._data.get(_raw(address, "address"), {})
        for k in sorted(fields):
            yield k, fields[k]

    def addresses(self) -> Iterator[bytes]:
        """Contracts holding at least one key, sorted."""
        yield from sorted(self._data)

    def export_account(self, address: BytesLike) -> Dict[bytes, bytes]:
        return dict(self.items(address))

    def import_account(self, address: BytesLike, data: Mapping[bytes, bytes]) -> None:
        """Replace a contract's storage with `data` (empty values are dropped)."""
        addr = _raw(address, "address")
        self._data.pop(addr, None)
        for k, v in data.items():
            self.set(addr, k, v)

    def __len__(self) -> int:
        return sum(len(fields) for fields in self._data.values())

    def __repr__(self) -> str:  # pragma: no cover
        return f"StorageView(contracts={len(self._data)}, keys={len(self)})"


__all__ = ["StorageView"]
