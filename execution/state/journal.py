"""
execution.state.journal — nested checkpoints over accounts and contract storage.

The journal is the transactional boundary of the host. Every contract call
opens a checkpoint; a failed call reverts it, so neither contract fields nor
balance moves of that call ever become visible.

Layout
------
The base state is a plain `{address: Account}` mapping plus a `StorageView`.
On top of it sits a stack of layers; the bottom layer always exists and holds
writes made outside of any call (genesis balances, tooling). Each layer keeps

    accounts : {address: Account}             private copies (copy-on-write)
    slots    : {(address, key): bytes | None}  None marks a deletion

Reads walk the stack from the top and fall back to the base. Writes touch the
top layer only. Merging a layer into its parent is O(changes).

    j = Journal(accounts, storage)
    m = j.begin()
    j.ensure_account_for_write(addr).credit(100)
    j.storage_set(addr, b"escrow:released", b"\\x01")
    j.commit_to(m)     # fold into the parent layer
    j.flush()          # push everything to the base state
"""

from __future__ import annotations

from typing import Dict, Iterator, List, MutableMapping, Optional, Set, Tuple

from execution.errors import StateConflict

from .accounts import EMPTY_CODE_HASH, Account
from .storage import StorageView

BytesLike = bytes | bytearray | memoryview
SlotKey = Tuple[bytes, bytes]


def _raw(x: BytesLike, what: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{what} must be bytes-like")
    return bytes(x)


class _Layer:
    __slots__ = ("accounts", "slots")

    def __init__(self) -> None:
        self.accounts: Dict[bytes, Account] = {}
        self.slots: Dict[SlotKey, Optional[bytes]] = {}

    def absorb(self, child: "_Layer") -> None:
        for addr, acc in child.accounts.items():
            self.accounts[addr] = acc.copy()
        self.slots.update(child.slots)


class Journal:
    """Copy-on-write write journal with nested checkpoints."""

    def __init__(self, accounts: MutableMapping[bytes, Account], storage: StorageView) -> None:
        self._accounts = accounts
        self._storage = storage
        self._stack: List[_Layer] = [_Layer()]

    # ---- checkpoints -------------------------------------------------------

    def depth(self) -> int:
        """Number of layers, including the always-present bottom one."""
        return len(self._stack)

    def begin(self) -> int:
        """Open a checkpoint; the returned marker is the depth to come back to."""
        marker = len(self._stack)
        self._stack.append(_Layer())
        return marker

    def commit(self) -> None:
        """Fold the top layer into its parent; the bottom layer goes to the base."""
        top = self._stack.pop()
        if self._stack:
            self._stack[-1].absorb(top)
            return
        self._write_base(top)
        self._stack.append(_Layer())

    def revert(self) -> None:
        """Drop the top layer (the bottom one is emptied instead)."""
        if len(self._stack) > 1:
            self._stack.pop()
        else:
            self._stack[0] = _Layer()

    def commit_to(self, marker: int) -> None:
        self._check_marker(marker)
        while len(self._stack) > marker:
            self.commit()

    def revert_to(self, marker: int) -> None:
        self._check_marker(marker)
        while len(self._stack) > marker:
            self.revert()

    def flush(self) -> None:
        """Commit every layer down to the base state."""
        self.commit_to(1)
        self.commit()

    @staticmethod
    def _check_marker(marker: int) -> None:
        if marker < 1:
            raise ValueError("marker must be >= 1")

    def _write_base(self, layer: _Layer) -> None:
        for addr, acc in layer.accounts.items():
            self._accounts[addr] = acc.copy()
        for (addr, key), value in layer.slots.items():
            if value is None:
                self._storage.delete(addr, key)
            else:
                self._storage.set(addr, key, value)

    # ---- accounts ----------------------------------------------------------

    def get_account(self, address: BytesLike) -> Optional[Account]:
        """Visible account (read-only view; never mutate it), or None."""
        addr = _raw(address, "address")
        for layer in reversed(self._stack):
            if addr in layer.accounts:
                return layer.accounts[addr]
        return self._accounts.get(addr)

    def get_account_for_write(self, address: BytesLike) -> Optional[Account]:
        """Mutable copy of the account in the top layer, or None if absent."""
        addr = _raw(address, "address")
        top = self._stack[-1]
        acc = top.accounts.get(addr)
        if acc is None:
            seen = self.get_account(addr)
            if seen is None:
                return None
            acc = top.accounts[addr] = seen.copy()
        return acc

    def ensure_account_for_write(self, address: BytesLike) -> Account:
        """`get_account_for_write`, creating an empty plain account when missing."""
        acc = self.get_account_for_write(address)
        if acc is None:
            acc = self._stack[-1].accounts[_raw(address, "address")] = Account()
        return acc

    def create_account(
        self,
        address: BytesLike,
        *,
        initial_balance: int = 0,
        code_hash: Optional[bytes] = None,
    ) -> Account:
        """New account in the top layer; StateConflict if one is already visible."""
        addr = _raw(address, "address")
        if self.get_account(addr) is not None:
            raise StateConflict("account already exists", address="0x" + addr.hex())
        acc = Account(balance=initial_balance, code_hash=code_hash or EMPTY_CODE_HASH)
        self._stack[-1].accounts[addr] = acc
        return acc

    def accounts(self) -> Iterator[Tuple[bytes, Account]]:
        """Every visible (address, account), sorted by address."""
        merged: Dict[bytes, Account] = dict(self._accounts)
        for layer in self._stack:
            merged.update(layer.accounts)
        for addr in sorted(merged):
            yield addr, merged[addr]

    def pending_account_addrs(self) -> Set[bytes]:
        """Addresses written by any layer and not yet flushed."""
        return {addr for layer in self._stack for addr in layer.accounts}

    # ---- storage -----------------------------------------------------------

    def storage_get(self, address: BytesLike, key: BytesLike, default: bytes = b"") -> bytes:
        slot = (_raw(address, "address"), _raw(key, "key"))
        for layer in reversed(self._stack):
            if slot in layer.slots:
                value = layer.slots[slot]
                return default if value is None else value
        return self._storage.get(slot[0], slot[1], default=default)

    def storage_set(self, address: BytesLike, key: BytesLike, value: BytesLike) -> None:
        """Stage a write in the top layer; an empty value deletes the key."""
        slot = (_raw(address, "address"), _raw(key, "key"))
        self._stack[-1].slots[slot] = _raw(value, "value") or None

    def storage_delete(self, address: BytesLike, key: BytesLike) -> None:
        self._stack[-1].slots[(_raw(address, "address"), _raw(key, "key"))] = None

    def storage_items(self, address: BytesLike) -> Iterator[Tuple[bytes, bytes]]:
        """Visible (key, value) pairs of one contract, sorted by key."""
        addr = _raw(address, "address")
        visible = self._storage.export_account(addr)
        for layer in self._stack:
            for (a, key), value in layer.slots.items():
                if a != addr:
                    continue
                if value is None:
                    visible.pop(key, None)
                else:
                    visible[key] = value
        for key in sorted(visible):
            yield key, visible[key]


__all__ = ["Journal"]
