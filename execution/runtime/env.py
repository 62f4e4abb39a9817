"""
execution.runtime.env — the contract-facing environment of one call frame.

Contracts never touch the host directly. Each call gets an `Env` bound to the
active `CallFrame`, exposing exactly the capabilities a contract may use:

    caller()             immediate caller of this frame
    transferred_value()  value attached to this call
    account_id()         the executing contract's own address
    balance()            the executing contract's custodial balance
    block_number()       current block height
    entropy()            bytes from the host's injected entropy source
    transfer(to, amt)    move funds out of this contract → bool
    instantiate(...)     create a contract from a registered template
    call(...)            invoke another contract's message
    emit_event(...)      append a log event
    storage_get/set      this contract's key/value storage

Read-only messages get an Env whose write capabilities raise InvalidAccess.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Sequence

import cbor2

from ..errors import InvalidAccess
from ..types.context import CallFrame
from .event_sink import event_topic

if TYPE_CHECKING:
    from .host import Host


class Env:
    __slots__ = ("_host", "_frame", "_read_only")

    def __init__(self, host: "Host", frame: CallFrame, *, read_only: bool = False) -> None:
        self._host = host
        self._frame = frame
        self._read_only = read_only

    # ------------------------ identity & context ------------------------

    @property
    def frame(self) -> CallFrame:
        return self._frame

    def caller(self) -> bytes:
        return self._frame.caller

    def transferred_value(self) -> int:
        return self._frame.value

    def account_id(self) -> bytes:
        return self._frame.callee

    def balance(self) -> int:
        return self._host.balance_of(self._frame.callee)

    def block_number(self) -> int:
        return self._host.block.height

    def entropy(self) -> bytes:
        return bytes(self._host.entropy(self._host.block))

    @property
    def balance_bits(self) -> int:
        return self._host.config.balance_bits

    # ------------------------ effects ------------------------

    def _require_writable(self, op: str) -> None:
        if self._read_only:
            raise InvalidAccess("state write in read-only message", op=op, address="0x" + self._frame.callee.hex())

    def transfer(self, to: bytes, amount: int) -> bool:
        """Move `amount` from this contract to `to`. False on failure, nothing changed."""
        self._require_writable("transfer")
        return self._host.transfer(self._frame.callee, to, amount)

    def instantiate(
        self,
        code_hash: bytes,
        args: Sequence[Any] = (),
        *,
        endowment: int = 0,
        salt: bytes = b"",
    ) -> bytes:
        """Create a contract with this contract as deployer; `endowment` comes from our balance."""
        self._require_writable("instantiate")
        return self._host.instantiate(
            code_hash, *args, caller=self._frame.callee, value=endowment, salt=salt
        )

    def call(self, callee: bytes, message: str, *args: Any, value: int = 0) -> Any:
        if self._read_only:
            return self._host.query(callee, message, *args, caller=self._frame.callee)
        return self._host.call(callee, message, *args, caller=self._frame.callee, value=value)

    def emit_event(self, name: str, topics: Sequence[bytes] = (), fields: Mapping[str, Any] | None = None) -> None:
        """
        Emit `name` with indexed `topics` (after topic[0] = sha3_256(name)) and
        `fields` encoded as canonical CBOR in the data payload.
        """
        self._require_writable("emit_event")
        data = cbor2.dumps(dict(fields or {}), canonical=True)
        self._host.events.emit(self._frame.callee, [event_topic(name), *topics], data)

    # ------------------------ storage ------------------------

    def storage_get(self, key: bytes, default: bytes = b"") -> bytes:
        return self._host.journal.storage_get(self._frame.callee, key, default)

    def storage_set(self, key: bytes, value: bytes) -> None:
        self._require_writable("storage_set")
        self._host.journal.storage_set(self._frame.callee, key, value)


__all__ = ["Env"]
