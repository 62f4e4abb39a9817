"""
execution.runtime.host — the in-memory execution host contracts run on.

The Host owns the ledger (accounts + contract storage behind a Journal), the
event log, the block context, the template registry and the entropy source,
and it is the only component that runs contract code.

Call boundary
-------------
Every contract invocation, top-level or nested, goes through `_run_frame`:

  1. refuse re-entry into a contract already on the call stack and enforce
     the configured maximum call depth;
  2. open a journal checkpoint and record an event-log mark;
  3. move the attached value from caller to callee;
  4. push a CallFrame and run the message (or constructor);
  5. commit on success; on *any* error revert the checkpoint, truncate the
     event log back to the mark, and re-raise.

Non-ExecError exceptions escaping contract code are wrapped in `Trap` with
the original as `__cause__`. A re-entrant lock serializes calls, so a host may
be shared between threads without interleaving inside a call.

Usage
-----
    host = Host()
    code = host.register_template(Escrow)
    host.set_balance(alice, 1_000)
    esc = host.instantiate(code, bob, carol, caller=alice)
    host.call(esc, "deposit", caller=alice, value=100)
    host.query(esc, "get_status")            # → (100, False)
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Type

from core import logging as clog

from ..config import HostConfig, get_config
from ..errors import ExecError, InvalidAccess, Revert, StateConflict, Trap, error_to_result_fields
from ..state.accounts import Account
from ..state.journal import Journal
from ..state.storage import StorageView
from ..types.address import to_hex
from ..types.context import BlockContext, CallFrame
from ..types.events import LogEvent
from ..types.result import CallResult
from ..types.status import CallStatus
from .contracts import Contract, TemplateRegistry, constructor_of, derive_address, messages_of
from .env import Env
from .event_sink import EventSink
from .transfers import apply_transfer, try_transfer

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------------------
# Entropy
# --------------------------------------------------------------------------------------


class EntropySource(Protocol):
    def __call__(self, block: BlockContext) -> bytes: ...


class BlockHeightEntropy:
    """Default entropy: the block height as u32 little-endian (4 bytes)."""

    def __call__(self, block: BlockContext) -> bytes:
        return (block.height & 0xFFFFFFFF).to_bytes(4, "little")


# --------------------------------------------------------------------------------------
# Host
# --------------------------------------------------------------------------------------


class Host:
    def __init__(
        self,
        config: Optional[HostConfig] = None,
        *,
        block: Optional[BlockContext] = None,
        entropy: Optional[EntropySource] = None,
    ) -> None:
        self.config = config or get_config()
        self.block = block or BlockContext(height=0, timestamp=0, chain_id=self.config.chain_id)
        self.entropy: EntropySource = entropy or BlockHeightEntropy()
        self.templates = TemplateRegistry()
        self.events = EventSink()
        self._accounts: Dict[bytes, Account] = {}
        self._storage = StorageView()
        self.journal = Journal(self._accounts, self._storage)
        self._frames: List[CallFrame] = []
        self._lock = threading.RLock()

    # ------------------------ templates & genesis ------------------------

    def register_template(self, cls: Type[Contract]) -> bytes:
        return self.templates.register(cls)

    def _check_address(self, addr: bytes, what: str = "address") -> bytes:
        b = bytes(addr)
        if len(b) != self.config.address_len:
            raise ValueError(f"{what} must be {self.config.address_len} bytes (got {len(b)})")
        return b

    def set_balance(self, address: bytes, amount: int) -> None:
        """Genesis/tooling helper: overwrite an account balance outside of any call."""
        with self._lock:
            if self._frames:
                raise InvalidAccess("set_balance during a call", op="set_balance")
            addr = self._check_address(address)
            acc = self.journal.ensure_account_for_write(addr)
            acc.debit(acc.balance)
            acc.credit(amount)
            self.journal.flush()

    def balance_of(self, address: bytes) -> int:
        acc = self.journal.get_account(address)
        return 0 if acc is None else acc.balance

    def code_hash_of(self, address: bytes) -> Optional[bytes]:
        acc = self.journal.get_account(address)
        if acc is None or not acc.is_contract:
            return None
        return acc.code_hash

    def accounts(self) -> Iterable[tuple]:
        return self.journal.accounts()

    def storage_items(self, address: bytes):
        return self.journal.storage_items(address)

    # ------------------------ block context ------------------------

    def advance_block(self, blocks: int = 1) -> BlockContext:
        with self._lock:
            if self._frames:
                raise InvalidAccess("advance_block during a call", op="advance_block")
            self.block = self.block.advanced(blocks, block_time=self.config.block_time)
            log.debug("block advanced", extra={"height": self.block.height})
            return self.block

    # ------------------------ value movement ------------------------

    def transfer(self, sender: bytes, recipient: bytes, amount: int) -> bool:
        """Contract-initiated transfer; False and no change on failure."""
        return try_transfer(self.journal, sender, recipient, amount)

    # ------------------------ call boundary ------------------------

    @staticmethod
    def _check_value(value: int, op: str) -> None:
        if value < 0:
            raise Revert(
                "attached value must be non-negative",
                code="INVALID_VALUE",
                data={"op": op, "value": value},
            )

    def _run_frame(
        self,
        *,
        caller: bytes,
        callee: bytes,
        value: int,
        op: str,
        body: Callable[[CallFrame], Any],
    ) -> Any:
        depth = len(self._frames)
        if depth >= self.config.max_call_depth:
            raise InvalidAccess("max call depth exceeded", op=op, data={"depth": depth})
        if any(f.callee == callee for f in self._frames):
            raise InvalidAccess("re-entrant call", op=op, address=to_hex(callee))

        frame = CallFrame(caller=caller, callee=callee, value=value, depth=depth)
        marker = self.journal.begin()
        ev_mark = self.events.mark()
        self._frames.append(frame)
        try:
            try:
                apply_transfer(self.journal, caller, callee, value)
            except OverflowError as e:
                raise ExecError("callee balance overflow", code="BALANCE_OVERFLOW") from e
            try:
                result = body(frame)
            except ExecError:
                raise
            except Exception as e:
                raise Trap(f"{type(e).__name__}: {e}", data={"op": op, "address": to_hex(callee)}) from e
        except ExecError as err:
            self.journal.revert_to(marker)
            self.events.truncate(ev_mark)
            log.warning(
                "call reverted",
                extra={"op": op, "contract": to_hex(callee), "depth": depth, "code": err.code},
            )
            raise
        finally:
            self._frames.pop()

        self.journal.commit_to(marker)
        if depth == 0:
            self.journal.flush()
        return result

    def instantiate(
        self,
        code_hash: bytes,
        *args: Any,
        caller: bytes,
        value: int = 0,
        salt: bytes = b"",
    ) -> bytes:
        """
        Create a contract from the template registered under `code_hash`,
        run its constructor with `args`, and return the new address.

        Raises StateConflict if the derived address already holds an account.
        """
        with self._lock, clog.trace_scope():
            self._check_value(value, "instantiate")
            cls = self.templates.get(code_hash)
            ctor = constructor_of(cls)
            addr = derive_address(caller, code_hash, args, salt, length=self.config.address_len)
            if self.journal.get_account(addr) is not None:
                raise StateConflict("contract address already in use", address=to_hex(addr))
            self._bind_call_context(addr)

            def body(frame: CallFrame) -> None:
                acc = self.journal.ensure_account_for_write(addr)
                acc.code_hash = bytes(code_hash)
                getattr(cls(Env(self, frame)), ctor.name)(*args)

            self._run_frame(caller=caller, callee=addr, value=value, op="instantiate", body=body)
            log.info(
                "contract instantiated",
                extra={"template": cls.__name__, "address": to_hex(addr), "deployer": to_hex(caller)},
            )
            return addr

    def _resolve(self, callee: bytes, message: str):
        code_hash = self.code_hash_of(callee)
        if code_hash is None:
            raise InvalidAccess("no contract at address", op=message, address=to_hex(callee))
        cls = self.templates.get(code_hash)
        spec = messages_of(cls).get(message)
        if spec is None:
            raise InvalidAccess("unknown message", op=message, address=to_hex(callee))
        return cls, spec

    def _bind_call_context(self, callee: bytes) -> None:
        clog.bind(height=self.block.height, contract=to_hex(callee))

    def call(self, callee: bytes, message: str, *args: Any, caller: bytes, value: int = 0) -> Any:
        """Run a public message on `callee`; state changes commit on success."""
        with self._lock, clog.trace_scope():
            self._check_value(value, message)
            cls, spec = self._resolve(callee, message)
            if value and not spec.payable:
                raise Revert("message is not payable", code="NON_PAYABLE", data={"message": message})
            self._bind_call_context(callee)
            log.debug("call", extra={"entry": message, "value": value, "caller": to_hex(caller)})

            def body(frame: CallFrame) -> Any:
                env = Env(self, frame, read_only=not spec.mutates)
                return getattr(cls(env), message)(*args)

            return self._run_frame(caller=caller, callee=callee, value=value, op=message, body=body)

    def query(self, callee: bytes, message: str, *args: Any, caller: Optional[bytes] = None) -> Any:
        """
        Run a message without keeping any effect. Read-only messages are the
        intended target; anything a mutating message does is discarded.
        """
        with self._lock, clog.trace_scope():
            cls, spec = self._resolve(callee, message)
            frame = CallFrame(
                caller=caller if caller is not None else b"\x00" * self.config.address_len,
                callee=callee,
                value=0,
                depth=len(self._frames),
            )
            marker = self.journal.begin()
            ev_mark = self.events.mark()
            self._frames.append(frame)
            try:
                env = Env(self, frame, read_only=not spec.mutates)
                return getattr(cls(env), message)(*args)
            finally:
                self._frames.pop()
                self.journal.revert_to(marker)
                self.events.truncate(ev_mark)

    def execute(self, callee: bytes, message: str, *args: Any, caller: bytes, value: int = 0) -> CallResult:
        """`call` for tools: failures become a CallResult instead of an exception."""
        with self._lock:
            mark = self.events.mark()
            try:
                ret = self.call(callee, message, *args, caller=caller, value=value)
            except ExecError as err:
                fields = error_to_result_fields(err)
                status = CallStatus.TRAP if fields["status"] == "trap" else CallStatus.REVERT
                return CallResult(status=status, error=fields["error"])
            return CallResult(status=CallStatus.SUCCESS, return_value=ret, logs=tuple(self.events.since(mark)))

    # ------------------------ persistence ------------------------

    def restore(
        self,
        *,
        block: BlockContext,
        accounts: Mapping[bytes, Account],
        storage: Mapping[bytes, Mapping[bytes, bytes]],
        events: Iterable[LogEvent],
    ) -> None:
        """Replace the whole state (used by snapshot import)."""
        with self._lock:
            if self._frames:
                raise InvalidAccess("restore during a call", op="restore")
            self.block = block
            self._accounts = {bytes(a): acc.copy() for a, acc in accounts.items()}
            self._storage = StorageView()
            for addr, items in storage.items():
                self._storage.import_account(addr, items)
            self.journal = Journal(self._accounts, self._storage)
            self.events = EventSink()
            self.events.extend(events)

    def export_state(self) -> bytes:
        from ..state.snapshots import export_state

        with self._lock:
            return export_state(self)

    def import_state(self, blob: bytes) -> None:
        from ..state.snapshots import import_state

        import_state(blob, self)


__all__ = ["Host", "EntropySource", "BlockHeightEntropy"]
