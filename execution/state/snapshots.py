"""
execution.state.snapshots — whole-state export/import as canonical CBOR.

A snapshot captures everything a host needs to resume where it left off:

- the block context (height, timestamp, chain id)
- every account (balance, code hash)
- every contract's storage
- the event log

Contract *code* is not part of a snapshot: templates are Python classes
registered on the importing host by content hash. Importing a snapshot whose
contracts reference an unregistered template is rejected.

Wire format (CBOR, canonical mode)
----------------------------------
    {
      "v": 1,
      "block":    {"height": int, "timestamp": int, "chainId": int},
      "accounts": [[addr: bytes, balance: int, code_hash: bytes], ...],
      "storage":  [[addr: bytes, {key: bytes → value: bytes}], ...],
      "events":   [[address: bytes, [topic: bytes, ...], data: bytes], ...]
    }

Lists are sorted by address so equal states encode to equal bytes.

Interfaces expected from the host
---------------------------------
    host.block                       -> BlockContext
    host.journal                     -> Journal (flushed before export)
    host.events                      -> EventSink
    host.templates.has(code_hash)    -> bool
    host.restore(block, accounts, storage, events)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import cbor2

from execution.types.context import BlockContext
from execution.types.events import LogEvent

from .accounts import Account

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _cbor_dumps(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def export_state(host: Any) -> bytes:
    """Serialize the host's committed state to canonical CBOR bytes."""
    journal = host.journal
    if journal.depth() != 1:
        raise RuntimeError("cannot export state while a call is in progress")
    journal.flush()

    accounts: List[List[Any]] = []
    storage: List[List[Any]] = []
    for addr, acc in journal.accounts():
        accounts.append([addr, acc.balance, acc.code_hash])
        items = dict(journal.storage_items(addr))
        if items:
            storage.append([addr, items])

    doc = {
        "v": SNAPSHOT_VERSION,
        "block": host.block.to_dict(),
        "accounts": accounts,
        "storage": storage,
        "events": [[ev.address, list(ev.topics), ev.data] for ev in host.events.all()],
    }
    blob = _cbor_dumps(doc)
    log.debug("state exported", extra={"accounts": len(accounts), "bytes": len(blob)})
    return blob


def import_state(blob: bytes, host: Any) -> None:
    """
    Replace the host's state with the snapshot in `blob`.

    Raises:
        ValueError on malformed input, unsupported version, or contracts whose
        template is not registered on `host`.
    """
    try:
        doc = cbor2.loads(blob)
    except (cbor2.CBORDecodeError, TypeError, ValueError) as e:
        raise ValueError(f"invalid snapshot encoding: {e}") from e
    if not isinstance(doc, dict):
        raise ValueError("snapshot must be a CBOR map")
    if doc.get("v") != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {doc.get('v')!r}")

    try:
        block = BlockContext.from_dict(doc["block"])
        accounts: Dict[bytes, Account] = {}
        for addr, balance, code_hash in doc["accounts"]:
            acc = Account(balance=int(balance), code_hash=bytes(code_hash))
            if acc.is_contract and not host.templates.has(acc.code_hash):
                raise ValueError(f"unknown contract template 0x{acc.code_hash.hex()}")
            accounts[bytes(addr)] = acc
        storage: Dict[bytes, Dict[bytes, bytes]] = {
            bytes(addr): {bytes(k): bytes(v) for k, v in items.items()}
            for addr, items in doc["storage"]
        }
        events = [LogEvent(address=a, topics=t, data=d) for a, t, d in doc["events"]]
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed snapshot: {e}") from e

    host.restore(block=block, accounts=accounts, storage=storage, events=events)
    log.debug("state imported", extra={"accounts": len(accounts), "height": block.height})


__all__ = ["SNAPSHOT_VERSION", "export_state", "import_state"]
