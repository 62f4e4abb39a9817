"""
execution.runtime.contracts — contract model, template registry, address derivation.

A contract *template* is a Python class deriving from `Contract`. Its public
surface is declared with two decorators:

    class Counter(Contract):
        @constructor
        def new(self, start: int) -> None: ...

        @message(payable=True)
        def bump(self) -> None: ...

        @message(mutates=False)
        def get(self) -> int: ...

Instances hold no state of their own: the host creates a fresh instance for
every call and all persistent fields live in host storage under the contract's
address, so the journal can roll them back with everything else.

Templates are registered by content hash, sha3_256 of the class source, which
plays the role of an on-chain code hash. Instantiation derives the new address
deterministically:

    addr = sha3_256(b"escrow-host/instantiate\\0" || deployer || code_hash
                    || sha3_256(cbor(args)) || salt)[:address_len]
"""

from __future__ import annotations

import hashlib
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Type

import cbor2

from ..errors import InvalidAccess
from ..types.address import Hash, to_hex

if TYPE_CHECKING:
    from .env import Env

log = logging.getLogger(__name__)

ADDRESS_DOMAIN = b"escrow-host/instantiate\x00"

_SPEC_ATTR = "__contract_message__"


# --------------------------------------------------------------------------------------
# Message declarations
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class MessageSpec:
    name: str
    payable: bool = False
    mutates: bool = True
    constructor: bool = False


def message(fn: Optional[Callable] = None, *, payable: bool = False, mutates: bool = True):
    """
    Mark a method as a public message.

    payable  — the message accepts attached value
    mutates  — False for read-only messages; state writes then raise InvalidAccess
    """
    def wrap(f: Callable) -> Callable:
        if payable and not mutates:
            raise ValueError(f"{f.__name__}: a read-only message cannot be payable")
        setattr(f, _SPEC_ATTR, MessageSpec(name=f.__name__, payable=payable, mutates=mutates))
        return f

    return wrap(fn) if fn is not None else wrap


def constructor(fn: Callable) -> Callable:
    """Mark the method run once at instantiation. Endowments are always accepted."""
    setattr(fn, _SPEC_ATTR, MessageSpec(name=fn.__name__, payable=True, constructor=True))
    return fn


class Contract:
    """Base class for contract templates."""

    def __init__(self, env: "Env") -> None:
        self._env = env

    def env(self) -> "Env":
        return self._env


def messages_of(cls: Type[Contract]) -> Dict[str, MessageSpec]:
    """Public (non-constructor) messages declared on `cls` and its bases."""
    out: Dict[str, MessageSpec] = {}
    for name, member in inspect.getmembers(cls, inspect.isfunction):
        spec = getattr(member, _SPEC_ATTR, None)
        if spec is not None and not spec.constructor:
            out[name] = spec
    return out


def constructor_of(cls: Type[Contract]) -> MessageSpec:
    found = [
        getattr(m, _SPEC_ATTR)
        for _, m in inspect.getmembers(cls, inspect.isfunction)
        if getattr(getattr(m, _SPEC_ATTR, None), "constructor", False)
    ]
    if len(found) != 1:
        raise ValueError(f"{cls.__name__} must declare exactly one @constructor (found {len(found)})")
    return found[0]


# --------------------------------------------------------------------------------------
# Template registry
# --------------------------------------------------------------------------------------


def template_hash(cls: Type[Contract]) -> Hash:
    """Content hash of a template: sha3_256 of its class source."""
    try:
        src = inspect.getsource(cls)
    except (OSError, TypeError) as e:
        raise ValueError(f"cannot read source of template {cls.__name__}") from e
    return Hash(hashlib.sha3_256(src.encode("utf-8")).digest())


class TemplateRegistry:
    """Maps code hashes to contract classes."""

    def __init__(self) -> None:
        self._by_hash: Dict[bytes, Type[Contract]] = {}

    def register(self, cls: Type[Contract]) -> Hash:
        """Register `cls` and return its code hash. Re-registering is a no-op."""
        if not (isinstance(cls, type) and issubclass(cls, Contract)):
            raise TypeError("template must be a Contract subclass")
        constructor_of(cls)
        h = template_hash(cls)
        known = self._by_hash.get(h)
        if known is None:
            self._by_hash[h] = cls
            log.debug("template registered", extra={"template": cls.__name__, "code_hash": h})
        return h

    def has(self, code_hash: bytes) -> bool:
        return bytes(code_hash) in self._by_hash

    def get(self, code_hash: bytes) -> Type[Contract]:
        try:
            return self._by_hash[bytes(code_hash)]
        except KeyError:
            raise InvalidAccess("unknown code hash", op="instantiate", data={"code_hash": to_hex(code_hash)}) from None

    def hashes(self) -> Sequence[bytes]:
        return sorted(self._by_hash)

    def __len__(self) -> int:
        return len(self._by_hash)


# --------------------------------------------------------------------------------------
# Address derivation
# --------------------------------------------------------------------------------------


def encode_args(args: Sequence[Any]) -> bytes:
    """Canonical CBOR of constructor arguments."""
    return cbor2.dumps(list(args), canonical=True)


def derive_address(
    deployer: bytes,
    code_hash: bytes,
    args: Sequence[Any],
    salt: bytes,
    *,
    length: int = 32,
) -> bytes:
    """Deterministic address of a new contract instance."""
    h = hashlib.sha3_256()
    h.update(ADDRESS_DOMAIN)
    h.update(bytes(deployer))
    h.update(bytes(code_hash))
    h.update(hashlib.sha3_256(encode_args(args)).digest())
    h.update(bytes(salt))
    digest = h.digest()
    while len(digest) < length:
        digest += hashlib.sha3_256(digest).digest()
    return digest[:length]


__all__ = [
    "ADDRESS_DOMAIN",
    "Contract",
    "MessageSpec",
    "TemplateRegistry",
    "constructor",
    "constructor_of",
    "derive_address",
    "encode_args",
    "message",
    "messages_of",
    "template_hash",
]
