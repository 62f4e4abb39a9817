"""
execution.types.address — principals (AccountId) and content hashes.

An `AccountId` is an opaque, fixed-length byte string. Contract logic only
ever compares principals for equality; rendering (0x-hex) and parsing live
here so every layer agrees on one canonical form.

A `Hash` is a 32-byte SHA3-256 digest, used for contract code templates.

Helpers accept raw bytes or hex strings (with or without 0x). Human-friendly
names ("alice") can be mapped to stable addresses with `named_account`, which
tools and tests use to avoid pasting hex around.
"""

from __future__ import annotations

import hashlib
from typing import NewType, Union

AccountId = NewType("AccountId", bytes)
Hash = NewType("Hash", bytes)

HexLike = Union[str, bytes, bytearray, memoryview]

HASH_LEN = 32
ZERO_HASH: Hash = Hash(b"\x00" * HASH_LEN)


def _strip0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def hex_to_bytes(v: HexLike) -> bytes:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    if isinstance(v, str):
        s = _strip0x(v.strip())
        if len(s) % 2:
            raise ValueError(f"hex string must have even length: {v!r}")
        try:
            return bytes.fromhex(s)
        except ValueError as e:
            raise ValueError(f"invalid hex string: {v!r}") from e
    raise TypeError(f"expected hex-like value, got {type(v).__name__}")


def to_account_id(v: HexLike, *, length: int = 32) -> AccountId:
    """Coerce `v` into an AccountId of exactly `length` bytes."""
    b = hex_to_bytes(v)
    if len(b) != length:
        raise ValueError(f"account id must be exactly {length} bytes (got {len(b)})")
    return AccountId(b)


def to_hash(v: HexLike) -> Hash:
    b = hex_to_bytes(v)
    if len(b) != HASH_LEN:
        raise ValueError(f"hash must be exactly {HASH_LEN} bytes (got {len(b)})")
    return Hash(b)


def named_account(tag: str, *, length: int = 32) -> AccountId:
    """
    Stable address for a human-readable tag: sha3_256("account:" + tag).

    Not a key derivation; only a naming convenience for tools and tests.
    """
    digest = hashlib.sha3_256(b"account:" + tag.encode("utf-8")).digest()
    while len(digest) < length:
        digest += hashlib.sha3_256(digest).digest()
    return AccountId(digest[:length])


def parse_account(v: str, *, length: int = 32) -> AccountId:
    """
    Parse a CLI-style principal: 0x-hex of the right length, otherwise a tag
    passed through `named_account`.
    """
    s = v.strip()
    if s.startswith(("0x", "0X")):
        return to_account_id(s, length=length)
    if not s:
        raise ValueError("empty principal")
    return named_account(s, length=length)


__all__ = [
    "AccountId",
    "Hash",
    "HexLike",
    "HASH_LEN",
    "ZERO_HASH",
    "to_hex",
    "hex_to_bytes",
    "to_account_id",
    "to_hash",
    "named_account",
    "parse_account",
]
