# -*- coding: utf-8 -*-
"""
contracts.stdlib.codec
======================

Fixed-width storage codecs shared by the templates. All values live in the
contract's host storage as bytes:

    bool      b"\\x01" / b"\\x00"
    uint      16-byte big-endian (u128) by default, width taken from the host
    address   raw account id bytes
    list      count under `<prefix>:len` (u32 BE), items under `<prefix>:<u32 BE index>`

Reads of missing keys return the zero value (False / 0 / empty list). A
missing address is a corrupted contract and raises.
"""
from __future__ import annotations

from typing import List

from execution.runtime.env import Env


def put_bool(env: Env, key: bytes, v: bool) -> None:
    env.storage_set(key, b"\x01" if v else b"\x00")


def get_bool(env: Env, key: bytes) -> bool:
    v = env.storage_get(key)
    return len(v) > 0 and v[0] != 0


def _uint_width(env: Env) -> int:
    return (env.balance_bits + 7) // 8


def put_uint(env: Env, key: bytes, n: int) -> None:
    width = _uint_width(env)
    if not isinstance(n, int) or n < 0 or n.bit_length() > width * 8:
        raise ValueError(f"value does not fit u{width * 8}: {n!r}")
    env.storage_set(key, n.to_bytes(width, "big"))


def get_uint(env: Env, key: bytes) -> int:
    v = env.storage_get(key)
    if not v:
        return 0
    if len(v) != _uint_width(env):
        raise ValueError(f"corrupt uint at {key!r}")
    return int.from_bytes(v, "big")


def put_addr(env: Env, key: bytes, addr: bytes) -> None:
    if not isinstance(addr, (bytes, bytearray)) or not addr:
        raise ValueError("address must be non-empty bytes")
    env.storage_set(key, bytes(addr))


def get_addr(env: Env, key: bytes) -> bytes:
    v = env.storage_get(key)
    if not v:
        raise ValueError(f"missing address at {key!r}")
    return v


# ---- append-only lists --------------------------------------------------------


def _len_key(prefix: bytes) -> bytes:
    return prefix + b":len"


def _item_key(prefix: bytes, i: int) -> bytes:
    return prefix + b":" + i.to_bytes(4, "big")


def list_len(env: Env, prefix: bytes) -> int:
    v = env.storage_get(_len_key(prefix))
    return int.from_bytes(v, "big") if v else 0


def list_append(env: Env, prefix: bytes, item: bytes) -> int:
    """Append `item`; returns its index."""
    n = list_len(env, prefix)
    if n >= 0xFFFFFFFF:
        raise OverflowError("list is full")
    env.storage_set(_item_key(prefix, n), bytes(item))
    env.storage_set(_len_key(prefix), (n + 1).to_bytes(4, "big"))
    return n


def list_items(env: Env, prefix: bytes) -> List[bytes]:
    return [env.storage_get(_item_key(prefix, i)) for i in range(list_len(env, prefix))]


__all__ = [
    "put_bool",
    "get_bool",
    "put_uint",
    "get_uint",
    "put_addr",
    "get_addr",
    "list_len",
    "list_append",
    "list_items",
]
