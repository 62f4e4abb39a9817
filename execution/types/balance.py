"""
execution.types.balance — monetary amounts and checked arithmetic.

Balances are non-negative integers. Python's ints are unbounded, so every
width is an explicit cap:

* account balances on the ledger are u256 (`U256_MAX`);
* contract-level `Balance` values (e.g. an escrow's `deposited`) are bounded
  by the configured `balance_bits` (u128 by default).

Overflow is always an error. Nothing here wraps or saturates.

Exports
-------
* Types: `Balance`
* Constants: `U256_MAX`
* `balance_max(bits)`, `is_u256(n)`
* `to_balance(n, bits=...)`  → validated Balance
* `safe_add(a, b, cap=...)`  → raises OverflowError on cap breach
* `safe_sub(a, b)`           → raises ValueError if result < 0
"""

from __future__ import annotations

from typing import NewType

U256_MAX: int = (1 << 256) - 1
"""Maximum 256-bit unsigned integer."""

Balance = NewType("Balance", int)


def balance_max(bits: int) -> int:
    """Largest amount representable with `bits` unsigned bits."""
    if not isinstance(bits, int) or bits <= 0:
        raise ValueError("bits must be a positive int")
    return (1 << bits) - 1


def is_u256(n: int) -> bool:
    """Return True iff 0 <= n <= U256_MAX."""
    return isinstance(n, int) and not isinstance(n, bool) and 0 <= n <= U256_MAX


def _ensure_nonneg_int(n: int) -> int:
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError(f"expected int, got {type(n).__name__}")
    if n < 0:
        raise ValueError("value must be non-negative")
    return n


def to_balance(n: int, *, bits: int = 128) -> Balance:
    """Validate and coerce an int into a `Balance` of the given width."""
    n = _ensure_nonneg_int(n)
    if n > balance_max(bits):
        raise OverflowError(f"amount exceeds u{bits}")
    return Balance(n)


def safe_add(a: int, b: int, *, cap: int = U256_MAX) -> int:
    """
    Checked addition. Raises OverflowError if result exceeds `cap`.
    """
    _ensure_nonneg_int(a)
    _ensure_nonneg_int(b)
    s = a + b
    if s > cap:
        raise OverflowError(f"addition overflow: {a} + {b} > cap {cap}")
    return s


def safe_sub(a: int, b: int) -> int:
    """
    Checked subtraction. Raises ValueError if result would be negative.
    """
    _ensure_nonneg_int(a)
    _ensure_nonneg_int(b)
    if b > a:
        raise ValueError(f"subtraction underflow: {a} - {b} < 0")
    return a - b


__all__ = [
    "Balance",
    "U256_MAX",
    "balance_max",
    "is_u256",
    "to_balance",
    "safe_add",
    "safe_sub",
]
