"""
execution.state.accounts — ledger account records.

An account is a balance plus a code hash. Plain principals carry the all-zero
hash; contract instances carry the code hash of the template they were created
from. The balance of a contract is its custodial balance: for an escrow, the
funds it holds on behalf of the parties.

Balances are u256 and every change is checked: crediting past u256 raises
OverflowError and debiting more than the balance raises
ExecError(INSUFFICIENT_BALANCE).
"""

from __future__ import annotations

from dataclasses import dataclass

from execution.errors import ExecError
from execution.types.balance import U256_MAX, is_u256, safe_add

EMPTY_CODE_HASH: bytes = bytes(32)


def _amount(name: str, value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    if not is_u256(value):
        raise OverflowError(f"{name} exceeds u256")
    return value


@dataclass(slots=True)
class Account:
    balance: int = 0
    code_hash: bytes = EMPTY_CODE_HASH

    def __post_init__(self) -> None:
        self.balance = _amount("balance", self.balance)
        if not isinstance(self.code_hash, (bytes, bytearray, memoryview)):
            raise TypeError("code_hash must be bytes-like")
        self.code_hash = bytes(self.code_hash)
        if len(self.code_hash) != 32:
            raise ValueError("code_hash must be 32 bytes")

    @property
    def is_contract(self) -> bool:
        return self.code_hash != EMPTY_CODE_HASH

    def credit(self, amount: int) -> None:
        self.balance = safe_add(self.balance, _amount("amount", amount), cap=U256_MAX)

    def debit(self, amount: int) -> None:
        amt = _amount("amount", amount)
        if amt > self.balance:
            raise ExecError(
                "insufficient balance",
                code="INSUFFICIENT_BALANCE",
                data={"balance": self.balance, "amount": amt},
            )
        self.balance -= amt

    def copy(self) -> "Account":
        return Account(balance=self.balance, code_hash=self.code_hash)

    def to_dict(self) -> dict:
        return {"balance": self.balance, "code_hash": "0x" + self.code_hash.hex(), "contract": self.is_contract}


__all__ = ["Account", "EMPTY_CODE_HASH"]
