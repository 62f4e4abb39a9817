"""
execution.runtime.transfers — deterministic value movement between accounts

Implements the simplest ledger action: move funds from sender → recipient
inside the active journal layer.

Semantics
---------
- `apply_transfer` debits the sender and credits the recipient, creating the
  recipient as a plain account if needed. Insufficient balance raises
  ExecError(INSUFFICIENT_BALANCE); a recipient overflow raises OverflowError.
  Both are checked before anything is written.
- `try_transfer` is the contract-facing form: same effect, but failures are
  reported as `False` with no state change, leaving the decision to the
  calling contract (the escrow treats it as fatal).
- A zero amount is a successful no-op that still touches no accounts.
"""

from __future__ import annotations

import logging

from ..errors import ExecError
from ..state.journal import Journal
from ..types.balance import U256_MAX

log = logging.getLogger(__name__)


def _check_amount(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be int")
    if amount < 0:
        raise ValueError("amount must be non-negative")
    return amount


def apply_transfer(journal: Journal, sender: bytes, recipient: bytes, amount: int) -> None:
    """
    Move `amount` from `sender` to `recipient` in the journal's top layer.

    Raises:
        ExecError     — sender missing or balance insufficient
        OverflowError — recipient balance would exceed u256
    """
    amount = _check_amount(amount)
    if amount == 0:
        return

    src = journal.get_account(sender)
    if src is None or src.balance < amount:
        raise ExecError(
            "insufficient balance",
            code="INSUFFICIENT_BALANCE",
            data={
                "from": "0x" + bytes(sender).hex(),
                "balance": 0 if src is None else src.balance,
                "amount": amount,
            },
        )
    if bytes(sender) == bytes(recipient):
        return

    dst = journal.get_account(recipient)
    if (0 if dst is None else dst.balance) + amount > U256_MAX:
        raise OverflowError("recipient balance exceeds u256")

    journal.get_account_for_write(sender).debit(amount)  # type: ignore[union-attr]
    journal.ensure_account_for_write(recipient).credit(amount)


def try_transfer(journal: Journal, sender: bytes, recipient: bytes, amount: int) -> bool:
    """
    Attempt a transfer; return False (and change nothing) instead of raising
    on insufficient balance or recipient overflow.
    """
    try:
        apply_transfer(journal, sender, recipient, amount)
    except (ExecError, OverflowError) as e:
        log.debug(
            "transfer failed",
            extra={"to": bytes(recipient), "amount": amount, "reason": str(e)},
        )
        return False
    return True


__all__ = ["apply_transfer", "try_transfer"]
