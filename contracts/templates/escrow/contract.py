# -*- coding: utf-8 -*-
"""
Custodial Escrow (template)
---------------------------

One depositor funds the escrow; one arbiter decides whether the funds go to the
beneficiary (release) or back to the depositor (refund).

Model:
- Parties: depositor (whoever instantiates the contract), beneficiary, arbiter.
  All three are fixed at construction and never change.
- Deposits: only the depositor, only with a non-zero attached value, only
  while the escrow is open. Amounts accumulate with checked u128 addition.
- Settlement: exactly one of release()/refund(), arbiter only, once. The
  settled flag is set before the payout; if the payout fails the whole call
  reverts, flag included.
- A zero-balance settlement is a valid terminal transition with no transfer.

State machine:  Open --deposit--> Open
                Open --release|refund--> Settled   (terminal)
"""
from __future__ import annotations

from typing import Tuple

from contracts.errors import AlreadyReleased, InvalidAmount, Overflow, TransferFailed, Unauthorized
from contracts.stdlib.codec import get_addr, get_bool, get_uint, put_addr, put_bool, put_uint
from execution.runtime.contracts import Contract, constructor, message
from execution.types.balance import balance_max, safe_add


# ---- storage keys ------------------------------------------------------------

K_DEPOSITOR = b"escrow:depositor"
K_BENEFICIARY = b"escrow:beneficiary"
K_ARBITER = b"escrow:arbiter"
K_DEPOSITED = b"escrow:deposited"      # u128 BE
K_RELEASED = b"escrow:released"        # b"\x01" once settled


class Escrow(Contract):

    # ---- construction --------------------------------------------------------

    @constructor
    def new(self, beneficiary: bytes, arbiter: bytes) -> None:
        env = self.env()
        put_addr(env, K_DEPOSITOR, env.caller())
        put_addr(env, K_BENEFICIARY, bytes(beneficiary))
        put_addr(env, K_ARBITER, bytes(arbiter))
        put_uint(env, K_DEPOSITED, 0)
        put_bool(env, K_RELEASED, False)

    # ---- guards --------------------------------------------------------------

    def _only(self, key: bytes, role: str) -> None:
        env = self.env()
        if env.caller() != get_addr(env, key):
            raise Unauthorized(f"only the {role} may call this", data={"caller": "0x" + env.caller().hex()})

    def _open(self) -> None:
        if get_bool(self.env(), K_RELEASED):
            raise AlreadyReleased()

    # ---- messages ------------------------------------------------------------

    @message(payable=True)
    def deposit(self) -> None:
        """Add the attached value to the escrowed amount."""
        env = self.env()
        self._only(K_DEPOSITOR, "depositor")
        value = env.transferred_value()
        if value <= 0:
            raise InvalidAmount()
        self._open()
        current = get_uint(env, K_DEPOSITED)
        try:
            total = safe_add(current, value, cap=balance_max(env.balance_bits))
        except OverflowError as e:
            raise Overflow(data={"deposited": current, "value": value}) from e
        put_uint(env, K_DEPOSITED, total)

    @message
    def release(self) -> None:
        """Arbiter pays the full deposit to the beneficiary and settles the escrow."""
        self._settle(K_BENEFICIARY)

    @message
    def refund(self) -> None:
        """Arbiter returns the full deposit to the depositor and settles the escrow."""
        self._settle(K_DEPOSITOR)

    def _settle(self, payee_key: bytes) -> None:
        env = self.env()
        self._only(K_ARBITER, "arbiter")
        self._open()
        put_bool(env, K_RELEASED, True)
        amount = get_uint(env, K_DEPOSITED)
        if amount > 0:
            payee = get_addr(env, payee_key)
            if not env.transfer(payee, amount):
                raise TransferFailed(data={"to": "0x" + payee.hex(), "amount": amount})

    # ---- views ---------------------------------------------------------------

    @message(mutates=False)
    def get_status(self) -> Tuple[int, bool]:
        env = self.env()
        return get_uint(env, K_DEPOSITED), get_bool(env, K_RELEASED)

    @message(mutates=False)
    def get_parties(self) -> Tuple[bytes, bytes, bytes]:
        env = self.env()
        return (
            get_addr(env, K_DEPOSITOR),
            get_addr(env, K_BENEFICIARY),
            get_addr(env, K_ARBITER),
        )


__all__ = ["Escrow"]
