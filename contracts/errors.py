"""
contracts.errors — error taxonomy of the escrow contracts.

Every error is a `Revert`: raising it aborts the current call and the host
rolls back all of that call's effects. Each class carries a stable `code`
used in results and CLI output.

    Unauthorized         caller is not the principal the message requires
    InvalidAmount        a deposit carried no value
    AlreadyReleased      the escrow is already settled
    Overflow             deposited amount would exceed the balance width
    TransferFailed       the host refused the terminal payout
    InstantiationFailed  the factory could not create an escrow
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from execution.errors import Revert


class ContractError(Revert):
    code_name = "CONTRACT_ERROR"
    default_message = "contract error"

    def __init__(self, message: Optional[str] = None, *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message, code=self.code_name, data=data)


class Unauthorized(ContractError):
    code_name = "UNAUTHORIZED"
    default_message = "caller is not authorized"


class InvalidAmount(ContractError):
    code_name = "INVALID_AMOUNT"
    default_message = "amount must be greater than zero"


class AlreadyReleased(ContractError):
    code_name = "ALREADY_RELEASED"
    default_message = "escrow already settled"


class Overflow(ContractError):
    code_name = "OVERFLOW"
    default_message = "arithmetic overflow"


class TransferFailed(ContractError):
    code_name = "TRANSFER_FAILED"
    default_message = "value transfer failed"


class InstantiationFailed(ContractError):
    code_name = "INSTANTIATION_FAILED"
    default_message = "escrow instantiation failed"


__all__ = [
    "ContractError",
    "Unauthorized",
    "InvalidAmount",
    "AlreadyReleased",
    "Overflow",
    "TransferFailed",
    "InstantiationFailed",
]
