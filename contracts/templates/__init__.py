# -*- coding: utf-8 -*-
"""
contracts.templates
===================

Contract templates shipped with the repository, keyed by a short name:

    escrow           custodial Escrow (depositor / beneficiary / arbiter)
    escrow_factory   EscrowFactory deploying Escrow instances

`register_all(host)` registers every template on a host and returns the code
hash of each, which is what instantiation and the factory constructor take.
"""
from __future__ import annotations

from typing import Dict, Type

from execution.runtime.contracts import Contract

from .escrow import Escrow
from .escrow_factory import EscrowFactory

TEMPLATES: Dict[str, Type[Contract]] = {
    "escrow": Escrow,
    "escrow_factory": EscrowFactory,
}


def register_all(host) -> Dict[str, bytes]:
    """Register every shipped template on `host`; returns {name: code_hash}."""
    return {name: host.register_template(cls) for name, cls in TEMPLATES.items()}


__all__ = ["TEMPLATES", "Escrow", "EscrowFactory", "register_all"]
