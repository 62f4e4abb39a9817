# -*- coding: utf-8 -*-
"""
Escrow Factory (template)
-------------------------

Creates Escrow instances from a fixed template code hash and keeps an
append-only, factory-owned list of every instance it created.

deploy_escrow(beneficiary, arbiter, endowment):
- salt = entropy from the host (block height, u32 little-endian, by default);
- instantiate the template with constructor input (beneficiary, arbiter), the
  salt, and `endowment` paid out of the factory's own balance;
- on any instantiation failure revert with InstantiationFailed, leaving the
  registry untouched;
- on success append the new address, emit EscrowDeployed{escrow, creator}
  with both fields as indexed topics, and return the address.

The factory is the deployer of record, so every escrow it creates has the
factory's address as its depositor.
"""
from __future__ import annotations

from typing import List

from contracts.errors import InstantiationFailed
from contracts.stdlib.codec import get_addr, list_append, list_items, put_addr
from execution.errors import ExecError
from execution.runtime.contracts import Contract, constructor, message

# ---- storage keys ------------------------------------------------------------

K_TEMPLATE = b"factory:template"
K_ESCROWS = b"factory:escrows"         # list prefix

EV_ESCROW_DEPLOYED = "EscrowDeployed"


class EscrowFactory(Contract):

    @constructor
    def new(self, template: bytes) -> None:
        put_addr(self.env(), K_TEMPLATE, bytes(template))

    @message(payable=True)
    def deploy_escrow(self, beneficiary: bytes, arbiter: bytes, endowment: int) -> bytes:
        env = self.env()
        template = get_addr(env, K_TEMPLATE)
        try:
            escrow = env.instantiate(
                template,
                (bytes(beneficiary), bytes(arbiter)),
                endowment=endowment,
                salt=env.entropy(),
            )
        except ExecError as e:
            raise InstantiationFailed(data={"cause": e.to_dict()}) from e

        list_append(env, K_ESCROWS, escrow)
        creator = env.caller()
        env.emit_event(
            EV_ESCROW_DEPLOYED,
            topics=[escrow, creator],
            fields={"escrow": escrow, "creator": creator},
        )
        return escrow

    @message(mutates=False)
    def get_escrows(self) -> List[bytes]:
        return list_items(self.env(), K_ESCROWS)

    @message(mutates=False)
    def get_template(self) -> bytes:
        return get_addr(self.env(), K_TEMPLATE)


__all__ = ["EscrowFactory", "EV_ESCROW_DEPLOYED"]
