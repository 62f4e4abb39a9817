# -*- coding: utf-8 -*-
"""
contracts.tests.conftest
========================

Pytest fixtures for the contract templates.

Every test gets a fresh in-memory `Host` built from an explicit (empty)
environment mapping, so local ESCROW_* variables never leak into results.
Principals are stable `named_account` addresses, funded at genesis.

Usage (inside a test file):
    def test_flow(host, codes, parties, new_escrow):
        esc = new_escrow()
        host.call(esc, "deposit", caller=parties.alice, value=100)
        assert host.query(esc, "get_status") == (100, False)
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Dict, Optional

import pytest

from contracts.templates import register_all
from execution.config import HostConfig, load_config
from execution.runtime.host import Host
from execution.types.address import named_account
from execution.types.context import BlockContext

GENESIS_BALANCE = 1_000_000


class FixedEntropy:
    """Entropy source returning whatever `value` is set to (default: 4 zero bytes)."""

    def __init__(self, value: bytes = b"\x00\x00\x00\x00") -> None:
        self.value = value
        self.calls = 0

    def __call__(self, block: BlockContext) -> bytes:
        self.calls += 1
        return self.value


@pytest.fixture
def cfg() -> HostConfig:
    return load_config(env={})


@pytest.fixture
def host(cfg: HostConfig) -> Host:
    return Host(config=cfg)


@pytest.fixture
def codes(host: Host) -> Dict[str, bytes]:
    return register_all(host)


@pytest.fixture
def parties(host: Host) -> SimpleNamespace:
    """alice (depositor), bob (beneficiary), carol (arbiter), mallory (outsider)."""
    ns = SimpleNamespace(
        alice=named_account("alice"),
        bob=named_account("bob"),
        carol=named_account("carol"),
        mallory=named_account("mallory"),
    )
    for addr in vars(ns).values():
        host.set_balance(addr, GENESIS_BALANCE)
    return ns


@pytest.fixture
def new_escrow(host: Host, codes: Dict[str, bytes], parties: SimpleNamespace) -> Callable[..., bytes]:
    """Instantiate an Escrow; defaults to alice/bob/carol with a unique salt per call."""
    counter = {"n": 0}

    def _make(
        depositor: Optional[bytes] = None,
        beneficiary: Optional[bytes] = None,
        arbiter: Optional[bytes] = None,
        *,
        endowment: int = 0,
    ) -> bytes:
        counter["n"] += 1
        return host.instantiate(
            codes["escrow"],
            beneficiary or parties.bob,
            arbiter or parties.carol,
            caller=depositor or parties.alice,
            value=endowment,
            salt=counter["n"].to_bytes(4, "little"),
        )

    return _make


@pytest.fixture
def new_factory(host: Host, codes: Dict[str, bytes], parties: SimpleNamespace) -> Callable[..., bytes]:
    def _make(deployer: Optional[bytes] = None, *, endowment: int = 0) -> bytes:
        return host.instantiate(
            codes["escrow_factory"],
            codes["escrow"],
            caller=deployer or parties.mallory,
            value=endowment,
        )

    return _make
