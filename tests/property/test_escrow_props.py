# -*- coding: utf-8 -*-
"""
Property tests for the Escrow state machine.

- role gating: any caller other than the depositor is refused, nothing moves
- settlement: over any sequence of calls `released` flips at most once and a
  second settlement always fails with AlreadyReleased
- accumulation: `deposited` is the exact sum of accepted deposits, and a
  deposit that would pass the u128 cap fails with Overflow
- parties never change
"""
from __future__ import annotations

from types import SimpleNamespace

import pytest
from hypothesis import given, settings, strategies as st

from contracts.errors import AlreadyReleased, Overflow, Unauthorized
from contracts.templates import register_all
from execution.config import load_config
from execution.runtime.host import Host
from execution.types.address import named_account
from execution.types.balance import balance_max

FUNDS = 10**9
CAP = balance_max(128)

ALICE = named_account("alice")
NOT_ALICE = st.binary(min_size=32, max_size=32).filter(lambda a: a != ALICE)


def _setup(funds: int = FUNDS) -> SimpleNamespace:
    host = Host(config=load_config(env={}))
    codes = register_all(host)
    p = SimpleNamespace(
        host=host,
        alice=ALICE,
        bob=named_account("bob"),
        carol=named_account("carol"),
    )
    for addr in (p.alice, p.bob, p.carol):
        host.set_balance(addr, funds)
    p.esc = host.instantiate(codes["escrow"], p.bob, p.carol, caller=p.alice)
    return p


@given(NOT_ALICE, st.integers(min_value=1, max_value=1_000))
@settings(max_examples=80, deadline=None)
def test_any_non_depositor_is_refused(who: bytes, amount: int):
    p = _setup()
    host = p.host
    host.call(p.esc, "deposit", caller=p.alice, value=7)
    host.set_balance(who, amount)

    with pytest.raises(Unauthorized):
        host.call(p.esc, "deposit", caller=who, value=amount)

    assert host.query(p.esc, "get_status") == (7, False)
    assert host.balance_of(who) == amount
    assert host.balance_of(p.esc) == 7


OPS = st.lists(
    st.one_of(
        st.tuples(st.just("deposit"), st.integers(min_value=1, max_value=1_000)),
        st.tuples(st.sampled_from(["release", "refund"]), st.sampled_from(["carol", "bob", "alice"])),
    ),
    min_size=1,
    max_size=12,
)


@given(OPS)
@settings(max_examples=100, deadline=None)
def test_settlement_is_exclusive_over_any_call_sequence(ops):
    p = _setup()
    host = p.host
    parties = (p.alice, p.bob, p.carol)
    deposited, released, flips = 0, False, 0

    for op, arg in ops:
        if op == "deposit":
            if released:
                with pytest.raises(AlreadyReleased):
                    host.call(p.esc, "deposit", caller=p.alice, value=arg)
            else:
                host.call(p.esc, "deposit", caller=p.alice, value=arg)
                deposited += arg
        elif arg != "carol":
            with pytest.raises(Unauthorized):
                host.call(p.esc, op, caller=getattr(p, arg))
        elif released:
            before = (host.balance_of(p.alice), host.balance_of(p.bob))
            with pytest.raises(AlreadyReleased):
                host.call(p.esc, op, caller=p.carol)
            assert (host.balance_of(p.alice), host.balance_of(p.bob)) == before
        else:
            host.call(p.esc, op, caller=p.carol)
            released, flips = True, flips + 1
            assert host.balance_of(p.esc) == 0

        assert host.query(p.esc, "get_status") == (deposited, released)
        assert host.query(p.esc, "get_parties") == parties

    assert flips <= 1


NEAR_CAP = st.integers(min_value=CAP - 2**16, max_value=CAP)
SMALL = st.integers(min_value=1, max_value=2**64)


@given(st.lists(st.one_of(NEAR_CAP, SMALL), min_size=1, max_size=6))
@settings(max_examples=100, deadline=None)
def test_deposited_is_exact_sum_or_overflow(amounts):
    total = sum(amounts)
    p = _setup(funds=total)
    host = p.host
    expected = 0

    for a in amounts:
        if expected + a > CAP:
            with pytest.raises(Overflow):
                host.call(p.esc, "deposit", caller=p.alice, value=a)
        else:
            host.call(p.esc, "deposit", caller=p.alice, value=a)
            expected += a
        assert host.query(p.esc, "get_status") == (expected, False)

    assert host.balance_of(p.esc) == expected
    assert host.balance_of(p.alice) == total - expected
