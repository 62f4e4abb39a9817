# -*- coding: utf-8 -*-
"""
EscrowFactory template: deterministic deployment, the append-only registry,
EscrowDeployed events, and instantiation failures.
"""
from __future__ import annotations

import cbor2
import pytest

from contracts.errors import InstantiationFailed
from contracts.templates.escrow_factory.contract import EV_ESCROW_DEPLOYED
from execution.runtime.contracts import derive_address
from execution.runtime.event_sink import event_topic
from execution.runtime.host import Host

from .conftest import GENESIS_BALANCE, FixedEntropy


def _deploy(host, factory, parties, *, caller=None, endowment=0, value=None):
    return host.call(
        factory,
        "deploy_escrow",
        parties.bob,
        parties.carol,
        endowment,
        caller=caller or parties.alice,
        value=endowment if value is None else value,
    )


def test_new_factory_is_empty(host, codes, new_factory):
    factory = new_factory()
    assert host.query(factory, "get_escrows") == []
    assert host.query(factory, "get_template") == codes["escrow"]


def test_deploy_registers_instance(host, parties, new_factory):
    factory = new_factory()
    esc = _deploy(host, factory, parties, endowment=10)

    assert host.query(factory, "get_escrows") == [esc]
    assert host.balance_of(esc) == 10
    assert host.balance_of(factory) == 0
    assert host.query(esc, "get_status") == (0, False)


def test_factory_is_depositor_of_record(host, parties, new_factory):
    factory = new_factory()
    esc = _deploy(host, factory, parties)
    assert host.query(esc, "get_parties") == (factory, parties.bob, parties.carol)


@pytest.mark.parametrize("n", [1, 2, 5])
def test_registry_grows_in_call_order(host, parties, new_factory, n):
    factory = new_factory()
    deployed = []
    for _ in range(n):
        deployed.append(_deploy(host, factory, parties))
        host.advance_block()
    assert host.query(factory, "get_escrows") == deployed
    assert len(set(deployed)) == n


def test_address_is_derived_from_factory_template_args_and_height(host, codes, parties, new_factory):
    factory = new_factory()
    host.advance_block(7)
    esc = _deploy(host, factory, parties)
    expected = derive_address(
        factory,
        codes["escrow"],
        (parties.bob, parties.carol),
        (7).to_bytes(4, "little"),
        length=host.config.address_len,
    )
    assert esc == expected


def test_same_block_same_args_collides(host, parties, new_factory):
    factory = new_factory()
    first = _deploy(host, factory, parties)

    with pytest.raises(InstantiationFailed) as ei:
        _deploy(host, factory, parties)
    assert ei.value.data["cause"]["code"] == "STATE_CONFLICT"

    assert host.query(factory, "get_escrows") == [first]


def test_distinct_args_in_same_block_do_not_collide(host, parties, new_factory):
    factory = new_factory()
    a = _deploy(host, factory, parties)
    b = host.call(factory, "deploy_escrow", parties.carol, parties.bob, 0, caller=parties.alice)
    assert a != b
    assert host.query(factory, "get_escrows") == [a, b]


def test_injected_entropy_drives_the_salt(cfg, parties):
    from contracts.templates import register_all
    from execution.types.address import named_account

    entropy = FixedEntropy(b"salt")
    host = Host(config=cfg, entropy=entropy)
    codes = register_all(host)
    alice = named_account("alice")
    host.set_balance(alice, 100)
    factory = host.instantiate(codes["escrow_factory"], codes["escrow"], caller=alice)

    deployed = []
    for i in range(3):
        entropy.value = i.to_bytes(4, "little")
        deployed.append(host.call(factory, "deploy_escrow", parties.bob, parties.carol, 0, caller=alice))

    # block height never moved; distinct entropy alone keeps addresses distinct
    assert host.block.height == 0
    assert len(set(deployed)) == 3
    assert host.query(factory, "get_escrows") == deployed
    assert entropy.calls == 3


def test_endowment_comes_from_factory_balance(host, parties, new_factory):
    factory = new_factory(endowment=100)
    assert host.balance_of(factory) == 100

    esc = _deploy(host, factory, parties, endowment=30, value=0)
    assert host.balance_of(esc) == 30
    assert host.balance_of(factory) == 70
    assert host.balance_of(parties.alice) == GENESIS_BALANCE


def test_attached_value_is_not_validated_against_endowment(host, parties, new_factory):
    factory = new_factory()
    esc = _deploy(host, factory, parties, endowment=0, value=40)
    assert host.balance_of(factory) == 40
    assert host.balance_of(esc) == 0


def test_insufficient_endowment_is_instantiation_failure(host, parties, new_factory):
    factory = new_factory()

    with pytest.raises(InstantiationFailed) as ei:
        _deploy(host, factory, parties, endowment=10, value=5)
    assert ei.value.data["cause"]["code"] == "INSUFFICIENT_BALANCE"

    assert host.query(factory, "get_escrows") == []
    assert host.balance_of(parties.alice) == GENESIS_BALANCE
    assert host.balance_of(factory) == 0
    assert host.events.all() == []


def test_negative_endowment_is_instantiation_failure(host, parties, new_factory):
    factory = new_factory()

    with pytest.raises(InstantiationFailed) as ei:
        _deploy(host, factory, parties, endowment=-1, value=0)
    assert ei.value.data["cause"]["code"] == "INVALID_VALUE"
    assert host.query(factory, "get_escrows") == []
    assert host.events.all() == []


def test_unregistered_template_is_instantiation_failure(host, codes, parties):
    factory = host.instantiate(codes["escrow_factory"], b"\x42" * 32, caller=parties.alice)
    with pytest.raises(InstantiationFailed):
        _deploy(host, factory, parties)
    assert host.query(factory, "get_escrows") == []


def test_deployed_escrow_is_fully_functional(host, parties, new_factory):
    factory = new_factory()
    esc = _deploy(host, factory, parties, endowment=10)

    # the arbiter can settle; the endowment is not part of `deposited`
    host.call(esc, "release", caller=parties.carol)
    assert host.query(esc, "get_status") == (0, True)
    assert host.balance_of(esc) == 10


# ---------------------------- events -------------------------------------------


def test_deploy_emits_escrow_deployed(host, parties, new_factory):
    factory = new_factory()
    esc = _deploy(host, factory, parties)

    evs = host.events.filter(address=factory)
    assert len(evs) == 1
    ev = evs[0]
    assert ev.topics == (event_topic(EV_ESCROW_DEPLOYED), esc, parties.alice)
    assert cbor2.loads(ev.data) == {"escrow": esc, "creator": parties.alice}


def test_events_are_filterable_by_instance_and_creator(host, parties, new_factory):
    factory = new_factory()
    t0 = event_topic(EV_ESCROW_DEPLOYED)
    e1 = _deploy(host, factory, parties, caller=parties.alice)
    host.advance_block()
    e2 = _deploy(host, factory, parties, caller=parties.bob)

    by_alice = host.events.filter(topics=[t0, None, parties.alice])
    by_bob = host.events.filter(topics=[t0, None, parties.bob])
    assert [ev.topics[1] for ev in by_alice] == [e1]
    assert [ev.topics[1] for ev in by_bob] == [e2]

    by_instance = host.events.filter(topics=[t0, e2])
    assert len(by_instance) == 1 and by_instance[0].topics[2] == parties.bob

    assert host.events.filter(topics=[t0, None, None, None]) == []


def test_execute_returns_deploy_logs(host, parties, new_factory):
    factory = new_factory()
    res = host.execute(factory, "deploy_escrow", parties.bob, parties.carol, 0, caller=parties.alice)
    assert res.is_success
    assert [ev.address for ev in res.logs] == [factory]
    assert res.to_dict()["return"] == "0x" + res.return_value.hex()
