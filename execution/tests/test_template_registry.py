import pytest

from execution.errors import InvalidAccess
from execution.runtime.contracts import (
    Contract,
    TemplateRegistry,
    constructor,
    constructor_of,
    derive_address,
    message,
    messages_of,
    template_hash,
)


class Plain(Contract):
    @constructor
    def new(self, x: int) -> None:
        pass

    @message(payable=True)
    def put(self) -> None:
        pass

    @message(mutates=False)
    def get(self) -> int:
        return 0

    def helper(self) -> None:
        pass


class NoCtor(Contract):
    @message
    def run(self) -> None:
        pass


def test_message_specs():
    specs = messages_of(Plain)
    assert set(specs) == {"put", "get"}
    assert specs["put"].payable and specs["put"].mutates
    assert not specs["get"].payable and not specs["get"].mutates
    assert constructor_of(Plain).name == "new"


def test_read_only_payable_is_rejected():
    with pytest.raises(ValueError):

        @message(payable=True, mutates=False)
        def bad(self):
            pass


def test_registry_is_idempotent_and_content_addressed():
    reg = TemplateRegistry()
    h1 = reg.register(Plain)
    h2 = reg.register(Plain)
    assert h1 == h2 == template_hash(Plain)
    assert len(h1) == 32
    assert len(reg) == 1
    assert reg.get(h1) is Plain
    assert reg.has(h1) and not reg.has(b"\x00" * 32)


def test_registry_rejects_bad_templates():
    reg = TemplateRegistry()
    with pytest.raises(ValueError):
        reg.register(NoCtor)
    with pytest.raises(TypeError):
        reg.register(object)  # type: ignore[arg-type]
    with pytest.raises(InvalidAccess):
        reg.get(b"\x01" * 32)


class Other(Contract):
    @constructor
    def new(self) -> None:
        pass


def test_hashes_are_sorted():
    reg = TemplateRegistry()
    hs = [reg.register(Plain), reg.register(Other)]
    assert hs[0] != hs[1]
    assert list(reg.hashes()) == sorted(hs)


def test_derive_address_is_deterministic():
    dep, code = b"\x01" * 32, b"\x02" * 32
    a = derive_address(dep, code, [b"x", b"y"], b"\x00\x00\x00\x00")
    assert a == derive_address(dep, code, [b"x", b"y"], b"\x00\x00\x00\x00")
    assert len(a) == 32


@pytest.mark.parametrize(
    "change",
    [
        {"deployer": b"\x09" * 32},
        {"code_hash": b"\x09" * 32},
        {"args": [b"y", b"x"]},
        {"salt": b"\x01\x00\x00\x00"},
    ],
)
def test_derive_address_depends_on_every_input(change):
    base = dict(deployer=b"\x01" * 32, code_hash=b"\x02" * 32, args=[b"x", b"y"], salt=b"\x00\x00\x00\x00")
    a = derive_address(**base)
    b = derive_address(**{**base, **change})
    assert a != b


@pytest.mark.parametrize("length", [8, 20, 64])
def test_derive_address_length(length):
    assert len(derive_address(b"d", b"c", [], b"", length=length)) == length
