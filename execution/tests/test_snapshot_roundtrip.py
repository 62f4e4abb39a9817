import cbor2
import pytest

from execution.config import load_config
from execution.runtime.contracts import Contract, constructor, message
from execution.runtime.host import Host
from execution.state.snapshots import SNAPSHOT_VERSION, export_state

ALICE = b"\xaa" * 32
K = b"note:text"


class Note(Contract):
    @constructor
    def new(self, text: bytes) -> None:
        self.env().storage_set(K, text)

    @message
    def write(self, text: bytes) -> None:
        env = self.env()
        env.storage_set(K, text)
        env.emit_event("Written", topics=[env.caller()], fields={"text": text})

    @message(mutates=False)
    def read(self) -> bytes:
        return self.env().storage_get(K)


def mk_host() -> Host:
    host = Host(config=load_config(env={}))
    host.register_template(Note)
    return host


@pytest.fixture
def populated() -> Host:
    host = mk_host()
    host.set_balance(ALICE, 500)
    code = host.register_template(Note)
    addr = host.instantiate(code, b"hello", caller=ALICE, value=20)
    host.call(addr, "write", b"world", caller=ALICE)
    host.advance_block(4)
    host.note_addr = addr  # type: ignore[attr-defined]
    return host


def test_roundtrip_restores_everything(populated):
    blob = populated.export_state()
    fresh = mk_host()
    fresh.import_state(blob)

    addr = populated.note_addr
    assert fresh.block == populated.block
    assert fresh.balance_of(ALICE) == 480
    assert fresh.balance_of(addr) == 20
    assert fresh.query(addr, "read") == b"world"
    assert [e.to_dict() for e in fresh.events.all()] == [e.to_dict() for e in populated.events.all()]

    # the restored host keeps working and re-exports identically
    assert fresh.export_state() == blob
    fresh.call(addr, "write", b"again", caller=ALICE)
    assert fresh.query(addr, "read") == b"again"


def test_export_is_canonical_cbor(populated):
    doc = cbor2.loads(populated.export_state())
    assert doc["v"] == SNAPSHOT_VERSION
    assert doc["block"]["height"] == 4
    addrs = [a for a, _, _ in doc["accounts"]]
    assert addrs == sorted(addrs)


def test_import_rejects_unknown_template(populated):
    blob = populated.export_state()
    bare = Host(config=load_config(env={}))
    with pytest.raises(ValueError, match="unknown contract template"):
        bare.import_state(blob)


@pytest.mark.parametrize(
    "blob",
    [
        b"\xff\xfe",
        cbor2.dumps([1, 2, 3]),
        cbor2.dumps({"v": 99}),
        cbor2.dumps({"v": SNAPSHOT_VERSION, "block": {"height": 0}}),
    ],
)
def test_import_rejects_malformed(blob):
    with pytest.raises(ValueError):
        mk_host().import_state(blob)


def test_export_refused_mid_call():
    host = mk_host()
    host.journal.begin()
    with pytest.raises(RuntimeError):
        export_state(host)
