# -*- coding: utf-8 -*-
"""
contracts.tools.cli
-------------------

`escrowctl` — drive Escrow and EscrowFactory contracts on a local host whose
state is persisted in a CBOR snapshot file between invocations.

Principals are given either as 0x-hex account ids or as plain names; a name
maps to a stable address (sha3 of the name), so `--caller alice` always means
the same account. Results print as JSON. Contract or host errors print
`{"error": {...}}` and exit with code 1.

Examples
--------
# fresh state with two funded accounts
escrowctl init --fund alice=1000 --fund bob=0

# escrow owned by alice, paying bob, arbitrated by carol
escrowctl new-escrow --caller alice --beneficiary bob --arbiter carol
escrowctl deposit 0x<escrow> --caller alice --value 100
escrowctl release 0x<escrow> --caller carol
escrowctl status 0x<escrow>

# factory flow
escrowctl new-factory --caller deployer
escrowctl deploy 0x<factory> --caller alice --beneficiary bob --arbiter carol
escrowctl advance
escrowctl escrows 0x<factory>
escrowctl events --name EscrowDeployed --topic '*' --topic alice
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import cbor2
import typer

from contracts.templates import register_all
from contracts.tools import atomic_write_bytes, pretty_json, to_jsonable
from core import logging as clog
from execution.config import HostConfig, load_config
from execution.errors import ExecError
from execution.runtime.event_sink import event_topic
from execution.runtime.host import Host
from execution.state.accounts import Account
from execution.types.address import hex_to_bytes, parse_account, to_hash

log = logging.getLogger(__name__)

STATE_FILE_ENV = "ESCROW_STATE_FILE"
DEFAULT_STATE_PATH = Path("escrow-state.cbor")

app = typer.Typer(
    name="escrowctl",
    add_completion=False,
    no_args_is_help=True,
    help="Deploy and operate custodial escrows on a local, file-backed execution host.",
)


# -------------------- context --------------------


@app.callback()
def _configure(
    ctx: typer.Context,
    state_file: Path = typer.Option(
        DEFAULT_STATE_PATH,
        "--state-file",
        "-f",
        envvar=STATE_FILE_ENV,
        help="CBOR snapshot holding the host state.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override ESCROW_LOG_LEVEL."),
) -> None:
    overrides: Dict[str, Any] = {}
    if log_level:
        overrides["log_level"] = log_level
    try:
        cfg = load_config(overrides=overrides)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    clog.configure_from_config(cfg)
    ctx.obj = {"state_file": state_file, "config": cfg}


def _cfg(ctx: typer.Context) -> HostConfig:
    return ctx.obj["config"]


def _new_host(ctx: typer.Context) -> Host:
    host = Host(config=_cfg(ctx))
    register_all(host)
    return host


def _load_host(ctx: typer.Context) -> Host:
    path: Path = ctx.obj["state_file"]
    if not path.exists():
        _fail({"code": "NO_STATE", "message": f"state file {path} not found; run `escrowctl init` first"})
    host = _new_host(ctx)
    try:
        host.import_state(path.read_bytes())
    except ValueError as e:
        _fail({"code": "BAD_STATE", "message": str(e)})
    log.debug("state loaded", extra={"path": str(path), "height": host.block.height})
    return host


def _save_host(ctx: typer.Context, host: Host) -> None:
    atomic_write_bytes(ctx.obj["state_file"], host.export_state())


def _emit(obj: Any) -> None:
    typer.echo(pretty_json(obj))


def _fail(error: Dict[str, Any]) -> NoReturn:
    typer.echo(pretty_json({"error": error}))
    raise typer.Exit(code=1)


def _principal(ctx: typer.Context, value: str) -> bytes:
    try:
        return parse_account(value, length=_cfg(ctx).address_len)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _call(ctx: typer.Context, host: Host, target: str, msg: str, *args: Any, caller: str, value: int = 0) -> Any:
    res = host.execute(_principal(ctx, target), msg, *args, caller=_principal(ctx, caller), value=value)
    if not res.is_success:
        _fail(res.error or {"code": res.status.code, "message": "call failed"})
    _save_host(ctx, host)
    return res


# -------------------- chain / accounts --------------------


@app.command()
def init(
    ctx: typer.Context,
    fund: Optional[List[str]] = typer.Option(None, "--fund", help="NAME=AMOUNT genesis balance (repeatable)."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing state file."),
) -> None:
    """Create a fresh state file with registered templates and optional balances."""
    path: Path = ctx.obj["state_file"]
    if path.exists() and not force:
        _fail({"code": "STATE_EXISTS", "message": f"{path} already exists (use --force)"})
    host = Host(config=_cfg(ctx))
    codes = register_all(host)
    funded: Dict[str, int] = {}
    for item in fund or []:
        name, sep, amount = item.partition("=")
        if not sep:
            raise typer.BadParameter(f"--fund expects NAME=AMOUNT, got {item!r}")
        try:
            host.set_balance(_principal(ctx, name), int(amount, 0))
        except (ValueError, OverflowError) as e:
            raise typer.BadParameter(f"--fund {item!r}: {e}") from e
        funded[name] = int(amount, 0)
    _save_host(ctx, host)
    _emit({"state_file": str(path), "block": host.block.to_dict(), "funded": funded, "templates": codes})


@app.command()
def fund(
    ctx: typer.Context,
    principal: str = typer.Argument(..., help="Account to fund (0x-hex or name)."),
    amount: int = typer.Argument(..., min=0, help="New balance."),
) -> None:
    """Set an account balance (development helper)."""
    host = _load_host(ctx)
    addr = _principal(ctx, principal)
    try:
        host.set_balance(addr, amount)
    except OverflowError as e:
        _fail({"code": "OVERFLOW", "message": str(e)})
    _save_host(ctx, host)
    _emit({"address": addr, "balance": host.balance_of(addr)})


@app.command()
def balance(
    ctx: typer.Context,
    principal: str = typer.Argument(..., help="Account or contract (0x-hex or name)."),
) -> None:
    """Show an account's balance and whether it is a contract."""
    host = _load_host(ctx)
    addr = _principal(ctx, principal)
    acc = host.journal.get_account(addr) or Account()
    _emit({"address": addr, **acc.to_dict()})


@app.command()
def advance(
    ctx: typer.Context,
    blocks: int = typer.Argument(1, min=0, help="Number of blocks to advance."),
) -> None:
    """Advance the block height (changes the factory's deployment salt)."""
    host = _load_host(ctx)
    block = host.advance_block(blocks)
    _save_host(ctx, host)
    _emit(block.to_dict())


@app.command()
def events(
    ctx: typer.Context,
    address: Optional[str] = typer.Option(None, "--address", help="Emitting contract."),
    name: Optional[str] = typer.Option(None, "--name", help="Event name, e.g. EscrowDeployed."),
    topic: Optional[List[str]] = typer.Option(
        None, "--topic", help="Indexed field filter after the name, in order; '*' matches anything."
    ),
) -> None:
    """List events, optionally filtered by emitter, name and indexed fields."""
    host = _load_host(ctx)
    topics: List[Optional[bytes]] = []
    if name or topic:
        topics.append(event_topic(name) if name else None)
        for t in topic or []:
            topics.append(None if t == "*" else _principal(ctx, t))
    found = host.events.filter(
        address=_principal(ctx, address) if address else None,
        topics=topics or None,
    )
    out = []
    for ev in found:
        try:
            fields = cbor2.loads(ev.data) if ev.data else {}
        except (cbor2.CBORDecodeError, ValueError):
            fields = {"raw": ev.data}
        out.append({**ev.to_dict(), "fields": to_jsonable(fields)})
    _emit(out)


# -------------------- escrow --------------------


@app.command("new-escrow")
def new_escrow(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Depositor (instantiating account)."),
    beneficiary: str = typer.Option(..., "--beneficiary"),
    arbiter: str = typer.Option(..., "--arbiter"),
    endowment: int = typer.Option(0, "--endowment", min=0, help="Value moved into the new escrow's account."),
    salt: Optional[str] = typer.Option(None, "--salt", help="Hex salt (default: host entropy)."),
) -> None:
    """Instantiate an Escrow directly; the caller becomes the depositor."""
    host = _load_host(ctx)
    code = register_all(host)["escrow"]
    try:
        addr = host.instantiate(
            code,
            _principal(ctx, beneficiary),
            _principal(ctx, arbiter),
            caller=_principal(ctx, caller),
            value=endowment,
            salt=hex_to_bytes(salt) if salt else host.entropy(host.block),
        )
    except ExecError as e:
        _fail(e.to_dict())
    _save_host(ctx, host)
    _emit({"escrow": addr})


@app.command()
def deposit(
    ctx: typer.Context,
    escrow: str = typer.Argument(..., help="Escrow address."),
    caller: str = typer.Option(..., "--caller"),
    value: int = typer.Option(..., "--value", min=0, help="Amount to deposit."),
) -> None:
    """Deposit funds (depositor only)."""
    host = _load_host(ctx)
    _emit(_call(ctx, host, escrow, "deposit", caller=caller, value=value).to_dict())


@app.command()
def release(
    ctx: typer.Context,
    escrow: str = typer.Argument(..., help="Escrow address."),
    caller: str = typer.Option(..., "--caller"),
) -> None:
    """Pay the deposit to the beneficiary (arbiter only)."""
    host = _load_host(ctx)
    _emit(_call(ctx, host, escrow, "release", caller=caller).to_dict())


@app.command()
def refund(
    ctx: typer.Context,
    escrow: str = typer.Argument(..., help="Escrow address."),
    caller: str = typer.Option(..., "--caller"),
) -> None:
    """Return the deposit to the depositor (arbiter only)."""
    host = _load_host(ctx)
    _emit(_call(ctx, host, escrow, "refund", caller=caller).to_dict())


def _query(ctx: typer.Context, target: str, msg: str) -> Any:
    host = _load_host(ctx)
    try:
        return host.query(_principal(ctx, target), msg)
    except ExecError as e:
        _fail(e.to_dict())


@app.command()
def status(ctx: typer.Context, escrow: str = typer.Argument(..., help="Escrow address.")) -> None:
    """Show (deposited, released)."""
    deposited, released = _query(ctx, escrow, "get_status")
    _emit({"deposited": deposited, "released": released})


@app.command()
def parties(ctx: typer.Context, escrow: str = typer.Argument(..., help="Escrow address.")) -> None:
    """Show depositor, beneficiary and arbiter."""
    depositor, beneficiary, arbiter = _query(ctx, escrow, "get_parties")
    _emit({"depositor": depositor, "beneficiary": beneficiary, "arbiter": arbiter})


# -------------------- factory --------------------


@app.command("new-factory")
def new_factory(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Deploying account."),
    endowment: int = typer.Option(0, "--endowment", min=0, help="Initial factory balance from the caller."),
    template: Optional[str] = typer.Option(None, "--template", help="0x code hash to deploy (default: Escrow)."),
) -> None:
    """Instantiate an EscrowFactory bound to an escrow template."""
    host = _load_host(ctx)
    codes = register_all(host)
    try:
        template_hash = to_hash(template) if template else codes["escrow"]
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    try:
        addr = host.instantiate(
            codes["escrow_factory"],
            template_hash,
            caller=_principal(ctx, caller),
            value=endowment,
            salt=host.entropy(host.block),
        )
    except ExecError as e:
        _fail(e.to_dict())
    _save_host(ctx, host)
    _emit({"factory": addr, "template": template_hash})


@app.command()
def deploy(
    ctx: typer.Context,
    factory: str = typer.Argument(..., help="Factory address."),
    caller: str = typer.Option(..., "--caller"),
    beneficiary: str = typer.Option(..., "--beneficiary"),
    arbiter: str = typer.Option(..., "--arbiter"),
    endowment: int = typer.Option(0, "--endowment", min=0, help="Value the factory moves into the escrow."),
    value: int = typer.Option(0, "--value", min=0, help="Value attached to the deploy call."),
) -> None:
    """Deploy an Escrow through the factory."""
    host = _load_host(ctx)
    res = _call(
        ctx,
        host,
        factory,
        "deploy_escrow",
        _principal(ctx, beneficiary),
        _principal(ctx, arbiter),
        endowment,
        caller=caller,
        value=value,
    )
    out = res.to_dict()
    out["escrow"] = out["return"]
    _emit(out)


@app.command()
def escrows(ctx: typer.Context, factory: str = typer.Argument(..., help="Factory address.")) -> None:
    """List escrows deployed by a factory, oldest first."""
    _emit(_query(ctx, factory, "get_escrows"))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
