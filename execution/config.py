"""
execution.config — runtime configuration for the escrow execution host.

This module centralizes knobs for:
  • Chain identity (chain id stamped into the block context)
  • Principal and amount shapes (address length, contract balance width)
  • Limits (maximum nested call depth)
  • Block production (seconds added to the timestamp per advanced block)
  • Logging (level and output format for tools)

Configuration may be provided via environment variables. Safe defaults are chosen so a
local developer run works out of the box.

Environment variables (all optional):
  ESCROW_CHAIN_ID          -> integer >= 1 (default: 1337)
  ESCROW_ADDRESS_LEN       -> principal size in bytes, clamped to [8, 64] (default: 32)
  ESCROW_BALANCE_BITS      -> width of contract amounts, clamped to [32, 256] (default: 128)
  ESCROW_MAX_CALL_DEPTH    -> nested call limit, clamped to [1, 1024] (default: 64)
  ESCROW_BLOCK_TIME        -> seconds per block, >= 0 (default: 6)
  ESCROW_LOG_LEVEL         -> DEBUG/INFO/WARNING/ERROR (default: INFO)
  ESCROW_LOG_FORMAT        -> text|json (default: text)

Programmatic usage:
    from execution.config import get_config
    cfg = get_config()
    host = Host(config=cfg)

Note: This module does not perform any I/O beyond reading env vars.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from typing import Dict, Mapping, Optional, Union

# ----------------------------- helpers -------------------------------------

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("text", "json")


def _int_env(value: Optional[str], default: int) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value.strip(), 0)
    except ValueError:
        raise ValueError(f"invalid integer value: {value!r}") from None


def _clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


# ------------------------------ dataclass -----------------------------------


@dataclass(frozen=True)
class HostConfig:
    chain_id: int = 1337
    address_len: int = 32
    balance_bits: int = 128
    max_call_depth: int = 64
    block_time: int = 6
    log_level: str = "INFO"
    log_format: str = "text"

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)

    def with_overrides(self, **kw: object) -> "HostConfig":
        """Return a validated copy with the given fields replaced."""
        return _validate(replace(self, **kw))


# ------------------------------ loader --------------------------------------


def _validate(cfg: HostConfig) -> HostConfig:
    if cfg.chain_id <= 0:
        raise ValueError("chain_id must be >= 1")
    if cfg.block_time < 0:
        raise ValueError("block_time must be >= 0")
    level = cfg.log_level.upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"log_level must be one of {_LOG_LEVELS}")
    fmt = cfg.log_format.lower()
    if fmt not in _LOG_FORMATS:
        raise ValueError(f"log_format must be one of {_LOG_FORMATS}")
    return replace(
        cfg,
        address_len=_clamp(cfg.address_len, 8, 64),
        balance_bits=_clamp(cfg.balance_bits, 32, 256),
        max_call_depth=_clamp(cfg.max_call_depth, 1, 1024),
        log_level=level,
        log_format=fmt,
    )


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int]]] = None,
) -> HostConfig:
    """
    Build a HostConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides keyed by HostConfig field name
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})
    d = HostConfig()

    cfg = HostConfig(
        chain_id=int(overrides.get("chain_id", _int_env(env.get("ESCROW_CHAIN_ID"), d.chain_id))),
        address_len=int(overrides.get("address_len", _int_env(env.get("ESCROW_ADDRESS_LEN"), d.address_len))),
        balance_bits=int(overrides.get("balance_bits", _int_env(env.get("ESCROW_BALANCE_BITS"), d.balance_bits))),
        max_call_depth=int(
            overrides.get("max_call_depth", _int_env(env.get("ESCROW_MAX_CALL_DEPTH"), d.max_call_depth))
        ),
        block_time=int(overrides.get("block_time", _int_env(env.get("ESCROW_BLOCK_TIME"), d.block_time))),
        log_level=str(overrides.get("log_level", env.get("ESCROW_LOG_LEVEL") or d.log_level)),
        log_format=str(overrides.get("log_format", env.get("ESCROW_LOG_FORMAT") or d.log_format)),
    )
    return _validate(cfg)


@lru_cache(maxsize=1)
def get_config() -> HostConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


def summary(cfg: Optional[HostConfig] = None) -> str:
    """One-line summary of the active host knobs."""
    cfg = cfg or get_config()
    return (
        "host{"
        f"chain={cfg.chain_id}, addr={cfg.address_len}B, balance=u{cfg.balance_bits}, "
        f"depth={cfg.max_call_depth}, block_time={cfg.block_time}s, "
        f"log={cfg.log_level}/{cfg.log_format}"
        "}"
    )


__all__ = [
    "HostConfig",
    "load_config",
    "get_config",
    "summary",
]
