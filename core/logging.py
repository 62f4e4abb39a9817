"""
core.logging
------------

Structured logging for the escrow host and `escrowctl`.

Two renderings share one record model:

* JSON lines (one object per record) for pipes, files and CI;
* a compact, optionally colored text line for terminals.

Every record is enriched with the fields bound in the current context
(`trace_id`, `chain_id`, `height`, `contract`, ...), kept in a ContextVar so
nested calls and threads each see their own view. Values are made printable on
the way in: bytes become 0x-hex, dataclasses become dicts.

    from core import logging as clog

    clog.configure(json=False, level="INFO")
    with clog.trace_scope():
        clog.bind(height=12)
        logging.getLogger(__name__).info("escrow deployed", extra={"escrow": addr})

Library modules only call `logging.getLogger(__name__)`; the handlers
installed by `configure()` do the formatting and context injection.
"""

from __future__ import annotations

import datetime as _dt
import json as _json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Optional, Tuple

FORMAT_ENV = "ESCROW_LOG_FORMAT"

_FIELDS: ContextVar[Dict[str, Any]] = ContextVar("escrow_log_fields", default={})

# Context keys shown (in this order) in the text rendering.
TEXT_CONTEXT_KEYS = ("trace_id", "chain_id", "height", "component", "contract")

# Attributes every LogRecord has; anything else on a record came from `extra=`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


# ---- value coercion ----------------------------------------------------------


def _plain(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if isinstance(v, dict):
        return {str(k): _plain(x) for k, x in v.items()}
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_plain(x) for x in v]
    if is_dataclass(v) and not isinstance(v, type):
        return _plain(asdict(v))
    return str(v)


# ---- context -----------------------------------------------------------------


def context() -> Dict[str, Any]:
    """Copy of the fields bound in the current context."""
    return dict(_FIELDS.get())


def bind(**fields: Any) -> None:
    _FIELDS.set({**_FIELDS.get(), **{k: _plain(v) for k, v in fields.items()}})


def clear_context() -> None:
    _FIELDS.set({})


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """
    Run a block under a trace id, restoring the previous fields afterwards.

    Without an explicit id an already-bound one is reused, so a contract call
    made from inside another call logs under the outer call's trace.
    """
    saved = _FIELDS.get()
    tid = trace_id or saved.get("trace_id") or short_uuid()
    bind(trace_id=tid)
    try:
        yield tid
    finally:
        _FIELDS.set(saved)


# ---- formatters --------------------------------------------------------------


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _plain(v)
        for k, v in vars(record).items()
        if k not in _STANDARD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


def _traceback(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)).rstrip() if record.exc_info else ""


class JSONFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        doc: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **context(),
        }
        for k, v in _extras(record).items():
            doc.setdefault(k, v)
        tb = _traceback(record)
        if tb:
            doc["err"] = tb
        return _json.dumps(doc, separators=(",", ":"), default=str)


_COLORS = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1;35m",
}
_DIM = "\x1b[90m"
_RESET = "\x1b[0m"


class TextFormatter(logging.Formatter):
    """
    `ts | LEVEL | logger | trace_id=.. height=.. key=val | message`

    Colors are used only when the target stream is a terminal and NO_COLOR is
    unset.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        super().__init__()
        self._color = stream is not None and _is_tty(stream)

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{_RESET}" if self._color and text else text

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        parts = [f"{k}={ctx[k]}" for k in TEXT_CONTEXT_KEYS if ctx.get(k) is not None]
        parts += [f"{k}={v}" for k, v in _extras(record).items() if k not in ctx]

        line = " | ".join(
            s
            for s in (
                self._paint(_timestamp(record), _DIM),
                self._paint(f"{record.levelname:<5}", _COLORS.get(record.levelno, "")),
                record.name,
                " ".join(parts),
                record.getMessage(),
            )
            if s
        )
        tb = _traceback(record)
        return f"{line}\n{tb}" if tb else line


# ---- setup -------------------------------------------------------------------


def _is_tty(stream: IO[str]) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and "NO_COLOR" not in os.environ


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def _wants_json(flag: Optional[bool], stream: IO[str]) -> bool:
    if flag is not None:
        return flag
    env = os.environ.get(FORMAT_ENV, "").strip().lower()
    if env in ("json", "text"):
        return env == "json"
    return not _is_tty(stream)


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "INFO",
    stream: Optional[IO[str]] = None,
    file_path: Optional[Path | str] = None,
) -> None:
    """
    Replace the root logger's handlers.

    json      : force JSON (True) or text (False); None consults
                ESCROW_LOG_FORMAT and falls back to JSON off a terminal
    level     : minimum level, by name or number
    stream    : console stream, default the current sys.stderr
    file_path : optional file that also receives JSON lines
    """
    out = stream if stream is not None else sys.stderr
    lvl = _level(level)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(lvl)

    console = logging.StreamHandler(out)
    console.setFormatter(JSONFormatter() if _wants_json(json, out) else TextFormatter(out))
    root.addHandler(console)

    if file_path:
        path = Path(file_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def configure_from_config(cfg: Any, *, stream: Optional[IO[str]] = None) -> None:
    """Apply `log_level` / `log_format` of a HostConfig and bind its chain id."""
    bind(chain_id=getattr(cfg, "chain_id", None))
    fmt = str(getattr(cfg, "log_format", "") or "").lower()
    configure(
        json={"json": True, "text": False}.get(fmt),
        level=getattr(cfg, "log_level", "INFO"),
        stream=stream,
    )


class ContextAdapter(logging.LoggerAdapter):
    """Adapter whose constant fields are merged under each call's `extra=`."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_fields(logger: logging.Logger, **fields: Any) -> ContextAdapter:
    return ContextAdapter(logger, {k: _plain(v) for k, v in fields.items()})


__all__ = [
    "ContextAdapter",
    "JSONFormatter",
    "TextFormatter",
    "bind",
    "clear_context",
    "configure",
    "configure_from_config",
    "context",
    "short_uuid",
    "trace_scope",
    "with_fields",
]
