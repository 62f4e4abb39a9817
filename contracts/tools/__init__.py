# -*- coding: utf-8 -*-
"""
Helpers shared by the `escrowctl` command line: JSON rendering of host values
and crash-safe writes of the state snapshot.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, "os.PathLike[str]"]

__all__ = [
    "to_jsonable",
    "pretty_json",
    "ensure_dir",
    "atomic_write_bytes",
]


def to_jsonable(obj: Any) -> Any:
    """Account ids, keys and hashes (bytes) print as 0x-hex; tuples as lists."""
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return list(map(to_jsonable, obj))
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return "0x" + bytes(obj).hex()
    return obj


def pretty_json(obj: Any) -> str:
    return json.dumps(to_jsonable(obj), indent=2, sort_keys=True, ensure_ascii=False)


def ensure_dir(p: PathLike) -> Path:
    path = Path(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_bytes(path: PathLike, data: bytes) -> Path:
    """
    Replace `path` with `data` so readers see either the old snapshot or the
    new one, never a torn file.
    """
    target = Path(path)
    fd, tmp = tempfile.mkstemp(dir=ensure_dir(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return target
