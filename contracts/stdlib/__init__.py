# -*- coding: utf-8 -*-
"""
contracts.stdlib
================

Helpers shared by contract templates. Only storage codecs live here today;
see `contracts.stdlib.codec`.
"""
from __future__ import annotations

from . import codec

__all__ = ["codec"]
