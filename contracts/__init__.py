# -*- coding: utf-8 -*-
"""
contracts — the Escrow and EscrowFactory contracts plus their tooling.

Layout
------
- errors      : contract error taxonomy (all host-level reverts)
- stdlib      : storage codecs shared by the templates
- templates   : Escrow, EscrowFactory and the template catalog
- tools       : `escrowctl` command line
"""
