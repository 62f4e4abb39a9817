# -*- coding: utf-8 -*-
"""
contracts.tests
================

Behavioral tests for the Escrow and EscrowFactory templates and the
`escrowctl` command line. Fixtures live in conftest.py.
"""
