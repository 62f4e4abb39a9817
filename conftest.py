import os

import pytest

# Stable, quiet defaults for every test run. Individual tests pass explicit
# mappings to load_config() when they need other knobs.
os.environ.setdefault("TZ", "UTC")
os.environ.setdefault("ESCROW_LOG_LEVEL", "ERROR")
os.environ.setdefault("ESCROW_LOG_FORMAT", "text")


@pytest.fixture(autouse=True)
def _clean_log_context():
    """Logging context is process-global; never leak bound fields between tests."""
    from core import logging as clog

    clog.clear_context()
    yield
    clog.clear_context()
