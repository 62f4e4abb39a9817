import pytest

from execution.config import HostConfig, load_config, summary


def test_defaults_from_empty_env():
    cfg = load_config(env={})
    assert cfg == HostConfig()
    assert cfg.balance_bits == 128
    assert cfg.address_len == 32


def test_env_values_are_parsed_and_normalized():
    cfg = load_config(
        env={
            "ESCROW_CHAIN_ID": "0x10",
            "ESCROW_BALANCE_BITS": "64",
            "ESCROW_LOG_LEVEL": "debug",
            "ESCROW_LOG_FORMAT": "JSON",
        }
    )
    assert cfg.chain_id == 16
    assert cfg.balance_bits == 64
    assert cfg.log_level == "DEBUG"
    assert cfg.log_format == "json"


def test_out_of_range_values_are_clamped():
    cfg = load_config(env={"ESCROW_ADDRESS_LEN": "2", "ESCROW_BALANCE_BITS": "4096", "ESCROW_MAX_CALL_DEPTH": "0"})
    assert (cfg.address_len, cfg.balance_bits, cfg.max_call_depth) == (8, 256, 1)


def test_overrides_win_over_env():
    cfg = load_config(env={"ESCROW_CHAIN_ID": "5"}, overrides={"chain_id": 7, "log_level": "warning"})
    assert cfg.chain_id == 7
    assert cfg.log_level == "WARNING"


@pytest.mark.parametrize(
    "env",
    [
        {"ESCROW_CHAIN_ID": "0"},
        {"ESCROW_CHAIN_ID": "abc"},
        {"ESCROW_BLOCK_TIME": "-1"},
        {"ESCROW_LOG_LEVEL": "LOUD"},
        {"ESCROW_LOG_FORMAT": "xml"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_config(env=env)


def test_with_overrides_revalidates():
    cfg = HostConfig().with_overrides(address_len=100)
    assert cfg.address_len == 64
    with pytest.raises(ValueError):
        HostConfig().with_overrides(chain_id=0)


def test_summary_mentions_knobs():
    s = summary(load_config(env={}))
    assert "chain=1337" in s and "balance=u128" in s
