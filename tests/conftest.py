import pytest

ENV_KEYS = (
    "NETWORK",
    "PRIVATE_KEY",
    "POOL_FEE",
    "ADDRESSES_FILE",
    "TX_TIMEOUT_S",
    "TOKEN_ID",
)

NETWORK_KEYS = (
    "RPC_URL",
    "CHAIN_ID",
    "V3_FACTORY",
    "POSITION_MANAGER",
    "ROUTER",
    "QUOTER",
    "WETH",
    "TOKEN_A",
    "TOKEN_B",
    "BRIDGE",
    "BRIDGE_EXTENSION",
    "AUSD",
    "AUSD_FAUCET",
)


@pytest.fixture
def addresses_file(tmp_path):
    return tmp_path / "deployedAddresses.json"


@pytest.fixture
def clean_env(monkeypatch, addresses_file):
    """No config env vars set, address file pointed at a temp path."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    for prefix in ("KATANA", "SEPOLIA"):
        for key in NETWORK_KEYS:
            monkeypatch.delenv(f"{prefix}_{key}", raising=False)
    monkeypatch.setenv("ADDRESSES_FILE", str(addresses_file))
    return monkeypatch
