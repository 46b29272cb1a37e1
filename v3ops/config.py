"""
v3ops/config.py

Loads configuration from the repo-root .env.

- NETWORK selects katana (local fork of Katana Tatara, default) or sepolia
- network-prefixed variables supply endpoints/addresses (KATANA_*, SEPOLIA_*)
- token A/B addresses may also come from the JSON address file written by
  v3ops.deploy_tokens (explicit env vars win over the file)

Sepolia needs SEPOLIA_RPC_URL and PRIVATE_KEY. The katana fork falls back to
http://127.0.0.1:8545 and the local dev key #0.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from v3ops.price_math import FEE_TIERS, TICK_SPACINGS, tick_spacing_for_fee

REPO_ROOT = Path(__file__).resolve().parents[1]

# Always load .env from repo root reliably (no find_dotenv() stack-frame issues)
ENV_PATH = REPO_ROOT / ".env"
load_dotenv(dotenv_path=ENV_PATH)

DEFAULT_ADDRESSES_FILE = REPO_ROOT / "config" / "deployedAddresses.json"

# Anvil/Hardhat default private key #0 (LOCAL ONLY).
# This key exists only for local dev networks and must never be used on public networks.
LOCAL_DEV_PRIVKEY0 = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

SUPPORTED_NETWORKS = ("katana", "sepolia")


@dataclass(frozen=True)
class NetworkInfo:
    name: str
    chain_id: int
    bridge_network_id: int
    default_rpc_url: str | None
    v3_factory: str
    position_manager: str
    router: str
    quoter: str | None
    weth: str
    token_a: str
    token_b: str
    bridge: str
    bridge_extension: str
    ausd: str | None = None
    ausd_faucet: str | None = None


NETWORKS = {
    "sepolia": NetworkInfo(
        name="Sepolia",
        chain_id=11155111,
        bridge_network_id=0,
        default_rpc_url=None,
        v3_factory="0x0227628f3F023bb0B980b67D528571c95c6DaC1c",
        position_manager="0x1238536071E1c677A632429e3655c799b22cDA52",
        router="0x3bFA4769FB09eefC5a80d6E87c3B9C650f7Ae48E",
        quoter="0xEd1f6473345F45b75F8179591dd5bA1888cf2FB3",
        weth="0xfff9976782d46cc05630d1f6ebab18b2324d6b14",
        token_a="0x18Ae0780D1d9325ce7fe45c68F6879b24Ff63FBe",
        token_b="0xb9B04519126d3d6D13FE9B5B69cF7e00A1eBFa49",
        bridge="0x528e26b25a34a4A5d0dbDa1d57D318153d2ED582",
        bridge_extension="0x2311BFA86Ae27FC10E1ad3f805A2F9d22Fc8a6a1",
    ),
    "katana": NetworkInfo(
        name="Katana Tatara Fork",
        chain_id=129399,
        bridge_network_id=1,
        default_rpc_url="http://127.0.0.1:8545",
        v3_factory="0x9B3336186a38E1b6c21955d112dbb0343Ee061eE",
        position_manager="0x1400feFD6F9b897970f00Df6237Ff2B8b27Dc82C",
        router="0xAC4c6e212A361c968F1725b4d055b47E63F80b75",
        quoter=None,
        weth="0x17B8Ee96E3bcB3b04b3e8334de4524520C51caB4",
        # WETH/AUSD is the pair the katana scripts trade
        token_a="0x17B8Ee96E3bcB3b04b3e8334de4524520C51caB4",
        token_b="0xa9012a055bd4e0eDfF8Ce09f960291C09D5322dC",
        bridge="0x528e26b25a34a4A5d0dbDa1d57D318153d2ED582",
        bridge_extension="0x2311BFA86Ae27FC10E1ad3f805A2F9d22Fc8a6a1",
        ausd="0xa9012a055bd4e0eDfF8Ce09f960291C09D5322dC",
        ausd_faucet="0xd236c18D274E54FAccC3dd9DDA4b27965a73ee6C",
    ),
}


def _must(name: str) -> str:
    """Fetch a required environment variable."""
    v = os.getenv(name)
    if not v:
        raise ValueError(f"Missing required env var: {name}")
    return v


def _opt(name: str) -> str | None:
    """Fetch an optional environment variable."""
    v = os.getenv(name)
    return v if v else None


def _network() -> str:
    network = (os.getenv("NETWORK") or "katana").lower().strip()
    if network not in SUPPORTED_NETWORKS:
        raise ValueError(f"Unsupported NETWORK={network}")
    return network


def _by_network_opt(katana_key: str, sepolia_key: str, network: str | None = None) -> str | None:
    """Resolve an optional value based on NETWORK=katana|sepolia (or an explicit network)."""
    if (network or _network()) == "katana":
        return _opt(katana_key)
    return _opt(sepolia_key)


def _as_addr(x: str) -> str:
    """Basic validation for Ethereum address strings."""
    if not x.startswith("0x") or len(x) != 42:
        raise ValueError(f"Not an address: {x}")
    return x


def _env_int(name: str, default: int) -> int:
    """Read an int env var with a default."""
    return int(os.getenv(name, str(default)))


def _read_address_file(p: Path) -> dict[str, dict[str, str]]:
    if not p.exists():
        return {}
    data = json.loads(p.read_text())
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ValueError(f"Address file must map network -> {{name: address}}: {p}")
    return data


def load_addresses(path: str | Path, network: str) -> dict[str, str]:
    """
    Read one network's entries from the JSON address file.

    The file looks like {"katana": {"TokenA": "0x..", "TokenB": "0x.."}}.
    A missing file or network is an empty mapping.
    """
    entries = _read_address_file(Path(path)).get(network, {})
    return {str(k): str(v) for k, v in entries.items()}


def save_addresses(path: str | Path, network: str, addresses: dict[str, str]) -> None:
    """Merge one network's addresses into the JSON address file, creating it if needed."""
    p = Path(path)
    merged = _read_address_file(p)
    merged.setdefault(network, {}).update(addresses)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(merged, indent=2) + "\n")


@dataclass(frozen=True)
class OpsConfig:
    # Network + RPC
    network: str
    rpc_url: str
    chain_id: int
    private_key: str

    # Uniswap/SushiSwap V3 deployment
    v3_factory: str
    position_manager: str
    router: str
    quoter: str | None
    weth: str

    # Pair we operate on
    token_a: str
    token_b: str
    fee: int
    tick_spacing: int

    # LxLy bridge
    bridge: str
    bridge_extension: str
    bridge_network_id: int

    # katana-only helpers
    ausd: str | None
    ausd_faucet: str | None

    addresses_file: str
    tx_timeout_s: int


def load_config(network: str | None = None) -> OpsConfig:
    """
    Resolve the active network's settings.

    Precedence for every address: env var > address file (token A/B only) > network default.
    """
    network = _network() if network is None else network.lower().strip()
    if network not in SUPPORTED_NETWORKS:
        raise ValueError(f"Unsupported network: {network}")
    info = NETWORKS[network]
    prefix = network.upper()

    if network == "sepolia":
        rpc_url = _must("SEPOLIA_RPC_URL")
        private_key = _must("PRIVATE_KEY")
    else:
        rpc_url = _opt("KATANA_RPC_URL") or info.default_rpc_url
        private_key = _opt("PRIVATE_KEY") or LOCAL_DEV_PRIVKEY0

    chain_id = _env_int(f"{prefix}_CHAIN_ID", info.chain_id)

    addresses_file = _opt("ADDRESSES_FILE") or str(DEFAULT_ADDRESSES_FILE)
    deployed = load_addresses(addresses_file, network)

    def addr(key: str, default: str | None) -> str | None:
        v = _by_network_opt(f"KATANA_{key}", f"SEPOLIA_{key}", network) or default
        return _as_addr(v) if v else None

    token_a = addr("TOKEN_A", deployed.get("TokenA") or info.token_a)
    token_b = addr("TOKEN_B", deployed.get("TokenB") or info.token_b)
    if token_a.lower() == token_b.lower():
        raise ValueError("TOKEN_A and TOKEN_B resolve to the same address.")

    fee = _env_int("POOL_FEE", FEE_TIERS["MEDIUM"])
    if fee not in TICK_SPACINGS:
        raise ValueError(f"Unsupported POOL_FEE={fee}; expected one of {sorted(TICK_SPACINGS)}")

    return OpsConfig(
        network=network,
        rpc_url=rpc_url,
        chain_id=chain_id,
        private_key=private_key,

        v3_factory=addr("V3_FACTORY", info.v3_factory),
        position_manager=addr("POSITION_MANAGER", info.position_manager),
        router=addr("ROUTER", info.router),
        quoter=addr("QUOTER", info.quoter),
        weth=addr("WETH", info.weth),

        token_a=token_a,
        token_b=token_b,
        fee=fee,
        tick_spacing=tick_spacing_for_fee(fee),

        bridge=addr("BRIDGE", info.bridge),
        bridge_extension=addr("BRIDGE_EXTENSION", info.bridge_extension),
        bridge_network_id=info.bridge_network_id,

        ausd=addr("AUSD", info.ausd),
        ausd_faucet=addr("AUSD_FAUCET", info.ausd_faucet),

        addresses_file=addresses_file,
        tx_timeout_s=_env_int("TX_TIMEOUT_S", 120),
    )


def load_network_config(network: str) -> OpsConfig:
    """load_config() for an explicit network, regardless of NETWORK in the env."""
    return load_config(network)
