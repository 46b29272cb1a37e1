"""
v3ops/abi.py

ABIs for the contracts the scripts talk to.

- Test tokens (TokenA/TokenB) come from Hardhat artifacts, so we do not guess
  constructor signatures or bytecode.
- Uniswap/SushiSwap V3 periphery, ERC20, the AUSD faucet and the LxLy bridge
  are deployed third-party contracts; minimal JSON ABIs with only the entries
  we call are kept inline.
"""

import json
from pathlib import Path
from typing import Any

from v3ops.config import REPO_ROOT


def load_artifact(artifact_path: str) -> tuple[list[dict[str, Any]], str | None]:
    """Load (abi, bytecode) from a Hardhat artifact JSON file. bytecode may be None."""
    p = Path(artifact_path)
    if not p.exists():
        raise FileNotFoundError(f"Artifact not found: {artifact_path}")

    data = json.loads(p.read_text())
    abi = data.get("abi")
    if not abi:
        raise ValueError(f"No ABI in artifact: {artifact_path}")
    bytecode = data.get("bytecode")
    if bytecode in ("", "0x"):
        bytecode = None
    return abi, bytecode


def load_artifact_abi(artifact_path: str) -> list[dict[str, Any]]:
    """Load the ABI array from a Hardhat artifact JSON file."""
    return load_artifact(artifact_path)[0]


def _find_first_existing(paths: list[str]) -> str:
    """Pick the first path that exists (helps if you rearrange contracts)."""
    for rel in paths:
        p = Path(rel)
        if not p.is_absolute():
            p = REPO_ROOT / p
        if p.exists():
            return str(p)
    raise FileNotFoundError("Could not find artifact. Tried:\n" + "\n".join(paths))


def token_artifact_path(name: str) -> str:
    """Artifact for the mintable test token TokenA or TokenB."""
    if name not in ("TokenA", "TokenB"):
        raise ValueError(f"Unknown test token: {name}")
    return _find_first_existing([
        f"artifacts/contracts/{name}.sol/{name}.json",
        f"examples/{name}.sol/{name}.json",
    ])


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[tuple[str, str]], mutability: str) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


ERC20_ABI = [
    _fn("symbol", [], [("", "string")], "view"),
    _fn("name", [], [("", "string")], "view"),
    _fn("decimals", [], [("", "uint8")], "view"),
    _fn("balanceOf", [("account", "address")], [("", "uint256")], "view"),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")], "view"),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")], "nonpayable"),
]

# TokenA/TokenB expose an owner mint on top of ERC20.
MINTABLE_ERC20_ABI = ERC20_ABI + [
    _fn("mint", [("to", "address"), ("amount", "uint256")], [], "nonpayable"),
]

FACTORY_ABI = [
    _fn("owner", [], [("", "address")], "view"),
    _fn("getPool", [("tokenA", "address"), ("tokenB", "address"), ("fee", "uint24")], [("pool", "address")], "view"),
    _fn("createPool", [("tokenA", "address"), ("tokenB", "address"), ("fee", "uint24")], [("pool", "address")], "nonpayable"),
    _fn("feeAmountTickSpacing", [("fee", "uint24")], [("", "int24")], "view"),
]

POOL_ABI = [
    _fn("initialize", [("sqrtPriceX96", "uint160")], [], "nonpayable"),
    _fn(
        "slot0",
        [],
        [
            ("sqrtPriceX96", "uint160"),
            ("tick", "int24"),
            ("observationIndex", "uint16"),
            ("observationCardinality", "uint16"),
            ("observationCardinalityNext", "uint16"),
            ("feeProtocol", "uint8"),
            ("unlocked", "bool"),
        ],
        "view",
    ),
    _fn("liquidity", [], [("", "uint128")], "view"),
    _fn("tickSpacing", [], [("", "int24")], "view"),
]

MINT_PARAMS_COMPONENTS = [
    {"name": "token0", "type": "address"},
    {"name": "token1", "type": "address"},
    {"name": "fee", "type": "uint24"},
    {"name": "tickLower", "type": "int24"},
    {"name": "tickUpper", "type": "int24"},
    {"name": "amount0Desired", "type": "uint256"},
    {"name": "amount1Desired", "type": "uint256"},
    {"name": "amount0Min", "type": "uint256"},
    {"name": "amount1Min", "type": "uint256"},
    {"name": "recipient", "type": "address"},
    {"name": "deadline", "type": "uint256"},
]

POSITION_MANAGER_ABI = [
    {
        "type": "function",
        "name": "mint",
        "inputs": [{"name": "params", "type": "tuple", "components": MINT_PARAMS_COMPONENTS}],
        "outputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "liquidity", "type": "uint128"},
            {"name": "amount0", "type": "uint256"},
            {"name": "amount1", "type": "uint256"},
        ],
        "stateMutability": "payable",
    },
    _fn(
        "positions",
        [("tokenId", "uint256")],
        [
            ("nonce", "uint96"),
            ("operator", "address"),
            ("token0", "address"),
            ("token1", "address"),
            ("fee", "uint24"),
            ("tickLower", "int24"),
            ("tickUpper", "int24"),
            ("liquidity", "uint128"),
            ("feeGrowthInside0LastX128", "uint256"),
            ("feeGrowthInside1LastX128", "uint256"),
            ("tokensOwed0", "uint128"),
            ("tokensOwed1", "uint128"),
        ],
        "view",
    ),
    _fn("ownerOf", [("tokenId", "uint256")], [("", "address")], "view"),
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "tokenId", "type": "uint256"},
            {"indexed": False, "internalType": "uint128", "name": "liquidity", "type": "uint128"},
            {"indexed": False, "internalType": "uint256", "name": "amount0", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "amount1", "type": "uint256"},
        ],
        "name": "IncreaseLiquidity",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
            {"indexed": True, "internalType": "uint256", "name": "tokenId", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
]

FAUCET_ABI = [
    _fn("faucetDripAmount", [], [("", "uint256")], "view"),
    _fn("maxAmountToOwn", [], [("", "uint256")], "view"),
    _fn("maxDripFrequency", [], [("", "uint256")], "view"),
    _fn("requestFunds", [("_receiver", "address")], [], "nonpayable"),
    # custom errors, so reverts decode to a name
    {"type": "error", "name": "InsufficientFunds", "inputs": []},
    {"type": "error", "name": "MaxAllowedExceeded", "inputs": []},
    {"type": "error", "name": "MaxFrequencyExceeded", "inputs": []},
]

# LxLy (Polygon zkEVM style) bridge, deposit side only.
BRIDGE_ABI = [
    _fn(
        "bridgeAsset",
        [
            ("destinationNetwork", "uint32"),
            ("destinationAddress", "address"),
            ("amount", "uint256"),
            ("token", "address"),
            ("forceUpdateGlobalExitRoot", "bool"),
            ("permitData", "bytes"),
        ],
        [],
        "payable",
    ),
    _fn("networkID", [], [("", "uint32")], "view"),
    _fn("depositCount", [], [("", "uint256")], "view"),
]
