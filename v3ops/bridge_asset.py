"""
v3ops/bridge_asset.py

Deposits an ERC20 into the LxLy bridge on the active network, addressed to the
other network (sepolia <-> katana). Claiming on the destination side is not
handled here.

Steps:
1) optionally mint the amount first (--mint, TokenA/TokenB test tokens only)
2) approve the bridge for the amount
3) bridgeAsset(destinationNetwork, recipient, amount, token, forceUpdateGlobalExitRoot=True, permitData=b"")

Usage:
  python -m v3ops.bridge_asset [--token 0x..] [--amount 10] [--recipient 0x..] [--mint]
"""

import argparse

from web3 import Web3

from v3ops.abi import BRIDGE_ABI, MINTABLE_ERC20_ABI
from v3ops.chain import Chain, format_units, to_base_units
from v3ops.config import NETWORKS, OpsConfig, load_config


def destination_network_id(cfg: OpsConfig) -> int:
    """LxLy network id of the other side of the bridge."""
    others = [info for name, info in NETWORKS.items() if name != cfg.network]
    if len(others) != 1:
        raise ValueError(f"Cannot pick a destination network from {cfg.network}")
    return others[0].bridge_network_id


def bridge(chain: Chain, cfg: OpsConfig, token: str, amount: int, recipient: str) -> object:
    dest = destination_network_id(cfg)
    if dest == cfg.bridge_network_id:
        raise ValueError("Source and destination bridge network ids are the same")

    print(f"Approving bridge {cfg.bridge}...")
    chain.approve(token, cfg.bridge, amount)

    fn = chain.contract(cfg.bridge, BRIDGE_ABI).functions.bridgeAsset(
        dest,
        Web3.to_checksum_address(recipient),
        int(amount),
        Web3.to_checksum_address(token),
        True,
        b"",
    )
    print(f"Bridging to network id {dest}...")
    return chain.transact(fn, "bridgeAsset")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--token", default=None, help="ERC20 to bridge (default TOKEN_A)")
    parser.add_argument("--amount", default="10", help="human units")
    parser.add_argument("--recipient", default=None, help="destination address (default: our account)")
    parser.add_argument("--mint", action="store_true", help="mint the amount first (test tokens)")
    args = parser.parse_args()

    cfg = load_config()
    chain = Chain.from_config(cfg)

    token = args.token or cfg.token_a
    recipient = args.recipient or chain.address
    info = chain.token_info(token)
    amount = to_base_units(args.amount, info.decimals)

    print(f"Bridging from {cfg.network} (LxLy network id {cfg.bridge_network_id})")
    print(f"  Account  : {chain.address}")
    print(f"  Token    : {info.symbol} ({info.address})")
    print(f"  Amount   : {format_units(amount, info.decimals)}")
    print(f"  Recipient: {recipient}")
    print("")

    if args.mint:
        print(f"Minting {format_units(amount, info.decimals)} {info.symbol}...")
        fn = chain.contract(token, MINTABLE_ERC20_ABI).functions.mint(chain.address, amount)
        chain.transact(fn, "mint")

    balance = chain.balance_of(token)
    print(f"Balance: {format_units(balance, info.decimals)} {info.symbol}")
    if balance < amount:
        raise SystemExit(f"Insufficient {info.symbol} balance to bridge {format_units(amount, info.decimals)}")

    try:
        rcpt = bridge(chain, cfg, token, amount, recipient)
    except ValueError as e:
        raise SystemExit(str(e))

    print("")
    print("Bridge deposit submitted:")
    print(f"  Block   : {rcpt.blockNumber}")
    print(f"  Tx hash : {rcpt.transactionHash.hex()}")
    print(f"  Status  : {rcpt.status}")
    print(f"  Gas used: {rcpt.gasUsed}")


if __name__ == "__main__":
    main()
