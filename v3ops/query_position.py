"""
v3ops/query_position.py

Prints a V3 position: owner, pair, fee, tick range with prices, in-range status,
liquidity and uncollected fees.

Usage:
  python -m v3ops.query_position <token_id>
  TOKEN_ID=<token_id> python -m v3ops.query_position
"""

import argparse
import os

from v3ops.chain import Chain, format_units
from v3ops.config import OpsConfig, load_config
from v3ops.price_math import in_range, tick_to_human_price, tick_to_price


def print_position(chain: Chain, cfg: OpsConfig, token_id: int) -> None:
    position = chain.position(cfg.position_manager, token_id)
    owner = chain.owner_of(cfg.position_manager, token_id)

    info0 = chain.token_info(position.token0)
    info1 = chain.token_info(position.token1)

    pool = chain.get_pool(cfg.v3_factory, position.token0, position.token1, position.fee)
    if pool is None:
        raise RuntimeError(f"No pool for position #{token_id} ({info0.symbol}/{info1.symbol} fee {position.fee})")
    current_tick = chain.slot0(pool).tick

    pair = f"{info1.symbol}/{info0.symbol}"

    print("Position Details:")
    print("-----------------")
    print(f"NFT Token ID  : {token_id}")
    print(f"Owner         : {owner}")
    print(f"Operator      : {position.operator}")
    print(f"Pool          : {pool}")
    print(f"Fee Tier      : {position.fee / 10000}%")
    print("")
    print("Tokens:")
    print(f"  Token0: {info0.symbol} ({position.token0})")
    print(f"  Token1: {info1.symbol} ({position.token1})")
    print("")
    print("Tick Range (price, 18 decimals):")
    print(f"  Lower  : {position.tick_lower} ({tick_to_price(position.tick_lower)})")
    print(f"  Upper  : {position.tick_upper} ({tick_to_price(position.tick_upper)})")
    print(f"  Current: {current_tick} ({tick_to_price(current_tick)})")
    print("")

    lower = tick_to_human_price(position.tick_lower, info0.decimals, info1.decimals)
    upper = tick_to_human_price(position.tick_upper, info0.decimals, info1.decimals)
    current = tick_to_human_price(current_tick, info0.decimals, info1.decimals)
    print(f"Price Range   : {lower:.6g} to {upper:.6g} {pair}")
    print(f"Current Price : {current:.6g} {pair}")

    status = "In Range" if in_range(current_tick, position.tick_lower, position.tick_upper) else "Out of Range"
    print(f"Status        : {status}")
    print("")
    print("Liquidity:")
    print(f"  Current Liquidity: {position.liquidity}")
    print("")
    print("Uncollected Fees:")
    print(f"  {info0.symbol}: {format_units(position.tokens_owed0, info0.decimals)}")
    print(f"  {info1.symbol}: {format_units(position.tokens_owed1, info1.decimals)}")
    print("")
    print("Fee Growth:")
    print(f"  {info0.symbol} Inside Last: {position.fee_growth_inside0_last_x128}")
    print(f"  {info1.symbol} Inside Last: {position.fee_growth_inside1_last_x128}")
    print(f"Nonce         : {position.nonce}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("token_id", nargs="?", default=os.getenv("TOKEN_ID"), help="position NFT id")
    args = parser.parse_args()

    if not args.token_id:
        raise SystemExit("Usage: python -m v3ops.query_position <token_id>  (or set TOKEN_ID)")
    try:
        token_id = int(args.token_id)
    except ValueError:
        raise SystemExit(f"token_id must be an integer, got {args.token_id!r}")

    cfg = load_config()
    chain = Chain.from_config(cfg)

    print(f"Querying V3 position #{token_id} on {cfg.network}...")
    print("")
    print_position(chain, cfg, token_id)


if __name__ == "__main__":
    main()
