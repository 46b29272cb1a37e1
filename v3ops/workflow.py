"""
v3ops/workflow.py

End-to-end V3 run in one process:
1) create_pool.ensure_pool
   - creates the (TOKEN_A, TOKEN_B, POOL_FEE) pool if missing, initializes it if sqrtPriceX96 == 0
2) mint_position.mint
   - approves both tokens and mints a position (full range unless a range is given)
3) query_position.print_position
   - reads the freshly minted position back

Gas is summed per step; a summary with elapsed time is printed at the end.

Usage:
  python -m v3ops.workflow [--amount-a 1000] [--amount-b 1000] [--reserve1 1 --reserve0 1]
                           [--tick-lower T --tick-upper T | --price P [--width 0.1]]
"""

from __future__ import annotations

import argparse
import time

from v3ops.chain import Chain
from v3ops.config import load_config
from v3ops.create_pool import ensure_pool, print_pair
from v3ops.mint_position import DEFAULT_DEADLINE_S, mint, resolve_tick_range
from v3ops.price_math import PriceMathError, sort_tokens
from v3ops.query_position import print_position


def _step(n: int, title: str) -> None:
    print("")
    print(f"=== Step {n}: {title} ===")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--amount-a", dest="amount_a", default="1000")
    parser.add_argument("--amount-b", dest="amount_b", default="1000")
    parser.add_argument("--reserve1", default="1")
    parser.add_argument("--reserve0", default="1")
    parser.add_argument("--tick-lower", dest="tick_lower", type=int, default=None)
    parser.add_argument("--tick-upper", dest="tick_upper", type=int, default=None)
    parser.add_argument("--price", default=None, help="whole token1 per token0")
    parser.add_argument("--width", type=float, default=0.1)
    args = parser.parse_args()

    cfg = load_config()
    started = time.time()
    chain = Chain.from_config(cfg)
    gas: dict[str, int] = {}

    token0, token1 = sort_tokens(cfg.token_a, cfg.token_b)
    info0 = chain.token_info(token0)
    info1 = chain.token_info(token1)
    try:
        tick_lower, tick_upper = resolve_tick_range(
            cfg.tick_spacing, args.tick_lower, args.tick_upper, args.price, args.width, info0.decimals, info1.decimals
        )
    except (PriceMathError, ValueError) as e:
        raise SystemExit(f"Invalid tick range: {e}")

    print(f"Running full V3 workflow on {cfg.network} (chain id {chain.chain_id})")
    print(f"  Operator: {chain.address}")
    print_pair(info0, info1)

    _step(1, "create / initialize pool")
    try:
        pool, gas["create_pool"] = ensure_pool(chain, cfg, args.reserve1, args.reserve0)
    except PriceMathError as e:
        raise SystemExit(f"Invalid initial price: {e}")

    _step(2, "mint position")
    token_id, _, gas["mint_position"] = mint(
        chain, cfg, args.amount_a, args.amount_b, tick_lower, tick_upper, DEFAULT_DEADLINE_S
    )
    print(f"  NFT Token ID: {token_id}")

    _step(3, "query position")
    print_position(chain, cfg, token_id)

    elapsed = time.time() - started
    total = sum(gas.values())

    print("")
    print("=== Workflow summary ===")
    print(f"  Pool        : {pool}")
    print(f"  Position    : #{token_id} [{tick_lower}, {tick_upper}]")
    for name, used in gas.items():
        print(f"  Gas ({name}): {used}")
    print(f"  Total gas   : {total}")
    print(f"  Elapsed     : {elapsed:.1f}s")


if __name__ == "__main__":
    main()
