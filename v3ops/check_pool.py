"""
v3ops/check_pool.py

Reports the state of the V3 pool for (TOKEN_A, TOKEN_B, POOL_FEE) on the active NETWORK.

- If the pool does not exist: prints the estimated gas/cost to create it.
- Otherwise: liquidity, sqrtPriceX96, current tick and the tick's price.

Usage:
  python -m v3ops.check_pool
"""

from web3 import Web3

from v3ops.chain import Chain
from v3ops.config import load_config
from v3ops.price_math import decode_sqrt_price, tick_to_price


def main() -> None:
    cfg = load_config()
    chain = Chain.from_config(cfg)

    print("Checking V3 pool status...")
    print(f"  network  = {cfg.network} (chain id {chain.chain_id})")
    print(f"  TokenA   = {cfg.token_a}")
    print(f"  TokenB   = {cfg.token_b}")
    print(f"  Fee tier = {cfg.fee} ({cfg.fee / 10000}%)")
    print("")

    pool = chain.get_pool(cfg.v3_factory, cfg.token_a, cfg.token_b, cfg.fee)
    if pool is None:
        print("Pool does not exist yet!")
        gas, cost_wei = chain.estimate_create_pool(cfg.v3_factory, cfg.token_a, cfg.token_b, cfg.fee)
        print("")
        print("To create pool:")
        print(f"  Estimated gas : {gas}")
        print(f"  Estimated cost: {Web3.from_wei(cost_wei, 'ether')} ETH")
        return

    print(f"Pool exists at: {pool}")
    print("")
    print_pool_state(chain, pool)


def print_pool_state(chain: Chain, pool: str) -> None:
    slot0 = chain.slot0(pool)
    liquidity = chain.liquidity(pool)

    print("Current pool state:")
    print(f"  Liquidity      : {liquidity}")
    print(f"  Sqrt Price X96 : {slot0.sqrt_price_x96}")
    print(f"  Current Tick   : {slot0.tick}")

    if slot0.sqrt_price_x96 == 0:
        print("  (pool is not initialized)")
        return

    print("")
    print(f"Price (tick, 18 decimals): {tick_to_price(slot0.tick)} token1/token0")
    print(f"Price (sqrtPriceX96)     : {decode_sqrt_price(slot0.sqrt_price_x96):.6f} token1/token0")


if __name__ == "__main__":
    main()
