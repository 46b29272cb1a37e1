"""
v3ops/create_pool.py

Creates (if missing) and initializes (if sqrtPriceX96 == 0) the V3 pool for
(TOKEN_A, TOKEN_B, POOL_FEE).

The initial price comes from a reserve ratio: sqrtPriceX96 = encode_sqrt_price(reserve1, reserve0),
where reserve1/reserve0 is token1 per token0 in the sorted pair. 1:1 is the default
and encodes to exactly 2**96.

Usage:
  python -m v3ops.create_pool [--reserve1 R1] [--reserve0 R0]
"""

from __future__ import annotations

import argparse

from v3ops.chain import Chain, TokenInfo
from v3ops.config import OpsConfig, load_config
from v3ops.price_math import PriceMathError, decode_sqrt_price, encode_sqrt_price, sort_tokens


def ensure_pool(chain: Chain, cfg: OpsConfig, reserve1: str = "1", reserve0: str = "1") -> tuple[str, int]:
    """
    Make sure the pool exists and is initialized.

    Returns (pool_address, gas_used_by_this_call).
    """
    gas_used = 0
    token0, token1 = sort_tokens(cfg.token_a, cfg.token_b)

    # Encode up front so a bad ratio fails before any transaction is sent.
    sqrt_price_x96 = encode_sqrt_price(reserve1, reserve0)

    pool = chain.get_pool(cfg.v3_factory, token0, token1, cfg.fee)
    if pool is None:
        print(f"Pool does not exist. Creating {cfg.fee} fee tier pool...")
        rcpt = chain.create_pool(cfg.v3_factory, token0, token1, cfg.fee)
        gas_used += int(rcpt.gasUsed)
        print(f"  Pool created in block {rcpt.blockNumber} (gas used: {rcpt.gasUsed})")

        pool = chain.get_pool(cfg.v3_factory, token0, token1, cfg.fee)
        if pool is None:
            raise RuntimeError("createPool mined but factory.getPool still returns the zero address")
    else:
        print(f"Pool already exists at: {pool}")

    slot0 = chain.slot0(pool)
    if slot0.sqrt_price_x96 == 0:
        print(f"Pool is not initialized. Initializing at {reserve1}:{reserve0} (token1:token0)...")
        print(f"  Initial sqrt price: {sqrt_price_x96}")
        rcpt = chain.initialize_pool(pool, sqrt_price_x96)
        gas_used += int(rcpt.gasUsed)
        print(f"  Pool initialized in block {rcpt.blockNumber} (gas used: {rcpt.gasUsed})")
    else:
        print("Pool already initialized")
        print(f"  Current sqrt price: {slot0.sqrt_price_x96}")

    return pool, gas_used


def print_pair(token0: TokenInfo, token1: TokenInfo) -> None:
    print("Sorted tokens:")
    print(f"  Token0: {token0.symbol} ({token0.address})")
    print(f"  Token1: {token1.symbol} ({token1.address})")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--reserve1", default="1", help="token1 side of the initial price ratio")
    parser.add_argument("--reserve0", default="1", help="token0 side of the initial price ratio")
    args = parser.parse_args()

    cfg = load_config()
    chain = Chain.from_config(cfg)

    print(f"Creating V3 pool on {cfg.network} (chain id {chain.chain_id})")
    print(f"  Operator: {chain.address}")
    print(f"  Fee tier: {cfg.fee} ({cfg.fee / 10000}%)")

    token0, token1 = sort_tokens(cfg.token_a, cfg.token_b)
    print_pair(chain.token_info(token0), chain.token_info(token1))
    print("")

    try:
        pool, gas_used = ensure_pool(chain, cfg, args.reserve1, args.reserve0)
    except PriceMathError as e:
        raise SystemExit(f"Invalid initial price: {e}")

    slot0 = chain.slot0(pool)
    print("")
    print("Pool state:")
    print(f"  Pool address : {pool}")
    print(f"  sqrtPriceX96 : {slot0.sqrt_price_x96}")
    print(f"  Current tick : {slot0.tick}")
    print(f"  Price        : {decode_sqrt_price(slot0.sqrt_price_x96):.6f} token1/token0")
    print(f"  Gas used     : {gas_used}")
    print("")
    print("Pool creation/verification complete.")


if __name__ == "__main__":
    main()
