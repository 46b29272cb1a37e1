"""
v3ops/mint_position.py

Mints a V3 liquidity position (NFT) for (TOKEN_A, TOKEN_B, POOL_FEE).

Tick range, in order of precedence:
  --tick-lower/--tick-upper   explicit ticks, snapped to the fee tier's spacing
  --price [--width]           band of +/- width around a token1/token0 price in
                              whole tokens (the units query_position prints)
  (default)                   full range for the fee tier's spacing

Amounts are human decimal amounts of TokenA and TokenB; they are mapped onto
token0/token1 after sorting. amount0Min/amount1Min are 0 (no slippage guard,
test networks only).

Usage:
  python -m v3ops.mint_position [--amount-a 1000] [--amount-b 1000]
                                [--tick-lower T --tick-upper T | --price P [--width 0.1]]
"""

from __future__ import annotations

import argparse
import time
from typing import Any, Optional

from v3ops.chain import Chain, MintParams, format_units, to_base_units, token_id_from_receipt
from v3ops.config import OpsConfig, load_config
from v3ops.price_math import (
    PriceMathError,
    full_range_ticks,
    human_price_to_raw,
    in_range,
    is_valid_tick,
    nearest_usable_tick,
    sort_tokens,
    tick_range_for_price,
)

DEFAULT_DEADLINE_S = 600


def resolve_tick_range(
    tick_spacing: int,
    tick_lower: Optional[int] = None,
    tick_upper: Optional[int] = None,
    price: Optional[str] = None,
    width: float = 0.1,
    decimals0: int = 18,
    decimals1: int = 18,
) -> tuple[int, int]:
    """
    Pick a (tickLower, tickUpper) that the pool will accept.

    price is token1 per token0 in whole tokens; decimals0/decimals1 map it onto
    the base-unit ratio the ticks are defined on.

    Raises PriceMathError for bad ticks/prices and ValueError for an empty range.
    """
    if (tick_lower is None) != (tick_upper is None):
        raise ValueError("--tick-lower and --tick-upper must be given together")

    if tick_lower is not None:
        lower = nearest_usable_tick(tick_lower, tick_spacing)
        upper = nearest_usable_tick(tick_upper, tick_spacing)
    elif price is not None:
        raw = human_price_to_raw(price, decimals0, decimals1)
        lower, upper = tick_range_for_price(raw, tick_spacing, width)
    else:
        lower, upper = full_range_ticks(tick_spacing)

    if not (is_valid_tick(lower) and is_valid_tick(upper)):
        raise ValueError(f"Invalid tick range: {lower} .. {upper}")
    if lower >= upper:
        raise ValueError(f"tickLower must be below tickUpper after snapping: {lower} >= {upper}")
    return lower, upper


def mint(
    chain: Chain,
    cfg: OpsConfig,
    amount_a: str,
    amount_b: str,
    tick_lower: int,
    tick_upper: int,
    deadline_s: int = DEFAULT_DEADLINE_S,
) -> tuple[int, Any, int]:
    """
    Approve both tokens and mint. Returns (token_id, mint_receipt, total_gas_used).
    """
    gas_used = 0
    token0, token1 = sort_tokens(cfg.token_a, cfg.token_b)
    info0 = chain.token_info(token0)
    info1 = chain.token_info(token1)

    token0_is_a = token0.lower() == cfg.token_a.lower()
    amount0 = to_base_units(amount_a if token0_is_a else amount_b, info0.decimals)
    amount1 = to_base_units(amount_b if token0_is_a else amount_a, info1.decimals)

    bal0 = chain.balance_of(token0)
    bal1 = chain.balance_of(token1)
    print("Token balances:")
    print(f"  {info0.symbol}: {format_units(bal0, info0.decimals)}")
    print(f"  {info1.symbol}: {format_units(bal1, info1.decimals)}")
    if amount0 > bal0:
        raise RuntimeError(f"Insufficient {info0.symbol} balance. Have {format_units(bal0, info0.decimals)}, need {format_units(amount0, info0.decimals)}")
    if amount1 > bal1:
        raise RuntimeError(f"Insufficient {info1.symbol} balance. Have {format_units(bal1, info1.decimals)}, need {format_units(amount1, info1.decimals)}")

    pool = chain.get_pool(cfg.v3_factory, token0, token1, cfg.fee)
    if pool is None:
        raise RuntimeError(f"No pool for fee tier {cfg.fee}; run v3ops.create_pool first")
    current_tick = chain.slot0(pool).tick
    if not in_range(current_tick, tick_lower, tick_upper):
        print(f"WARNING: current tick {current_tick} is outside [{tick_lower}, {tick_upper}]; the position will be single-sided and earn no fees until the price moves into range")

    print("Approving tokens...")
    rcpt = chain.approve(token0, cfg.position_manager, amount0)
    gas_used += int(rcpt.gasUsed)
    print(f"  {info0.symbol} approved")
    rcpt = chain.approve(token1, cfg.position_manager, amount1)
    gas_used += int(rcpt.gasUsed)
    print(f"  {info1.symbol} approved")

    params = MintParams(
        token0=token0,
        token1=token1,
        fee=cfg.fee,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        amount0_desired=amount0,
        amount1_desired=amount1,
        amount0_min=0,
        amount1_min=0,
        recipient=chain.address,
        deadline=int(time.time()) + deadline_s,
    )

    print(f"Minting position in ticks [{tick_lower}, {tick_upper}]...")
    rcpt = chain.mint_position(cfg.position_manager, params)
    gas_used += int(rcpt.gasUsed)

    token_id = token_id_from_receipt(rcpt, cfg.position_manager)
    return token_id, rcpt, gas_used


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--amount-a", dest="amount_a", default="1000", help="TokenA amount (human units)")
    parser.add_argument("--amount-b", dest="amount_b", default="1000", help="TokenB amount (human units)")
    parser.add_argument("--tick-lower", dest="tick_lower", type=int, default=None)
    parser.add_argument("--tick-upper", dest="tick_upper", type=int, default=None)
    parser.add_argument("--price", default=None, help="center price, whole token1 per token0 (as query_position prints)")
    parser.add_argument("--width", type=float, default=0.1, help="relative band around --price")
    parser.add_argument("--deadline", type=int, default=DEFAULT_DEADLINE_S, help="seconds from now")
    args = parser.parse_args()

    cfg = load_config()
    chain = Chain.from_config(cfg)

    token0, token1 = sort_tokens(cfg.token_a, cfg.token_b)
    decimals0 = chain.token_info(token0).decimals
    decimals1 = chain.token_info(token1).decimals

    try:
        tick_lower, tick_upper = resolve_tick_range(
            cfg.tick_spacing, args.tick_lower, args.tick_upper, args.price, args.width, decimals0, decimals1
        )
    except (PriceMathError, ValueError) as e:
        raise SystemExit(f"Invalid tick range: {e}")

    print(f"Minting new V3 position on {cfg.network} (chain id {chain.chain_id})")
    print(f"  Operator    : {chain.address}")
    print(f"  Fee tier    : {cfg.fee} (tick spacing {cfg.tick_spacing})")
    print(f"  Tick range  : {tick_lower} .. {tick_upper}")
    print("")

    token_id, rcpt, gas_used = mint(chain, cfg, args.amount_a, args.amount_b, tick_lower, tick_upper, args.deadline)

    print("")
    print("Position minted successfully!")
    print(f"  NFT Token ID: {token_id}")
    print(f"  Tx hash     : {rcpt.transactionHash.hex()}")
    print(f"  Gas used    : {gas_used}")


if __name__ == "__main__":
    main()
