"""
v3ops/price_math.py

Tick / price math for Uniswap V3 style (and SushiSwap V3) concentrated-liquidity pools.

Three representations of a pool price:
  - a reserve ratio (reserve1 / reserve0)
  - sqrtPriceX96 = sqrt(price) * 2**96   (uint160 on-chain)
  - tick, where price = 1.0001**tick    (int24 on-chain, [-887272, 887272])

price is always token1 per token0 in the pool's own token ordering.

Precision:
- sqrt / log / pow are done in double precision floats; only the final
  fixed-point values are exact integers.
- encode_sqrt_price is exact for equal reserves (returns Q96) and accurate to
  about 12 significant digits otherwise.
- price_to_tick(tick_to_price(t) / 1e18) returns t for most ticks and t - 1
  for the rest, because floor() sits right on the float rounding error of log().

Nothing in here talks to the network or prints.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from numbers import Integral
from typing import Any


Q96 = 2 ** 96
Q192 = Q96 ** 2

MIN_TICK = -887272
MAX_TICK = 887272

# sqrt(ratio) is scaled to an integer by this before going into Q96.
SQRT_SCALE = 10 ** 12

TICK_BASE = 1.0001
PRICE_DECIMALS = 18

# fee (hundredths of a bip) -> tick spacing
FEE_TIERS = {
    "LOWEST": 100,    # 0.01%
    "LOW": 500,       # 0.05%
    "MEDIUM": 3000,   # 0.3%
    "HIGH": 10000,    # 1%
}

TICK_SPACINGS = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}


class PriceMathError(ValueError):
    """Base class for every failure raised by this module."""


class InvalidArgument(PriceMathError):
    """Missing, non-numeric, non-positive or wrongly shaped input."""


class OutOfRange(PriceMathError):
    """A tick (given or computed) outside [MIN_TICK, MAX_TICK]."""


class EncodingFailed(PriceMathError):
    """sqrtPriceX96 encoding failed; the original error is chained."""


def _is_int(x: Any) -> bool:
    return isinstance(x, Integral) and not isinstance(x, bool)


def _require_tick(tick: Any) -> int:
    if not _is_int(tick):
        raise InvalidArgument(f"Tick must be an integer, got {tick!r}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OutOfRange(f"Tick {tick} is outside [{MIN_TICK}, {MAX_TICK}]")
    return int(tick)


def _require_spacing(tick_spacing: Any) -> int:
    if not _is_int(tick_spacing):
        raise InvalidArgument(f"Tick spacing must be an integer, got {tick_spacing!r}")
    if tick_spacing <= 0:
        raise InvalidArgument(f"Tick spacing must be positive, got {tick_spacing}")
    return int(tick_spacing)


def _as_decimal(value: Any) -> Decimal:
    """
    Normalize int / float / Decimal / numeric string into a Decimal.

    Raises InvalidOperation / TypeError for anything else; callers decide which
    error kind that becomes.
    """
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got bool {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(value)
    if isinstance(value, str):
        return Decimal(value.strip())
    raise TypeError(f"Expected a number or numeric string, got {type(value).__name__}")


def _price_as_decimal(price: Any) -> Decimal:
    if price is None or (isinstance(price, str) and not price.strip()):
        raise InvalidArgument("Price must be provided")
    try:
        p = _as_decimal(price)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidArgument(f"Price must be a positive number: {exc}") from exc
    if p.is_nan() or p <= 0:
        raise InvalidArgument(f"Price must be a positive number, got {price!r}")
    return p


def is_valid_tick(tick: Any) -> bool:
    """True iff tick is an integer inside [MIN_TICK, MAX_TICK]. Never raises."""
    return _is_int(tick) and MIN_TICK <= tick <= MAX_TICK


def encode_sqrt_price(reserve1: Any, reserve0: Any) -> int:
    """
    Encode the reserve ratio reserve1/reserve0 as sqrtPriceX96.

    Equal reserves (compared numerically, so 1 == "1" == "1.0") give exactly Q96.
    Otherwise floor(sqrt(ratio) * 1e12) * 2**96 // 1e12, which keeps the float
    error out of the 2**96 multiplication.

    Raises:
      InvalidArgument: a reserve is missing, zero or negative.
      EncodingFailed: anything else went wrong (non-numeric input, overflow, ...).
    """
    if reserve0 is None or reserve1 is None or reserve0 == "" or reserve1 == "":
        raise InvalidArgument("Both reserves must be provided")
    if isinstance(reserve0, bool) or isinstance(reserve1, bool):
        raise InvalidArgument("Reserves must be numbers, not booleans")

    try:
        r1 = _as_decimal(reserve1)
        r0 = _as_decimal(reserve0)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise EncodingFailed(f"Failed to encode sqrt price: {exc}") from exc

    if not (r0.is_finite() and r1.is_finite()):
        raise EncodingFailed(f"Failed to encode sqrt price: non-finite reserve ({reserve1!r}, {reserve0!r})")
    if r0 <= 0 or r1 <= 0:
        raise InvalidArgument("Reserves must be positive numbers")

    if r1 == r0:
        return Q96

    try:
        ratio = float(r1) / float(r0)
        scaled = math.floor(math.sqrt(ratio) * SQRT_SCALE)
        return scaled * Q96 // SQRT_SCALE
    except (ArithmeticError, ValueError) as exc:
        raise EncodingFailed(f"Failed to encode sqrt price: {exc}") from exc


def decode_sqrt_price(sqrt_price_x96: Any) -> float:
    """Convert sqrtPriceX96 back to price = token1/token0 (float)."""
    if not _is_int(sqrt_price_x96):
        raise InvalidArgument(f"sqrtPriceX96 must be an integer, got {sqrt_price_x96!r}")
    if sqrt_price_x96 < 0:
        raise InvalidArgument("sqrtPriceX96 must not be negative")
    sp = sqrt_price_x96 / Q96
    return sp * sp


def price_to_tick(price: Any) -> int:
    """
    Convert a price to its tick: floor(ln(price) / ln(1.0001)).

    Raises:
      InvalidArgument: price missing, non-numeric, or <= 0.
      OutOfRange: the resulting tick is outside [MIN_TICK, MAX_TICK].
    """
    pf = float(_price_as_decimal(price))
    if pf == 0.0 or math.isinf(pf):
        # below / above what a double can hold, so far outside the tick range
        raise OutOfRange(f"Price {price} is out of valid tick range")

    raw = math.log(pf) / math.log(TICK_BASE)
    tick = math.floor(raw)
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OutOfRange(f"Price {price} is out of valid tick range (tick {tick})")
    return tick


def tick_to_price(tick: Any) -> str:
    """
    Convert a tick to price = 1.0001**tick as an 18-decimal fixed-point string.

    "1000000000000000000" is a price of 1.0. The value is truncated, so very
    negative ticks come out as "0".
    """
    t = _require_tick(tick)
    price = TICK_BASE ** t
    return str(math.floor(price * 10 ** PRICE_DECIMALS))


def tick_to_human_price(tick: Any, decimals0: int = 18, decimals1: int = 18) -> float:
    """Price of token0 in token1 whole units, adjusting for token decimals."""
    t = _require_tick(tick)
    return (TICK_BASE ** t) * (10 ** (decimals0 - decimals1))


def human_price_to_raw(price: Any, decimals0: int = 18, decimals1: int = 18) -> Decimal:
    """
    Inverse of tick_to_human_price: whole-token price (token1 per token0) to the
    base-unit ratio that ticks are defined on.
    """
    p = _price_as_decimal(price)
    if not (_is_int(decimals0) and _is_int(decimals1)) or decimals0 < 0 or decimals1 < 0:
        raise InvalidArgument(f"Token decimals must be non-negative integers, got {decimals0!r}, {decimals1!r}")
    return p * Decimal(10) ** (decimals1 - decimals0)


def nearest_usable_tick(tick: Any, tick_spacing: Any) -> int:
    """
    Snap tick to the nearest multiple of tick_spacing.

    Exact halves round up (toward +infinity), so 30 -> 60 and -30 -> 0 with a
    spacing of 60. The result is clamped to the outermost usable multiples, so
    it is always a multiple of the spacing and a valid tick.
    """
    t = _require_tick(tick)
    spacing = _require_spacing(tick_spacing)

    q, r = divmod(t, spacing)
    if 2 * r >= spacing:
        q += 1
    rounded = q * spacing

    max_usable = (MAX_TICK // spacing) * spacing
    min_usable = -max_usable
    return max(min_usable, min(rounded, max_usable))


def full_range_ticks(tick_spacing: Any) -> tuple[int, int]:
    """Widest usable (tickLower, tickUpper) for a spacing, e.g. (-887220, 887220) for 60."""
    spacing = _require_spacing(tick_spacing)
    upper = (MAX_TICK // spacing) * spacing
    return -upper, upper


def tick_spacing_for_fee(fee: Any) -> int:
    if fee not in TICK_SPACINGS or isinstance(fee, bool):
        raise InvalidArgument(f"Invalid fee tier: {fee}")
    return TICK_SPACINGS[fee]


def tick_range_for_price(price: Any, tick_spacing: Any, width: float = 0.1) -> tuple[int, int]:
    """
    Tick range covering price * (1 - width) .. price * (1 + width).

    Lower bound is floored and upper bound ceiled to the spacing, so the range
    always contains the requested band.
    """
    spacing = _require_spacing(tick_spacing)
    if not isinstance(width, (int, float)) or isinstance(width, bool) or not 0 < width < 1:
        raise InvalidArgument(f"Width must be between 0 and 1, got {width!r}")

    p = float(_price_as_decimal(price))
    lower = price_to_tick(p * (1 - width))
    upper = price_to_tick(p * (1 + width)) + 1

    tick_lower = (lower // spacing) * spacing
    tick_upper = -((-upper) // spacing) * spacing

    max_usable = (MAX_TICK // spacing) * spacing
    tick_lower = max(tick_lower, -max_usable)
    tick_upper = min(tick_upper, max_usable)

    if not (is_valid_tick(tick_lower) and is_valid_tick(tick_upper)) or tick_lower >= tick_upper:
        raise OutOfRange(f"No usable tick range around price {price}")
    return tick_lower, tick_upper


def in_range(current_tick: int, tick_lower: int, tick_upper: int) -> bool:
    """A position earns fees while tick_lower <= current < tick_upper."""
    return tick_lower <= current_tick < tick_upper


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses as (token0, token1); the factory requires token0 < token1."""
    if token_a.lower() == token_b.lower():
        raise InvalidArgument("token_a and token_b must differ")
    if token_a.lower() < token_b.lower():
        return token_a, token_b
    return token_b, token_a
