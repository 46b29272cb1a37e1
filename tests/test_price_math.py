"""
Tests for v3ops.price_math.

Covers:
    - encode_sqrt_price / decode_sqrt_price
    - price_to_tick / tick_to_price / tick_to_human_price / human_price_to_raw
    - nearest_usable_tick / is_valid_tick / full_range_ticks
    - tick_range_for_price / in_range / sort_tokens / tick_spacing_for_fee
"""

from decimal import Decimal

import pytest

from v3ops.price_math import (
    FEE_TIERS,
    MAX_TICK,
    MIN_TICK,
    Q96,
    EncodingFailed,
    InvalidArgument,
    OutOfRange,
    PriceMathError,
    decode_sqrt_price,
    encode_sqrt_price,
    full_range_ticks,
    human_price_to_raw,
    in_range,
    is_valid_tick,
    nearest_usable_tick,
    price_to_tick,
    sort_tokens,
    tick_range_for_price,
    tick_spacing_for_fee,
    tick_to_human_price,
    tick_to_price,
)


def test_errors_are_value_errors():
    for cls in (InvalidArgument, OutOfRange, EncodingFailed):
        assert issubclass(cls, PriceMathError)
        assert issubclass(cls, ValueError)


# ===================================================================
# encode_sqrt_price
# ===================================================================
class TestEncodeSqrtPrice:

    def test_equal_reserves_is_exactly_q96(self):
        assert encode_sqrt_price(100, 100) == 79228162514264337593543950336
        assert encode_sqrt_price(1, 1) == Q96

    @pytest.mark.parametrize("r1, r0", [("1", "1"), ("1", "1.0"), (Decimal("2.50"), "2.5"), (7.0, 7)])
    def test_equal_reserves_compared_numerically(self, r1, r0):
        assert encode_sqrt_price(r1, r0) == Q96

    def test_perfect_squares_are_exact(self):
        assert encode_sqrt_price(4, 1) == 2 * Q96
        assert encode_sqrt_price(100, 1) == 10 * Q96
        assert encode_sqrt_price(1, 4) == Q96 // 2

    def test_higher_ratio_gives_higher_sqrt_price(self):
        assert encode_sqrt_price(2, 1) > Q96 > encode_sqrt_price(1, 2)

    def test_result_is_int(self):
        assert isinstance(encode_sqrt_price("3", "2"), int)

    def test_decodes_back_to_ratio(self):
        assert decode_sqrt_price(encode_sqrt_price(9, 1)) == pytest.approx(9.0, rel=1e-9)
        assert decode_sqrt_price(encode_sqrt_price("1", "3000")) == pytest.approx(1 / 3000, rel=1e-9)

    @pytest.mark.parametrize("r1, r0", [(None, 1), (1, None), ("", "1"), ("1", "")])
    def test_missing_reserve(self, r1, r0):
        with pytest.raises(InvalidArgument):
            encode_sqrt_price(r1, r0)

    @pytest.mark.parametrize("r1, r0", [(0, 1), (1, 0), (-1, 1), ("1", "-5")])
    def test_non_positive_reserve(self, r1, r0):
        with pytest.raises(InvalidArgument, match="positive"):
            encode_sqrt_price(r1, r0)

    def test_bool_reserve_rejected(self):
        with pytest.raises(InvalidArgument):
            encode_sqrt_price(True, 1)

    @pytest.mark.parametrize("r1, r0", [("abc", "1"), ("1", "nan"), ("inf", "1"), ([1], 1)])
    def test_unparseable_reserve_is_encoding_failure(self, r1, r0):
        with pytest.raises(EncodingFailed):
            encode_sqrt_price(r1, r0)

    def test_encoding_failure_chains_cause(self):
        with pytest.raises(EncodingFailed) as info:
            encode_sqrt_price("not-a-number", "1")
        assert info.value.__cause__ is not None


class TestDecodeSqrtPrice:

    def test_known_values(self):
        assert decode_sqrt_price(Q96) == 1.0
        assert decode_sqrt_price(2 * Q96) == 4.0
        assert decode_sqrt_price(0) == 0.0

    @pytest.mark.parametrize("value", [-1, 1.5, "79228162514264337593543950336"])
    def test_rejects_bad_input(self, value):
        with pytest.raises(InvalidArgument):
            decode_sqrt_price(value)


# ===================================================================
# price_to_tick / tick_to_price
# ===================================================================
class TestPriceToTick:

    def test_price_one_is_tick_zero(self):
        assert price_to_tick(1) == 0
        assert price_to_tick("1") == 0
        assert price_to_tick(Decimal("1.0")) == 0

    def test_one_basis_point(self):
        assert price_to_tick(1.0001) == 1
        assert price_to_tick("1.0001") == 1

    def test_floor_semantics(self):
        assert price_to_tick(2) == 6931
        assert price_to_tick(0.5) == -6932

    @pytest.mark.parametrize("price", [None, "", "   ", 0, "0", -1, "-2.5", "abc", "nan", True])
    def test_invalid_price(self, price):
        with pytest.raises(InvalidArgument):
            price_to_tick(price)

    @pytest.mark.parametrize("price", ["1e40", "1e-40", "1e400", "1e-400"])
    def test_price_outside_tick_range(self, price):
        with pytest.raises(OutOfRange):
            price_to_tick(price)


class TestTickToPrice:

    def test_tick_zero_is_one(self):
        assert tick_to_price(0) == "1000000000000000000"

    def test_returns_digit_string(self):
        for tick in (-500, -1, 1, 500, 100000):
            s = tick_to_price(tick)
            assert isinstance(s, str)
            assert s.isdigit()

    def test_min_tick_truncates_to_zero(self):
        assert tick_to_price(MIN_TICK) == "0"

    def test_max_tick_is_huge(self):
        assert int(tick_to_price(MAX_TICK)) > 10 ** 56

    def test_strictly_increasing_near_zero(self):
        prices = [int(tick_to_price(t)) for t in range(-100, 101)]
        assert all(a < b for a, b in zip(prices, prices[1:]))

    @pytest.mark.parametrize("tick", [1.5, "10", None, True])
    def test_non_integer_tick(self, tick):
        with pytest.raises(InvalidArgument):
            tick_to_price(tick)

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1])
    def test_tick_out_of_range(self, tick):
        with pytest.raises(OutOfRange):
            tick_to_price(tick)

    def test_round_trip_lands_on_tick_or_one_below(self):
        for t in range(-10000, 10001, 97):
            back = price_to_tick(int(tick_to_price(t)) / 1e18)
            assert back in (t - 1, t), t
        assert price_to_tick(int(tick_to_price(0)) / 1e18) == 0

    def test_round_trip_is_exact_for_most_ticks(self):
        ticks = range(-10000, 10001)
        exact = sum(1 for t in ticks if price_to_tick(int(tick_to_price(t)) / 1e18) == t)
        # about 71% land exactly; the rest fall one tick below
        assert exact / len(ticks) > 0.6

    def test_human_price_adjusts_decimals(self):
        assert tick_to_human_price(0) == 1.0
        # token0 with 18 decimals, token1 with 6 (e.g. WETH/USDC)
        assert tick_to_human_price(0, 18, 6) == pytest.approx(1e12)
        assert tick_to_human_price(0, 6, 18) == pytest.approx(1e-12)


class TestHumanPriceToRaw:

    def test_scales_by_decimal_difference(self):
        assert human_price_to_raw("2000", 18, 6) == Decimal("2E-9")
        assert human_price_to_raw("2000", 6, 18) == Decimal("2E15")
        assert human_price_to_raw(5) == 5

    def test_inverts_human_price(self):
        for tick in (-60000, -887, 0, 1234, 70000):
            human = tick_to_human_price(tick, 18, 6)
            raw = human_price_to_raw(human, 18, 6)
            assert float(raw) == pytest.approx(1.0001 ** tick, rel=1e-9)

    @pytest.mark.parametrize("d0, d1", [(-1, 18), (18, 1.5), (None, 6), (True, 6)])
    def test_bad_decimals(self, d0, d1):
        with pytest.raises(InvalidArgument, match="decimals"):
            human_price_to_raw("1", d0, d1)

    def test_bad_price(self):
        with pytest.raises(InvalidArgument):
            human_price_to_raw("0", 18, 6)


# ===================================================================
# nearest_usable_tick / is_valid_tick / full_range_ticks
# ===================================================================
class TestNearestUsableTick:

    @pytest.mark.parametrize(
        "tick, spacing, expected",
        [
            (0, 60, 0),
            (59, 60, 60),
            (29, 60, 0),
            (30, 60, 60),
            (-30, 60, 0),
            (-31, 60, -60),
            (-100, 60, -120),
            (100, 60, 120),
            (123, 1, 123),
            (15, 10, 20),
            (-15, 10, -10),
        ],
    )
    def test_snaps_to_nearest_multiple(self, tick, spacing, expected):
        assert nearest_usable_tick(tick, spacing) == expected

    def test_result_is_multiple_within_half_spacing(self):
        for t in range(-1000, 1000, 7):
            snapped = nearest_usable_tick(t, 60)
            assert snapped % 60 == 0
            assert abs(snapped - t) <= 30

    def test_clamps_at_the_edges(self):
        assert nearest_usable_tick(MAX_TICK, 60) == 887220
        assert nearest_usable_tick(MIN_TICK, 60) == -887220
        assert nearest_usable_tick(MAX_TICK, 1) == MAX_TICK
        assert nearest_usable_tick(MIN_TICK, 200) == -887200

    @pytest.mark.parametrize("spacing", [0, -60, 1.5, None, True])
    def test_bad_spacing(self, spacing):
        with pytest.raises(InvalidArgument):
            nearest_usable_tick(0, spacing)

    def test_bad_tick(self):
        with pytest.raises(InvalidArgument):
            nearest_usable_tick(1.5, 60)
        with pytest.raises(OutOfRange):
            nearest_usable_tick(MAX_TICK + 1, 60)


class TestIsValidTick:

    @pytest.mark.parametrize("tick", [0, 1, -1, MIN_TICK, MAX_TICK])
    def test_valid(self, tick):
        assert is_valid_tick(tick) is True

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1, 1.5, 0.0, "1", None, True, False])
    def test_invalid(self, tick):
        assert is_valid_tick(tick) is False


class TestFullRangeAndFees:

    @pytest.mark.parametrize(
        "spacing, expected",
        [(1, (-887272, 887272)), (10, (-887270, 887270)), (60, (-887220, 887220)), (200, (-887200, 887200))],
    )
    def test_full_range(self, spacing, expected):
        assert full_range_ticks(spacing) == expected

    def test_fee_tier_spacing(self):
        assert tick_spacing_for_fee(FEE_TIERS["LOWEST"]) == 1
        assert tick_spacing_for_fee(FEE_TIERS["LOW"]) == 10
        assert tick_spacing_for_fee(FEE_TIERS["MEDIUM"]) == 60
        assert tick_spacing_for_fee(FEE_TIERS["HIGH"]) == 200

    def test_unknown_fee_tier(self):
        with pytest.raises(InvalidArgument):
            tick_spacing_for_fee(123)


# ===================================================================
# tick_range_for_price / in_range / sort_tokens
# ===================================================================
class TestTickRangeForPrice:

    def test_ten_percent_band_around_one(self):
        assert tick_range_for_price(1, 60) == (-1080, 960)

    def test_range_contains_band(self):
        lower, upper = tick_range_for_price("2000", 10, width=0.05)
        assert lower % 10 == 0 and upper % 10 == 0
        assert 1.0001 ** lower <= 2000 * 0.95
        assert 1.0001 ** upper >= 2000 * 1.05

    @pytest.mark.parametrize("width", [0, 1, -0.1, 1.5, True, "0.1"])
    def test_bad_width(self, width):
        with pytest.raises(InvalidArgument):
            tick_range_for_price(1, 60, width)

    def test_bad_price(self):
        with pytest.raises(InvalidArgument):
            tick_range_for_price(0, 60)


def test_in_range_is_half_open():
    assert in_range(0, -60, 60)
    assert in_range(-60, -60, 60)
    assert not in_range(60, -60, 60)
    assert not in_range(-61, -60, 60)


class TestSortTokens:
    LOW = "0x17B8Ee96E3bcB3b04b3e8334de4524520C51caB4"
    HIGH = "0xa9012a055bd4e0eDfF8Ce09f960291C09D5322dC"

    def test_orders_by_address(self):
        assert sort_tokens(self.LOW, self.HIGH) == (self.LOW, self.HIGH)
        assert sort_tokens(self.HIGH, self.LOW) == (self.LOW, self.HIGH)

    def test_same_token_rejected(self):
        with pytest.raises(InvalidArgument):
            sort_tokens(self.LOW, self.LOW.lower())
