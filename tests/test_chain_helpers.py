from decimal import Decimal

import pytest
from web3 import Web3

from v3ops.chain import (
    INCREASE_LIQUIDITY_TOPIC,
    TRANSFER_TOPIC,
    MintParams,
    format_units,
    to_base_units,
    token_id_from_receipt,
)

NPM = "0x1400feFD6F9b897970f00Df6237Ff2B8b27Dc82C"
OTHER = "0x17B8Ee96E3bcB3b04b3e8334de4524520C51caB4"
ZERO_TOPIC = "0x" + "00" * 32


def _word(value: int) -> str:
    return "0x" + format(value, "064x")


def _addr_topic(address: str) -> str:
    return "0x" + "00" * 12 + address[2:].lower()


def test_event_topics():
    assert TRANSFER_TOPIC == "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    assert INCREASE_LIQUIDITY_TOPIC.startswith("0x") and len(INCREASE_LIQUIDITY_TOPIC) == 66


class TestToBaseUnits:

    @pytest.mark.parametrize(
        "amount, decimals, expected",
        [
            ("1000", 18, 1000 * 10 ** 18),
            ("1.5", 6, 1_500_000),
            (0.5, 18, 5 * 10 ** 17),
            (Decimal("0.000000000000000001"), 18, 1),
            ("0.0000001", 6, 0),
            ("42", 0, 42),
            (7, 18, 7 * 10 ** 18),
        ],
    )
    def test_conversion(self, amount, decimals, expected):
        assert to_base_units(amount, decimals) == expected

    def test_large_amount_is_exact(self):
        assert to_base_units("123456789012345678901234567890.123456789012345678", 18) == (
            123456789012345678901234567890123456789012345678
        )

    @pytest.mark.parametrize("amount", ["-1", "nan", "inf"])
    def test_rejects_negative_and_non_finite(self, amount):
        with pytest.raises(ValueError):
            to_base_units(amount)


class TestFormatUnits:

    @pytest.mark.parametrize(
        "value, decimals, expected",
        [
            (1_500_000, 6, "1.5"),
            (10 ** 18, 18, "1"),
            (0, 18, "0"),
            (1, 18, "0.000000000000000001"),
            (-15, 1, "-1.5"),
            (42, 0, "42"),
            (1000 * 10 ** 18 + 25 * 10 ** 15, 18, "1000.025"),
        ],
    )
    def test_formatting(self, value, decimals, expected):
        assert format_units(value, decimals) == expected

    def test_inverse_of_to_base_units(self):
        assert format_units(to_base_units("3.14159", 6), 6) == "3.14159"


class TestTokenIdFromReceipt:

    def test_from_mint_transfer(self):
        receipt = {
            "logs": [
                {
                    "address": NPM.lower(),
                    "topics": [TRANSFER_TOPIC, ZERO_TOPIC, _addr_topic(OTHER), _word(42)],
                }
            ]
        }
        assert token_id_from_receipt(receipt, NPM) == 42

    def test_from_increase_liquidity_with_bytes_topics(self):
        receipt = {
            "logs": [
                {
                    "address": NPM,
                    "topics": [bytes.fromhex(INCREASE_LIQUIDITY_TOPIC[2:]), bytes.fromhex(_word(7)[2:])],
                }
            ]
        }
        assert token_id_from_receipt(receipt, NPM) == 7

    def test_skips_erc20_transfers_from_other_contracts(self):
        erc20_transfer = {
            "address": OTHER,
            "topics": [TRANSFER_TOPIC, _addr_topic(OTHER), _addr_topic(NPM)],
        }
        nft_mint = {
            "address": NPM,
            "topics": [TRANSFER_TOPIC, ZERO_TOPIC, _addr_topic(OTHER), _word(1234)],
        }
        assert token_id_from_receipt({"logs": [erc20_transfer, nft_mint]}, NPM) == 1234

    def test_ignores_non_mint_nft_transfer(self):
        receipt = {
            "logs": [
                {
                    "address": NPM,
                    "topics": [TRANSFER_TOPIC, _addr_topic(OTHER), _addr_topic(NPM), _word(5)],
                }
            ]
        }
        with pytest.raises(RuntimeError, match="Mint event not found"):
            token_id_from_receipt(receipt, NPM)

    def test_no_logs(self):
        with pytest.raises(RuntimeError):
            token_id_from_receipt({"logs": []}, NPM)


def test_mint_params_tuple_order():
    params = MintParams(
        token0=OTHER.lower(),
        token1=NPM.lower(),
        fee=3000,
        tick_lower=-887220,
        tick_upper=887220,
        amount0_desired=10,
        amount1_desired=20,
        amount0_min=0,
        amount1_min=0,
        recipient=OTHER.lower(),
        deadline=1_700_000_000,
    )
    t = params.as_tuple()
    assert len(t) == 11
    assert t[0] == Web3.to_checksum_address(OTHER)
    assert t[1] == Web3.to_checksum_address(NPM)
    assert t[2:9] == (3000, -887220, 887220, 10, 20, 0, 0)
    assert t[9] == Web3.to_checksum_address(OTHER)
    assert t[10] == 1_700_000_000
