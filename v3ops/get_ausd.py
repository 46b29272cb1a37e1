"""
v3ops/get_ausd.py

Requests AUSD from the Katana Tatara faucet for the configured account.

Prints the faucet's drip amount, max balance and drip frequency, then calls
requestFunds(account) and reports the balance change. Faucet reverts are
reported by their custom error name.

Usage:
  NETWORK=katana python -m v3ops.get_ausd
"""

from eth_utils import keccak
from web3.exceptions import ContractLogicError

from v3ops.abi import FAUCET_ABI
from v3ops.chain import Chain, format_units
from v3ops.config import load_config

FAUCET_ERRORS = {
    "MaxFrequencyExceeded": "You must wait longer between requests",
    "MaxAllowedExceeded": "You already have the maximum allowed AUSD",
    "InsufficientFunds": "The faucet is out of funds",
}

_SELECTORS = {"0x" + keccak(text=f"{name}()")[:4].hex(): name for name in FAUCET_ERRORS}


def faucet_error_name(revert: object) -> str | None:
    """Name of the faucet custom error in a revert message/data, if any."""
    text = str(revert)
    for name in FAUCET_ERRORS:
        if name in text:
            return name
    lowered = text.lower()
    for selector, name in _SELECTORS.items():
        if selector in lowered:
            return name
    return None


def main() -> None:
    cfg = load_config()
    if cfg.ausd is None or cfg.ausd_faucet is None:
        raise SystemExit(f"No AUSD faucet configured for NETWORK={cfg.network}; use NETWORK=katana")

    chain = Chain.from_config(cfg)
    ausd = chain.token_info(cfg.ausd)
    faucet = chain.contract(cfg.ausd_faucet, FAUCET_ABI)

    print(f"Requesting AUSD on {cfg.network} (chain id {chain.chain_id})")
    print(f"  Account: {chain.address}")
    print(f"  Faucet : {cfg.ausd_faucet}")

    before = chain.balance_of(cfg.ausd)
    print(f"Initial AUSD balance: {format_units(before, ausd.decimals)} {ausd.symbol}")

    drip = int(faucet.functions.faucetDripAmount().call())
    max_own = int(faucet.functions.maxAmountToOwn().call())
    frequency = int(faucet.functions.maxDripFrequency().call())

    print("")
    print("Faucet configuration:")
    print(f"  Drip amount      : {format_units(drip, ausd.decimals)} {ausd.symbol}")
    print(f"  Max amount to own: {format_units(max_own, ausd.decimals)} {ausd.symbol}")
    print(f"  Max drip freq    : {frequency} seconds")

    print("")
    print("Requesting funds...")
    try:
        rcpt = chain.transact(faucet.functions.requestFunds(chain.address), "requestFunds")
    except ContractLogicError as e:
        name = faucet_error_name(e.data if e.data is not None else e)
        if name is None:
            raise
        raise SystemExit(f"Faucet refused ({name}): {FAUCET_ERRORS[name]}")

    print(f"  Tx hash : {rcpt.transactionHash.hex()}")
    print(f"  Gas used: {rcpt.gasUsed}")

    after = chain.balance_of(cfg.ausd)
    print("")
    print(f"Final AUSD balance: {format_units(after, ausd.decimals)} {ausd.symbol}")
    print(f"Received          : {format_units(after - before, ausd.decimals)} {ausd.symbol}")


if __name__ == "__main__":
    main()
