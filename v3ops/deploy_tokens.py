"""
v3ops/deploy_tokens.py

Deploys the mintable test tokens TokenA and TokenB from their Hardhat artifacts
and records the addresses under the active network in ADDRESSES_FILE
(default config/deployedAddresses.json). load_config() picks them up as
TOKEN_A/TOKEN_B unless those are set explicitly in the env.

Usage:
  python -m v3ops.deploy_tokens [--initial-supply 1000000]
"""

import argparse

from v3ops.abi import load_artifact, token_artifact_path
from v3ops.chain import Chain, format_units, to_base_units
from v3ops.config import load_config, save_addresses

TOKENS = ("TokenA", "TokenB")


def deploy_token(chain: Chain, name: str, initial_supply: int) -> str:
    abi, bytecode = load_artifact(token_artifact_path(name))
    if bytecode is None:
        raise RuntimeError(f"{name} artifact has no bytecode; compile the contracts first")

    print(f"Deploying {name}...")
    address = chain.deploy_contract(abi, bytecode, initial_supply)
    size = chain.has_code(address)
    if not size:
        raise RuntimeError(f"{name} deployment mined but no code at {address}")
    print(f"  {name} deployed at: {address} ({size} bytes)")
    return address


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--initial-supply", dest="initial_supply", default="1000000", help="per token, human units")
    args = parser.parse_args()

    cfg = load_config()
    chain = Chain.from_config(cfg)

    supply = to_base_units(args.initial_supply, 18)

    print(f"Deploying test tokens to {cfg.network} (chain id {chain.chain_id})")
    print(f"  Deployer      : {chain.address}")
    print(f"  Initial supply: {format_units(supply)} each")
    print("")

    deployed = {name: deploy_token(chain, name, supply) for name in TOKENS}
    save_addresses(cfg.addresses_file, cfg.network, deployed)

    print("")
    print("Deployment summary:")
    for name, address in deployed.items():
        print(f"  {name}: {address}")
    print(f"Addresses saved to {cfg.addresses_file} under '{cfg.network}'")


if __name__ == "__main__":
    main()
