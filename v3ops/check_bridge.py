"""
v3ops/check_bridge.py

Checks that the LxLy bridge and bridge extension contracts have code on both
sepolia and katana. Read-only: no key or chain id check is needed, only each
network's RPC URL. A network whose config cannot be loaded is reported and
skipped.

Usage:
  python -m v3ops.check_bridge
"""

from web3 import Web3

from v3ops.config import SUPPORTED_NETWORKS, load_network_config


def code_size(w3: Web3, address: str) -> int:
    return len(w3.eth.get_code(Web3.to_checksum_address(address)))


def check_network(network: str) -> dict[str, bool] | None:
    """{label: has_code} for the network's bridge contracts, or None if unreachable."""
    try:
        cfg = load_network_config(network)
    except ValueError as e:
        print(f"  skipped: {e}")
        return None

    w3 = Web3(Web3.HTTPProvider(cfg.rpc_url))
    if not w3.is_connected():
        print(f"  skipped: could not connect to RPC {cfg.rpc_url}")
        return None

    results: dict[str, bool] = {}
    for label, address in (("Bridge", cfg.bridge), ("Bridge Extension", cfg.bridge_extension)):
        size = code_size(w3, address)
        if size:
            print(f"  {label} exists at {address} ({size} bytes)")
        else:
            print(f"  No contract found for {label} at {address}")
        results[label] = size > 0
    return results


def main() -> None:
    print("Checking bridge contracts...")

    summary: dict[str, dict[str, bool] | None] = {}
    for network in SUPPORTED_NETWORKS:
        print("")
        print(f"--- {network} ---")
        summary[network] = check_network(network)

    print("")
    print("Summary:")
    for network, results in summary.items():
        if results is None:
            print(f"  {network}: not checked")
            continue
        for label, ok in results.items():
            print(f"  {network} {label}: {'OK' if ok else 'MISSING'}")


if __name__ == "__main__":
    main()
