#!/usr/bin/env python3
"""Register the default chain catalog with a running API.

Chains that already exist are skipped.

Usage:
    python scripts/register_chains.py [--url URL] [--testnets]

Environment (from .env or shell):
    BACKEND_URL       API base URL (default: http://localhost:3001)
    BACKEND_API_KEY   API key; falls back to the first of VALID_API_KEYS
    ALCHEMY_API_KEY   Optional; public RPC endpoints are used without it
"""

import argparse
import asyncio
import os
import sys

import httpx
from dotenv import load_dotenv

load_dotenv()


# id -> (name, display name, chain id, alchemy network, public rpc, explorer, currency, testnet)
CHAIN_CATALOG = {
    "ethereum-mainnet": ("ethereum", "Ethereum Mainnet", 1, "eth-mainnet",
                         "https://ethereum-rpc.publicnode.com", "https://etherscan.io",
                         ("Ether", "ETH", 18), False),
    "polygon-mainnet": ("polygon", "Polygon Mainnet", 137, "polygon-mainnet",
                        "https://polygon-rpc.com", "https://polygonscan.com",
                        ("Matic", "MATIC", 18), False),
    "arbitrum-mainnet": ("arbitrum", "Arbitrum One", 42161, "arb-mainnet",
                         "https://arb1.arbitrum.io/rpc", "https://arbiscan.io",
                         ("Ether", "ETH", 18), False),
    "optimism-mainnet": ("optimism", "OP Mainnet", 10, "opt-mainnet",
                         "https://mainnet.optimism.io", "https://optimistic.etherscan.io",
                         ("Ether", "ETH", 18), False),
    "base-mainnet": ("base", "Base", 8453, "base-mainnet",
                     "https://mainnet.base.org", "https://basescan.org",
                     ("Ether", "ETH", 18), False),
    "avalanche-mainnet": ("avalanche", "Avalanche C-Chain", 43114, None,
                          "https://api.avax.network/ext/bc/C/rpc", "https://snowtrace.io",
                          ("Avalanche", "AVAX", 18), False),
    "ethereum-sepolia": ("ethereum", "Ethereum Sepolia", 11155111, "eth-sepolia",
                         "https://ethereum-sepolia-rpc.publicnode.com", "https://sepolia.etherscan.io",
                         ("Sepolia Ether", "ETH", 18), True),
    "polygon-amoy": ("polygon", "Polygon Amoy", 80002, "polygon-amoy",
                     "https://rpc-amoy.polygon.technology", "https://amoy.polygonscan.com",
                     ("Matic", "MATIC", 18), True),
}


def default_chains(alchemy_key: str = "", include_testnets: bool = False) -> list[dict]:
    """Registration payloads for the catalog."""
    chains = []
    for chain_key, entry in CHAIN_CATALOG.items():
        name, display_name, chain_id, network, public_rpc, explorer, currency, testnet = entry
        if testnet and not include_testnets:
            continue
        rpc_url = (
            f"https://{network}.g.alchemy.com/v2/{alchemy_key}"
            if alchemy_key and network
            else public_rpc
        )
        chains.append({
            "id": chain_key,
            "name": name,
            "display_name": display_name,
            "chain_id": chain_id,
            "rpc_url": rpc_url,
            "explorer_url": explorer,
            "native_currency": {"name": currency[0], "symbol": currency[1], "decimals": currency[2]},
            "is_testnet": testnet,
        })
    return chains


async def register_chains(base_url: str, api_key: str, chains: list[dict]) -> int:
    """Register missing chains.

    Returns:
        Number of failures
    """
    failures = 0
    headers = {"X-API-Key": api_key} if api_key else {}
    async with httpx.AsyncClient(base_url=base_url.rstrip("/"), headers=headers, timeout=15.0) as client:
        for chain in chains:
            existing = await client.get(f"/chains/{chain['id']}")
            if existing.status_code == 200:
                print(f"  = {chain['id']} already registered")
                continue

            response = await client.post("/chains/register", json=chain)
            if response.status_code == 200:
                print(f"  + {chain['id']} registered ({chain['display_name']})")
            else:
                failures += 1
                print(f"  ! {chain['id']} failed: HTTP {response.status_code} {response.text}")
    return failures


def main():
    parser = argparse.ArgumentParser(description="Register the default chain catalog")
    parser.add_argument("--url", default=os.getenv("BACKEND_URL", "http://localhost:3001"),
                        help="API base URL")
    parser.add_argument("--testnets", action="store_true", help="Also register testnets")
    args = parser.parse_args()

    raw_keys = os.getenv("BACKEND_API_KEY") or os.getenv("VALID_API_KEYS", "")
    api_key = next((k.strip() for k in raw_keys.split(",") if k.strip()), "")
    chains = default_chains(os.getenv("ALCHEMY_API_KEY", ""), include_testnets=args.testnets)

    print(f"Registering {len(chains)} chains with {args.url}")
    try:
        failures = asyncio.run(register_chains(args.url, api_key, chains))
    except httpx.HTTPError as e:
        print(f"Request failed: {e}")
        sys.exit(1)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
