"""EVM network registry.

All EVM-compatible chains share Ethereum's account model, so one derived
address receives funds on every network listed here.
"""

from dataclasses import dataclass

from src.cw_common.enums import AddressSpace


@dataclass(frozen=True)
class EvmNetwork:
    name: str
    chain_id: int
    native_symbol: str
    explorer_url: str
    required_confirmations: int


EVM_NETWORKS: dict[str, EvmNetwork] = {
    "ERC20": EvmNetwork("ERC20", 1, "ETH", "https://etherscan.io", 12),
    "BSC20": EvmNetwork("BSC20", 56, "BNB", "https://bscscan.com", 15),
    "Arbitrum": EvmNetwork("Arbitrum", 42161, "ETH", "https://arbiscan.io", 6),
    "Optimism": EvmNetwork("Optimism", 10, "ETH", "https://optimistic.etherscan.io", 6),
}

# Token contract addresses per network (USDT/USDC use 6 decimals on-chain)
TOKEN_CONTRACTS: dict[str, dict[str, str]] = {
    "ERC20": {
        "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
        "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    },
    "BSC20": {
        "USDT": "0x55d398326f99059fF775485246999027B3197955",
        "USDC": "0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d",
    },
    "Arbitrum": {
        "USDT": "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
        "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    },
    "Optimism": {
        "USDT": "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58",
        "USDC": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
    },
}


def address_space_of(network: str) -> AddressSpace | None:
    """Return the address space a network belongs to, None if unsupported."""
    return AddressSpace.EVM if network in EVM_NETWORKS else None


def token_contract(network: str, symbol: str) -> str | None:
    """ERC-20 contract for *symbol* on *network*; None for the native coin or unknown tokens."""
    return TOKEN_CONTRACTS.get(network, {}).get(symbol)
