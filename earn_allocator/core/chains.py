"""Chain id to network lookups."""

from dataclasses import dataclass
from typing import Dict

from .errors import UnsupportedChainError


@dataclass(frozen=True)
class Chain:
    """Network metadata used in reports and notifications."""
    chain_id: int
    name: str
    defillama_name: str
    explorer_url: str


CHAINS: Dict[int, Chain] = {
    1: Chain(1, "mainnet", "ethereum", "https://etherscan.io"),
    146: Chain(146, "sonic", "sonic", "https://sonicscan.org"),
    8453: Chain(8453, "base", "base", "https://basescan.org"),
    9745: Chain(9745, "plasma", "plasma", "https://plasmascan.to/"),
    42161: Chain(42161, "arbitrum", "arbitrum", "https://arbiscan.io"),
}


def get_chain(chain_id: int) -> Chain:
    """Return the chain for an id or raise UnsupportedChainError."""
    chain = CHAINS.get(chain_id)
    if chain is None:
        raise UnsupportedChainError(f"Unsupported chainId: {chain_id}")
    return chain


def get_chain_name(chain_id: int) -> str:
    return get_chain(chain_id).name


def get_chain_name_defillama(chain_id: int) -> str:
    return get_chain(chain_id).defillama_name


def get_explorer_tx_url(chain_id: int, tx_hash: str) -> str:
    """Build a block explorer link for a transaction."""
    base_url = get_chain(chain_id).explorer_url.rstrip("/")
    return f"{base_url}/tx/{tx_hash}"
