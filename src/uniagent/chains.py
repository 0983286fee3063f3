"""Chain and asset resolution for the execution engine.

Maps the human-readable chain names and asset symbols clients send to the
canonical identifiers the engine expects. Pure lookups, no I/O.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from uniagent.errors import MissingFieldError, UnknownAssetError, UnknownChainError

# Sentinel for "the chain's native asset"
NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a supported chain."""

    name: str
    chain_id: int
    native_symbol: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    is_evm: bool = True


class PrimaryAsset(str, Enum):
    """Settlement assets the engine treats as interchangeable via convert."""

    USDC = "usdc"
    USDT = "usdt"
    ETH = "eth"
    SOL = "sol"
    BNB = "bnb"
    BTC = "btc"


# ======================
# Chain Configurations
# ======================

CHAINS: dict[str, ChainConfig] = {
    "ethereum": ChainConfig("Ethereum", 1, "ETH", aliases=("eth",)),
    "bsc": ChainConfig("BNB Smart Chain", 56, "BNB", aliases=("bnb",)),
    "base": ChainConfig("Base", 8453, "ETH"),
    "arbitrum": ChainConfig("Arbitrum One", 42161, "ETH", aliases=("arb",)),
    "avalanche": ChainConfig("Avalanche C-Chain", 43114, "AVAX", aliases=("avax",)),
    "optimism": ChainConfig("Optimism", 10, "ETH", aliases=("op",)),
    "polygon": ChainConfig("Polygon", 137, "POL", aliases=("matic",)),
    "solana": ChainConfig("Solana", 101, "SOL", aliases=("sol",), is_evm=False),
    "linea": ChainConfig("Linea", 59144, "ETH"),
    "sonic": ChainConfig("Sonic", 146, "S"),
    "berachain": ChainConfig("Berachain", 80094, "BERA", aliases=("bera",)),
    "mantle": ChainConfig("Mantle", 5000, "MNT"),
    "monad": ChainConfig("Monad", 143, "MON"),
    "merlin": ChainConfig("Merlin", 4200, "BTC"),
    "hyperevm": ChainConfig("HyperEVM", 999, "HYPE"),
    "blast": ChainConfig("Blast", 81457, "ETH"),
    "manta": ChainConfig("Manta Pacific", 169, "ETH"),
    "mode": ChainConfig("Mode", 34443, "ETH"),
    "plasma": ChainConfig("Plasma", 9745, "XPL"),
    "xlayer": ChainConfig("X Layer", 196, "OKB"),
    "conflux": ChainConfig("Conflux eSpace", 1030, "CFX"),
}


def _build_alias_table() -> dict[str, int]:
    table: dict[str, int] = {}
    for key, chain in CHAINS.items():
        table[key] = chain.chain_id
        for alias in chain.aliases:
            table[alias] = chain.chain_id
    return table


# Every accepted chain name (canonical key and short aliases) -> chain ID
CHAIN_ALIASES: dict[str, int] = _build_alias_table()

PRIMARY_ASSETS: dict[str, PrimaryAsset] = {asset.name: asset for asset in PrimaryAsset}


# ======================
# Resolution
# ======================

def resolve_chain(name: Optional[str]) -> int:
    """Resolve a chain name or alias to its chain ID.

    Raises:
        MissingFieldError: If name is empty
        UnknownChainError: If name is not a supported alias
    """
    if not name:
        raise MissingFieldError("chain")
    chain_id = CHAIN_ALIASES.get(name.lower())
    if chain_id is None:
        raise UnknownChainError(name)
    return chain_id


def resolve_token(address: Optional[str]) -> str:
    """Resolve a token argument to an engine token address.

    "native" in any case maps to the zero address; anything else passes
    through untouched and is validated by the engine.
    """
    if not address:
        raise MissingFieldError("token")
    if address.lower() == "native":
        return NATIVE_TOKEN_ADDRESS
    return address


def resolve_asset(symbol: Optional[str]) -> PrimaryAsset:
    """Resolve a primary asset symbol (USDC, ETH, ...) case-insensitively.

    Raises:
        MissingFieldError: If symbol is empty
        UnknownAssetError: If symbol is not a primary asset
    """
    if not symbol:
        raise MissingFieldError("asset")
    asset = PRIMARY_ASSETS.get(symbol.upper())
    if asset is None:
        raise UnknownAssetError(symbol, list(PRIMARY_ASSETS))
    return asset


def resolve_source_tokens(symbols: Optional[list[str]]) -> list[PrimaryAsset]:
    """Resolve the primary assets allowed to fund a trade.

    Unknown symbols are dropped rather than rejected.
    """
    if not symbols:
        return []
    return [PRIMARY_ASSETS[s.upper()] for s in symbols if s and s.upper() in PRIMARY_ASSETS]


def get_chain_by_id(chain_id: int) -> Optional[ChainConfig]:
    """Get chain configuration by chain ID."""
    for chain in CHAINS.values():
        if chain.chain_id == chain_id:
            return chain
    return None


def get_supported_chains() -> dict[str, int]:
    """Get every accepted chain alias with its chain ID."""
    return dict(CHAIN_ALIASES)
