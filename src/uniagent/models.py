"""Domain models shared by the broker and the execution engines."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from uniagent.chains import PrimaryAsset

# Engine fee amounts are fixed-point USD with 18 decimals
USD_DECIMALS = 18


class OperationKind(str, Enum):
    """Operations a client can request."""

    BUY = "buy"
    SELL = "sell"
    CONVERT = "convert"
    TRANSFER = "transfer"


def format_units(value: int, decimals: int = USD_DECIMALS) -> str:
    """Render a fixed-point integer as a decimal string.

    Matches the ethers convention: at least one fractional digit, no
    trailing zeros beyond it (10**18 -> "1.0", 15 * 10**17 -> "1.5").
    """
    negative = value < 0
    whole, frac = divmod(abs(int(value)), 10**decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{'-' if negative else ''}{whole}.{frac_str}"


def parse_units(amount: Decimal, decimals: int = USD_DECIMALS) -> int:
    """Convert a decimal amount to a fixed-point integer."""
    return int(amount * Decimal(10**decimals))


@dataclass(frozen=True)
class Intent:
    """A normalized, fully resolved client request.

    Exactly one of token / asset is set: asset for convert, token otherwise.
    """

    operation: OperationKind
    owner_address: str
    chain_id: int
    amount: str
    token: Optional[str] = None
    asset: Optional[PrimaryAsset] = None
    receiver: Optional[str] = None
    slippage_bps: int = 100
    source_tokens: tuple[PrimaryAsset, ...] = ()
    universal_gas: bool = True


@dataclass(frozen=True)
class FeeQuote:
    """Fee breakdown in 18-decimal fixed-point USD."""

    total: int = 0
    gas: int = 0
    service: int = 0
    lp: int = 0

    @property
    def total_usd(self) -> str:
        return format_units(self.total)

    @property
    def gas_usd(self) -> str:
        return format_units(self.gas)

    @property
    def service_usd(self) -> str:
        return format_units(self.service)

    @property
    def lp_usd(self) -> str:
        return format_units(self.lp)


@dataclass(frozen=True)
class ExecutionContext:
    """What the engine needs, besides the transaction, to submit it later.

    Opaque to the broker: it is stored and handed back, never inspected.
    """

    engine: str
    owner_address: str
    chain_id: int
    slippage_bps: int
    universal_gas: bool = True
    source_tokens: tuple[PrimaryAsset, ...] = ()
    session_id: Optional[str] = None


@dataclass(frozen=True)
class UnsignedTransaction:
    """An engine-built transaction waiting for the owner's signature."""

    root_hash: str
    operation: OperationKind
    context: ExecutionContext
    steps: tuple[dict, ...] = ()
    fee_quote: Optional[FeeQuote] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def step_count(self) -> int:
        return len(self.steps)


@dataclass(frozen=True)
class SubmissionResult:
    """What the engine reports after accepting a signed transaction."""

    transaction_id: str
    fees: Optional[FeeQuote] = None


@dataclass(frozen=True)
class Receipt:
    """Returned to the client after a confirmed submission."""

    transaction_id: str
    explorer_url: str
    fees: Optional[FeeQuote] = None


@dataclass
class ChainAmount:
    """Holdings of one asset on one chain."""

    chain: str
    chain_id: int
    amount: Decimal


@dataclass
class AssetBalance:
    """Holdings of one asset aggregated across chains."""

    symbol: str
    name: str
    total_amount: Decimal
    total_amount_usd: Decimal
    chains: list[ChainAmount] = field(default_factory=list)


@dataclass
class AccountBalance:
    """Unified balance of a user's engine account."""

    owner_address: str
    evm_address: Optional[str]
    solana_address: Optional[str]
    total_balance_usd: Decimal
    assets: list[AssetBalance] = field(default_factory=list)


@dataclass
class TransactionRecord:
    """A past transaction as reported by the engine."""

    transaction_id: str
    status: str
    created_at: Optional[str] = None
