"""Transaction contracts for the two-phase create/submit flow.

Create calls return only a root hash and a preview; the unsigned
transaction itself never leaves the server. Field names are camelCase on
the wire.
"""

from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _amount_to_str(value: Any) -> Any:
    """Accept JSON numbers for amounts and keep them as decimal strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


Amount = Annotated[Optional[str], BeforeValidator(_amount_to_str)]


class TradeOptions(BaseModel):
    """Optional trade settings shared by every create request."""

    model_config = ConfigDict(populate_by_name=True)

    slippage_bps: Optional[int] = Field(
        None, alias="slippageBps", ge=0, le=10000,
        description="Slippage tolerance in basis points (default 100)",
    )
    source_tokens: Optional[list[str]] = Field(
        None, alias="sourceTokens",
        description="Primary assets allowed to fund the trade (e.g. [\"USDC\", \"ETH\"])",
    )
    universal_gas: Optional[bool] = Field(
        None, alias="universalGas", description="Pay gas from primary assets"
    )

    def options(self) -> dict:
        """Trade options as broker keyword arguments."""
        return {
            "slippage_bps": self.slippage_bps,
            "source_tokens": self.source_tokens,
            "universal_gas": self.universal_gas,
        }


class BuyRequest(TradeOptions):
    """Buy a token with a USD amount."""

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")
    chain: Optional[str] = Field(None, description="Chain name or alias (ethereum, arb, ...)")
    token: Optional[str] = Field(None, description="Token address or \"native\"")
    amount_in_usd: Amount = Field(None, alias="amountInUSD", description="USD amount to spend")


class SellRequest(TradeOptions):
    """Sell a token amount."""

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")
    chain: Optional[str] = Field(None, description="Chain name or alias")
    token: Optional[str] = Field(None, description="Token address or \"native\"")
    amount: Amount = Field(None, description="Token amount to sell")


class ConvertRequest(TradeOptions):
    """Convert into a primary asset on a chain."""

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")
    chain: Optional[str] = Field(None, description="Chain name or alias")
    asset: Optional[str] = Field(None, description="Primary asset: USDC, USDT, ETH, SOL, BNB, BTC")
    amount: Amount = Field(None, description="Amount of the asset to receive")


class TransferRequest(TradeOptions):
    """Transfer a token to a receiver."""

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")
    chain: Optional[str] = Field(None, description="Chain name or alias")
    token: Optional[str] = Field(None, description="Token address or \"native\"")
    amount: Amount = Field(None, description="Token amount to send")
    receiver: Optional[str] = Field(None, description="Receiver address")


class TransactionPreview(BaseModel):
    """What the client is about to sign."""

    model_config = ConfigDict(populate_by_name=True)

    steps: int = Field(0, description="Number of operations the engine will execute")
    total_fee_usd: Optional[str] = Field(None, alias="totalFeeUSD")
    gas_fee_usd: Optional[str] = Field(None, alias="gasFeeUSD")
    service_fee_usd: Optional[str] = Field(None, alias="serviceFeeUSD")
    lp_fee_usd: Optional[str] = Field(None, alias="lpFeeUSD")


class CreateTransactionResponse(BaseModel):
    """Response of every create call."""

    model_config = ConfigDict(populate_by_name=True)

    root_hash: str = Field(..., alias="rootHash", description="Hash the owner must sign")
    preview: TransactionPreview
    message: str


class SubmitRequest(BaseModel):
    """Signature for a pending transaction."""

    model_config = ConfigDict(populate_by_name=True)

    root_hash: Optional[str] = Field(None, alias="rootHash", description="Root hash from a create call")
    signature: Optional[str] = Field(None, description="Owner's signature over the root hash")


class FeeSummary(BaseModel):
    """Fees actually charged for a submitted transaction."""

    model_config = ConfigDict(populate_by_name=True)

    total_usd: str = Field(..., alias="totalUSD")
    gas_usd: str = Field(..., alias="gasUSD")


class SubmitResponse(BaseModel):
    """Receipt of a submitted transaction."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(..., alias="transactionId")
    explorer_url: str = Field(..., alias="explorerUrl")
    fees: Optional[FeeSummary] = None
