"""Account contracts: unified balance and transaction history."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BalanceRequest(BaseModel):
    """Request for an owner's unified balance."""

    model_config = ConfigDict(populate_by_name=True)

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")


class ChainAmountInfo(BaseModel):
    """Holdings of one asset on one chain."""

    model_config = ConfigDict(populate_by_name=True)

    chain: str
    chain_id: int = Field(..., alias="chainId")
    amount: Decimal


class AssetBalanceInfo(BaseModel):
    """Holdings of one asset across every chain."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    name: str
    total_amount: Decimal = Field(..., alias="totalAmount")
    total_amount_usd: Decimal = Field(..., alias="totalAmountInUSD")
    chains: list[ChainAmountInfo] = Field(default_factory=list)


class BalanceResponse(BaseModel):
    """Unified balance with the account's smart account addresses."""

    model_config = ConfigDict(populate_by_name=True)

    owner_address: str = Field(..., alias="ownerAddress")
    evm_address: Optional[str] = Field(None, alias="evmAddress")
    solana_address: Optional[str] = Field(None, alias="solanaAddress")
    total_balance_usd: Decimal = Field(..., alias="totalBalanceUSD")
    assets: list[AssetBalanceInfo] = Field(default_factory=list)


class HistoryRequest(BaseModel):
    """Request for one page of transaction history."""

    model_config = ConfigDict(populate_by_name=True)

    owner_address: Optional[str] = Field(None, alias="ownerAddress", description="Owner wallet address")
    page: int = Field(1, description="Page number, starting at 1")
    page_size: int = Field(10, alias="pageSize", description="Items per page (max 100)")


class HistoryItem(BaseModel):
    """One past transaction."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(..., alias="transactionId")
    status: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    explorer_url: str = Field(..., alias="explorerUrl")


class HistoryResponse(BaseModel):
    """One page of transaction history."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    items: list[HistoryItem] = Field(default_factory=list)
