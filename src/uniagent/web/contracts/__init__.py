"""Request and response contracts for the web layer.

Every contract is camelCase on the wire and accepts snake_case too.
"""

from uniagent.web.contracts.accounts import (
    AssetBalanceInfo,
    BalanceRequest,
    BalanceResponse,
    ChainAmountInfo,
    HistoryItem,
    HistoryRequest,
    HistoryResponse,
)
from uniagent.web.contracts.chains import ChainListResponse
from uniagent.web.contracts.transactions import (
    BuyRequest,
    ConvertRequest,
    CreateTransactionResponse,
    FeeSummary,
    SellRequest,
    SubmitRequest,
    SubmitResponse,
    TradeOptions,
    TransactionPreview,
    TransferRequest,
)

__all__ = [
    # Transaction contracts
    "TradeOptions",
    "BuyRequest",
    "SellRequest",
    "ConvertRequest",
    "TransferRequest",
    "TransactionPreview",
    "CreateTransactionResponse",
    "SubmitRequest",
    "SubmitResponse",
    "FeeSummary",
    # Account contracts
    "BalanceRequest",
    "BalanceResponse",
    "AssetBalanceInfo",
    "ChainAmountInfo",
    "HistoryRequest",
    "HistoryResponse",
    "HistoryItem",
    # Chain contracts
    "ChainListResponse",
]
