"""Account endpoints: unified balance and transaction history."""

from fastapi import APIRouter, Depends

from uniagent.api.dependencies import get_app_settings, get_broker
from uniagent.broker.service import Broker
from uniagent.config import Settings
from uniagent.web.contracts.accounts import (
    AssetBalanceInfo,
    BalanceRequest,
    BalanceResponse,
    ChainAmountInfo,
    HistoryItem,
    HistoryRequest,
    HistoryResponse,
)

router = APIRouter(tags=["accounts"])


@router.post("/balance", response_model=BalanceResponse)
async def get_balance(
    request: BalanceRequest,
    broker: Broker = Depends(get_broker),
) -> BalanceResponse:
    """Get the owner's smart account addresses and unified balance."""
    balance = await broker.get_balance(request.owner_address)
    return BalanceResponse(
        owner_address=balance.owner_address,
        evm_address=balance.evm_address,
        solana_address=balance.solana_address,
        total_balance_usd=balance.total_balance_usd,
        assets=[
            AssetBalanceInfo(
                symbol=asset.symbol,
                name=asset.name,
                total_amount=asset.total_amount,
                total_amount_usd=asset.total_amount_usd,
                chains=[
                    ChainAmountInfo(chain=c.chain, chain_id=c.chain_id, amount=c.amount)
                    for c in asset.chains
                ],
            )
            for asset in balance.assets
        ],
    )


@router.post("/history", response_model=HistoryResponse)
async def get_history(
    request: HistoryRequest,
    broker: Broker = Depends(get_broker),
    settings: Settings = Depends(get_app_settings),
) -> HistoryResponse:
    """Get one page of the owner's transaction history."""
    records = await broker.get_history(request.owner_address, request.page, request.page_size)
    return HistoryResponse(
        page=request.page,
        page_size=request.page_size,
        items=[
            HistoryItem(
                transaction_id=record.transaction_id,
                status=record.status,
                created_at=record.created_at,
                explorer_url=settings.explorer_url(record.transaction_id),
            )
            for record in records
        ],
    )
