"""Transaction endpoints for the two-phase create/submit flow.

Create endpoints build an unsigned transaction, keep it server-side and
return only its root hash. The client signs that hash and posts the
signature to /submit. NO signing happens server-side.
"""

from fastapi import APIRouter, Depends

from uniagent.api.dependencies import get_broker
from uniagent.broker.service import SIGN_MESSAGE, Broker, build_preview
from uniagent.models import UnsignedTransaction
from uniagent.web.contracts.transactions import (
    BuyRequest,
    ConvertRequest,
    CreateTransactionResponse,
    FeeSummary,
    SellRequest,
    SubmitRequest,
    SubmitResponse,
    TransactionPreview,
    TransferRequest,
)

router = APIRouter(tags=["transactions"])


def _created(transaction: UnsignedTransaction) -> CreateTransactionResponse:
    return CreateTransactionResponse(
        root_hash=transaction.root_hash,
        preview=TransactionPreview.model_validate(build_preview(transaction)),
        message=SIGN_MESSAGE,
    )


@router.post(
    "/buy",
    response_model=CreateTransactionResponse,
    response_model_exclude_none=True,
)
async def create_buy(
    request: BuyRequest,
    broker: Broker = Depends(get_broker),
) -> CreateTransactionResponse:
    """Create a buy transaction.

    Spends amountInUSD from the owner's primary assets on the given token.
    Returns the rootHash to sign.
    """
    transaction = await broker.create_buy(
        request.owner_address,
        request.chain,
        request.token,
        request.amount_in_usd,
        **request.options(),
    )
    return _created(transaction)


@router.post(
    "/sell",
    response_model=CreateTransactionResponse,
    response_model_exclude_none=True,
)
async def create_sell(
    request: SellRequest,
    broker: Broker = Depends(get_broker),
) -> CreateTransactionResponse:
    """Create a sell transaction back into primary assets."""
    transaction = await broker.create_sell(
        request.owner_address,
        request.chain,
        request.token,
        request.amount,
        **request.options(),
    )
    return _created(transaction)


@router.post(
    "/convert",
    response_model=CreateTransactionResponse,
    response_model_exclude_none=True,
)
async def create_convert(
    request: ConvertRequest,
    broker: Broker = Depends(get_broker),
) -> CreateTransactionResponse:
    """Create a conversion into a primary asset (USDC, USDT, ETH, SOL, BNB, BTC)."""
    transaction = await broker.create_convert(
        request.owner_address,
        request.chain,
        request.asset,
        request.amount,
        **request.options(),
    )
    return _created(transaction)


@router.post(
    "/transfer",
    response_model=CreateTransactionResponse,
    response_model_exclude_none=True,
)
async def create_transfer(
    request: TransferRequest,
    broker: Broker = Depends(get_broker),
) -> CreateTransactionResponse:
    """Create a cross-chain token transfer to a receiver."""
    transaction = await broker.create_transfer(
        request.owner_address,
        request.chain,
        request.token,
        request.amount,
        request.receiver,
        **request.options(),
    )
    return _created(transaction)


@router.post("/submit", response_model=SubmitResponse)
async def submit_transaction(
    request: SubmitRequest,
    broker: Broker = Depends(get_broker),
) -> SubmitResponse:
    """Submit the owner's signature for a pending transaction.

    Each rootHash can be submitted once. Expired, unknown and already
    submitted hashes all answer 404.
    """
    receipt = await broker.submit(request.root_hash, request.signature)
    fees = None
    if receipt.fees is not None:
        fees = FeeSummary(total_usd=receipt.fees.total_usd, gas_usd=receipt.fees.gas_usd)
    return SubmitResponse(
        transaction_id=receipt.transaction_id,
        explorer_url=receipt.explorer_url,
        fees=fees,
    )
