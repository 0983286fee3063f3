"""Broker service.

Ties the resolver, builder, pending store and coordinator together behind
one object owned by the application. Controllers only ever talk to this.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from uniagent.broker.builder import TransactionBuilder
from uniagent.broker.coordinator import SubmitCoordinator
from uniagent.broker.store import PendingTransactionStore
from uniagent.chains import resolve_asset, resolve_chain, resolve_source_tokens, resolve_token
from uniagent.config import Settings, get_settings
from uniagent.engine.base import ExecutionEngine
from uniagent.errors import BrokerError, EngineError, InputError, MissingFieldError
from uniagent.models import (
    AccountBalance,
    Intent,
    OperationKind,
    Receipt,
    TransactionRecord,
    UnsignedTransaction,
)

logger = logging.getLogger(__name__)

SIGN_MESSAGE = "Sign the rootHash with your wallet and POST to /submit"

MAX_PAGE_SIZE = 100


def build_preview(transaction: UnsignedTransaction) -> dict:
    """Summarize a transaction for the client before it signs.

    Fee fields are present only when the engine quoted fees.
    """
    preview: dict = {"steps": transaction.step_count}
    fee = transaction.fee_quote
    if fee is not None:
        preview["totalFeeUSD"] = fee.total_usd
        preview["gasFeeUSD"] = fee.gas_usd
        preview["serviceFeeUSD"] = fee.service_usd
        preview["lpFeeUSD"] = fee.lp_usd
    return preview


def _require(**fields) -> None:
    """Raise MissingFieldError for the first empty field, in argument order."""
    for name, value in fields.items():
        if value is None or value == "":
            raise MissingFieldError(name)


def _require_amount(name: str, value) -> None:
    """Raise InputError unless value is a finite amount greater than zero."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InputError(f"Invalid {name}: {value}") from None
    if not amount.is_finite() or amount <= 0:
        raise InputError(f"Invalid {name}: {value}")


class Broker:
    """Two-phase transaction broker.

    Phase one (create_*) builds an unsigned transaction and parks it under
    its root hash. Phase two (submit) pairs a signature with that hash and
    hands the signed transaction to the engine, exactly once.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        store: PendingTransactionStore,
        settings: Optional[Settings] = None,
    ):
        self.engine = engine
        self.store = store
        self.settings = settings or get_settings()
        self.builder = TransactionBuilder(engine)
        self.coordinator = SubmitCoordinator(store, engine, self.settings)

    # ======================
    # Phase one: create
    # ======================

    def _intent(
        self,
        operation: OperationKind,
        owner_address: str,
        chain: str,
        amount: str,
        token: Optional[str] = None,
        asset: Optional[str] = None,
        receiver: Optional[str] = None,
        slippage_bps: Optional[int] = None,
        source_tokens: Optional[list[str]] = None,
        universal_gas: Optional[bool] = None,
    ) -> Intent:
        """Resolve raw request values into an Intent."""
        return Intent(
            operation=operation,
            owner_address=owner_address,
            chain_id=resolve_chain(chain),
            amount=str(amount),
            token=resolve_token(token) if operation != OperationKind.CONVERT else None,
            asset=resolve_asset(asset) if operation == OperationKind.CONVERT else None,
            receiver=receiver,
            # 0 falls back to the default, as the engine treats it as unset
            slippage_bps=slippage_bps or self.settings.default_slippage_bps,
            source_tokens=tuple(resolve_source_tokens(source_tokens)),
            universal_gas=self.settings.universal_gas if universal_gas is None else universal_gas,
        )

    async def create(self, intent: Intent) -> UnsignedTransaction:
        """Build the transaction for a resolved intent and park it for signing."""
        transaction = await self.builder.build(intent)
        await self.store.put(self.store.new_entry(transaction))
        return transaction

    async def create_buy(
        self,
        owner_address: Optional[str],
        chain: Optional[str],
        token: Optional[str],
        amount_usd: Optional[str],
        **options,
    ) -> UnsignedTransaction:
        """Buy a token with a USD amount drawn from primary assets."""
        _require(ownerAddress=owner_address, chain=chain, token=token, amountInUSD=amount_usd)
        _require_amount("amountInUSD", amount_usd)
        intent = self._intent(
            OperationKind.BUY, owner_address, chain, amount_usd, token=token, **options
        )
        return await self.create(intent)

    async def create_sell(
        self,
        owner_address: Optional[str],
        chain: Optional[str],
        token: Optional[str],
        amount: Optional[str],
        **options,
    ) -> UnsignedTransaction:
        """Sell a token amount back into primary assets."""
        _require(ownerAddress=owner_address, chain=chain, token=token, amount=amount)
        _require_amount("amount", amount)
        intent = self._intent(
            OperationKind.SELL, owner_address, chain, amount, token=token, **options
        )
        return await self.create(intent)

    async def create_convert(
        self,
        owner_address: Optional[str],
        chain: Optional[str],
        asset: Optional[str],
        amount: Optional[str],
        **options,
    ) -> UnsignedTransaction:
        """Convert into a primary asset on the target chain."""
        _require(ownerAddress=owner_address, chain=chain, asset=asset, amount=amount)
        _require_amount("amount", amount)
        intent = self._intent(
            OperationKind.CONVERT, owner_address, chain, amount, asset=asset, **options
        )
        return await self.create(intent)

    async def create_transfer(
        self,
        owner_address: Optional[str],
        chain: Optional[str],
        token: Optional[str],
        amount: Optional[str],
        receiver: Optional[str],
        **options,
    ) -> UnsignedTransaction:
        """Send a token amount to a receiver on the target chain."""
        _require(
            ownerAddress=owner_address, chain=chain, token=token, amount=amount, receiver=receiver
        )
        _require_amount("amount", amount)
        intent = self._intent(
            OperationKind.TRANSFER,
            owner_address,
            chain,
            amount,
            token=token,
            receiver=receiver,
            **options,
        )
        return await self.create(intent)

    # ======================
    # Phase two: submit
    # ======================

    async def submit(self, root_hash: Optional[str], signature: Optional[str]) -> Receipt:
        """Submit a signed pending transaction. See SubmitCoordinator.submit."""
        return await self.coordinator.submit(root_hash, signature)

    # ======================
    # Account data
    # ======================

    async def get_balance(self, owner_address: Optional[str]) -> AccountBalance:
        """Get the owner's unified balance across chains."""
        _require(ownerAddress=owner_address)
        try:
            return await self.engine.get_account(owner_address)
        except (EngineError, httpx.HTTPError) as e:
            logger.error(f"Balance lookup for {owner_address[:10]}... failed: {e}")
            raise BrokerError(str(e)) from e
        except Exception as e:
            logger.exception(f"Balance lookup for {owner_address[:10]}... failed unexpectedly")
            raise BrokerError(f"Execution engine error: {e}") from e

    async def get_history(
        self,
        owner_address: Optional[str],
        page: int = 1,
        page_size: int = 10,
    ) -> list[TransactionRecord]:
        """Get one page of the owner's transaction history, newest first."""
        _require(ownerAddress=owner_address)
        if page < 1:
            raise InputError("Invalid page: must be 1 or greater")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InputError(f"Invalid pageSize: must be between 1 and {MAX_PAGE_SIZE}")
        try:
            return await self.engine.get_transactions(owner_address, page, page_size)
        except (EngineError, httpx.HTTPError) as e:
            logger.error(f"History lookup for {owner_address[:10]}... failed: {e}")
            raise BrokerError(str(e)) from e
        except Exception as e:
            logger.exception(f"History lookup for {owner_address[:10]}... failed unexpectedly")
            raise BrokerError(f"Execution engine error: {e}") from e

    @property
    def pending_count(self) -> int:
        """Number of transactions waiting for a signature."""
        return len(self.store)
