"""Simulated execution engine for development and tests.

Builds believable unsigned transactions without touching any chain:
content-derived root hashes, a fee quote from simulated prices, and a
signature check that mirrors what the real engine enforces.
"""

import hashlib
import logging
import re
import secrets
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from uniagent.chains import CHAINS, NATIVE_TOKEN_ADDRESS, get_chain_by_id
from uniagent.engine.base import ExecutionEngine
from uniagent.errors import EngineError
from uniagent.models import (
    AccountBalance,
    AssetBalance,
    ChainAmount,
    ExecutionContext,
    FeeQuote,
    Intent,
    OperationKind,
    SubmissionResult,
    TransactionRecord,
    UnsignedTransaction,
    parse_units,
)

logger = logging.getLogger(__name__)

EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Simulated market prices in USD, for demonstration only
SIMULATED_PRICES: dict[str, Decimal] = {
    "USDC": Decimal("1.00"),
    "USDT": Decimal("1.00"),
    "ETH": Decimal("3900.00"),
    "SOL": Decimal("225.00"),
    "BNB": Decimal("710.00"),
    "BTC": Decimal("100000.00"),
    "AVAX": Decimal("52.00"),
    "POL": Decimal("0.62"),
    "S": Decimal("0.85"),
    "BERA": Decimal("6.50"),
    "MNT": Decimal("1.10"),
    "MON": Decimal("0.05"),
    "HYPE": Decimal("25.00"),
    "XPL": Decimal("0.90"),
    "OKB": Decimal("48.00"),
    "CFX": Decimal("0.15"),
}

# Simulated network fee per operation step, in USD
GAS_FEE_USD: dict[int, Decimal] = {
    1: Decimal("1.50"),
    56: Decimal("0.05"),
    101: Decimal("0.01"),
    137: Decimal("0.02"),
    43114: Decimal("0.08"),
}
DEFAULT_GAS_FEE_USD = Decimal("0.03")

# Largest accepted order of magnitude for an amount
MAX_AMOUNT_EXPONENT = 30

# Chain where primary assets settle; operations elsewhere need a bridge hop
HOME_CHAIN_ID = 42161


class DryRunEngine(ExecutionEngine):
    """
    Simulated engine for PoC testing.

    Provides:
    - Root hashes unique per build (intent fields + random nonce)
    - Fee quotes from simulated prices and per-chain gas
    - EIP-191 signature verification against the owner address
    - Per-owner in-memory history and settable balances
    """

    def __init__(
        self,
        service_fee_percent: Decimal = Decimal("0.001"),
        lp_fee_percent: Decimal = Decimal("0.0005"),
        home_chain_id: int = HOME_CHAIN_ID,
        verify_signatures: bool = True,
    ):
        self.service_fee_percent = service_fee_percent
        self.lp_fee_percent = lp_fee_percent
        self.home_chain_id = home_chain_id
        self.verify_signatures = verify_signatures
        self._prices = SIMULATED_PRICES.copy()
        self._history: dict[str, list[TransactionRecord]] = {}
        self._balances: dict[str, list[AssetBalance]] = {}

    @property
    def name(self) -> str:
        return "dry_run"

    def set_price(self, symbol: str, price: Decimal) -> None:
        """Set simulated price for an asset."""
        self._prices[symbol.upper()] = price

    def get_price(self, symbol: str) -> Optional[Decimal]:
        """Get simulated price for an asset."""
        return self._prices.get(symbol.upper())

    def set_balance(
        self,
        owner_address: str,
        symbol: str,
        amount: Decimal,
        chain: str = "arbitrum",
    ) -> None:
        """Set a simulated holding for an owner, replacing any previous one."""
        chain_config = CHAINS[chain]
        price = self._prices.get(symbol.upper(), Decimal("1"))
        holdings = [
            a for a in self._balances.get(owner_address.lower(), []) if a.symbol != symbol.upper()
        ]
        holdings.append(
            AssetBalance(
                symbol=symbol.upper(),
                name=symbol.upper(),
                total_amount=amount,
                total_amount_usd=amount * price,
                chains=[ChainAmount(chain=chain_config.name, chain_id=chain_config.chain_id, amount=amount)],
            )
        )
        self._balances[owner_address.lower()] = holdings

    # ======================
    # Building
    # ======================

    async def build_buy(self, intent: Intent) -> UnsignedTransaction:
        usd_value = self._parse_amount(intent.amount)
        return self._build(intent, usd_value, "swap")

    async def build_sell(self, intent: Intent) -> UnsignedTransaction:
        amount = self._parse_amount(intent.amount)
        return self._build(intent, amount * self._token_price(intent), "swap")

    async def build_convert(self, intent: Intent) -> UnsignedTransaction:
        if intent.asset is None:
            raise EngineError("Convert requires a primary asset")
        amount = self._parse_amount(intent.amount)
        price = self._prices.get(intent.asset.name, Decimal("1"))
        return self._build(intent, amount * price, "convert")

    async def build_transfer(self, intent: Intent) -> UnsignedTransaction:
        if not intent.receiver:
            raise EngineError("Transfer requires a receiver address")
        amount = self._parse_amount(intent.amount)
        return self._build(intent, amount * self._token_price(intent), "transfer")

    def _parse_amount(self, raw: str) -> Decimal:
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            raise EngineError(f"Invalid amount: {raw}")
        if not amount.is_finite() or amount <= 0 or amount.adjusted() > MAX_AMOUNT_EXPONENT:
            raise EngineError(f"Invalid amount: {raw}")
        return amount

    def _token_price(self, intent: Intent) -> Decimal:
        """Native tokens use the chain's native price; other tokens count as $1."""
        if intent.token == NATIVE_TOKEN_ADDRESS:
            chain = get_chain_by_id(intent.chain_id)
            if chain:
                return self._prices.get(chain.native_symbol, Decimal("1"))
        return Decimal("1")

    def _build(self, intent: Intent, usd_value: Decimal, action: str) -> UnsignedTransaction:
        nonce = secrets.token_hex(16)
        preimage = "|".join(
            str(part)
            for part in (
                intent.operation.value,
                intent.owner_address.lower(),
                intent.chain_id,
                intent.token or (intent.asset.value if intent.asset else ""),
                intent.amount,
                intent.receiver or "",
                nonce,
            )
        )
        root_hash = "0x" + hashlib.sha256(preimage.encode()).hexdigest()

        steps: list[dict] = []
        if intent.chain_id != self.home_chain_id:
            steps.append({"type": "bridge", "fromChainId": self.home_chain_id, "toChainId": intent.chain_id})
        steps.append({"type": action, "chainId": intent.chain_id})

        gas_per_step = GAS_FEE_USD.get(intent.chain_id, DEFAULT_GAS_FEE_USD)
        gas = gas_per_step * len(steps)
        service = usd_value * self.service_fee_percent
        lp = Decimal("0") if intent.operation == OperationKind.TRANSFER else usd_value * self.lp_fee_percent
        fee_quote = FeeQuote(
            total=parse_units(gas + service + lp),
            gas=parse_units(gas),
            service=parse_units(service),
            lp=parse_units(lp),
        )

        context = ExecutionContext(
            engine=self.name,
            owner_address=intent.owner_address,
            chain_id=intent.chain_id,
            slippage_bps=intent.slippage_bps,
            universal_gas=intent.universal_gas,
            source_tokens=intent.source_tokens,
            session_id=nonce,
        )

        logger.info(
            f"Simulated {intent.operation.value} built: {root_hash[:10]}... "
            f"({len(steps)} step(s), ~${usd_value:.2f})"
        )

        return UnsignedTransaction(
            root_hash=root_hash,
            operation=intent.operation,
            context=context,
            steps=tuple(steps),
            fee_quote=fee_quote,
            raw={"simulated": True, "usdValue": str(usd_value)},
        )

    # ======================
    # Submission
    # ======================

    async def send(
        self,
        transaction: UnsignedTransaction,
        signature: str,
        context: ExecutionContext,
    ) -> SubmissionResult:
        """Simulate execution after checking the signature."""
        if context.engine != self.name:
            raise EngineError(f"Transaction was built by {context.engine}, not {self.name}")

        if self.verify_signatures and EVM_ADDRESS_RE.match(context.owner_address):
            signer = self._recover_signer(transaction.root_hash, signature)
            if signer.lower() != context.owner_address.lower():
                raise EngineError("Invalid signature: signer does not match account owner")

        transaction_id = uuid.uuid4().hex
        record = TransactionRecord(
            transaction_id=transaction_id,
            status="finished",
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._history.setdefault(context.owner_address.lower(), []).insert(0, record)

        logger.info(f"Simulated execution of {transaction.root_hash[:10]}... as {transaction_id}")
        return SubmissionResult(transaction_id=transaction_id, fees=transaction.fee_quote)

    @staticmethod
    def _recover_signer(root_hash: str, signature: str) -> str:
        """Recover the address that personal-signed the root hash bytes."""
        try:
            message = encode_defunct(primitive=bytes.fromhex(root_hash.removeprefix("0x")))
            return Account.recover_message(message, signature=signature)
        except Exception as e:
            raise EngineError(f"Invalid signature: {e}") from e

    # ======================
    # Account data
    # ======================

    async def get_account(self, owner_address: str) -> AccountBalance:
        assets = list(self._balances.get(owner_address.lower(), []))
        evm_address = "0x" + hashlib.sha256(f"ua:{owner_address.lower()}".encode()).hexdigest()[:40]
        return AccountBalance(
            owner_address=owner_address,
            evm_address=evm_address,
            solana_address=None,
            total_balance_usd=sum((a.total_amount_usd for a in assets), Decimal("0")),
            assets=assets,
        )

    async def get_transactions(
        self,
        owner_address: str,
        page: int = 1,
        page_size: int = 10,
    ) -> list[TransactionRecord]:
        history = self._history.get(owner_address.lower(), [])
        start = (page - 1) * page_size
        return history[start:start + page_size]
