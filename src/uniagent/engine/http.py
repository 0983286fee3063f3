"""Execution engine backed by a remote Universal Account gateway.

The gateway holds the route-finding and settlement logic; this adapter only
translates intents into gateway payloads and gateway payloads back into
domain models. Project credentials are sent on every request and are never
exposed to clients.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Optional

import httpx

from uniagent.chains import get_chain_by_id
from uniagent.engine.base import ExecutionEngine
from uniagent.errors import EngineError
from uniagent.models import (
    AccountBalance,
    AssetBalance,
    ChainAmount,
    ExecutionContext,
    FeeQuote,
    Intent,
    SubmissionResult,
    TransactionRecord,
    UnsignedTransaction,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/v1"


def _fee_amount(value: Any) -> int:
    """Parse one fixed-point fee amount (decimal or 0x-hex string, or number)."""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise TypeError(f"boolean fee amount {value}")
    if isinstance(value, (int, float)):
        return int(value)
    return int(str(value).strip(), 0)


def parse_fee_totals(data: Optional[dict]) -> Optional[FeeQuote]:
    """Extract a FeeQuote from a gateway "fees" object.

    Amounts arrive as 18-decimal fixed-point integers, usually as strings.

    Raises:
        EngineError: If the fee object or one of its amounts is malformed
    """
    if not data:
        return None
    totals = data.get("totals") if isinstance(data, dict) else None
    if not totals:
        return None
    if not isinstance(totals, dict):
        raise EngineError(f"Execution engine returned malformed fee totals: {totals!r}")
    try:
        return FeeQuote(
            total=_fee_amount(totals.get("feeTokenAmountInUSD")),
            gas=_fee_amount(totals.get("gasFeeTokenAmountInUSD")),
            service=_fee_amount(totals.get("transactionServiceFeeTokenAmountInUSD")),
            lp=_fee_amount(totals.get("transactionLPFeeTokenAmountInUSD")),
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise EngineError(f"Execution engine returned a malformed fee amount: {e}") from e


class HttpExecutionEngine(ExecutionEngine):
    """Execution engine that talks to the gateway over HTTP.

    Supports all four operations plus balance and history lookups.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        client_key: str,
        app_id: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the gateway client.

        Args:
            base_url: Gateway root URL
            project_id: Engine project ID
            client_key: Engine project client key
            app_id: Engine application UUID
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {
            "X-Project-Id": project_id,
            "X-Client-Key": client_key,
            "X-App-Uuid": app_id,
        }
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "universal_account"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def _post(self, path: str, payload: dict) -> dict:
        """POST to the gateway and return the decoded JSON body.

        Raises:
            EngineError: On transport failure, timeout, a non-2xx answer,
                or a body that is not a JSON object
        """
        client = await self._get_client()
        try:
            response = await client.post(f"{API_PREFIX}{path}", json=payload)
        except httpx.TimeoutException as e:
            raise EngineError(f"Execution engine timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise EngineError(f"Execution engine unreachable: {type(e).__name__}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            body = data if isinstance(data, dict) else {}
            message = body.get("message") or body.get("error") or response.text or response.reason_phrase
            logger.warning(f"Engine {path} returned {response.status_code}: {message}")
            raise EngineError(str(message), http_status=response.status_code)

        if not isinstance(data, dict):
            raise EngineError(
                f"Execution engine returned a malformed response for {path}: expected a JSON object"
            )

        return data

    # ======================
    # Building
    # ======================

    def _trade_config(self, intent: Intent) -> dict:
        config: dict[str, Any] = {
            "slippageBps": intent.slippage_bps,
            "universalGas": intent.universal_gas,
        }
        if intent.source_tokens:
            config["usePrimaryTokens"] = [t.value for t in intent.source_tokens]
        return config

    async def _create(self, kind: str, intent: Intent, params: dict) -> UnsignedTransaction:
        payload = {
            "ownerAddress": intent.owner_address,
            "tradeConfig": self._trade_config(intent),
            **params,
        }
        data = await self._post(f"/transactions/{kind}", payload)
        return self._parse_transaction(intent, data)

    def _parse_transaction(self, intent: Intent, data: dict) -> UnsignedTransaction:
        root_hash = data.get("rootHash")
        if not root_hash:
            raise EngineError("Execution engine returned a transaction without rootHash")

        fee_quote = None
        fee_quotes = data.get("feeQuotes") or []
        if fee_quotes:
            fee_quote = parse_fee_totals(fee_quotes[0].get("fees"))

        context = ExecutionContext(
            engine=self.name,
            owner_address=intent.owner_address,
            chain_id=intent.chain_id,
            slippage_bps=intent.slippage_bps,
            universal_gas=intent.universal_gas,
            source_tokens=intent.source_tokens,
            session_id=data.get("sessionId"),
        )

        return UnsignedTransaction(
            root_hash=root_hash,
            operation=intent.operation,
            context=context,
            steps=tuple(data.get("userOps") or ()),
            fee_quote=fee_quote,
            raw=data,
        )

    async def build_buy(self, intent: Intent) -> UnsignedTransaction:
        return await self._create(
            "buy",
            intent,
            {
                "token": {"chainId": intent.chain_id, "address": intent.token},
                "amountInUSD": intent.amount,
            },
        )

    async def build_sell(self, intent: Intent) -> UnsignedTransaction:
        return await self._create(
            "sell",
            intent,
            {
                "token": {"chainId": intent.chain_id, "address": intent.token},
                "amount": intent.amount,
            },
        )

    async def build_convert(self, intent: Intent) -> UnsignedTransaction:
        if intent.asset is None:
            raise EngineError("Convert requires a primary asset")
        return await self._create(
            "convert",
            intent,
            {
                "expectToken": {"type": intent.asset.value, "amount": intent.amount},
                "chainId": intent.chain_id,
            },
        )

    async def build_transfer(self, intent: Intent) -> UnsignedTransaction:
        return await self._create(
            "transfer",
            intent,
            {
                "token": {"chainId": intent.chain_id, "address": intent.token},
                "amount": intent.amount,
                "receiver": intent.receiver,
            },
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
        """Forward the signed transaction to the gateway for execution."""
        payload: dict[str, Any] = {
            "ownerAddress": context.owner_address,
            "transaction": transaction.raw,
            "signature": signature,
        }
        if context.session_id:
            payload["sessionId"] = context.session_id

        data = await self._post("/transactions/send", payload)

        transaction_id = data.get("transactionId")
        if not transaction_id:
            raise EngineError("Execution engine accepted the transaction but returned no transactionId")

        return SubmissionResult(
            transaction_id=transaction_id,
            fees=parse_fee_totals(data.get("fees")),
        )

    # ======================
    # Account data
    # ======================

    async def get_account(self, owner_address: str) -> AccountBalance:
        payload = {"ownerAddress": owner_address}
        options, primary = await asyncio.gather(
            self._post("/accounts/options", payload),
            self._post("/accounts/primary-assets", payload),
        )

        assets = []
        for item in primary.get("assets") or []:
            token = item.get("token") or {}
            chains = []
            for agg in item.get("chainAggregation") or []:
                chain_id = int(agg.get("chainId") or 0)
                chain_name = (agg.get("chain") or {}).get("name")
                if not chain_name:
                    known = get_chain_by_id(chain_id)
                    chain_name = known.name if known else f"Chain {chain_id}"
                chains.append(
                    ChainAmount(
                        chain=chain_name,
                        chain_id=chain_id,
                        amount=Decimal(str(agg.get("amount") or 0)),
                    )
                )
            assets.append(
                AssetBalance(
                    symbol=token.get("symbol") or "Unknown",
                    name=token.get("name") or "Unknown",
                    total_amount=Decimal(str(item.get("totalAmount") or 0)),
                    total_amount_usd=Decimal(str(item.get("totalAmountInUSD") or 0)),
                    chains=chains,
                )
            )

        return AccountBalance(
            owner_address=options.get("ownerAddress") or owner_address,
            evm_address=options.get("smartAccountAddress"),
            solana_address=options.get("solanaSmartAccountAddress"),
            total_balance_usd=Decimal(str(primary.get("totalAmountInUSD") or 0)),
            assets=assets,
        )

    async def get_transactions(
        self,
        owner_address: str,
        page: int = 1,
        page_size: int = 10,
    ) -> list[TransactionRecord]:
        data = await self._post(
            "/transactions/list",
            {"ownerAddress": owner_address, "page": page, "pageSize": page_size},
        )
        records = []
        for item in data.get("items") or []:
            transaction_id = item.get("transactionId") or item.get("id")
            if not transaction_id:
                continue
            created_at = item.get("createdAt")
            records.append(
                TransactionRecord(
                    transaction_id=str(transaction_id),
                    status=str(item.get("status", "unknown")),
                    created_at=str(created_at) if created_at is not None else None,
                )
            )
        return records

    async def health_check(self) -> bool:
        client = await self._get_client()
        try:
            response = await client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Engine health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
