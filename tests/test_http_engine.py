"""Tests for the gateway-backed execution engine."""

from decimal import Decimal

import httpx
import pytest

from conftest import FakeGateway
from uniagent.chains import NATIVE_TOKEN_ADDRESS, PrimaryAsset
from uniagent.engine.http import HttpExecutionEngine, parse_fee_totals
from uniagent.errors import EngineError
from uniagent.models import Intent, OperationKind

OWNER = "0x" + "11" * 20

FEES = {
    "totals": {
        "feeTokenAmountInUSD": str(15 * 10**17),
        "gasFeeTokenAmountInUSD": str(10**18),
        "transactionServiceFeeTokenAmountInUSD": str(4 * 10**17),
        "transactionLPFeeTokenAmountInUSD": str(10**17),
    }
}


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def http_engine(gateway):
    engine = HttpExecutionEngine(
        base_url="https://gateway.test/",
        project_id="proj",
        client_key="key",
        app_id="app",
        transport=httpx.MockTransport(gateway),
    )
    yield engine
    await engine.close()


def buy_intent(**overrides) -> Intent:
    values = dict(
        operation=OperationKind.BUY,
        owner_address=OWNER,
        chain_id=8453,
        amount="10",
        token=NATIVE_TOKEN_ADDRESS,
    )
    values.update(overrides)
    return Intent(**values)


class TestParseFeeTotals:
    """Tests for fee parsing."""

    def test_parse(self):
        """Test parsing gateway fee totals."""
        quote = parse_fee_totals(FEES)

        assert quote.total_usd == "1.5"
        assert quote.lp_usd == "0.1"

    def test_missing(self):
        """Test that absent totals give no quote."""
        assert parse_fee_totals(None) is None
        assert parse_fee_totals({}) is None

    def test_hex_amounts(self):
        """Test that 0x-prefixed amounts are read as hex."""
        quote = parse_fee_totals({"totals": {"feeTokenAmountInUSD": "0x10", "gasFeeTokenAmountInUSD": 7}})

        assert quote.total == 16
        assert quote.gas == 7
        assert quote.lp == 0

    @pytest.mark.parametrize("amount", ["abc", "1.5", True, [1]])
    def test_malformed_amount(self, amount):
        """Test that an unreadable amount is an engine error."""
        with pytest.raises(EngineError) as exc_info:
            parse_fee_totals({"totals": {"feeTokenAmountInUSD": amount}})

        assert "malformed fee amount" in str(exc_info.value)

    def test_malformed_totals(self):
        """Test that totals which are not an object are an engine error."""
        with pytest.raises(EngineError):
            parse_fee_totals({"totals": ["1"]})


class TestBuild:
    """Tests for building through the gateway."""

    async def test_buy_payload(self, http_engine, gateway):
        """Test the buy request body and headers."""
        gateway.on(
            "/v1/transactions/buy",
            json_body={
                "rootHash": "0xroot",
                "userOps": [{"op": 1}, {"op": 2}],
                "feeQuotes": [{"fees": FEES}],
                "sessionId": "s-1",
            },
        )

        transaction = await http_engine.build_buy(
            buy_intent(slippage_bps=50, source_tokens=(PrimaryAsset.USDC,))
        )

        request = gateway.requests[-1]
        assert request.headers["X-Project-Id"] == "proj"
        assert request.headers["X-Client-Key"] == "key"
        assert request.headers["X-App-Uuid"] == "app"
        assert gateway.body() == {
            "ownerAddress": OWNER,
            "tradeConfig": {"slippageBps": 50, "universalGas": True, "usePrimaryTokens": ["usdc"]},
            "token": {"chainId": 8453, "address": NATIVE_TOKEN_ADDRESS},
            "amountInUSD": "10",
        }
        assert transaction.root_hash == "0xroot"
        assert transaction.step_count == 2
        assert transaction.fee_quote.gas_usd == "1.0"
        assert transaction.context.session_id == "s-1"
        assert transaction.context.engine == "universal_account"

    async def test_convert_payload(self, http_engine, gateway):
        """Test the convert request body."""
        gateway.on("/v1/transactions/convert", json_body={"rootHash": "0xroot"})

        await http_engine.build_convert(
            buy_intent(operation=OperationKind.CONVERT, token=None, asset=PrimaryAsset.ETH, amount="0.5")
        )

        body = gateway.body()
        assert body["expectToken"] == {"type": "eth", "amount": "0.5"}
        assert body["chainId"] == 8453

    async def test_transfer_payload(self, http_engine, gateway):
        """Test the transfer request body."""
        gateway.on("/v1/transactions/transfer", json_body={"rootHash": "0xroot"})

        await http_engine.build_transfer(
            buy_intent(operation=OperationKind.TRANSFER, receiver="0xreceiver", amount="3")
        )

        body = gateway.body()
        assert body["receiver"] == "0xreceiver"
        assert body["amount"] == "3"

    async def test_gateway_error_message(self, http_engine, gateway):
        """Test that gateway rejections keep the gateway's message."""
        gateway.on("/v1/transactions/sell", 400, {"message": "Insufficient balance"})

        with pytest.raises(EngineError) as exc_info:
            await http_engine.build_sell(buy_intent(operation=OperationKind.SELL))

        assert str(exc_info.value) == "Insufficient balance"
        assert exc_info.value.http_status == 400

    async def test_missing_root_hash(self, http_engine, gateway):
        """Test that a response without rootHash is an engine error."""
        gateway.on("/v1/transactions/buy", json_body={"userOps": []})

        with pytest.raises(EngineError):
            await http_engine.build_buy(buy_intent())

    async def test_non_object_body(self, http_engine, gateway):
        """Test that a successful answer that is not a JSON object is an engine error."""
        gateway.on("/v1/transactions/buy", json_body=[])

        with pytest.raises(EngineError) as exc_info:
            await http_engine.build_buy(buy_intent())

        assert "expected a JSON object" in str(exc_info.value)

    async def test_non_object_error_body(self, http_engine, gateway):
        """Test that a rejection with a non-object body keeps its status."""
        gateway.on("/v1/transactions/buy", 422, ["bad"])

        with pytest.raises(EngineError) as exc_info:
            await http_engine.build_buy(buy_intent())

        assert exc_info.value.http_status == 422

    async def test_timeout(self, http_engine, gateway):
        """Test that a timeout is reported as an engine error."""
        gateway.on("/v1/transactions/buy", exc=httpx.ReadTimeout("slow"))

        with pytest.raises(EngineError) as exc_info:
            await http_engine.build_buy(buy_intent())

        assert "timed out" in str(exc_info.value)

    async def test_unreachable(self, http_engine, gateway):
        """Test that a connection failure is reported as an engine error."""
        gateway.on("/v1/transactions/buy", exc=httpx.ConnectError("refused"))

        with pytest.raises(EngineError) as exc_info:
            await http_engine.build_buy(buy_intent())

        assert "unreachable" in str(exc_info.value)


class TestSend:
    """Tests for submitting through the gateway."""

    async def test_send(self, http_engine, gateway):
        """Test that the raw transaction and signature are forwarded."""
        gateway.on(
            "/v1/transactions/buy",
            json_body={"rootHash": "0xroot", "sessionId": "s-9", "extra": "kept"},
        )
        gateway.on("/v1/transactions/send", json_body={"transactionId": "tx-1", "fees": FEES})
        transaction = await http_engine.build_buy(buy_intent())

        result = await http_engine.send(transaction, "0xsig", transaction.context)

        body = gateway.body()
        assert body["signature"] == "0xsig"
        assert body["ownerAddress"] == OWNER
        assert body["sessionId"] == "s-9"
        assert body["transaction"]["extra"] == "kept"
        assert result.transaction_id == "tx-1"
        assert result.fees.total_usd == "1.5"

    async def test_send_without_transaction_id(self, http_engine, gateway):
        """Test that an acceptance without ID is an error."""
        gateway.on("/v1/transactions/buy", json_body={"rootHash": "0xroot"})
        gateway.on("/v1/transactions/send", json_body={})
        transaction = await http_engine.build_buy(buy_intent())

        with pytest.raises(EngineError):
            await http_engine.send(transaction, "0xsig", transaction.context)

    async def test_send_malformed_fees(self, http_engine, gateway):
        """Test that unreadable fees on acceptance are an engine error."""
        gateway.on("/v1/transactions/buy", json_body={"rootHash": "0xroot"})
        gateway.on(
            "/v1/transactions/send",
            json_body={"transactionId": "tx-1", "fees": {"totals": {"feeTokenAmountInUSD": "abc"}}},
        )
        transaction = await http_engine.build_buy(buy_intent())

        with pytest.raises(EngineError):
            await http_engine.send(transaction, "0xsig", transaction.context)


class TestAccountData:
    """Tests for balance and history lookups."""

    async def test_get_account(self, http_engine, gateway):
        """Test parsing of account options and primary assets."""
        gateway.on(
            "/v1/accounts/options",
            json_body={"ownerAddress": OWNER, "smartAccountAddress": "0xsmart"},
        )
        gateway.on(
            "/v1/accounts/primary-assets",
            json_body={
                "totalAmountInUSD": 12.5,
                "assets": [
                    {
                        "token": {"symbol": "USDC", "name": "USD Coin"},
                        "totalAmount": 12.5,
                        "totalAmountInUSD": 12.5,
                        "chainAggregation": [
                            {"chainId": 8453, "amount": 10, "chain": {"name": "Base"}},
                            {"chainId": 42161, "amount": 2.5},
                        ],
                    }
                ],
            },
        )

        balance = await http_engine.get_account(OWNER)

        assert balance.evm_address == "0xsmart"
        assert balance.solana_address is None
        assert balance.total_balance_usd == Decimal("12.5")
        usdc = balance.assets[0]
        assert usdc.name == "USD Coin"
        assert [c.chain for c in usdc.chains] == ["Base", "Arbitrum One"]

    async def test_get_transactions(self, http_engine, gateway):
        """Test history parsing and pagination parameters."""
        gateway.on(
            "/v1/transactions/list",
            json_body={
                "items": [
                    {"transactionId": "a", "status": 7, "createdAt": "2025-01-01T00:00:00Z"},
                    {"id": 42, "status": "pending"},
                    {"status": "orphan"},
                ]
            },
        )

        records = await http_engine.get_transactions(OWNER, page=2, page_size=5)

        assert gateway.body() == {"ownerAddress": OWNER, "page": 2, "pageSize": 5}
        assert [r.transaction_id for r in records] == ["a", "42"]
        assert records[0].status == "7"
        assert records[1].created_at is None

    async def test_health_check(self, http_engine, gateway):
        """Test the gateway health check."""
        assert await http_engine.health_check() is False

        gateway.on("/health", json_body={"ok": True})

        assert await http_engine.health_check() is True
