"""Pytest configuration and fixtures."""

import json
import os

import httpx
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["API_SECRET"] = ""
os.environ["DEBUG"] = "true"

from uniagent.api.app import create_app
from uniagent.broker.service import Broker
from uniagent.broker.store import PendingTransactionStore
from uniagent.config import Settings
from uniagent.engine.dry_run import DryRunEngine
from uniagent.models import ExecutionContext, FeeQuote, OperationKind, UnsignedTransaction


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway:
    """Records gateway requests and answers with canned responses per path."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, httpx.Response] = {}

    def on(self, path: str, status: int = 200, json_body=None, exc: Exception = None):
        self.responses[path] = exc or httpx.Response(status, json=json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"message": "no route"})
        if isinstance(response, Exception):
            raise response
        return response

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def sign_root_hash(account, root_hash: str) -> str:
    """Personal-sign the root hash bytes, as a wallet would."""
    message = encode_defunct(primitive=bytes.fromhex(root_hash.removeprefix("0x")))
    signed = account.sign_message(message)
    return "0x" + signed.signature.hex().removeprefix("0x")


def make_transaction(
    root_hash: str = "0x" + "ab" * 32,
    owner_address: str = "0x" + "11" * 20,
    engine: str = "dry_run",
    fee_quote: FeeQuote = None,
) -> UnsignedTransaction:
    """Build a minimal unsigned transaction for store and coordinator tests."""
    return UnsignedTransaction(
        root_hash=root_hash,
        operation=OperationKind.BUY,
        context=ExecutionContext(
            engine=engine,
            owner_address=owner_address,
            chain_id=42161,
            slippage_bps=100,
        ),
        steps=({"type": "swap", "chainId": 42161},),
        fee_quote=fee_quote,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock shared by the store under test."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, api_secret="", dry_run=True, environment="test")


@pytest.fixture
def store(clock, settings) -> PendingTransactionStore:
    """Pending store driven by the fake clock."""
    return PendingTransactionStore(
        ttl_seconds=settings.pending_tx_ttl_seconds,
        sweep_interval=settings.pending_tx_sweep_interval_seconds,
        clock=clock,
    )


@pytest.fixture
def engine() -> DryRunEngine:
    """Simulated execution engine."""
    return DryRunEngine()


@pytest.fixture
def broker(engine, store, settings) -> Broker:
    """Broker wired to the simulated engine."""
    return Broker(engine=engine, store=store, settings=settings)


@pytest.fixture
def owner():
    """A fresh local wallet acting as the account owner."""
    return Account.create()


@pytest.fixture
def test_app(settings, engine, store):
    """Application wired to the simulated engine and fake-clock store."""
    return create_app(settings=settings, engine=engine, store=store)


@pytest.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
