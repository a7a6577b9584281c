"""
Pytest fixtures and configuration for CryptoTracker tests
"""
import os
import sys
import tempfile
from pathlib import Path

# Configuration is read at import time, so it must be in place first
_test_dir = tempfile.mkdtemp(prefix="cryptotracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_test_dir) / 'test.sqlite'}"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["CMC_API_KEY"] = "test-cmc-key"
os.environ["ALLOW_INSECURE_DEV_SECRET"] = "0"

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest
from fastapi.testclient import TestClient

CMC_BASE = "https://cmc.test/v1"
COINGECKO_BASE = "https://coingecko.test/api/v3"


class FakeUpstream:
    """Scripted upstream provider served through httpx.MockTransport."""

    def __init__(self):
        self.calls = []
        self.routes = {}

    def respond(self, path, payload=None, status_code=200, error=None):
        self.routes[path] = (status_code, payload, error)

    def handler(self, request):
        self.calls.append(request)
        status_code, payload, error = self.routes.get(
            request.url.path, (404, {"status": "not found"}, None)
        )
        if error is not None:
            raise error
        return httpx.Response(status_code, json=payload)

    def calls_to(self, path):
        return [call for call in self.calls if call.url.path == path]

    def client(self, base_url, **kwargs):
        return httpx.Client(base_url=base_url, transport=httpx.MockTransport(self.handler), **kwargs)


@pytest.fixture
def upstream():
    """Fake CoinMarketCap and CoinGecko providers"""
    return FakeUpstream()


@pytest.fixture
def cache():
    from cryptotracker.services.market import ResponseCache
    return ResponseCache(ttl_seconds=3600, max_entries=64)


@pytest.fixture
def gateway(upstream, cache):
    from cryptotracker.services.market import MarketDataGateway
    gateway = MarketDataGateway(
        cache=cache,
        cmc_client=upstream.client(CMC_BASE, headers={"X-CMC_PRO_API_KEY": "test-cmc-key"}),
        coingecko_client=upstream.client(COINGECKO_BASE),
    )
    yield gateway
    gateway.close()


@pytest.fixture
def resolver(upstream):
    from cryptotracker.services.market import SymbolResolver
    return SymbolResolver(upstream.client(COINGECKO_BASE))


@pytest.fixture
def db_session():
    """Fresh schema on the test database"""
    from cryptotracker.core.database import Base, SessionLocal, engine
    import cryptotracker.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session, gateway, resolver):
    """API client with upstream providers replaced by fakes"""
    from cryptotracker.main import app
    from cryptotracker.api.cryptos import get_market_gateway, get_symbol_resolver

    app.dependency_overrides[get_market_gateway] = lambda: gateway
    app.dependency_overrides[get_symbol_resolver] = lambda: resolver
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_listings():
    return {
        "status": {"error_code": 0},
        "data": [
            {"id": 1, "symbol": "BTC", "name": "Bitcoin", "quote": {"USD": {"price": 67000.5}}},
            {"id": 1027, "symbol": "ETH", "name": "Ethereum", "quote": {"USD": {"price": 3400.25}}},
        ],
    }


@pytest.fixture
def sample_history():
    return {
        "prices": [[1700000000000, 37000.1], [1700003600000, 37100.2]],
        "market_caps": [],
        "total_volumes": [],
    }


@pytest.fixture
def sample_coin_list():
    return [
        {"id": "batcat", "symbol": "btc", "name": "BatCat"},
        {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin"},
        {"id": "ethereum", "symbol": "eth", "name": "Ethereum"},
        {"id": "ethereum-wormhole", "symbol": "eth", "name": "Ethereum (Wormhole)"},
        {"id": "tether-gold", "symbol": "xaut", "name": "Tether Gold"},
        {"id": "wrapped-abc", "symbol": "abc", "name": "Wrapped ABC"},
        {"id": "abc", "symbol": "abc", "name": "ABC Chain"},
        {"id": "solana-wormhole", "symbol": "sol", "name": "Solana (Wormhole)"},
        {"id": "sol-token", "symbol": "sol", "name": "SOL"},
    ]
