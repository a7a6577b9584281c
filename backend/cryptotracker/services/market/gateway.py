"""
Market data gateway.

Proxies CoinMarketCap (listings, quotes, info) and CoinGecko (price history)
behind the response cache. Successful responses are cached as decoded JSON;
failures are never cached and surface as UpstreamError without retry.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote as url_quote
import httpx
from cryptotracker.core.errors import UpstreamError, ValidationError
from cryptotracker.services.market.cache import ResponseCache

logger = logging.getLogger(__name__)

MAX_LISTINGS_LIMIT = 5000


def create_cmc_client(api_key: str, base_url: str, timeout: float) -> httpx.Client:
    """HTTP client for CoinMarketCap with the API key header attached."""
    if not api_key:
        logger.warning("CMC_API_KEY is not set, CoinMarketCap requests will be rejected upstream")
    return httpx.Client(
        base_url=base_url,
        headers={
            "X-CMC_PRO_API_KEY": api_key or "",
            "Accept": "application/json",
        },
        timeout=timeout,
        follow_redirects=True,
    )


def create_coingecko_client(base_url: str, timeout: float) -> httpx.Client:
    """HTTP client for the public CoinGecko API."""
    return httpx.Client(
        base_url=base_url,
        headers={"Accept": "application/json"},
        timeout=timeout,
        follow_redirects=True,
    )


def normalize_symbols(symbols: str) -> str:
    """Canonical form of a comma-joined symbol list: ``" btc, eth"`` -> ``"BTC,ETH"``.

    Raises:
        ValidationError: no symbol left after normalization.
    """
    parts = [part.strip().upper() for part in (symbols or "").split(",")]
    parts = [part for part in parts if part]
    if not parts:
        raise ValidationError("symbol required")
    return ",".join(parts)


def fetch_json(client: httpx.Client, provider: str, path: str, params: Optional[dict] = None) -> Any:
    """GET a JSON document from an upstream provider.

    Raises:
        UpstreamError: network failure, timeout, non-2xx status or bad JSON.
    """
    try:
        response = client.get(path, params=params)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"{provider} {path} returned HTTP {e.response.status_code}")
        raise UpstreamError(f"{provider} returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"{provider} {path} request failed: {e!r}")
        raise UpstreamError(f"{provider} request failed") from e
    except ValueError as e:
        logger.error(f"{provider} {path} returned invalid JSON: {e}")
        raise UpstreamError(f"{provider} returned invalid JSON") from e


class MarketDataGateway:
    """Cache-aside access to the two upstream market data providers."""

    def __init__(
        self,
        cache: ResponseCache,
        cmc_client: httpx.Client,
        coingecko_client: httpx.Client
    ):
        self.cache = cache
        self.cmc_client = cmc_client
        self.coingecko_client = coingecko_client

    def _cached(self, cache_key: str, client: httpx.Client, provider: str, path: str, params: dict) -> Any:
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        data = fetch_json(client, provider, path, params)
        if data is None:
            raise UpstreamError(f"{provider} returned an empty document")
        self.cache.set(cache_key, data)
        return data

    def listings(self, limit: int = 50) -> Any:
        """Top ``limit`` assets by market cap, converted to USD."""
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LISTINGS_LIMIT:
            raise ValidationError("invalid limit")
        return self._cached(
            f"listings:{limit}",
            self.cmc_client,
            "CoinMarketCap",
            "/cryptocurrency/listings/latest",
            {"limit": limit, "convert": "USD"},
        )

    def quote(self, symbol: str) -> Any:
        """Latest quote for one or more comma-joined symbols."""
        symbols = normalize_symbols(symbol)
        return self._cached(
            f"quotes:{symbols}",
            self.cmc_client,
            "CoinMarketCap",
            "/cryptocurrency/quotes/latest",
            {"symbol": symbols, "convert": "USD"},
        )

    def info(self, symbol: str) -> Any:
        """Descriptive metadata for one or more comma-joined symbols."""
        symbols = normalize_symbols(symbol)
        return self._cached(
            f"info:{symbols}",
            self.cmc_client,
            "CoinMarketCap",
            "/cryptocurrency/info",
            {"symbol": symbols},
        )

    def history(self, coin_id: str, days: int = 7) -> Any:
        """[timestamp, price] series for a CoinGecko coin id over ``days`` days."""
        coin_id = (coin_id or "").strip()
        if not coin_id:
            raise ValidationError("id required")
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValidationError("invalid days")
        return self._cached(
            f"history:{coin_id}:{days}",
            self.coingecko_client,
            "CoinGecko",
            f"/coins/{url_quote(coin_id, safe='')}/market_chart",
            {"vs_currency": "usd", "days": days},
        )

    def close(self):
        self.cmc_client.close()
        self.coingecko_client.close()
