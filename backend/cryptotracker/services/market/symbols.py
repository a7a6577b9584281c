"""
Ticker symbol to CoinGecko coin id resolution.

CoinGecko addresses coins by its own ids ("bitcoin"), while the rest of the
API uses tickers ("BTC"). The full coin list is fetched once and cached.
"""
import logging
from typing import Any, Dict, List, Optional
import httpx
from cryptotracker.core.errors import UpstreamError
from cryptotracker.services.market.cache import ResponseCache
from cryptotracker.services.market.gateway import fetch_json

logger = logging.getLogger(__name__)

COIN_LIST_KEY = "coins:list"


class SymbolResolver:
    """Shared symbol -> coin id lookup with its own cache."""

    def __init__(self, coingecko_client: httpx.Client, ttl_seconds: float = 86400):
        self.coingecko_client = coingecko_client
        self.cache = ResponseCache(ttl_seconds=ttl_seconds, max_entries=1, name="coin list")

    def coin_list(self) -> List[Dict[str, Any]]:
        """All coins known to CoinGecko as ``{"id", "symbol", "name"}`` dicts."""
        coins = self.cache.get(COIN_LIST_KEY)
        if coins is not None:
            return coins

        coins = fetch_json(self.coingecko_client, "CoinGecko", "/coins/list")
        if not isinstance(coins, list):
            logger.error(f"CoinGecko coin list has unexpected type {type(coins).__name__}")
            raise UpstreamError("CoinGecko returned an unexpected coin list")
        self.cache.set(COIN_LIST_KEY, coins)
        logger.info(f"Loaded {len(coins)} coins from CoinGecko")
        return coins

    def resolve(self, symbol: str, name: Optional[str] = None) -> Optional[str]:
        """Coin id for a ticker, or None if no coin uses it.

        Tickers are not unique on CoinGecko. Among coins with the ticker, one
        whose name equals ``name`` wins (listings carry the coin name), then
        one whose id equals the ticker, then the first listed.
        """
        wanted = (symbol or "").strip().lower()
        if not wanted:
            return None

        matches = [
            coin for coin in self.coin_list()
            if isinstance(coin, dict) and str(coin.get("symbol", "")).lower() == wanted
        ]
        if not matches:
            return None

        wanted_name = (name or "").strip().lower()
        if wanted_name:
            for coin in matches:
                if str(coin.get("name", "")).lower() == wanted_name:
                    return coin["id"]
        for coin in matches:
            if coin.get("id") == wanted:
                return coin["id"]
        return matches[0].get("id")
