"""
Market data services: upstream gateway, response cache and symbol resolution.
"""
from cryptotracker.services.market.cache import ResponseCache
from cryptotracker.services.market.gateway import (
    MarketDataGateway,
    create_cmc_client,
    create_coingecko_client,
)
from cryptotracker.services.market.symbols import SymbolResolver

__all__ = [
    "ResponseCache",
    "MarketDataGateway",
    "SymbolResolver",
    "create_cmc_client",
    "create_coingecko_client",
]
