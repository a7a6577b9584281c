"""
Live check of the market data cache against the real providers.
Calls every gateway operation twice and reports whether the second call was
served from the cache. Needs network access and CMC_API_KEY.
"""
import sys
import time
from pathlib import Path

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from cryptotracker.core.config import get_settings
from cryptotracker.core.errors import UpstreamError
from cryptotracker.services.market import (
    MarketDataGateway,
    ResponseCache,
    SymbolResolver,
    create_cmc_client,
    create_coingecko_client,
)


def check_operation(gateway: MarketDataGateway, name: str, operation, *args):
    """Call an operation twice and compare timings and payloads."""
    print(f"🔍 {name}{args}...")
    try:
        started = time.perf_counter()
        first = operation(*args)
        first_ms = (time.perf_counter() - started) * 1000

        started = time.perf_counter()
        second = operation(*args)
        second_ms = (time.perf_counter() - started) * 1000
    except UpstreamError as e:
        print(f"   ❌ Upstream failure: {e}")
        return False

    cached = first is second
    print(f"   First call: {first_ms:.1f} ms, second call: {second_ms:.1f} ms")
    print(f"   {'✅' if cached else '❌'} Served from cache: {cached}")
    gateway.cache.clear()
    return cached


def main():
    settings = get_settings()
    coingecko_client = create_coingecko_client(settings.coingecko_base_url, settings.upstream_timeout_seconds)
    gateway = MarketDataGateway(
        cache=ResponseCache(ttl_seconds=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries),
        cmc_client=create_cmc_client(settings.cmc_api_key, settings.cmc_base_url, settings.upstream_timeout_seconds),
        coingecko_client=coingecko_client,
    )
    resolver = SymbolResolver(coingecko_client)

    try:
        results = [
            check_operation(gateway, "listings", gateway.listings, 10),
            check_operation(gateway, "quote", gateway.quote, "BTC,ETH"),
            check_operation(gateway, "info", gateway.info, "BTC,ETH"),
            check_operation(gateway, "history", gateway.history, "bitcoin", 7),
        ]
        print(f"🔍 resolve('BTC') -> {resolver.resolve('BTC')}")
    finally:
        gateway.close()

    print(f"\n{sum(results)}/{len(results)} operations cached")
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
