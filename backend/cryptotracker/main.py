"""
FastAPI application entry point.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from cryptotracker.api import health, auth, cryptos
from cryptotracker.core.auth import get_signing_secret
from cryptotracker.core.config import get_settings
from cryptotracker.core.database import init_db
from cryptotracker.core.errors import install_error_handlers
from cryptotracker.services.market import (
    MarketDataGateway,
    ResponseCache,
    SymbolResolver,
    create_cmc_client,
    create_coingecko_client,
)

app_settings = get_settings()

logging.basicConfig(
    level=app_settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CryptoTracker API",
    description="Cached proxy for cryptocurrency market data, with user favorites",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(cryptos.router, prefix="/api/cryptos", tags=["cryptos"])


@app.on_event("startup")
async def startup_event():
    """Validate configuration, prepare the database and upstream clients."""
    # Fails startup when no signing secret is configured
    get_signing_secret()
    if not app_settings.session_secret:
        logger.warning("Using the insecure development session secret; never do this in production")

    init_db()

    coingecko_client = create_coingecko_client(
        app_settings.coingecko_base_url, app_settings.upstream_timeout_seconds
    )
    app.state.market_gateway = MarketDataGateway(
        cache=ResponseCache(
            ttl_seconds=app_settings.cache_ttl_seconds,
            max_entries=app_settings.cache_max_entries,
        ),
        cmc_client=create_cmc_client(
            app_settings.cmc_api_key,
            app_settings.cmc_base_url,
            app_settings.upstream_timeout_seconds,
        ),
        coingecko_client=coingecko_client,
    )
    app.state.symbol_resolver = SymbolResolver(
        coingecko_client, ttl_seconds=app_settings.coin_list_ttl_seconds
    )
    logger.info(
        f"Market cache ready (ttl={app_settings.cache_ttl_seconds}s, "
        f"max_entries={app_settings.cache_max_entries}, "
        f"upstream_timeout={app_settings.upstream_timeout_seconds}s)"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Close upstream HTTP clients."""
    gateway = getattr(app.state, "market_gateway", None)
    if gateway is not None:
        gateway.close()
        app.state.market_gateway = None


def run():
    import uvicorn

    uvicorn.run("cryptotracker.main:app", host="0.0.0.0", port=app_settings.port)


if __name__ == "__main__":
    run()
