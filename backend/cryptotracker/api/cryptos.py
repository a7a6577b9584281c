"""
Crypto market data and favorites endpoints.

Market routes are plain ``def`` handlers: they block on upstream HTTP calls,
so FastAPI runs them in its worker thread pool.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from cryptotracker.core.auth import get_current_user_id
from cryptotracker.core.database import get_db
from cryptotracker.core.errors import UpstreamError, ValidationError
from cryptotracker.services import credentials
from cryptotracker.services.market import MarketDataGateway, SymbolResolver
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


class FavoriteRequest(BaseModel):
    symbol: Optional[str] = None


class FavoritesResponse(BaseModel):
    favorites: list[str]


def get_market_gateway(request: Request) -> MarketDataGateway:
    """Dependency returning the gateway created at startup."""
    return request.app.state.market_gateway


def get_symbol_resolver(request: Request) -> SymbolResolver:
    """Dependency returning the symbol resolver created at startup."""
    return request.app.state.symbol_resolver


def _parse_positive_int(value: Optional[str], default: int, error: str) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    if parsed < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    return parsed


def _call_upstream(operation, failure_detail: str, *args):
    """Run a gateway operation and map its errors to HTTP responses."""
    try:
        return operation(*args)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except UpstreamError as e:
        logger.error(f"{failure_detail}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)
    except Exception as e:
        logger.error(f"{failure_detail}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)


@router.get("/list")
def list_cryptos(
    limit: Optional[str] = None,
    gateway: MarketDataGateway = Depends(get_market_gateway)
):
    """Top cryptocurrencies by market cap."""
    parsed_limit = _parse_positive_int(limit, 50, "invalid limit")
    return _call_upstream(gateway.listings, "Error fetching listings", parsed_limit)


@router.get("/quote/{symbol}")
def quote(
    symbol: str,
    gateway: MarketDataGateway = Depends(get_market_gateway)
):
    """Latest quote for one or more comma-joined symbols."""
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="symbol required")
    return _call_upstream(gateway.quote, "Error fetching quote", symbol)


@router.get("/info/{symbol}")
def info(
    symbol: str,
    gateway: MarketDataGateway = Depends(get_market_gateway)
):
    """Metadata (logo, description, links) for one or more symbols."""
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="symbol required")
    return _call_upstream(gateway.info, "Error fetching info", symbol)


@router.get("/history")
def history(
    id: Optional[str] = None,
    days: Optional[str] = None,
    gateway: MarketDataGateway = Depends(get_market_gateway)
):
    """Price history from CoinGecko, addressed by CoinGecko coin id."""
    coin_id = (id or "").strip() or "bitcoin"
    parsed_days = _parse_positive_int(days, 7, "invalid days")
    return _call_upstream(gateway.history, "Error fetching history", coin_id, parsed_days)


@router.get("/resolve/{symbol}")
def resolve_symbol(
    symbol: str,
    name: Optional[str] = None,
    resolver: SymbolResolver = Depends(get_symbol_resolver)
):
    """Translate a ticker symbol into the CoinGecko id used by /history."""
    coin_id = _call_upstream(resolver.resolve, "Error resolving symbol", symbol, name)
    if coin_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="unknown symbol")
    return {"symbol": symbol.strip().upper(), "id": coin_id}


@router.post("/favorites")
async def add_favorite(
    request: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add a symbol to the current user's favorites."""
    if not request.symbol or not request.symbol.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="symbol required")

    try:
        credentials.add_favorite(db, user_id, request.symbol)
    except ValidationError as e:
        logger.info(f"Rejected favorite for user {user_id}: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding favorite for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error adding favorite"
        )
    return {"ok": True}


@router.get("/favorites", response_model=FavoritesResponse)
async def list_favorites(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the current user's favorite symbols."""
    try:
        favorites = credentials.list_favorites(db, user_id)
    except Exception as e:
        logger.error(f"Error listing favorites for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error listing favorites"
        )
    return FavoritesResponse(favorites=favorites)


@router.delete("/favorites/{symbol}")
async def remove_favorite(
    symbol: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Remove a symbol from the current user's favorites."""
    try:
        removed = credentials.remove_favorite(db, user_id, symbol)
    except Exception as e:
        logger.error(f"Error removing favorite for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error removing favorite"
        )
    return {"ok": True, "removed": removed}


@router.post("/cache/clear")
def clear_cache(
    user_id: int = Depends(get_current_user_id),
    gateway: MarketDataGateway = Depends(get_market_gateway)
):
    """Drop every cached upstream response."""
    logger.info(f"User {user_id} cleared the market data cache")
    gateway.cache.clear()
    return {"ok": True}
