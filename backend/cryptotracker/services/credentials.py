"""
Credential store: users and their favorite symbols.
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from cryptotracker.core.errors import ConflictError, ValidationError
from cryptotracker.models.favorite import Favorite
from cryptotracker.models.user import User

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    """Canonical casing for a ticker symbol."""
    return (symbol or "").strip().upper()


def find_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, username: str, password_hash: str) -> int:
    """Insert a user and return its id.

    The unique index on username decides conflicts, so concurrent
    registrations of the same name cannot both succeed.

    Raises:
        ConflictError: username already exists.
    """
    user = User(username=username, password_hash=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"user {username!r} already exists")
    db.refresh(user)
    logger.info(f"Created user {user.id}")
    return user.id


def add_favorite(db: Session, user_id: int, symbol: str) -> bool:
    """Add a symbol to the user's favorites.

    Returns:
        True if the favorite was added, False if it was already present.
    """
    normalized = normalize_symbol(symbol)
    if not normalized:
        raise ValidationError("symbol required")

    existing = db.query(Favorite).filter(
        Favorite.user_id == user_id,
        Favorite.symbol == normalized
    ).first()
    if existing:
        return False

    db.add(Favorite(user_id=user_id, symbol=normalized))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.get(User, user_id) is None:
            raise ValidationError("unknown user")
        # Lost a race against an identical insert; the set already holds it
        return False
    return True


def remove_favorite(db: Session, user_id: int, symbol: str) -> bool:
    """Remove a symbol from the user's favorites. Returns False if absent."""
    normalized = normalize_symbol(symbol)
    deleted = db.query(Favorite).filter(
        Favorite.user_id == user_id,
        Favorite.symbol == normalized
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def list_favorites(db: Session, user_id: int) -> List[str]:
    """Favorite symbols in the order they were added."""
    rows = db.query(Favorite.symbol).filter(
        Favorite.user_id == user_id
    ).order_by(Favorite.id).all()
    return [row.symbol for row in rows]
