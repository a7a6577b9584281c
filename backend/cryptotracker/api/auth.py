"""
Authentication endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from pydantic import BaseModel
from cryptotracker.core.database import get_db
from cryptotracker.core.auth import hash_password, verify_password, issue_token, password_too_long
from cryptotracker.core.errors import ConflictError
from cryptotracker.services import credentials
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


class CredentialsRequest(BaseModel):
    # Optional so a missing field gets the same 400 body as an empty one
    username: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


def _require_credentials(request: CredentialsRequest) -> tuple[str, str]:
    username = (request.username or "").strip()
    if not username or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username and password required"
        )
    return username, request.password


@router.post("/register", response_model=TokenResponse)
async def register(
    request: CredentialsRequest,
    db: Session = Depends(get_db)
):
    """Register a new user and return a session token."""
    username, password = _require_credentials(request)
    if password_too_long(password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="password too long"
        )

    try:
        user_id = credentials.create_user(db, username, hash_password(password))
        token = issue_token(user_id)
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="user exists"
        )
    except Exception as e:
        logger.error(f"Error registering {username!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error registering"
        )

    return TokenResponse(token=token)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: CredentialsRequest,
    db: Session = Depends(get_db)
):
    """Login with username and password."""
    username, password = _require_credentials(request)

    try:
        user = credentials.find_user_by_username(db, username)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {username!r}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="invalid credentials"
            )
        token = issue_token(user.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error logging in {username!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error logging in"
        )

    return TokenResponse(token=token)
