"""
Authentication utilities and dependencies.

Session tokens are stateless: ``<base64url(claims json)>.<hex hmac-sha256>``
with claims ``{"sub": user_id, "iat": ..., "exp": ...}``.
"""
from fastapi import Header, HTTPException, status
from typing import Optional
from datetime import datetime, timedelta, timezone
import base64
import binascii
import hashlib
import hmac
import json
import logging
import bcrypt
from cryptotracker.core import config
from cryptotracker.core.errors import InvalidToken

logger = logging.getLogger(__name__)

# Only used when ALLOW_INSECURE_DEV_SECRET is set explicitly
DEV_SESSION_SECRET = "insecure-development-secret"

# bcrypt only reads the first 72 bytes; newer releases reject anything longer
MAX_PASSWORD_BYTES = 72

__all__ = ['MAX_PASSWORD_BYTES', 'password_too_long', 'hash_password', 'verify_password', 'get_signing_secret', 'issue_token', 'verify_token', 'get_current_user_id']


def password_too_long(password: str) -> bool:
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash password using bcrypt."""
    password_bytes = password.encode('utf-8')
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash."""
    if password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def get_signing_secret() -> str:
    """Return the token signing secret.

    Raises:
        RuntimeError: if SESSION_SECRET is unset and the development
            secret was not explicitly allowed.
    """
    if config.SESSION_SECRET:
        return config.SESSION_SECRET
    if config.ALLOW_INSECURE_DEV_SECRET:
        return DEV_SESSION_SECRET
    raise RuntimeError(
        "SESSION_SECRET not configured. Set it in the environment or app config_local.py, "
        "or set ALLOW_INSECURE_DEV_SECRET=1 for local development."
    )


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(payload: str) -> str:
    return hmac.new(
        get_signing_secret().encode(),
        payload.encode(),
        hashlib.sha256
    ).hexdigest()


def issue_token(user_id: int, now: Optional[datetime] = None) -> str:
    """Create a signed session token for the user."""
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(days=config.TOKEN_EXPIRY_DAYS)
    claims = {
        'sub': user_id,
        'iat': int(issued_at.timestamp()),
        'exp': int(expires_at.timestamp()),
    }
    payload = _b64encode(json.dumps(claims, sort_keys=True).encode())
    return f"{payload}.{_sign(payload)}"


def verify_token(token: str, now: Optional[datetime] = None) -> int:
    """Verify a session token and return its user id.

    Raises:
        InvalidToken: malformed token, bad signature, expired, or bad subject.
    """
    if not token:
        raise InvalidToken("empty token")

    parts = token.split('.')
    if len(parts) != 2:
        raise InvalidToken("malformed token")
    payload, signature = parts

    # Signature first, claims are untrusted until it matches
    if not hmac.compare_digest(signature.encode('utf-8'), _sign(payload).encode('utf-8')):
        raise InvalidToken("bad signature")

    try:
        claims = json.loads(_b64decode(payload))
    except (binascii.Error, ValueError) as e:
        raise InvalidToken(f"undecodable claims: {e}")
    if not isinstance(claims, dict):
        raise InvalidToken("claims are not an object")

    expires_at = claims.get('exp')
    if not isinstance(expires_at, int):
        raise InvalidToken("missing expiry")
    current = now or datetime.now(timezone.utc)
    if current.timestamp() >= expires_at:
        raise InvalidToken("token expired")

    user_id = claims.get('sub')
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise InvalidToken("bad subject")
    return user_id


def get_current_user_id(authorization: Optional[str] = Header(None)) -> int:
    """Dependency to get the authenticated user id from a bearer token."""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing authorization"
        )

    parts = authorization.split(' ')
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid authorization"
        )

    try:
        return verify_token(parts[1])
    except InvalidToken as e:
        logger.info(f"Rejected session token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token"
        )
