"""
JWT token handler for session authentication.

Provides session issuance and token validation.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import JWTError, jwt

from glaneur.config.settings import get_settings
from glaneur.domain.entities.session import AuthenticatedIdentity, Session
from glaneur.domain.exceptions.auth import (
    AuthRequiredError,
    ExpiredTokenError,
    InvalidTokenError,
)

TOKEN_TYPE = "session"


def issue_session_token(user_id: UUID, wallet_address: str) -> Session:
    """
    Issue a signed session token for an authenticated user.

    Args:
        user_id: User UUID
        wallet_address: Wallet the user signed in with

    Returns:
        Session carrying the encoded token and its expiry

    Example:
        >>> session = issue_session_token(user.id, signed_wallet)
        >>> session.token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc).replace(microsecond=0)
    expire = now + timedelta(hours=settings.JWT_EXPIRATION_HOURS)
    payload = {
        "sub": str(user_id),
        "wallet": wallet_address,
        "iat": now,
        "exp": expire,
        "type": TOKEN_TYPE,
    }
    token = jwt.encode(
        payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    return Session(
        token=token,
        user_id=user_id,
        wallet_address=wallet_address,
        issued_at=now,
        expires_at=expire,
    )


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded claims

    Raises:
        ExpiredTokenError: If token has expired
        InvalidTokenError: If token is invalid, tampered or of wrong type
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != TOKEN_TYPE:
        raise InvalidTokenError("Wrong token type")
    if not payload.get("sub") or not payload.get("wallet"):
        raise InvalidTokenError()

    return payload


def authenticate_with_token(token: Optional[str]) -> AuthenticatedIdentity:
    """
    Resolve the identity behind a bearer token.

    Never raises anything but authentication errors.

    Args:
        token: Raw bearer token, or None when absent

    Returns:
        AuthenticatedIdentity

    Raises:
        AuthRequiredError: If no token was supplied
        InvalidTokenError: If token is malformed, tampered or expired
    """
    if not token or not token.strip():
        raise AuthRequiredError()

    try:
        payload = decode_session_token(token.strip())
        return AuthenticatedIdentity(
            user_id=UUID(payload["sub"]),
            wallet_address=str(payload["wallet"]),
        )
    except InvalidTokenError:
        raise
    except (ValueError, TypeError, AttributeError, KeyError):
        raise InvalidTokenError()
