"""
Bearer token guard.

The single place a session token is read from a request.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from glaneur.domain.entities.session import AuthenticatedIdentity
from glaneur.infrastructure.auth.jwt_handler import authenticate_with_token

# auto_error=False so a missing header becomes AUTH_REQUIRED, not a 403
security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedIdentity:
    """
    Resolve the authenticated identity behind the Authorization header.

    Returns:
        AuthenticatedIdentity (user id and wallet address)

    Raises:
        AuthRequiredError: If no bearer token was sent
        InvalidTokenError: If the token is malformed, tampered or expired
    """
    token = credentials.credentials if credentials else None
    return authenticate_with_token(token)
