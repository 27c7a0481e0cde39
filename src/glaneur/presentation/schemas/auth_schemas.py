"""
Authentication request/response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from glaneur.presentation.schemas.envelope import CamelModel


class ChallengeRequest(CamelModel):
    """Request body for POST /challenge."""

    wallet_address: str = Field(
        ...,
        alias="walletAddress",
        description="Solana wallet address (base58)",
    )


class ChallengeData(CamelModel):
    """Challenge the wallet must sign."""

    message: str
    nonce: str
    expires_at: datetime = Field(..., alias="expiresAt")


class VerifyRequest(CamelModel):
    """Request body for POST /verify."""

    wallet_address: str = Field(..., alias="walletAddress")
    signature: str = Field(..., description="Signature (base58 or base64)")
    message: str = Field(..., description="Challenge message that was signed")
    wallet_name: Optional[str] = Field(
        default=None,
        alias="walletName",
        max_length=64,
        description="Wallet application name, used as wallet label",
    )


class UserData(CamelModel):
    id: str
    wallet_address: str = Field(..., alias="walletAddress")
    display_name: str = Field(..., alias="displayName")
    slug: str


class VerifyData(CamelModel):
    """Issued session."""

    token: str
    expires_at: datetime = Field(..., alias="expiresAt")
    user: UserData
    is_new_user: bool = Field(..., alias="isNewUser")
