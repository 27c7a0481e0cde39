"""
Collect request/response schemas.
"""

from typing import Optional

from pydantic import Field

from glaneur.presentation.schemas.envelope import CamelModel


class CollectRequest(CamelModel):
    """Optional body for POST /collect/{postId}."""

    wallet_address: Optional[str] = Field(
        default=None,
        alias="walletAddress",
        description="Linked wallet to receive the collectible",
    )


class CollectData(CamelModel):
    """
    Collect outcome.

    pending: collection_id, tx_signature, asset_id (null)
    already_collected: collection_id, message
    """

    status: str
    collection_id: str = Field(..., alias="collectionId")
    tx_signature: Optional[str] = Field(default=None, alias="txSignature")
    asset_id: Optional[str] = Field(default=None, alias="assetId")
    message: Optional[str] = None


class CollectionStatusData(CamelModel):
    status: str
    tx_signature: Optional[str] = Field(default=None, alias="txSignature")
    nft_mint: Optional[str] = Field(default=None, alias="nftMint")
