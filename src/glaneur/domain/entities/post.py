"""
Post entity - read-only view of a platform post.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class PostType(str, Enum):
    """Post kinds."""

    POST = "post"
    COLLECTIBLE = "collectible"
    EDITION = "edition"


@dataclass
class Post:
    """
    Post as seen by the collect pipeline.

    creator_wallet is the author's wallet, credited as NFT creator.
    """

    id: UUID
    user_id: UUID
    type: PostType
    creator_wallet: Optional[str] = None
    metadata_url: Optional[str] = None
    nft_name: Optional[str] = None
    seller_fee_basis_points: Optional[int] = None
    is_deleted: bool = False
    is_hidden: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_visible(self) -> bool:
        return not (self.is_deleted or self.is_hidden)

    @property
    def is_collectible(self) -> bool:
        return self.type == PostType.COLLECTIBLE

    def collectible_name(self) -> str:
        """NFT name, falling back to an id-derived default."""
        name = (self.nft_name or "").strip()
        return name or f"Collectible #{str(self.id)[:8]}"
