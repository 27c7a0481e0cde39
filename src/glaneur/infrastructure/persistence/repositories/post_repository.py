"""
Post repository implementation using SQLAlchemy.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.domain.entities.post import Post, PostType
from glaneur.domain.repositories.i_post_repository import IPostRepository
from glaneur.infrastructure.persistence.models import PostModel


class PostRepository(IPostRepository):
    """Read-only SQLAlchemy access to posts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, post_id: UUID) -> Optional[Post]:
        stmt = select(PostModel).where(PostModel.id == post_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    def _to_entity(self, model: PostModel) -> Post:
        """Convert SQLAlchemy model to domain entity."""
        try:
            post_type = PostType(model.type)
        except ValueError:
            post_type = PostType.POST

        return Post(
            id=model.id,
            user_id=model.user_id,
            type=post_type,
            creator_wallet=model.author.wallet_address if model.author else None,
            metadata_url=model.metadata_url,
            nft_name=model.nft_name,
            seller_fee_basis_points=model.seller_fee_basis_points,
            is_deleted=model.is_deleted,
            is_hidden=model.is_hidden,
            created_at=model.created_at,
        )
