"""
Collection repository implementation using SQLAlchemy.

Writes are committed immediately: the claim must be visible to
concurrent requests, and the signature must be durable before the
transaction is broadcast.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)
from glaneur.infrastructure.persistence.models import CollectionModel


class CollectionRepository(ICollectionRepository):
    """
    SQLAlchemy implementation of collection repository.

    Status changes are conditional UPDATEs; the affected row count tells
    whether this writer won.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, collection_id: UUID) -> Optional[Collection]:
        stmt = select(CollectionModel).where(CollectionModel.id == collection_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def get_by_post_and_user(
        self, post_id: UUID, user_id: UUID
    ) -> Optional[Collection]:
        stmt = select(CollectionModel).where(
            CollectionModel.post_id == post_id,
            CollectionModel.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def claim(self, collection: Collection) -> Tuple[Collection, bool]:
        model = CollectionModel(
            id=collection.id,
            post_id=collection.post_id,
            user_id=collection.user_id,
            wallet_address=collection.wallet_address,
            status=collection.status.value,
            client_ip=collection.client_ip,
            created_at=collection.created_at,
            updated_at=collection.updated_at,
        )
        self.session.add(model)

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            winner = await self.get_by_post_and_user(
                collection.post_id, collection.user_id
            )
            if winner is None:
                raise
            return winner, False

        return self._to_entity(model), True

    async def rearm(self, collection: Collection) -> bool:
        stmt = (
            update(CollectionModel)
            .where(
                CollectionModel.id == collection.id,
                CollectionModel.status == CollectionStatus.FAILED.value,
            )
            .values(
                status=CollectionStatus.PENDING.value,
                wallet_address=collection.wallet_address,
                client_ip=collection.client_ip,
                tx_signature=None,
                asset_id=None,
                last_valid_block_height=None,
                failure_reason=None,
                created_at=collection.created_at,
                updated_at=collection.updated_at,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def attach_signature(
        self,
        collection_id: UUID,
        tx_signature: str,
        last_valid_block_height: int,
    ) -> bool:
        stmt = (
            update(CollectionModel)
            .where(
                CollectionModel.id == collection_id,
                CollectionModel.status == CollectionStatus.PENDING.value,
                CollectionModel.tx_signature.is_(None),
            )
            .values(
                tx_signature=tx_signature,
                last_valid_block_height=last_valid_block_height,
                updated_at=datetime.now(),
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def transition(
        self,
        collection_id: UUID,
        status: CollectionStatus,
        asset_id: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> bool:
        if status == CollectionStatus.PENDING:
            raise ValueError("Cannot transition a collection to pending")

        values = {"status": status.value, "updated_at": datetime.now()}
        if status == CollectionStatus.CONFIRMED:
            values["asset_id"] = asset_id
        else:
            values["failure_reason"] = failure_reason

        stmt = (
            update(CollectionModel)
            .where(
                CollectionModel.id == collection_id,
                CollectionModel.status == CollectionStatus.PENDING.value,
            )
            .values(**values)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def list_pending(self, limit: int = 50) -> List[Collection]:
        stmt = (
            select(CollectionModel)
            .where(CollectionModel.status == CollectionStatus.PENDING.value)
            .order_by(CollectionModel.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    def _to_entity(self, model: CollectionModel) -> Collection:
        """Convert SQLAlchemy model to domain entity."""
        return Collection(
            id=model.id,
            post_id=model.post_id,
            user_id=model.user_id,
            wallet_address=model.wallet_address,
            status=CollectionStatus(model.status),
            tx_signature=model.tx_signature,
            asset_id=model.asset_id,
            client_ip=model.client_ip,
            last_valid_block_height=model.last_valid_block_height,
            failure_reason=model.failure_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
