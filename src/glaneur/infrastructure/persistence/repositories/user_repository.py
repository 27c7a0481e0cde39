"""
User repository implementation using SQLAlchemy.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.domain.entities.user import User, UserWallet
from glaneur.domain.exceptions import DuplicateEntityError
from glaneur.domain.repositories.i_user_repository import IUserRepository
from glaneur.infrastructure.persistence.models import UserModel, UserWalletModel


class UserRepository(IUserRepository):
    """
    SQLAlchemy implementation of user repository.

    Handles User and UserWallet persistence.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def create(self, user: User, primary_wallet: UserWallet) -> User:
        """
        Create user and its primary wallet in one flush.

        Raises:
            DuplicateEntityError: If wallet address or slug is taken
        """
        user_model = UserModel(
            id=user.id,
            wallet_address=user.wallet_address,
            display_name=user.display_name,
            slug=user.slug,
            created_at=user.created_at,
        )
        wallet_model = UserWalletModel(
            id=primary_wallet.id,
            user_id=user.id,
            address=primary_wallet.address,
            label=primary_wallet.label,
            is_primary=primary_wallet.is_primary,
            created_at=primary_wallet.created_at,
        )

        self.session.add(user_model)
        self.session.add(wallet_model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateEntityError("User", "wallet_address", user.wallet_address) from e

        return self._to_entity(user_model)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def get_by_wallet(self, wallet_address: str) -> Optional[User]:
        stmt = select(UserModel).where(UserModel.wallet_address == wallet_address)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def get_wallet(self, address: str) -> Optional[UserWallet]:
        stmt = select(UserWalletModel).where(UserWalletModel.address == address)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_wallet_entity(model) if model else None

    async def list_wallets(self, user_id: UUID) -> List[UserWallet]:
        stmt = (
            select(UserWalletModel)
            .where(UserWalletModel.user_id == user_id)
            .order_by(UserWalletModel.is_primary.desc(), UserWalletModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_wallet_entity(m) for m in result.scalars().all()]

    async def update_wallet_label(self, wallet_id: UUID, label: str) -> None:
        stmt = (
            update(UserWalletModel)
            .where(UserWalletModel.id == wallet_id)
            .values(label=label)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(exists().where(UserModel.slug == slug))
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    def _to_entity(self, model: UserModel) -> User:
        """Convert SQLAlchemy model to domain entity."""
        return User(
            id=model.id,
            wallet_address=model.wallet_address,
            display_name=model.display_name,
            slug=model.slug,
            created_at=model.created_at,
        )

    def _to_wallet_entity(self, model: UserWalletModel) -> UserWallet:
        return UserWallet(
            id=model.id,
            user_id=model.user_id,
            address=model.address,
            label=model.label,
            is_primary=model.is_primary,
            created_at=model.created_at,
        )
