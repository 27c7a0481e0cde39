"""
User repository interface.

Defines contract for user and linked-wallet persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from glaneur.domain.entities.user import User, UserWallet


class IUserRepository(ABC):
    """
    Abstract repository interface for User persistence.

    Implementations must handle database-specific details.
    """

    @abstractmethod
    async def create(self, user: User, primary_wallet: UserWallet) -> User:
        """
        Create a new user together with its primary wallet row.

        Args:
            user: User entity to persist
            primary_wallet: Wallet link registered as primary

        Returns:
            Created user

        Raises:
            DuplicateEntityError: If the wallet or slug is already taken
        """

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User unique identifier

        Returns:
            User entity if found, None otherwise
        """

    @abstractmethod
    async def get_by_wallet(self, wallet_address: str) -> Optional[User]:
        """
        Get user by the anchor wallet address stored on the user row.

        Args:
            wallet_address: Solana wallet address

        Returns:
            User entity if found, None otherwise
        """

    @abstractmethod
    async def get_wallet(self, address: str) -> Optional[UserWallet]:
        """
        Get a linked wallet row by address.

        Args:
            address: Solana wallet address

        Returns:
            UserWallet if linked to any user, None otherwise
        """

    @abstractmethod
    async def list_wallets(self, user_id: UUID) -> List[UserWallet]:
        """Get all wallets linked to a user."""

    @abstractmethod
    async def update_wallet_label(self, wallet_id: UUID, label: str) -> None:
        """Set the display label of a linked wallet."""

    @abstractmethod
    async def slug_exists(self, slug: str) -> bool:
        """Check whether a profile slug is already taken."""
