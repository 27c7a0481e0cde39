"""
Find Or Create User use case.

Resolves the canonical user behind a verified wallet, creating it on
first sign-in.
"""

import secrets
from typing import Optional, Tuple

from glaneur.domain.entities.user import DEFAULT_WALLET_LABEL, User, UserWallet
from glaneur.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from glaneur.domain.repositories.i_user_repository import IUserRepository
from glaneur.domain.value_objects.wallet_address import WalletAddress
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

MAX_SLUG_ATTEMPTS = 5


class FindOrCreateUser:
    """
    Resolve or create the user anchored on a wallet.

    Business rules:
    - Lookup order: linked wallets, then the user's anchor address
    - New users get a primary wallet row labelled with the wallet name
    - A missing wallet label is back-filled on a later sign-in
    - Slug collisions get a random 4-hex-char suffix
    - Losing a concurrent create race falls back to the winner's row
    """

    def __init__(self, user_repository: IUserRepository):
        """
        Initialize use case with dependencies.

        Args:
            user_repository: Repository for user persistence
        """
        self.user_repository = user_repository

    async def execute(
        self,
        wallet_address: str,
        wallet_name: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """
        Execute user resolution.

        Args:
            wallet_address: Verified wallet address
            wallet_name: Optional wallet application name for the label

        Returns:
            Tuple of (User entity, True if created by this call)
        """
        label = (wallet_name or "").strip() or DEFAULT_WALLET_LABEL

        # 1. Linked wallet
        wallet = await self.user_repository.get_wallet(wallet_address)
        if wallet:
            user = await self.user_repository.get_by_id(wallet.user_id)
            if user is None:
                raise EntityNotFoundError("User", str(wallet.user_id))
            if not wallet.label:
                await self.user_repository.update_wallet_label(wallet.id, label)
            return user, False

        # 2. Anchor address on the user row
        user = await self.user_repository.get_by_wallet(wallet_address)
        if user:
            return user, False

        # 3. Create
        user = User(
            wallet_address=wallet_address,
            slug=await self._unique_slug(wallet_address),
        )
        primary_wallet = UserWallet(
            user_id=user.id,
            address=wallet_address,
            label=label,
            is_primary=True,
        )

        try:
            user = await self.user_repository.create(user, primary_wallet)
        except DuplicateEntityError:
            # Another sign-in for the same wallet won the race
            existing = await self.user_repository.get_by_wallet(wallet_address)
            if existing is None:
                raise
            logger.info(
                "User create race lost, using existing row",
                extra={"wallet": wallet_address},
            )
            return existing, False

        metrics.users_created_total.inc()
        logger.info(
            "User created",
            extra={"user_id": str(user.id), "wallet": wallet_address},
        )
        return user, True

    async def _unique_slug(self, wallet_address: str) -> str:
        """Derive a free slug from the address."""
        base = WalletAddress(wallet_address).slug_base()
        slug = base
        for _ in range(MAX_SLUG_ATTEMPTS):
            if not await self.user_repository.slug_exists(slug):
                return slug
            slug = f"{base}-{secrets.token_hex(2)}"
        return slug
