"""
Dependency Injection Container for Glaneur.

Manages all service instances and their dependencies.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
)
from glaneur.config.settings import get_settings
from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)
from glaneur.domain.repositories.i_post_repository import IPostRepository
from glaneur.domain.repositories.i_user_repository import IUserRepository
from glaneur.domain.services.i_chain_client import IChainClient
from glaneur.domain.services.i_challenge_store import IChallengeStore
from glaneur.domain.services.i_mint_builder import IMintBuilder
from glaneur.domain.services.i_rate_limiter import IRateLimiter
from glaneur.domain.services.i_wallet_authenticator import (
    IWalletAuthenticator,
)
from glaneur.infrastructure.auth.challenge_store import (
    InMemoryChallengeStore,
    RedisChallengeStore,
)
from glaneur.infrastructure.auth.solana_wallet_adapter import (
    SolanaWalletAdapter,
)
from glaneur.infrastructure.background.reconciliation_sweeper import (
    ReconciliationSweeper,
)
from glaneur.infrastructure.blockchain.compressed_mint_builder import (
    CompressedMintBuilder,
)
from glaneur.infrastructure.blockchain.platform_signer import PlatformSigner
from glaneur.infrastructure.blockchain.solana_rpc_client import SolanaRpcClient
from glaneur.infrastructure.cache.redis_cache_client import RedisCacheClient
from glaneur.infrastructure.persistence.database import Database
from glaneur.infrastructure.persistence.repositories.collection_repository import (  # noqa: E501
    CollectionRepository,
)
from glaneur.infrastructure.persistence.repositories.post_repository import (
    PostRepository,
)
from glaneur.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)
from glaneur.infrastructure.rate_limiting.rate_limiter import (
    CollectRateLimiter,
    InMemoryRateLimitStore,
    RedisRateLimitStore,
)


class DIContainer:
    """
    Dependency Injection Container.

    Manages singleton instances of all services and repositories.
    Uses factory pattern for session-scoped dependencies.
    """

    def __init__(self):
        """Initialize container with None instances."""
        # Infrastructure
        self._database: Optional[Database] = None
        self._cache_client: Optional[RedisCacheClient] = None

        # Domain Services - Auth
        self._wallet_authenticator: Optional[IWalletAuthenticator] = None
        self._challenge_store: Optional[IChallengeStore] = None

        # Domain Services - Collect
        self._rate_limiter: Optional[IRateLimiter] = None
        self._chain_client: Optional[IChainClient] = None
        self._platform_signer: Optional[PlatformSigner] = None
        self._mint_builder: Optional[IMintBuilder] = None

        # Background
        self._reconciliation_sweeper: Optional[ReconciliationSweeper] = None

    async def initialize(self) -> None:
        """Initialize all services and establish connections."""
        await self.database.connect()

        if get_settings().REDIS_ENABLED:
            await self.cache_client.connect()

        if get_settings().RECONCILIATION_ENABLED:
            self.reconciliation_sweeper.start()

    async def shutdown(self) -> None:
        """Cleanup resources and close connections."""
        if self._reconciliation_sweeper:
            await self._reconciliation_sweeper.stop()

        if self._chain_client:
            await self._chain_client.close()

        if self._cache_client:
            await self._cache_client.disconnect()

        if self._database:
            await self._database.disconnect()

    # Infrastructure Getters

    @property
    def database(self) -> Database:
        """Get database instance."""
        if self._database is None:
            self._database = Database(
                database_url=get_settings().DATABASE_URL,
                echo=get_settings().DATABASE_ECHO,
            )
        return self._database

    @property
    def cache_client(self) -> RedisCacheClient:
        """Get Redis client instance."""
        if self._cache_client is None:
            settings = get_settings()
            self._cache_client = RedisCacheClient(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                password=settings.REDIS_PASSWORD or None,
            )
        return self._cache_client

    # Domain Service Getters - Auth

    @property
    def wallet_authenticator(self) -> IWalletAuthenticator:
        """Get wallet authenticator instance."""
        if self._wallet_authenticator is None:
            self._wallet_authenticator = SolanaWalletAdapter()
        return self._wallet_authenticator

    @property
    def challenge_store(self) -> IChallengeStore:
        """Get challenge store (Redis when enabled, in-memory otherwise)."""
        if self._challenge_store is None:
            if get_settings().REDIS_ENABLED:
                self._challenge_store = RedisChallengeStore(self.cache_client)
            else:
                self._challenge_store = InMemoryChallengeStore()
        return self._challenge_store

    # Domain Service Getters - Collect

    @property
    def rate_limiter(self) -> IRateLimiter:
        """Get collect rate limiter instance."""
        if self._rate_limiter is None:
            settings = get_settings()
            if settings.REDIS_ENABLED:
                store = RedisRateLimitStore(self.cache_client)
            else:
                store = InMemoryRateLimitStore()
            self._rate_limiter = CollectRateLimiter(
                store=store,
                user_daily_limit=settings.COLLECT_USER_DAILY_LIMIT,
                ip_daily_limit=settings.COLLECT_IP_DAILY_LIMIT,
                burst_limit=settings.COLLECT_BURST_LIMIT,
                daily_window_seconds=settings.COLLECT_DAILY_WINDOW_SECONDS,
                burst_window_seconds=settings.COLLECT_BURST_WINDOW_SECONDS,
            )
        return self._rate_limiter

    @property
    def chain_client(self) -> IChainClient:
        """Get Solana RPC client instance."""
        if self._chain_client is None:
            settings = get_settings()
            self._chain_client = SolanaRpcClient(
                rpc_url=settings.SOLANA_RPC_URL,
                commitment=settings.SOLANA_COMMITMENT,
                total_timeout=settings.RPC_TIMEOUT,
                connect_timeout=settings.RPC_CONNECT_TIMEOUT,
                max_retries=settings.RETRY_MAX_ATTEMPTS,
                retry_min_delay=settings.RETRY_INITIAL_DELAY,
                retry_max_delay=settings.RETRY_MAX_DELAY,
            )
        return self._chain_client

    @property
    def platform_signer(self) -> PlatformSigner:
        """Get platform signer (keypair loaded on first use)."""
        if self._platform_signer is None:
            self._platform_signer = PlatformSigner(
                keypair_path=get_settings().PLATFORM_KEYPAIR_PATH
            )
        return self._platform_signer

    @property
    def mint_builder(self) -> IMintBuilder:
        """Get compressed mint builder instance."""
        if self._mint_builder is None:
            self._mint_builder = CompressedMintBuilder(
                chain_client=self.chain_client,
                signer=self.platform_signer,
                merkle_tree_address=get_settings().BUBBLEGUM_TREE_ADDRESS,
            )
        return self._mint_builder

    @property
    def reconciliation_sweeper(self) -> ReconciliationSweeper:
        """Get background reconciliation sweeper."""
        if self._reconciliation_sweeper is None:
            settings = get_settings()
            self._reconciliation_sweeper = ReconciliationSweeper(
                tracker_scope=self.confirmation_tracker_scope,
                interval_seconds=settings.RECONCILIATION_INTERVAL_SECONDS,
                batch_size=settings.RECONCILIATION_BATCH_SIZE,
            )
        return self._reconciliation_sweeper

    # Repository Getters (Session-scoped)

    def get_user_repository(self, session: AsyncSession) -> IUserRepository:
        """Get user repository bound to a session."""
        return UserRepository(session)

    def get_post_repository(self, session: AsyncSession) -> IPostRepository:
        """Get post repository bound to a session."""
        return PostRepository(session)

    def get_collection_repository(self, session: AsyncSession) -> ICollectionRepository:
        """Get collection repository bound to a session."""
        return CollectionRepository(session)

    # Use Case Getters

    def get_confirmation_tracker(self, session: AsyncSession) -> ConfirmationTracker:
        """
        Get confirmation tracker with session-scoped repository.

        Args:
            session: Active database session

        Returns:
            ConfirmationTracker instance
        """
        return ConfirmationTracker(
            collection_repository=self.get_collection_repository(session),
            chain_client=self.chain_client,
            stale_pending_seconds=get_settings().COLLECT_STALE_PENDING_SECONDS,
        )

    @asynccontextmanager
    async def confirmation_tracker_scope(
        self,
    ) -> AsyncGenerator[ConfirmationTracker, None]:
        """Confirmation tracker with its own database session."""
        async with self.database.session() as session:
            yield self.get_confirmation_tracker(session)


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get global DI container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def initialize_container() -> DIContainer:
    """Initialize and return DI container."""
    container = get_container()
    await container.initialize()
    return container


async def shutdown_container() -> None:
    """Shutdown DI container."""
    container = get_container()
    await container.shutdown()


def reset_container() -> None:
    """Drop the global container (for testing)."""
    global _container
    _container = None
