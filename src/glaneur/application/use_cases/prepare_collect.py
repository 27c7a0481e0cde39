"""
Prepare Collect use case.

Turns an authenticated collect request into at most one server-signed
compressed mint per (post, user).
"""

from dataclasses import dataclass
from typing import Optional, Tuple
from uuid import UUID

from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
)
from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.entities.post import Post
from glaneur.domain.exceptions import (
    CollectSupersededError,
    EntityNotFoundError,
    GlaneurException,
    InvalidTokenError,
    RateLimitedError,
    TransactionRejectedError,
    UpstreamError,
    ValidationError,
)
from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)
from glaneur.domain.repositories.i_post_repository import IPostRepository
from glaneur.domain.repositories.i_user_repository import IUserRepository
from glaneur.domain.services.i_chain_client import IChainClient
from glaneur.domain.services.i_mint_builder import IMintBuilder
from glaneur.domain.services.i_rate_limiter import IRateLimiter
from glaneur.domain.value_objects.wallet_address import WalletAddress
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

STATUS_PENDING = "pending"
STATUS_ALREADY_COLLECTED = "already_collected"

ALREADY_COLLECTED_MESSAGE = "You've already collected this"


@dataclass
class CollectResult:
    """Outcome of a collect request."""

    status: str
    collection_id: UUID
    tx_signature: Optional[str] = None
    asset_id: Optional[str] = None
    message: Optional[str] = None

    @property
    def already_collected(self) -> bool:
        return self.status == STATUS_ALREADY_COLLECTED


class PrepareCollect:
    """
    Collect a free collectible post.

    Business rules:
    - Post must exist, be visible and be of collectible type
    - Post must carry a metadata URI
    - Recipient wallet must be linked to the user
    - One collection row per (post, user); repeats are already_collected
    - Rate limits apply only to attempts that pass the idempotency check
    - No row is created or re-armed when rate limited
    - A failed row is re-armed for a retry
    - Signature is persisted before the transaction is broadcast
    - Definitive broadcast rejection fails the row unless the chain
      already knows the signature; ambiguous outcomes leave it pending
      for the tracker
    """

    def __init__(
        self,
        post_repository: IPostRepository,
        user_repository: IUserRepository,
        collection_repository: ICollectionRepository,
        rate_limiter: IRateLimiter,
        mint_builder: IMintBuilder,
        chain_client: IChainClient,
        confirmation_tracker: ConfirmationTracker,
    ):
        """
        Initialize use case with dependencies.

        Args:
            post_repository: Read access to posts
            user_repository: Repository for users and linked wallets
            collection_repository: Repository for collection persistence
            rate_limiter: Collect rate limiter
            mint_builder: Builds and signs compressed mints
            chain_client: Solana RPC client for broadcast
            confirmation_tracker: Resolves existing pending rows
        """
        self.post_repository = post_repository
        self.user_repository = user_repository
        self.collection_repository = collection_repository
        self.rate_limiter = rate_limiter
        self.mint_builder = mint_builder
        self.chain_client = chain_client
        self.confirmation_tracker = confirmation_tracker

    async def execute(
        self,
        post_id: UUID,
        user_id: UUID,
        wallet_address: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> CollectResult:
        """
        Execute collect.

        Args:
            post_id: Post to collect
            user_id: Authenticated collector
            wallet_address: Optional linked wallet to receive the asset
            client_ip: Client IP for the per-network limit

        Returns:
            CollectResult, pending or already_collected

        Raises:
            EntityNotFoundError: If post is missing, deleted or hidden
            ValidationError: If post is not collectible or wallet is not linked
            InvalidTokenError: If the user no longer exists
            RateLimitedError: If a rate limit is exhausted
            UpstreamError: If the mint cannot be built or is rejected
            CollectSupersededError: If the attempt was failed before broadcast
        """
        # 1. Load post
        post = await self._load_collectible(post_id)

        # 2. Resolve recipient
        recipient = await self._resolve_recipient(user_id, wallet_address)

        # 3. Idempotency
        existing = await self.collection_repository.get_by_post_and_user(
            post_id, user_id
        )
        if existing is not None:
            if existing.is_pending:
                existing = await self.confirmation_tracker.resolve(
                    existing, source="collect"
                )
            if existing.status != CollectionStatus.FAILED:
                return self._already_collected(existing)

        # 4. Rate limit
        try:
            await self.rate_limiter.check_and_consume(str(user_id), client_ip)
        except RateLimitedError as e:
            metrics.collect_requests_total.labels(outcome="rate_limited").inc()
            logger.info(
                "Collect rate limited",
                extra={"user_id": str(user_id), "scope": e.scope},
            )
            raise

        # 5. Claim
        collection, claimed = await self._claim(
            existing, post_id, user_id, recipient, client_ip
        )
        if not claimed:
            return self._already_collected(collection)

        # 6. Build and sign
        try:
            signed = await self.mint_builder.build_signed_mint(post, recipient)
        except GlaneurException as e:
            await self._mark_failed(collection, f"Mint build failed: {e.message}")
            raise

        # 7. Persist before broadcast
        attached = await self.collection_repository.attach_signature(
            collection.id, signed.tx_signature, signed.last_valid_block_height
        )
        if not attached:
            current = await self.collection_repository.get_by_id(collection.id)
            if current is None or current.status == CollectionStatus.FAILED:
                # Failed as orphaned while signing; nothing was broadcast
                raise CollectSupersededError(str(collection.id))
            return self._already_collected(current)
        collection.attach_signature(signed.tx_signature, signed.last_valid_block_height)

        # 8. Broadcast
        try:
            await self.chain_client.send_transaction(signed.transaction)
        except TransactionRejectedError as e:
            if not await self._seen_on_chain(signed.tx_signature):
                await self._mark_failed(collection, e.reason)
                metrics.collect_requests_total.labels(outcome="rejected").inc()
                raise
            logger.warning(
                "Rejected transaction is known to the chain, leaving pending",
                extra={
                    "collection_id": str(collection.id),
                    "tx_signature": signed.tx_signature,
                    "reason": e.reason,
                },
            )
        except UpstreamError as e:
            logger.warning(
                "Broadcast outcome unknown, leaving collection pending",
                extra={
                    "collection_id": str(collection.id),
                    "tx_signature": signed.tx_signature,
                    "error": e.message,
                },
            )

        metrics.collect_requests_total.labels(outcome="pending").inc()
        logger.info(
            "Collect submitted",
            extra={
                "collection_id": str(collection.id),
                "post_id": str(post_id),
                "user_id": str(user_id),
                "tx_signature": signed.tx_signature,
            },
        )

        return CollectResult(
            status=STATUS_PENDING,
            collection_id=collection.id,
            tx_signature=signed.tx_signature,
            asset_id=None,
        )

    async def _load_collectible(self, post_id: UUID) -> Post:
        post = await self.post_repository.get_by_id(post_id)
        if post is None or not post.is_visible:
            raise EntityNotFoundError("Post", str(post_id))
        if not post.is_collectible:
            raise ValidationError(field="postId", reason="Post is not collectible")
        if not post.metadata_url:
            raise ValidationError(
                field="postId", reason="Collectible has no metadata URI"
            )
        return post

    async def _resolve_recipient(
        self, user_id: UUID, wallet_address: Optional[str]
    ) -> str:
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise InvalidTokenError("Account no longer exists")

        if not wallet_address or wallet_address == user.wallet_address:
            return user.wallet_address

        if not WalletAddress.is_valid(wallet_address):
            raise ValidationError(
                field="walletAddress", reason="Invalid Solana wallet address"
            )

        wallet = await self.user_repository.get_wallet(wallet_address)
        if wallet is None or wallet.user_id != user_id:
            raise ValidationError(
                field="walletAddress",
                reason="Wallet is not linked to this account",
            )
        return wallet.address

    async def _claim(
        self,
        existing: Optional[Collection],
        post_id: UUID,
        user_id: UUID,
        recipient: str,
        client_ip: Optional[str],
    ) -> Tuple[Collection, bool]:
        """
        Insert a pending row or re-arm the failed one.

        Returns:
            Tuple of (collection row, True if this request owns the attempt)
        """
        if existing is not None:
            existing.rearm(recipient, client_ip)
            if await self.collection_repository.rearm(existing):
                logger.info(
                    "Failed collection re-armed",
                    extra={"collection_id": str(existing.id)},
                )
                return existing, True
            current = await self.collection_repository.get_by_post_and_user(
                post_id, user_id
            )
            return current or existing, False

        return await self.collection_repository.claim(
            Collection(
                post_id=post_id,
                user_id=user_id,
                wallet_address=recipient,
                client_ip=client_ip,
            )
        )

    async def _seen_on_chain(self, tx_signature: str) -> bool:
        """
        Check whether a rejected transaction is nonetheless on chain.

        A resend can be rejected because an earlier attempt already
        landed. When the status cannot be read the answer is yes, so the
        tracker decides later.
        """
        try:
            status = await self.chain_client.get_signature_status(tx_signature)
        except UpstreamError:
            return True
        return status is not None and not status.failed

    async def _mark_failed(self, collection: Collection, reason: str) -> None:
        updated = await self.collection_repository.transition(
            collection.id, CollectionStatus.FAILED, failure_reason=reason
        )
        if updated:
            collection.fail(reason)
            metrics.collection_transitions_total.labels(
                status="failed", source="collect"
            ).inc()
        logger.warning(
            "Collect failed",
            extra={"collection_id": str(collection.id), "reason": reason},
        )

    def _already_collected(self, collection: Collection) -> CollectResult:
        metrics.collect_requests_total.labels(outcome="already_collected").inc()
        return CollectResult(
            status=STATUS_ALREADY_COLLECTED,
            collection_id=collection.id,
            tx_signature=collection.tx_signature or None,
            asset_id=collection.asset_id,
            message=ALREADY_COLLECTED_MESSAGE,
        )
