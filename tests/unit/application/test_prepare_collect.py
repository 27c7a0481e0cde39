"""
Unit tests for PrepareCollect use case.

Repositories and the rate limiter are mocked; the chain and mint builder
are in-process fakes.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
)
from glaneur.application.use_cases.prepare_collect import (
    ALREADY_COLLECTED_MESSAGE,
    STATUS_ALREADY_COLLECTED,
    STATUS_PENDING,
    PrepareCollect,
)
from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.entities.post import Post, PostType
from glaneur.domain.entities.user import User, UserWallet
from glaneur.domain.exceptions import (
    CollectSupersededError,
    EntityNotFoundError,
    InvalidTokenError,
    RateLimitedError,
    SignerNotConfiguredError,
    TransactionRejectedError,
    UpstreamError,
    ValidationError,
)
from glaneur.domain.services.i_chain_client import SignatureStatus
from tests.helpers.fakes import FakeChainClient, FakeMintBuilder, random_signature

WALLET = "DYw8jCTfwHNRJhhmFcbXvVDTqWMEVFBX6ZKUmG5CNSKK"
OTHER_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class TestPrepareCollect:
    """Unit tests for PrepareCollect."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _create_post(self, **kwargs) -> Post:
        defaults = {
            "id": uuid4(),
            "user_id": uuid4(),
            "type": PostType.COLLECTIBLE,
            "creator_wallet": OTHER_WALLET,
            "metadata_url": "https://arweave.net/meta.json",
        }
        defaults.update(kwargs)
        return Post(**defaults)

    def _create_use_case(self, post: Post = None, user: User = None):
        post_repo = AsyncMock()
        post_repo.get_by_id.return_value = post or self._create_post()

        user_repo = AsyncMock()
        user_repo.get_by_id.return_value = user or User(wallet_address=WALLET)
        user_repo.get_wallet.return_value = None

        collection_repo = AsyncMock()
        collection_repo.get_by_post_and_user.return_value = None
        collection_repo.claim.side_effect = lambda c: (c, True)
        collection_repo.rearm.return_value = True
        collection_repo.attach_signature.return_value = True
        collection_repo.transition.return_value = True

        rate_limiter = AsyncMock()
        chain = FakeChainClient()
        mint_builder = FakeMintBuilder()
        tracker = ConfirmationTracker(collection_repo, chain)

        use_case = PrepareCollect(
            post_repository=post_repo,
            user_repository=user_repo,
            collection_repository=collection_repo,
            rate_limiter=rate_limiter,
            mint_builder=mint_builder,
            chain_client=chain,
            confirmation_tracker=tracker,
        )
        return use_case, {
            "post_repo": post_repo,
            "user_repo": user_repo,
            "collection_repo": collection_repo,
            "rate_limiter": rate_limiter,
            "chain": chain,
            "mint_builder": mint_builder,
        }

    def _existing(self, user_id, post_id, **kwargs) -> Collection:
        return Collection(
            post_id=post_id, user_id=user_id, wallet_address=WALLET, **kwargs
        )

    # ================================================================
    # Happy path
    # ================================================================

    async def test_first_collect_is_pending_and_broadcast(self):
        """Test a new collect persists the signature and broadcasts."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)

        result = await use_case.execute(post.id, user.id, client_ip="1.2.3.4")

        assert result.status == STATUS_PENDING
        assert result.tx_signature
        assert result.asset_id is None
        deps["rate_limiter"].check_and_consume.assert_awaited_once_with(
            str(user.id), "1.2.3.4"
        )
        claimed = deps["collection_repo"].claim.call_args.args[0]
        assert claimed.wallet_address == WALLET
        assert claimed.client_ip == "1.2.3.4"
        deps["collection_repo"].attach_signature.assert_awaited_once_with(
            result.collection_id, result.tx_signature, 650
        )
        assert len(deps["chain"].sent) == 1
        assert deps["mint_builder"].built[0] == (post, WALLET)

    async def test_linked_wallet_receives_collectible(self):
        """Test a requested linked wallet becomes the recipient."""
        user = User(wallet_address=WALLET)
        use_case, deps = self._create_use_case(user=user)
        deps["user_repo"].get_wallet.return_value = UserWallet(
            user_id=user.id, address=OTHER_WALLET
        )

        await use_case.execute(uuid4(), user.id, wallet_address=OTHER_WALLET)

        assert deps["mint_builder"].built[0][1] == OTHER_WALLET

    # ================================================================
    # Validation
    # ================================================================

    async def test_missing_post_not_found(self):
        use_case, deps = self._create_use_case()
        deps["post_repo"].get_by_id.return_value = None

        with pytest.raises(EntityNotFoundError) as exc_info:
            await use_case.execute(uuid4(), uuid4())
        assert exc_info.value.code == "NOT_FOUND"

    async def test_deleted_post_not_found(self):
        use_case, _ = self._create_use_case(post=self._create_post(is_deleted=True))

        with pytest.raises(EntityNotFoundError):
            await use_case.execute(uuid4(), uuid4())

    async def test_regular_post_not_collectible(self):
        """Test non-collectible posts raise VALIDATION_ERROR."""
        use_case, deps = self._create_use_case(
            post=self._create_post(type=PostType.POST)
        )

        with pytest.raises(ValidationError, match="not collectible"):
            await use_case.execute(uuid4(), uuid4())
        deps["rate_limiter"].check_and_consume.assert_not_called()

    async def test_collectible_without_metadata_rejected(self):
        use_case, _ = self._create_use_case(post=self._create_post(metadata_url=None))

        with pytest.raises(ValidationError, match="metadata"):
            await use_case.execute(uuid4(), uuid4())

    async def test_unlinked_wallet_rejected(self):
        """Test a wallet owned by someone else cannot receive."""
        user = User(wallet_address=WALLET)
        use_case, deps = self._create_use_case(user=user)
        deps["user_repo"].get_wallet.return_value = UserWallet(
            user_id=uuid4(), address=OTHER_WALLET
        )

        with pytest.raises(ValidationError, match="not linked"):
            await use_case.execute(uuid4(), user.id, wallet_address=OTHER_WALLET)

    async def test_deleted_user_is_auth_invalid(self):
        use_case, deps = self._create_use_case()
        deps["user_repo"].get_by_id.return_value = None

        with pytest.raises(InvalidTokenError):
            await use_case.execute(uuid4(), uuid4())

    # ================================================================
    # Idempotency
    # ================================================================

    async def test_confirmed_row_is_already_collected(self):
        """Test a confirmed collection short-circuits before the limiter."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        existing = self._existing(
            user.id,
            post.id,
            status=CollectionStatus.CONFIRMED,
            tx_signature=random_signature(),
            asset_id="Asset1",
        )
        deps["collection_repo"].get_by_post_and_user.return_value = existing

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_ALREADY_COLLECTED
        assert result.collection_id == existing.id
        assert result.message == ALREADY_COLLECTED_MESSAGE
        deps["rate_limiter"].check_and_consume.assert_not_called()
        deps["collection_repo"].claim.assert_not_called()

    async def test_in_flight_row_is_already_collected(self):
        """Test a signed pending row still in flight is not duplicated."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        existing = self._existing(
            user.id,
            post.id,
            tx_signature=random_signature(),
            last_valid_block_height=600,
        )
        deps["collection_repo"].get_by_post_and_user.return_value = existing

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_ALREADY_COLLECTED
        assert deps["mint_builder"].built == []

    async def test_pending_row_confirmed_on_lookup(self):
        """Test an existing pending row that landed reports already_collected."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        signature = random_signature()
        deps["chain"].land(signature, "Asset2")
        deps["collection_repo"].get_by_post_and_user.return_value = self._existing(
            user.id, post.id, tx_signature=signature, last_valid_block_height=600
        )

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_ALREADY_COLLECTED
        assert result.asset_id == "Asset2"

    async def test_failed_row_is_rearmed(self):
        """Test a failed collection is retried in place."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        existing = self._existing(
            user.id,
            post.id,
            status=CollectionStatus.FAILED,
            failure_reason="expired",
        )
        deps["collection_repo"].get_by_post_and_user.return_value = existing

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_PENDING
        assert result.collection_id == existing.id
        deps["collection_repo"].rearm.assert_awaited_once()
        deps["collection_repo"].claim.assert_not_called()

    async def test_orphaned_unsigned_row_is_retried(self):
        """Test a stale unsigned pending row fails then is re-armed."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        deps["collection_repo"].get_by_post_and_user.return_value = self._existing(
            user.id, post.id, created_at=datetime.now() - timedelta(minutes=5)
        )

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_PENDING
        deps["collection_repo"].rearm.assert_awaited_once()

    async def test_lost_claim_is_already_collected(self):
        """Test the losing concurrent writer reports already_collected."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        winner = self._existing(user.id, post.id)
        deps["collection_repo"].claim.side_effect = None
        deps["collection_repo"].claim.return_value = (winner, False)

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_ALREADY_COLLECTED
        assert result.collection_id == winner.id
        assert deps["mint_builder"].built == []

    # ================================================================
    # Rate limiting
    # ================================================================

    async def test_rate_limited_creates_nothing(self):
        """Test RATE_LIMITED is raised before any row is claimed."""
        use_case, deps = self._create_use_case()
        deps["rate_limiter"].check_and_consume.side_effect = RateLimitedError(
            "burst", 42, "Slow down! Try again in 42 seconds."
        )

        with pytest.raises(RateLimitedError) as exc_info:
            await use_case.execute(uuid4(), uuid4())

        assert exc_info.value.retry_after == 42
        deps["collection_repo"].claim.assert_not_called()
        deps["collection_repo"].rearm.assert_not_called()

    # ================================================================
    # Build and broadcast failures
    # ================================================================

    async def test_build_failure_marks_row_failed(self):
        """Test a mint that cannot be built fails the claimed row."""
        use_case, deps = self._create_use_case()
        deps["mint_builder"].error = SignerNotConfiguredError("Platform keypair")

        with pytest.raises(SignerNotConfiguredError):
            await use_case.execute(uuid4(), uuid4())

        args = deps["collection_repo"].transition.call_args
        assert args.args[1] == CollectionStatus.FAILED
        assert "Mint build failed" in args.kwargs["failure_reason"]

    async def test_rejected_broadcast_marks_row_failed(self):
        """Test a definitive RPC rejection fails the row and surfaces."""
        use_case, deps = self._create_use_case()
        deps["chain"].reject_broadcasts("Blockhash not found")

        with pytest.raises(TransactionRejectedError) as exc_info:
            await use_case.execute(uuid4(), uuid4())

        assert exc_info.value.code == "UPSTREAM_ERROR"
        deps["collection_repo"].transition.assert_awaited_once()
        assert (
            deps["collection_repo"].transition.call_args.kwargs["failure_reason"]
            == "Blockhash not found"
        )

    async def test_rejected_but_known_to_chain_stays_pending(self):
        """Test a resend rejected after an earlier attempt landed is not failed."""
        use_case, deps = self._create_use_case()
        deps["chain"].reject_broadcasts("This transaction has already been processed")
        deps["chain"].get_signature_status = AsyncMock(
            return_value=SignatureStatus(confirmation_status="processed")
        )

        result = await use_case.execute(uuid4(), uuid4())

        assert result.status == STATUS_PENDING
        deps["chain"].get_signature_status.assert_awaited_once_with(
            result.tx_signature
        )
        deps["collection_repo"].transition.assert_not_called()

    async def test_rejected_with_unreadable_status_stays_pending(self):
        """Test a rejection is not final while the chain cannot be read."""
        use_case, deps = self._create_use_case()
        deps["chain"].reject_broadcasts()
        deps["chain"].status_error = UpstreamError("RPC unavailable")

        result = await use_case.execute(uuid4(), uuid4())

        assert result.status == STATUS_PENDING
        deps["collection_repo"].transition.assert_not_called()

    async def test_ambiguous_broadcast_stays_pending(self):
        """Test a timed-out broadcast leaves the row for the tracker."""
        use_case, deps = self._create_use_case()
        deps["chain"].drop_broadcasts()

        result = await use_case.execute(uuid4(), uuid4())

        assert result.status == STATUS_PENDING
        deps["collection_repo"].transition.assert_not_called()

    async def test_signature_persisted_before_broadcast(self):
        """Test attach_signature happens before sendTransaction."""
        use_case, deps = self._create_use_case()
        order = []
        deps["collection_repo"].attach_signature.side_effect = (
            lambda *args: order.append("persist") or True
        )
        original_send = deps["chain"].send_transaction

        async def send(transaction):
            order.append("broadcast")
            return await original_send(transaction)

        deps["chain"].send_transaction = send

        await use_case.execute(uuid4(), uuid4())

        assert order == ["persist", "broadcast"]

    async def test_row_failed_while_signing_is_superseded(self):
        """Test losing attach_signature to the orphan sweep raises CONFLICT."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        deps["collection_repo"].attach_signature.return_value = False
        deps["collection_repo"].get_by_id.side_effect = lambda collection_id: (
            self._existing(
                user.id,
                post.id,
                id=collection_id,
                status=CollectionStatus.FAILED,
                failure_reason="orphaned",
            )
        )

        with pytest.raises(CollectSupersededError) as exc_info:
            await use_case.execute(post.id, user.id)

        assert exc_info.value.code == "CONFLICT"
        assert deps["chain"].sent == []
        deps["collection_repo"].transition.assert_not_called()

    async def test_row_signed_elsewhere_is_already_collected(self):
        """Test losing attach_signature to another writer reports the winner."""
        user = User(wallet_address=WALLET)
        post = self._create_post()
        use_case, deps = self._create_use_case(post, user)
        deps["collection_repo"].attach_signature.return_value = False
        winner = self._existing(user.id, post.id, tx_signature=random_signature())
        deps["collection_repo"].get_by_id.return_value = winner

        result = await use_case.execute(post.id, user.id)

        assert result.status == STATUS_ALREADY_COLLECTED
        assert result.collection_id == winner.id
        assert deps["chain"].sent == []
