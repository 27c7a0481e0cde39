"""
Unit tests for ConfirmationTracker.

Chain responses come from FakeChainClient; the repository is mocked.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

from glaneur.application.use_cases.confirmation_tracker import (
    REASON_BLOCKHASH_EXPIRED,
    REASON_NOT_FOUND,
    REASON_ORPHANED,
    ConfirmationTracker,
)
from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.exceptions import UpstreamError
from tests.helpers.fakes import FakeChainClient, random_signature

WALLET = "DYw8jCTfwHNRJhhmFcbXvVDTqWMEVFBX6ZKUmG5CNSKK"


class TestConfirmationTracker:
    """Unit tests for ConfirmationTracker."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _create_collection(self, age_seconds: int = 0, **kwargs) -> Collection:
        return Collection(
            post_id=uuid4(),
            user_id=uuid4(),
            wallet_address=WALLET,
            created_at=datetime.now() - timedelta(seconds=age_seconds),
            **kwargs,
        )

    def _create_tracker(self, chain: FakeChainClient, repo: AsyncMock = None):
        if repo is None:
            repo = AsyncMock()
            repo.transition.return_value = True
        return ConfirmationTracker(repo, chain, stale_pending_seconds=120), repo

    # ================================================================
    # Test Methods
    # ================================================================

    async def test_terminal_collection_untouched(self):
        """Test confirmed rows are returned as is."""
        chain = FakeChainClient()
        tracker, repo = self._create_tracker(chain)
        collection = self._create_collection(status=CollectionStatus.CONFIRMED)

        result = await tracker.resolve(collection)

        assert result is collection
        repo.transition.assert_not_called()

    async def test_fresh_unsigned_row_stays_pending(self):
        chain = FakeChainClient()
        tracker, repo = self._create_tracker(chain)

        result = await tracker.resolve(self._create_collection(age_seconds=10))

        assert result.status == CollectionStatus.PENDING
        repo.transition.assert_not_called()

    async def test_stale_unsigned_row_is_orphaned(self):
        """Test unsigned rows older than 120s fail as orphans."""
        chain = FakeChainClient()
        tracker, repo = self._create_tracker(chain)

        result = await tracker.resolve(self._create_collection(age_seconds=121))

        assert result.status == CollectionStatus.FAILED
        assert result.failure_reason == REASON_ORPHANED
        repo.transition.assert_awaited_once()

    async def test_landed_transaction_confirms_with_asset_id(self):
        """Test confirmed signature moves row to CONFIRMED with asset id."""
        chain = FakeChainClient()
        signature = random_signature()
        chain.land(signature, "AssetId111")
        tracker, repo = self._create_tracker(chain)
        collection = self._create_collection(
            tx_signature=signature, last_valid_block_height=600
        )

        result = await tracker.resolve(collection)

        assert result.status == CollectionStatus.CONFIRMED
        assert result.asset_id == "AssetId111"
        repo.transition.assert_awaited_once_with(
            collection.id, CollectionStatus.CONFIRMED, asset_id="AssetId111"
        )

    async def test_finalized_counts_as_landed(self):
        chain = FakeChainClient()
        signature = random_signature()
        chain.land(signature, "AssetId222", status="finalized")
        tracker, _ = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(tx_signature=signature, last_valid_block_height=600)
        )

        assert result.status == CollectionStatus.CONFIRMED

    async def test_chain_error_fails_row(self):
        chain = FakeChainClient()
        signature = random_signature()
        chain.fail_on_chain(signature)
        tracker, _ = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(tx_signature=signature, last_valid_block_height=600)
        )

        assert result.status == CollectionStatus.FAILED
        assert "failed on chain" in result.failure_reason

    async def test_unseen_with_valid_blockhash_stays_pending(self):
        chain = FakeChainClient(block_height=500)
        tracker, repo = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(
                tx_signature=random_signature(), last_valid_block_height=600
            )
        )

        assert result.status == CollectionStatus.PENDING
        repo.transition.assert_not_called()

    async def test_unseen_with_expired_blockhash_fails(self):
        """Test rows fail once block height passes last valid height."""
        chain = FakeChainClient(block_height=601)
        tracker, _ = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(
                tx_signature=random_signature(), last_valid_block_height=600
            )
        )

        assert result.status == CollectionStatus.FAILED
        assert result.failure_reason == REASON_BLOCKHASH_EXPIRED

    async def test_unseen_without_block_height_uses_stale_threshold(self):
        chain = FakeChainClient()
        tracker, _ = self._create_tracker(chain)

        fresh = await tracker.resolve(
            self._create_collection(age_seconds=5, tx_signature=random_signature())
        )
        stale = await tracker.resolve(
            self._create_collection(age_seconds=300, tx_signature=random_signature())
        )

        assert fresh.status == CollectionStatus.PENDING
        assert stale.status == CollectionStatus.FAILED
        assert stale.failure_reason == REASON_NOT_FOUND

    async def test_rpc_failure_leaves_row_pending(self):
        """Test upstream errors are absorbed and the row stays pending."""
        chain = FakeChainClient()
        chain.status_error = UpstreamError("RPC unreachable")
        tracker, repo = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(
                tx_signature=random_signature(), last_valid_block_height=600
            )
        )

        assert result.status == CollectionStatus.PENDING
        repo.transition.assert_not_called()

    async def test_lost_transition_returns_stored_row(self):
        """Test another writer's transition wins and is returned."""
        chain = FakeChainClient()
        signature = random_signature()
        chain.land(signature, "AssetId333")
        repo = AsyncMock()
        repo.transition.return_value = False
        collection = self._create_collection(
            tx_signature=signature, last_valid_block_height=600
        )
        stored = self._create_collection(
            tx_signature=signature,
            status=CollectionStatus.CONFIRMED,
            asset_id="AssetId333",
        )
        repo.get_by_id.return_value = stored
        tracker, _ = self._create_tracker(chain, repo)

        result = await tracker.resolve(collection)

        assert result is stored
        assert collection.status == CollectionStatus.PENDING

    async def test_sweep_counts_outcomes(self):
        """Test sweep resolves each pending row and tallies results."""
        chain = FakeChainClient(block_height=500)
        landed = random_signature()
        chain.land(landed, "AssetId444")
        repo = AsyncMock()
        repo.transition.return_value = True
        repo.list_pending.return_value = [
            self._create_collection(tx_signature=landed, last_valid_block_height=600),
            self._create_collection(age_seconds=500),
            self._create_collection(
                tx_signature=random_signature(), last_valid_block_height=600
            ),
        ]
        tracker, _ = self._create_tracker(chain, repo)

        result = await tracker.sweep(limit=10)

        repo.list_pending.assert_awaited_once_with(limit=10)
        assert result.checked == 3
        assert result.confirmed == 1
        assert result.failed == 1
        assert result.still_pending == 1

    async def test_processed_transaction_waits_past_expiry(self):
        """Test a processed transaction is never failed on blockhash expiry."""
        chain = FakeChainClient(block_height=700)
        signature = random_signature()
        chain.land(signature, "AssetId555", status="processed")
        tracker, repo = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(tx_signature=signature, last_valid_block_height=650)
        )

        assert result.status == CollectionStatus.PENDING
        repo.transition.assert_not_called()

    async def test_landing_between_reads_confirms(self):
        """Test a mint landing after the height read is confirmed, not expired."""
        chain = FakeChainClient(block_height=700)
        signature = random_signature()
        calls = []

        async def block_height_then_land():
            calls.append("height")
            chain.land(signature, "AssetId666")
            return 700

        original_status = chain.get_signature_status

        async def status(tx_signature):
            calls.append("status")
            return await original_status(tx_signature)

        chain.get_block_height = block_height_then_land
        chain.get_signature_status = status
        tracker, _ = self._create_tracker(chain)

        result = await tracker.resolve(
            self._create_collection(tx_signature=signature, last_valid_block_height=650)
        )

        assert calls == ["height", "status"]
        assert result.status == CollectionStatus.CONFIRMED
        assert result.asset_id == "AssetId666"
