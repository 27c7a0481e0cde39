"""
Unit tests for Collection entity.

Tests the PENDING -> CONFIRMED | FAILED state machine and re-arming.
"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from glaneur.domain.entities.collection import Collection, CollectionStatus

WALLET = "DYw8jCTfwHNRJhhmFcbXvVDTqWMEVFBX6ZKUmG5CNSKK"
SIGNATURE = "5" * 88


class TestCollection:
    """Unit tests for Collection entity."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _create_collection(self, **kwargs) -> Collection:
        defaults = {"post_id": uuid4(), "user_id": uuid4(), "wallet_address": WALLET}
        defaults.update(kwargs)
        return Collection(**defaults)

    # ================================================================
    # Test Methods
    # ================================================================

    def test_new_collection_is_pending_and_unsigned(self):
        """Test defaults of a fresh collection."""
        collection = self._create_collection()

        assert collection.status == CollectionStatus.PENDING
        assert collection.is_pending
        assert collection.tx_signature is None
        assert collection.asset_id is None

    def test_requires_wallet(self):
        """Test recipient wallet is mandatory."""
        with pytest.raises(ValueError, match="Recipient wallet"):
            self._create_collection(wallet_address="")

    def test_attach_signature(self):
        """Test signature and block height are recorded."""
        collection = self._create_collection()
        collection.attach_signature(SIGNATURE, 1234)

        assert collection.tx_signature == SIGNATURE
        assert collection.last_valid_block_height == 1234

    def test_attach_signature_twice_fails(self):
        """Test a signed collection cannot be signed again."""
        collection = self._create_collection()
        collection.attach_signature(SIGNATURE, 1234)

        with pytest.raises(ValueError, match="already has"):
            collection.attach_signature("6" * 88, 1300)

    def test_confirm(self):
        """Test pending -> confirmed records the asset id."""
        collection = self._create_collection()
        collection.confirm("Asset1111")

        assert collection.status == CollectionStatus.CONFIRMED
        assert collection.asset_id == "Asset1111"

    def test_fail(self):
        """Test pending -> failed records the reason."""
        collection = self._create_collection()
        collection.fail("Blockhash expired")

        assert collection.status == CollectionStatus.FAILED
        assert collection.failure_reason == "Blockhash expired"

    @pytest.mark.parametrize(
        "terminal", [CollectionStatus.CONFIRMED, CollectionStatus.FAILED]
    )
    def test_terminal_states_reject_transitions(self, terminal):
        """Test confirmed and failed rows never transition again."""
        collection = self._create_collection(status=terminal)

        with pytest.raises(ValueError):
            collection.confirm("Asset")
        with pytest.raises(ValueError):
            collection.fail("again")
        with pytest.raises(ValueError):
            collection.attach_signature(SIGNATURE, 1)

    def test_rearm_failed_collection(self):
        """Test a failed collection is reset for a new attempt."""
        collection = self._create_collection(
            status=CollectionStatus.FAILED,
            tx_signature=SIGNATURE,
            last_valid_block_height=99,
            failure_reason="boom",
            created_at=datetime.now() - timedelta(days=1),
        )
        other_wallet = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"

        collection.rearm(other_wallet, "10.0.0.1")

        assert collection.status == CollectionStatus.PENDING
        assert collection.wallet_address == other_wallet
        assert collection.client_ip == "10.0.0.1"
        assert collection.tx_signature is None
        assert collection.last_valid_block_height is None
        assert collection.failure_reason is None
        assert collection.age().total_seconds() < 5

    def test_rearm_requires_failed(self):
        """Test only failed rows can be re-armed."""
        collection = self._create_collection()
        with pytest.raises(ValueError, match="Cannot retry"):
            collection.rearm(WALLET, None)

    def test_is_stale(self):
        """Test stale threshold is measured from created_at."""
        now = datetime.now()
        collection = self._create_collection(created_at=now - timedelta(seconds=121))

        assert collection.is_stale(120, now=now)
        assert not collection.is_stale(130, now=now)
