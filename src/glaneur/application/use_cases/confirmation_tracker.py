"""
Confirmation Tracker.

Resolves pending collections against the chain. Used lazily when a
client polls and periodically by the reconciliation sweeper.
"""

from dataclasses import dataclass
from typing import Optional

from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.exceptions import UpstreamError
from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)
from glaneur.domain.services.i_chain_client import IChainClient
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

REASON_ORPHANED = "Orphaned before broadcast"
REASON_NOT_FOUND = "Transaction not found on chain"
REASON_BLOCKHASH_EXPIRED = "Blockhash expired before confirmation"


@dataclass
class SweepResult:
    """Counters for one reconciliation pass."""

    checked: int = 0
    confirmed: int = 0
    failed: int = 0
    still_pending: int = 0


class ConfirmationTracker:
    """
    Move pending collections to CONFIRMED or FAILED.

    Business rules:
    - Only PENDING rows are touched
    - Unsigned rows fail once older than the stale threshold
    - Chain error on the transaction -> FAILED
    - confirmed/finalized -> CONFIRMED with the asset id from the logs
    - processed -> left alone, the transaction is already in a block
    - Unseen: FAILED once the blockhash has expired, otherwise left
      alone (stale threshold when height is unknown)
    - Block height is read before the signature status
    - Every transition is conditional on the row still being PENDING
    - RPC failures leave the row PENDING
    """

    def __init__(
        self,
        collection_repository: ICollectionRepository,
        chain_client: IChainClient,
        stale_pending_seconds: int = 120,
    ):
        """
        Initialize tracker with dependencies.

        Args:
            collection_repository: Repository for collection persistence
            chain_client: Solana RPC client
            stale_pending_seconds: Age after which unresolved rows fail
        """
        self.collection_repository = collection_repository
        self.chain_client = chain_client
        self.stale_pending_seconds = stale_pending_seconds

    async def resolve(self, collection: Collection, source: str = "poll") -> Collection:
        """
        Resolve a single collection if it is still pending.

        Args:
            collection: Collection to check
            source: Caller label for metrics (poll, collect, sweep)

        Returns:
            Collection in its latest known state
        """
        if not collection.is_pending:
            return collection

        if not collection.tx_signature:
            if collection.is_stale(self.stale_pending_seconds):
                return await self._fail(collection, REASON_ORPHANED, source)
            return collection

        try:
            return await self._resolve_signed(collection, source)
        except UpstreamError as e:
            logger.warning(
                "Could not resolve collection, leaving pending",
                extra={
                    "collection_id": str(collection.id),
                    "tx_signature": collection.tx_signature,
                    "error": e.message,
                },
            )
            return collection

    async def sweep(self, limit: int = 50) -> SweepResult:
        """
        Resolve the oldest pending collections.

        Args:
            limit: Maximum rows per pass

        Returns:
            SweepResult with per-outcome counts
        """
        result = SweepResult()
        pending = await self.collection_repository.list_pending(limit=limit)
        metrics.pending_collections.set(len(pending))

        for collection in pending:
            resolved = await self.resolve(collection, source="sweep")
            result.checked += 1
            if resolved.status == CollectionStatus.CONFIRMED:
                result.confirmed += 1
            elif resolved.status == CollectionStatus.FAILED:
                result.failed += 1
            else:
                result.still_pending += 1

        return result

    async def _resolve_signed(self, collection: Collection, source: str) -> Collection:
        # Height before status: a transaction landing between the reads
        # is then seen by the status read
        block_height = None
        if collection.last_valid_block_height is not None:
            block_height = await self.chain_client.get_block_height()

        status = await self.chain_client.get_signature_status(collection.tx_signature)

        if status is not None and status.failed:
            return await self._fail(
                collection, f"Transaction failed on chain: {status.err}", source
            )

        if status is not None and status.landed:
            asset_id = await self.chain_client.get_asset_id(collection.tx_signature)
            if asset_id is None:
                logger.warning(
                    "Confirmed mint without asset id in logs",
                    extra={"tx_signature": collection.tx_signature},
                )
            return await self._confirm(collection, asset_id, source)

        # Processed: already in a block, wait for confirmation
        if status is not None:
            return collection

        # Not seen yet
        if collection.last_valid_block_height is None:
            if collection.is_stale(self.stale_pending_seconds):
                return await self._fail(collection, REASON_NOT_FOUND, source)
            return collection

        if block_height > collection.last_valid_block_height:
            return await self._fail(collection, REASON_BLOCKHASH_EXPIRED, source)

        return collection

    async def _confirm(
        self, collection: Collection, asset_id: Optional[str], source: str
    ) -> Collection:
        updated = await self.collection_repository.transition(
            collection.id,
            CollectionStatus.CONFIRMED,
            asset_id=asset_id,
        )
        if not updated:
            return await self._reload(collection)

        collection.confirm(asset_id)
        metrics.collection_transitions_total.labels(
            status="confirmed", source=source
        ).inc()
        logger.info(
            "Collection confirmed",
            extra={
                "collection_id": str(collection.id),
                "tx_signature": collection.tx_signature,
                "asset_id": asset_id,
            },
        )
        return collection

    async def _fail(self, collection: Collection, reason: str, source: str) -> Collection:
        updated = await self.collection_repository.transition(
            collection.id,
            CollectionStatus.FAILED,
            failure_reason=reason,
        )
        if not updated:
            return await self._reload(collection)

        collection.fail(reason)
        metrics.collection_transitions_total.labels(status="failed", source=source).inc()
        logger.info(
            "Collection failed",
            extra={
                "collection_id": str(collection.id),
                "tx_signature": collection.tx_signature,
                "reason": reason,
            },
        )
        return collection

    async def _reload(self, collection: Collection) -> Collection:
        """Another writer transitioned the row first; return its version."""
        current = await self.collection_repository.get_by_id(collection.id)
        return current or collection
