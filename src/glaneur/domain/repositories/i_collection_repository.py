"""
Collection repository interface.

Defines contract for collection persistence. Every status change is a
conditional write so concurrent writers transition a row exactly once.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from glaneur.domain.entities.collection import Collection, CollectionStatus


class ICollectionRepository(ABC):
    """
    Abstract repository interface for collection persistence.
    """

    @abstractmethod
    async def get_by_id(self, collection_id: UUID) -> Optional[Collection]:
        """
        Retrieve collection by ID.

        Args:
            collection_id: Collection unique identifier

        Returns:
            Collection entity if found, None otherwise
        """

    @abstractmethod
    async def get_by_post_and_user(
        self, post_id: UUID, user_id: UUID
    ) -> Optional[Collection]:
        """
        Retrieve the collection for a (post, user) pair.

        Args:
            post_id: Post being collected
            user_id: Collecting user

        Returns:
            Collection entity if found, None otherwise
        """

    @abstractmethod
    async def claim(self, collection: Collection) -> Tuple[Collection, bool]:
        """
        Insert a new pending collection, or return the row that won.

        Relies on the (post_id, user_id) uniqueness constraint. The
        insert is committed immediately so concurrent requests observe it.

        Args:
            collection: Pending collection to insert

        Returns:
            Tuple of (stored collection, True if this call created it)
        """

    @abstractmethod
    async def rearm(self, collection: Collection) -> bool:
        """
        Reset a FAILED row to PENDING for a new attempt.

        Only succeeds if the stored row is still FAILED.

        Args:
            collection: Entity already re-armed in memory

        Returns:
            True if this call re-armed the row
        """

    @abstractmethod
    async def attach_signature(
        self,
        collection_id: UUID,
        tx_signature: str,
        last_valid_block_height: int,
    ) -> bool:
        """
        Record the signed transaction on a pending row and commit.

        Args:
            collection_id: Collection unique identifier
            tx_signature: Signature of the locally signed transaction
            last_valid_block_height: Expiry height of its blockhash

        Returns:
            True if the pending row was updated
        """

    @abstractmethod
    async def transition(
        self,
        collection_id: UUID,
        status: CollectionStatus,
        asset_id: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> bool:
        """
        Move a PENDING row to a terminal status.

        Args:
            collection_id: Collection unique identifier
            status: CONFIRMED or FAILED
            asset_id: Minted asset id (confirmed only)
            failure_reason: Why the attempt failed (failed only)

        Returns:
            True if the row was still PENDING and is now updated,
            False if another writer got there first
        """

    @abstractmethod
    async def list_pending(self, limit: int = 50) -> List[Collection]:
        """
        Get the oldest pending collections.

        Args:
            limit: Maximum number of rows

        Returns:
            Pending collections ordered by creation time
        """
