"""
Check Collection Status use case.
"""

from uuid import UUID

from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
)
from glaneur.domain.entities.collection import Collection
from glaneur.domain.exceptions import EntityNotFoundError
from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)


class CheckCollectionStatus:
    """
    Report a collection's status, resolving pending rows on the way.

    Business rules:
    - Unknown collection id -> NOT_FOUND
    - Pending rows are checked against the chain before answering
    - Asset id is only reported once confirmed
    """

    def __init__(
        self,
        collection_repository: ICollectionRepository,
        confirmation_tracker: ConfirmationTracker,
    ):
        """
        Initialize use case with dependencies.

        Args:
            collection_repository: Repository for collection persistence
            confirmation_tracker: Tracker resolving pending collections
        """
        self.collection_repository = collection_repository
        self.confirmation_tracker = confirmation_tracker

    async def execute(self, collection_id: UUID) -> Collection:
        """
        Execute status check.

        Args:
            collection_id: Collection unique identifier

        Returns:
            Collection in its latest state

        Raises:
            EntityNotFoundError: If collection does not exist
        """
        collection = await self.collection_repository.get_by_id(collection_id)
        if collection is None:
            raise EntityNotFoundError("Collection", str(collection_id))

        return await self.confirmation_tracker.resolve(collection, source="poll")
