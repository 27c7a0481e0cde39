"""
Post repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from glaneur.domain.entities.post import Post


class IPostRepository(ABC):
    """
    Read-only access to posts.

    Posts are owned by the content service; this service only reads them
    to decide whether they can be collected.
    """

    @abstractmethod
    async def get_by_id(self, post_id: UUID) -> Optional[Post]:
        """
        Get post by ID.

        Args:
            post_id: Post unique identifier

        Returns:
            Post entity if found, None otherwise
        """
