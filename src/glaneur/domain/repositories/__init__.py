"""Domain repository interfaces."""

from glaneur.domain.repositories.i_collection_repository import (
    ICollectionRepository,
)
from glaneur.domain.repositories.i_post_repository import IPostRepository
from glaneur.domain.repositories.i_user_repository import IUserRepository

__all__ = [
    "ICollectionRepository",
    "IPostRepository",
    "IUserRepository",
]
