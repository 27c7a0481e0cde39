"""
SQLAlchemy repository implementations.
"""

from glaneur.infrastructure.persistence.repositories.collection_repository import (
    CollectionRepository,
)
from glaneur.infrastructure.persistence.repositories.post_repository import (
    PostRepository,
)
from glaneur.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "CollectionRepository",
    "PostRepository",
    "UserRepository",
]
