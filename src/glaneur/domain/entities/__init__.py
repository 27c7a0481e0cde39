"""
Domain entities.
"""

from glaneur.domain.entities.challenge import Challenge
from glaneur.domain.entities.collection import Collection, CollectionStatus
from glaneur.domain.entities.post import Post, PostType
from glaneur.domain.entities.session import AuthenticatedIdentity, Session
from glaneur.domain.entities.user import DEFAULT_WALLET_LABEL, User, UserWallet

__all__ = [
    "AuthenticatedIdentity",
    "Challenge",
    "Collection",
    "CollectionStatus",
    "DEFAULT_WALLET_LABEL",
    "Post",
    "PostType",
    "Session",
    "User",
    "UserWallet",
]
