"""
FastAPI dependency injection.

Provides dependencies for FastAPI routes using the DI container.
All dependencies are async-compatible and use proper scoping.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.config.settings import get_settings
from glaneur.di.container import get_container

# ================================================================
# Database Dependencies
# ================================================================


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session dependency.

    Yields async database session from container.
    Session is automatically closed after request.
    """
    container = get_container()
    async with container.database.session() as session:
        yield session


# ================================================================
# Use Case Dependencies
# ================================================================


def get_generate_challenge():
    """Get GenerateChallenge use case dependency."""
    from glaneur.application.use_cases.generate_challenge import (
        GenerateChallenge,
    )

    settings = get_settings()
    return GenerateChallenge(
        challenge_store=get_container().challenge_store,
        domain=settings.SIWS_DOMAIN,
        ttl_seconds=settings.CHALLENGE_TTL_SECONDS,
    )


def get_verify_signature():
    """Get VerifySignature use case dependency."""
    from glaneur.application.use_cases.verify_signature import VerifySignature

    container = get_container()
    return VerifySignature(
        challenge_store=container.challenge_store,
        wallet_authenticator=container.wallet_authenticator,
    )


def get_find_or_create_user(
    session: AsyncSession = Depends(get_db_session),
):
    """Get FindOrCreateUser use case dependency."""
    from glaneur.application.use_cases.find_or_create_user import (
        FindOrCreateUser,
    )

    container = get_container()
    return FindOrCreateUser(user_repository=container.get_user_repository(session))


def get_prepare_collect(
    session: AsyncSession = Depends(get_db_session),
):
    """Get PrepareCollect use case dependency."""
    from glaneur.application.use_cases.prepare_collect import PrepareCollect

    container = get_container()
    return PrepareCollect(
        post_repository=container.get_post_repository(session),
        user_repository=container.get_user_repository(session),
        collection_repository=container.get_collection_repository(session),
        rate_limiter=container.rate_limiter,
        mint_builder=container.mint_builder,
        chain_client=container.chain_client,
        confirmation_tracker=container.get_confirmation_tracker(session),
    )


def get_check_collection_status(
    session: AsyncSession = Depends(get_db_session),
):
    """Get CheckCollectionStatus use case dependency."""
    from glaneur.application.use_cases.check_collection_status import (
        CheckCollectionStatus,
    )

    container = get_container()
    return CheckCollectionStatus(
        collection_repository=container.get_collection_repository(session),
        confirmation_tracker=container.get_confirmation_tracker(session),
    )
