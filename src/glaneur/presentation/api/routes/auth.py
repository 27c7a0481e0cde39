"""
Wallet sign-in routes.

- POST /challenge - Issue a single-use sign-in challenge
- POST /verify - Verify a signed challenge and issue a session token
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from glaneur.application.use_cases.find_or_create_user import FindOrCreateUser
from glaneur.application.use_cases.generate_challenge import GenerateChallenge
from glaneur.application.use_cases.verify_signature import VerifySignature
from glaneur.di.dependencies import (
    get_db_session,
    get_find_or_create_user,
    get_generate_challenge,
    get_verify_signature,
)
from glaneur.infrastructure.auth.jwt_handler import issue_session_token
from glaneur.infrastructure.monitoring import get_logger
from glaneur.presentation.api.middleware.error_handler import request_id_of
from glaneur.presentation.schemas.auth_schemas import (
    ChallengeData,
    ChallengeRequest,
    UserData,
    VerifyData,
    VerifyRequest,
)
from glaneur.presentation.schemas.envelope import SuccessEnvelope

logger = get_logger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/challenge",
    response_model=SuccessEnvelope[ChallengeData],
    summary="Issue sign-in challenge",
    description="Generate a single-use message for the wallet to sign",
)
async def create_challenge(
    body: ChallengeRequest,
    request: Request,
    use_case: GenerateChallenge = Depends(get_generate_challenge),
) -> SuccessEnvelope[ChallengeData]:
    """
    Issue a sign-in challenge.

    Raises:
        ValidationError: If the wallet address is malformed
    """
    challenge = await use_case.execute(body.wallet_address)

    return SuccessEnvelope[ChallengeData](
        data=ChallengeData(
            message=challenge.message,
            nonce=challenge.nonce,
            expires_at=challenge.expires_at,
        ),
        request_id=request_id_of(request),
    )


@router.post(
    "/verify",
    response_model=SuccessEnvelope[VerifyData],
    summary="Verify signed challenge",
    description="Verify the wallet signature and issue a session token",
)
async def verify(
    body: VerifyRequest,
    request: Request,
    verify_signature: VerifySignature = Depends(get_verify_signature),
    find_or_create_user: FindOrCreateUser = Depends(get_find_or_create_user),
    session: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[VerifyData]:
    """
    Verify a signed challenge.

    The challenge is consumed before the signature check, so a second
    attempt with the same message always fails.

    Raises:
        ValidationError: If the wallet address is malformed
        SignatureInvalidError: If the challenge or signature is rejected
    """
    await verify_signature.execute(
        wallet_address=body.wallet_address,
        message=body.message,
        signature=body.signature,
    )

    user, is_new = await find_or_create_user.execute(
        body.wallet_address, wallet_name=body.wallet_name
    )
    # User must be visible to the next request carrying the token
    await session.commit()

    session_token = issue_session_token(user.id, body.wallet_address)

    logger.info(
        "Wallet signed in",
        extra={"user_id": str(user.id), "is_new_user": is_new},
    )

    return SuccessEnvelope[VerifyData](
        data=VerifyData(
            token=session_token.token,
            expires_at=session_token.expires_at,
            user=UserData(
                id=str(user.id),
                wallet_address=user.wallet_address,
                display_name=user.display_name,
                slug=user.slug,
            ),
            is_new_user=is_new,
        ),
        request_id=request_id_of(request),
    )
