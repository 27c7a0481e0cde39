"""
Collect routes.

- POST /collect/{post_id} - Mint a free collectible to the caller
- GET /collect-status/{collection_id} - Poll a collection
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request

from glaneur.application.use_cases.check_collection_status import (
    CheckCollectionStatus,
)
from glaneur.application.use_cases.prepare_collect import PrepareCollect
from glaneur.di.dependencies import (
    get_check_collection_status,
    get_prepare_collect,
)
from glaneur.domain.entities.collection import CollectionStatus
from glaneur.domain.entities.session import AuthenticatedIdentity
from glaneur.presentation.api.middleware.auth import get_current_identity
from glaneur.presentation.api.middleware.client_ip import get_client_ip
from glaneur.presentation.api.middleware.error_handler import request_id_of
from glaneur.presentation.schemas.collect_schemas import (
    CollectData,
    CollectionStatusData,
    CollectRequest,
)
from glaneur.presentation.schemas.envelope import SuccessEnvelope

router = APIRouter(tags=["Collect"])


@router.post(
    "/collect/{post_id}",
    response_model=SuccessEnvelope[CollectData],
    response_model_exclude_none=True,
    summary="Collect a post",
    description="Mint a compressed collectible of the post to the caller",
)
async def collect(
    post_id: UUID,
    request: Request,
    body: Optional[CollectRequest] = Body(default=None),
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    use_case: PrepareCollect = Depends(get_prepare_collect),
) -> SuccessEnvelope[CollectData]:
    """
    Collect a free collectible.

    Returns pending with the transaction signature, or already_collected
    when a collection for this post and user exists.

    Raises:
        AuthRequiredError, InvalidTokenError: Without a valid session
        EntityNotFoundError: If the post does not exist
        ValidationError: If the post is not collectible
        RateLimitedError: If a collect limit is exhausted
        UpstreamError: If the chain rejects the mint
    """
    result = await use_case.execute(
        post_id=post_id,
        user_id=identity.user_id,
        wallet_address=body.wallet_address if body else None,
        client_ip=get_client_ip(request),
    )

    return SuccessEnvelope[CollectData](
        data=CollectData(
            status=result.status,
            collection_id=str(result.collection_id),
            tx_signature=result.tx_signature,
            asset_id=result.asset_id,
            message=result.message,
        ),
        request_id=request_id_of(request),
    )


@router.get(
    "/collect-status/{collection_id}",
    response_model=SuccessEnvelope[CollectionStatusData],
    summary="Collection status",
    description="Current status of a collection, resolving pending ones",
)
async def collect_status(
    collection_id: UUID,
    request: Request,
    use_case: CheckCollectionStatus = Depends(get_check_collection_status),
) -> SuccessEnvelope[CollectionStatusData]:
    """
    Poll a collection.

    nftMint stays null until the collection is confirmed.

    Raises:
        EntityNotFoundError: If the collection does not exist
    """
    collection = await use_case.execute(collection_id)
    confirmed = collection.status == CollectionStatus.CONFIRMED

    return SuccessEnvelope[CollectionStatusData](
        data=CollectionStatusData(
            status=collection.status.value,
            tx_signature=collection.tx_signature,
            nft_mint=collection.asset_id if confirmed else None,
        ),
        request_id=request_id_of(request),
    )
