"""API schemas."""

from glaneur.presentation.schemas.auth_schemas import (
    ChallengeData,
    ChallengeRequest,
    UserData,
    VerifyData,
    VerifyRequest,
)
from glaneur.presentation.schemas.collect_schemas import (
    CollectData,
    CollectionStatusData,
    CollectRequest,
)
from glaneur.presentation.schemas.envelope import (
    ErrorBody,
    ErrorEnvelope,
    SuccessEnvelope,
)

__all__ = [
    "ChallengeData",
    "ChallengeRequest",
    "CollectData",
    "CollectionStatusData",
    "CollectRequest",
    "ErrorBody",
    "ErrorEnvelope",
    "SuccessEnvelope",
    "UserData",
    "VerifyData",
    "VerifyRequest",
]
