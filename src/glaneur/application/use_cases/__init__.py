"""Application use cases."""

from glaneur.application.use_cases.check_collection_status import (
    CheckCollectionStatus,
)
from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
    SweepResult,
)
from glaneur.application.use_cases.find_or_create_user import FindOrCreateUser
from glaneur.application.use_cases.generate_challenge import GenerateChallenge
from glaneur.application.use_cases.prepare_collect import (
    CollectResult,
    PrepareCollect,
)
from glaneur.application.use_cases.verify_signature import VerifySignature

__all__ = [
    "CheckCollectionStatus",
    "CollectResult",
    "ConfirmationTracker",
    "FindOrCreateUser",
    "GenerateChallenge",
    "PrepareCollect",
    "SweepResult",
    "VerifySignature",
]
