"""Domain service interfaces."""

from glaneur.domain.services.i_chain_client import IChainClient, SignatureStatus
from glaneur.domain.services.i_challenge_store import IChallengeStore
from glaneur.domain.services.i_mint_builder import IMintBuilder, SignedMint
from glaneur.domain.services.i_rate_limiter import IRateLimiter
from glaneur.domain.services.i_wallet_authenticator import IWalletAuthenticator

__all__ = [
    "IChainClient",
    "IChallengeStore",
    "IMintBuilder",
    "IRateLimiter",
    "IWalletAuthenticator",
    "SignatureStatus",
    "SignedMint",
]
