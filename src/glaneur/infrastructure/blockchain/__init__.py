"""
Blockchain infrastructure - Solana RPC and compressed mints.
"""

from glaneur.infrastructure.blockchain.compressed_mint_builder import (
    CompressedMintBuilder,
)
from glaneur.infrastructure.blockchain.platform_signer import PlatformSigner
from glaneur.infrastructure.blockchain.solana_rpc_client import SolanaRpcClient

__all__ = [
    "CompressedMintBuilder",
    "PlatformSigner",
    "SolanaRpcClient",
]
