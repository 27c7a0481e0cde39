"""
Compressed mint builder.

Builds a Bubblegum mint of a collectible post to a collector's wallet
and signs it with the platform keypair.
"""

import time
from typing import Optional

from solders.hash import Hash
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from glaneur.domain.entities.post import Post
from glaneur.domain.exceptions import SignerNotConfiguredError, ValidationError
from glaneur.domain.services.i_chain_client import IChainClient
from glaneur.domain.services.i_mint_builder import IMintBuilder, SignedMint
from glaneur.infrastructure.blockchain.bubblegum import (
    MAX_NAME_LENGTH,
    Creator,
    MetadataArgs,
    build_mint_v1_instruction,
)
from glaneur.infrastructure.blockchain.platform_signer import PlatformSigner
from glaneur.infrastructure.monitoring import get_logger, log_performance

logger = get_logger(__name__)


def build_metadata(post: Post) -> MetadataArgs:
    """
    Metadata for a post's collectible.

    Raises:
        ValidationError: If the post cannot be minted as is
    """
    if not post.metadata_url:
        raise ValidationError(field="postId", reason="Collectible has no metadata URI")

    name = post.collectible_name()
    while len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        name = name[:-1]

    try:
        creators = []
        if post.creator_wallet:
            creators.append(
                Creator(
                    address=Pubkey.from_string(post.creator_wallet),
                    verified=False,
                    share=100,
                )
            )
        return MetadataArgs(
            name=name,
            uri=post.metadata_url,
            seller_fee_basis_points=post.seller_fee_basis_points or 0,
            creators=creators,
        )
    except ValueError as e:
        raise ValidationError(field="postId", reason=str(e)) from e


class CompressedMintBuilder(IMintBuilder):
    """
    Server-signed Bubblegum mints.

    The platform keypair is both fee payer and tree authority; the
    collector only receives the leaf. A fresh blockhash is fetched for
    every transaction.
    """

    def __init__(
        self,
        chain_client: IChainClient,
        signer: PlatformSigner,
        merkle_tree_address: Optional[str],
    ):
        """
        Initialize builder.

        Args:
            chain_client: RPC client used for the blockhash
            signer: Platform signer
            merkle_tree_address: Tree collectibles are minted into
        """
        self.chain_client = chain_client
        self.signer = signer
        self.merkle_tree_address = merkle_tree_address

    async def build_signed_mint(self, post: Post, recipient: str) -> SignedMint:
        if not self.merkle_tree_address:
            raise SignerNotConfiguredError("Bubblegum merkle tree")

        start = time.time()
        metadata = build_metadata(post)
        keypair = await self.signer.get_keypair()
        authority = keypair.pubkey()

        instruction = build_mint_v1_instruction(
            merkle_tree=Pubkey.from_string(self.merkle_tree_address),
            leaf_owner=Pubkey.from_string(recipient),
            payer=authority,
            tree_creator=authority,
            metadata=metadata,
        )

        blockhash, last_valid_block_height = (
            await self.chain_client.get_latest_blockhash()
        )
        message = MessageV0.try_compile(
            authority, [instruction], [], Hash.from_string(blockhash)
        )
        transaction = VersionedTransaction(message, [keypair])
        log_performance(logger, "Compressed mint build", start)

        return SignedMint(
            tx_signature=str(transaction.signatures[0]),
            transaction=bytes(transaction),
            last_valid_block_height=last_valid_block_height,
        )
