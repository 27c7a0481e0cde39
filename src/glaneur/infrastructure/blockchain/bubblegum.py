"""
Bubblegum mint_v1 instruction builder.

Encodes the compressed-NFT mint instruction by hand (Borsh layout) so no
Metaplex SDK is needed.
"""

import struct
from dataclasses import dataclass, field
from typing import List, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

BUBBLEGUM_PROGRAM_ID = Pubkey.from_string("BGUMAp9Gq7iTEuizy4pqaxsTyUCBK68MDfK752saRPUY")
SPL_NOOP_PROGRAM_ID = Pubkey.from_string("noopb9bkMVfRPU8AsbpTUg8AQkHtKwMYZiFUjNRtMmV")
SPL_ACCOUNT_COMPRESSION_PROGRAM_ID = Pubkey.from_string(
    "cmtDvXumGCrqC1Age74AVPhSRVXJMd8PJS91L8KbNCK"
)
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

# Anchor discriminator: sha256("global:mint_v1")[:8]
MINT_V1_DISCRIMINATOR = bytes([145, 98, 192, 118, 184, 147, 118, 104])

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200

TOKEN_STANDARD_NON_FUNGIBLE = 0
TOKEN_PROGRAM_VERSION_ORIGINAL = 0


@dataclass(frozen=True)
class Creator:
    address: Pubkey
    verified: bool
    share: int


@dataclass
class MetadataArgs:
    """Subset of Bubblegum MetadataArgs used for free collectibles."""

    name: str
    uri: str
    symbol: str = ""
    seller_fee_basis_points: int = 0
    creators: List[Creator] = field(default_factory=list)
    primary_sale_happened: bool = False
    is_mutable: bool = True

    def __post_init__(self):
        if len(self.name.encode("utf-8")) > MAX_NAME_LENGTH:
            raise ValueError(f"Name longer than {MAX_NAME_LENGTH} bytes")
        if len(self.symbol.encode("utf-8")) > MAX_SYMBOL_LENGTH:
            raise ValueError(f"Symbol longer than {MAX_SYMBOL_LENGTH} bytes")
        if len(self.uri.encode("utf-8")) > MAX_URI_LENGTH:
            raise ValueError(f"URI longer than {MAX_URI_LENGTH} bytes")
        if not 0 <= self.seller_fee_basis_points <= 10000:
            raise ValueError("Seller fee must be between 0 and 10000 basis points")
        if self.creators and sum(c.share for c in self.creators) != 100:
            raise ValueError("Creator shares must add up to 100")

    def serialize(self) -> bytes:
        """Borsh-encode the metadata."""
        out = bytearray()
        out += _borsh_string(self.name)
        out += _borsh_string(self.symbol)
        out += _borsh_string(self.uri)
        out += struct.pack("<H", self.seller_fee_basis_points)
        out += struct.pack("<?", self.primary_sale_happened)
        out += struct.pack("<?", self.is_mutable)
        out += b"\x00"  # edition_nonce: None
        out += b"\x01" + struct.pack("<B", TOKEN_STANDARD_NON_FUNGIBLE)
        out += b"\x00"  # collection: None
        out += b"\x00"  # uses: None
        out += struct.pack("<B", TOKEN_PROGRAM_VERSION_ORIGINAL)
        out += struct.pack("<I", len(self.creators))
        for creator in self.creators:
            out += bytes(creator.address)
            out += struct.pack("<?", creator.verified)
            out += struct.pack("<B", creator.share)
        return bytes(out)


def _borsh_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def find_tree_config(merkle_tree: Pubkey) -> Tuple[Pubkey, int]:
    """Derive the tree config (tree authority) PDA for a merkle tree."""
    return Pubkey.find_program_address([bytes(merkle_tree)], BUBBLEGUM_PROGRAM_ID)


def build_mint_v1_instruction(
    merkle_tree: Pubkey,
    leaf_owner: Pubkey,
    payer: Pubkey,
    tree_creator: Pubkey,
    metadata: MetadataArgs,
) -> Instruction:
    """
    Build a mint_v1 instruction.

    Args:
        merkle_tree: Tree the leaf is appended to
        leaf_owner: Wallet that will own the asset (also the delegate)
        payer: Fee payer, must sign
        tree_creator: Tree creator or delegate, must sign
        metadata: Asset metadata

    Returns:
        Instruction ready to be compiled into a message
    """
    tree_config, _ = find_tree_config(merkle_tree)
    accounts = [
        AccountMeta(pubkey=tree_config, is_signer=False, is_writable=True),
        AccountMeta(pubkey=leaf_owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=leaf_owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=merkle_tree, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=tree_creator, is_signer=True, is_writable=False),
        AccountMeta(pubkey=SPL_NOOP_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(
            pubkey=SPL_ACCOUNT_COMPRESSION_PROGRAM_ID,
            is_signer=False,
            is_writable=False,
        ),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = MINT_V1_DISCRIMINATOR + metadata.serialize()
    return Instruction(program_id=BUBBLEGUM_PROGRAM_ID, data=data, accounts=accounts)
