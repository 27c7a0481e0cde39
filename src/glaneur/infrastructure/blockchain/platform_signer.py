"""
Platform signer.

Holds the server keypair that pays for and authorizes compressed mints.
Loaded once, on first use.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from glaneur.domain.exceptions import SignerNotConfiguredError
from glaneur.infrastructure.monitoring import get_logger

logger = get_logger(__name__)


class PlatformSigner:
    """
    Lazily loaded platform keypair.

    The keypair file is the standard Solana CLI JSON array of 64 bytes.
    """

    def __init__(self, keypair_path: Optional[str] = None, keypair: Optional[Keypair] = None):
        """
        Initialize signer.

        Args:
            keypair_path: Path to the keypair JSON file
            keypair: Already loaded keypair (tests)
        """
        self.keypair_path = keypair_path
        self._keypair = keypair
        self._lock = asyncio.Lock()

    async def get_keypair(self) -> Keypair:
        """
        Get the platform keypair, loading it on first call.

        Raises:
            SignerNotConfiguredError: If no keypair path is configured
        """
        if self._keypair is not None:
            return self._keypair

        async with self._lock:
            if self._keypair is None:
                self._keypair = self._load()
        return self._keypair

    async def pubkey(self) -> Pubkey:
        return (await self.get_keypair()).pubkey()

    def _load(self) -> Keypair:
        if not self.keypair_path:
            raise SignerNotConfiguredError("Platform keypair")

        path = Path(self.keypair_path).expanduser()
        if not path.exists():
            raise SignerNotConfiguredError(f"Platform keypair at {path}")

        with open(path, "r") as f:
            secret = json.load(f)

        keypair = Keypair.from_bytes(bytes(secret))
        logger.info("Platform keypair loaded", extra={"pubkey": str(keypair.pubkey())})
        return keypair
