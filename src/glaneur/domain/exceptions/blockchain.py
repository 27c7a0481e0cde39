"""
Blockchain-related exceptions.
"""

from glaneur.domain.exceptions.base import GlaneurException


class UpstreamError(GlaneurException):
    """Raised when a Solana RPC call fails after bounded retries."""

    def __init__(self, message: str, status_code: int | None = None):
        """
        Initialize upstream error.

        Args:
            message: Error message
            status_code: HTTP status code returned by the RPC node, if any
        """
        super().__init__(message, code="UPSTREAM_ERROR")
        self.status_code = status_code


class TransactionRejectedError(UpstreamError):
    """Raised when the RPC node definitively rejects a transaction."""

    def __init__(self, tx_signature: str, reason: str):
        super().__init__(f"Transaction {tx_signature} rejected: {reason}")
        self.tx_signature = tx_signature
        self.reason = reason


class SignerNotConfiguredError(GlaneurException):
    """Raised when the platform keypair or merkle tree is not configured."""

    def __init__(self, what: str):
        super().__init__(f"{what} is not configured", code="INTERNAL_ERROR")
