"""Domain value objects."""

from glaneur.domain.value_objects.wallet_address import WalletAddress

__all__ = ["WalletAddress"]
