"""
Glaneur - wallet sign-in and free collectible minting service.
"""

__version__ = "0.1.0"
