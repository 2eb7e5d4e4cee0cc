"""
nameservice.utils
-----------------

Light helpers shared across the name service components: hex/address
handling, keccak-256 hashing and clocks.

This package file deliberately avoids eager imports to keep dependency order
simple during bootstrap.
"""

__all__: list[str] = []
