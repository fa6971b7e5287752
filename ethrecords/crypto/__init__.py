"""
ethrecords Cryptographic Primitives
"""

from ethrecords.crypto.hash import keccak256, rlp_hash
from ethrecords.crypto.secp256k1 import (
    PrivateKey,
    PublicKey,
    sign,
    recover_public_key,
)

__all__ = [
    # Hash functions
    "keccak256",
    "rlp_hash",
    # secp256k1
    "PrivateKey",
    "PublicKey",
    "sign",
    "recover_public_key",
]
