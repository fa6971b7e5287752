"""
ethrecords Hash Functions

Keccak-256 as used by Ethereum (the original Keccak padding, not FIPS 202
SHA3-256), provided by pycryptodome.
"""

from __future__ import annotations
from typing import Union

from Crypto.Hash import keccak

from ethrecords.core.types import Hash


def keccak256(data: Union[bytes, bytearray, memoryview]) -> Hash:
    """
    Keccak-256 hash function.

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte hash output wrapped in Hash type
    """
    return Hash(keccak256_raw(data))


def keccak256_raw(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """Keccak-256 returning raw bytes."""
    hasher = keccak.new(digest_bits=256)
    hasher.update(bytes(data))
    return hasher.digest()


def rlp_hash(item) -> Hash:
    """Keccak-256 of the canonical RLP encoding of item."""
    from ethrecords.core.serialization import encode

    return keccak256(encode(item))
