"""
ethrecords Core Data Structures
"""

from ethrecords.core.types import Hash, Address, Nonce, Bloom
from ethrecords.core.serialization import (
    encode,
    decode,
    serialize_uint,
    deserialize_item,
)

__all__ = [
    # Types
    "Hash",
    "Address",
    "Nonce",
    "Bloom",
    # RLP
    "encode",
    "decode",
    "serialize_uint",
    "deserialize_item",
]
