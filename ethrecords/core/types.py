"""
ethrecords Fixed-Width Value Types

Hash, Address, Nonce and Bloom wrap raw bytes of an exact width.
All hex strings are 0x-prefixed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Union

from ethrecords.constants import (
    HASH_SIZE,
    ADDRESS_SIZE,
    NONCE_SIZE,
    BLOOM_SIZE,
    BIG_ENDIAN,
    MAX_UINT256,
)
from ethrecords.errors import InvalidParameterError

BytesLike = Union[bytes, bytearray, memoryview]


def strip_hex_prefix(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


@dataclass(frozen=True, slots=True)
class FixedBytes:
    """
    Immutable byte string of a fixed width.

    The input buffer is copied, so later changes to a caller's bytearray
    never reach the value.
    """
    data: bytes
    SIZE: ClassVar[int] = 0

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise InvalidParameterError(
                type(self).__name__, f"expected bytes, got {type(self.data).__name__}"
            )
        data = bytes(self.data)
        if len(data) != self.SIZE:
            raise InvalidParameterError(
                type(self).__name__, f"must be {self.SIZE} bytes, got {len(data)}"
            )
        object.__setattr__(self, "data", data)

    def __bytes__(self) -> bytes:
        return self.data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedBytes):
            return type(self) is type(other) and self.data == other.data
        if isinstance(other, bytes):
            return self.data == other
        return False

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"

    def __str__(self) -> str:
        return self.hex()

    def hex(self) -> str:
        return "0x" + self.data.hex()

    @classmethod
    def from_hex(cls, hex_string: str):
        if not isinstance(hex_string, str):
            raise InvalidParameterError(cls.__name__, "expected a hex string")
        try:
            data = bytes.fromhex(strip_hex_prefix(hex_string))
        except ValueError as e:
            raise InvalidParameterError(cls.__name__, f"invalid hex: {e}") from e
        return cls(data)

    @classmethod
    def zero(cls):
        return cls(bytes(cls.SIZE))

    def is_zero(self) -> bool:
        return not any(self.data)

    def serialize(self) -> bytes:
        """Serialize to raw bytes."""
        return self.data


class Hash(FixedBytes):
    """
    Keccak-256 digest.

    SIZE: 32 bytes
    """
    __slots__ = ()
    SIZE: ClassVar[int] = HASH_SIZE


class Address(FixedBytes):
    """
    Account address: the last 20 bytes of keccak256(public key).

    SIZE: 20 bytes
    """
    __slots__ = ()
    SIZE: ClassVar[int] = ADDRESS_SIZE

    def checksum_hex(self) -> str:
        """EIP-55 mixed-case checksum encoding."""
        from ethrecords.crypto.hash import keccak256_raw

        lower = self.data.hex()
        digest = keccak256_raw(lower.encode("ascii")).hex()
        return "0x" + "".join(
            c.upper() if int(digest[i], 16) >= 8 else c
            for i, c in enumerate(lower)
        )

    def __str__(self) -> str:
        return self.checksum_hex()


class Nonce(FixedBytes):
    """
    Block proof-of-work nonce.

    SIZE: 8 bytes
    """
    __slots__ = ()
    SIZE: ClassVar[int] = NONCE_SIZE

    def __int__(self) -> int:
        return int.from_bytes(self.data, BIG_ENDIAN)

    @classmethod
    def from_int(cls, value: int) -> Nonce:
        return cls(value.to_bytes(NONCE_SIZE, BIG_ENDIAN))


class Bloom(FixedBytes):
    """
    2048-bit log bloom filter. Storage only, no membership tests.

    SIZE: 256 bytes
    """
    __slots__ = ()
    SIZE: ClassVar[int] = BLOOM_SIZE

    def __repr__(self) -> str:
        return f"Bloom({self.hex()[:18]}...)"


# ==============================================================================
# Field Validation
# ==============================================================================

def coerce_fixed(value, cls, name: str):
    """Accept an instance of cls or raw bytes of the right width."""
    if isinstance(value, cls):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return cls(value)
    raise InvalidParameterError(name, f"expected {cls.__name__}, got {type(value).__name__}")


def check_uint(value, name: str, max_value: int = MAX_UINT256) -> int:
    """Require a non-negative int no larger than max_value."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(name, f"expected int, got {type(value).__name__}")
    if value < 0 or value > max_value:
        raise InvalidParameterError(name, f"out of range: {value}")
    return value


def copy_bytes(value, name: str) -> bytes:
    """Copy a bytes-like value into immutable bytes."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidParameterError(name, f"expected bytes, got {type(value).__name__}")
    return bytes(value)
