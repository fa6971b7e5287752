"""
ethrecords secp256k1 Keys and Recoverable Signatures

Signatures are 65 bytes: r (32) || s (32) || recovery id (1).
Signing is deterministic (RFC 6979 with SHA-256) and always produces
the low-s form, as libsecp256k1 does.

Curve arithmetic is provided by the ecdsa package.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Tuple
import hashlib

from ecdsa import SigningKey, SECP256k1, ellipticcurve, numbertheory
from ecdsa.util import sigencode_string_canonize

from ethrecords.constants import (
    BIG_ENDIAN,
    PRIVATE_KEY_SIZE,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    HASH_SIZE,
    SECP256K1_N,
)
from ethrecords.core.types import Address, BytesLike, FixedBytes, strip_hex_prefix
from ethrecords.crypto.hash import keccak256_raw
from ethrecords.errors import (
    InvalidPrivateKeyError,
    InvalidParameterError,
    InvalidSignatureError,
    InvalidSignatureLengthError,
)

_CURVE = SECP256k1.curve
_GENERATOR = SECP256k1.generator
_ORDER = SECP256k1.order
_P = _CURVE.p()

UNCOMPRESSED_PREFIX = b"\x04"


class PublicKey(FixedBytes):
    """
    Uncompressed secp256k1 public key without the 0x04 prefix.

    SIZE: 64 bytes (x || y)
    """
    __slots__ = ()
    SIZE: ClassVar[int] = PUBLIC_KEY_SIZE

    def serialize(self) -> bytes:
        """65-byte uncompressed SEC1 encoding."""
        return UNCOMPRESSED_PREFIX + self.data

    @classmethod
    def deserialize(cls, data: BytesLike) -> PublicKey:
        """Accept either the 64-byte raw form or the 65-byte SEC1 form."""
        data = bytes(data)
        if len(data) == PUBLIC_KEY_SIZE + 1 and data[:1] == UNCOMPRESSED_PREFIX:
            data = data[1:]
        return cls(data)

    def to_address(self) -> Address:
        """Last 20 bytes of keccak256(x || y)."""
        return Address(keccak256_raw(self.data)[12:])


@dataclass(frozen=True, slots=True)
class PrivateKey:
    """
    secp256k1 private key.

    SIZE: 32 bytes, big-endian scalar in [1, n)
    """
    secret: bytes

    def __post_init__(self):
        if not isinstance(self.secret, (bytes, bytearray, memoryview)):
            raise InvalidPrivateKeyError(f"expected bytes, got {type(self.secret).__name__}")
        secret = bytes(self.secret)
        if len(secret) != PRIVATE_KEY_SIZE:
            raise InvalidPrivateKeyError(f"must be {PRIVATE_KEY_SIZE} bytes, got {len(secret)}")
        scalar = int.from_bytes(secret, BIG_ENDIAN)
        if scalar == 0 or scalar >= SECP256K1_N:
            raise InvalidPrivateKeyError("scalar out of range [1, n)")
        object.__setattr__(self, "secret", secret)

    @classmethod
    def generate(cls) -> PrivateKey:
        """Generate a new random key from the OS entropy source."""
        return cls(SigningKey.generate(curve=SECP256k1).to_string())

    @classmethod
    def from_hex(cls, hex_string: str) -> PrivateKey:
        if not isinstance(hex_string, str):
            raise InvalidPrivateKeyError("expected a hex string")
        try:
            secret = bytes.fromhex(strip_hex_prefix(hex_string.strip()))
        except ValueError as e:
            raise InvalidPrivateKeyError(f"invalid hex: {e}") from e
        return cls(secret)

    def serialize(self) -> bytes:
        return self.secret

    def hex(self) -> str:
        return "0x" + self.secret.hex()

    def _signing_key(self) -> SigningKey:
        return SigningKey.from_string(self.secret, curve=SECP256k1)

    def public_key(self) -> PublicKey:
        return PublicKey(self._signing_key().get_verifying_key().to_string())

    def address(self) -> Address:
        return self.public_key().to_address()

    def sign(self, digest: BytesLike) -> bytes:
        """Sign a 32-byte digest, returning r || s || recovery id."""
        return sign(self, digest)

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"

    __str__ = __repr__


# ==============================================================================
# Signing
# ==============================================================================

def _check_digest(digest: BytesLike) -> bytes:
    if not isinstance(digest, (bytes, bytearray, memoryview, FixedBytes)):
        raise InvalidParameterError("digest", f"expected bytes, got {type(digest).__name__}")
    digest = bytes(digest)
    if len(digest) != HASH_SIZE:
        raise InvalidParameterError("digest", f"must be {HASH_SIZE} bytes, got {len(digest)}")
    return digest


def sign(private_key: PrivateKey, digest: BytesLike) -> bytes:
    """
    Produce a 65-byte recoverable signature over digest.

    The recovery id is found by recovering both candidates and keeping
    the one that matches the signer's public key.
    """
    digest = _check_digest(digest)
    signing_key = private_key._signing_key()
    rs = signing_key.sign_digest_deterministic(
        digest,
        hashfunc=hashlib.sha256,
        sigencode=sigencode_string_canonize,
    )
    r = int.from_bytes(rs[:32], BIG_ENDIAN)
    s = int.from_bytes(rs[32:], BIG_ENDIAN)
    expected = signing_key.get_verifying_key().to_string()

    for recid in (0, 1):
        x, y = _recover_point(digest, r, s, recid)
        if x.to_bytes(32, BIG_ENDIAN) + y.to_bytes(32, BIG_ENDIAN) == expected:
            return rs + bytes([recid])
    raise InvalidSignatureError("no recovery id reproduces the signing key")


# ==============================================================================
# Recovery
# ==============================================================================

def split_signature(signature: BytesLike) -> Tuple[int, int, int]:
    """Split a 65-byte signature into (r, s, recovery id)."""
    signature = bytes(signature)
    if len(signature) != SIGNATURE_SIZE:
        raise InvalidSignatureLengthError(len(signature), SIGNATURE_SIZE)
    r = int.from_bytes(signature[:32], BIG_ENDIAN)
    s = int.from_bytes(signature[32:64], BIG_ENDIAN)
    return r, s, signature[64]


def recover_public_key(digest: BytesLike, signature: BytesLike) -> PublicKey:
    """
    Recover the public key that produced signature over digest.

    Raises:
        InvalidSignatureLengthError: signature is not 65 bytes
        InvalidSignatureError: r or s out of [1, n), recovery id not 0/1,
            or no curve point can be recovered
    """
    digest = _check_digest(digest)
    r, s, recid = split_signature(signature)
    if recid not in (0, 1):
        raise InvalidSignatureError(f"recovery id {recid} is not 0 or 1")
    if not (0 < r < SECP256K1_N):
        raise InvalidSignatureError("r out of range")
    if not (0 < s < SECP256K1_N):
        raise InvalidSignatureError("s out of range")

    x, y = _recover_point(digest, r, s, recid)
    return PublicKey(x.to_bytes(32, BIG_ENDIAN) + y.to_bytes(32, BIG_ENDIAN))


def _recover_point(digest: bytes, r: int, s: int, recid: int) -> Tuple[int, int]:
    # R = (r, y) with y parity given by recid; Q = r^-1 (s*R - e*G)
    alpha = (pow(r, 3, _P) + _CURVE.a() * r + _CURVE.b()) % _P
    try:
        beta = numbertheory.square_root_mod_prime(alpha, _P)
    except numbertheory.Error as e:
        raise InvalidSignatureError("r is not the x coordinate of a curve point") from e
    y = beta if beta % 2 == recid else _P - beta

    point_r = ellipticcurve.PointJacobi(_CURVE, r, y, 1, _ORDER)
    e = int.from_bytes(digest, BIG_ENDIAN) % _ORDER
    q = (point_r * s + _GENERATOR * ((-e) % _ORDER)) * numbertheory.inverse_mod(r, _ORDER)
    if q == ellipticcurve.INFINITY:
        raise InvalidSignatureError("recovered point at infinity")
    return q.x(), q.y()
