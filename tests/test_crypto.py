"""
ethrecords Cryptographic Primitive Tests
"""

import pytest

from ethrecords.constants import (
    EMPTY_CODE_HASH,
    EMPTY_UNCLE_HASH,
    EMPTY_ROOT_HASH,
    SECP256K1_N,
    SECP256K1_HALF_N,
)
from ethrecords.crypto.hash import keccak256, keccak256_raw, rlp_hash
from ethrecords.crypto.secp256k1 import (
    PrivateKey,
    PublicKey,
    sign,
    recover_public_key,
)
from ethrecords.errors import (
    InvalidPrivateKeyError,
    InvalidSignatureError,
    InvalidSignatureLengthError,
    InvalidParameterError,
)

EIP155_ADDRESS = "0x9d8A62f656a8d1615C1294fd71e9CFb3E4855A4F"


class TestKeccak:
    """Keccak-256 vectors."""

    def test_empty(self):
        assert keccak256(b"").data == EMPTY_CODE_HASH

    def test_empty_list(self):
        assert rlp_hash([]).data == EMPTY_UNCLE_HASH

    def test_empty_string(self):
        assert rlp_hash(b"").data == EMPTY_ROOT_HASH

    def test_not_sha3(self):
        """Ethereum Keccak differs from FIPS 202 SHA3-256."""
        import hashlib
        assert keccak256_raw(b"") != hashlib.sha3_256(b"").digest()


class TestPrivateKey:
    """Private key handling."""

    def test_wallet_address(self):
        key = PrivateKey.from_hex("e09ae607ff4fb3320133e73a76d4fc8e5b784663b2f34662fb910f3ff5d8d5ef")
        assert key.address().checksum_hex() == "0x15d48078AB8532b8857e0568311fc3792a5562ab"

    def test_eip155_address(self, signing_key):
        assert signing_key.address().checksum_hex() == EIP155_ADDRESS

    def test_generate(self):
        key = PrivateKey.generate()
        assert len(key.serialize()) == 32
        assert PrivateKey.generate() != key

    def test_from_hex_prefix_and_whitespace(self, signing_key):
        assert PrivateKey.from_hex("0x" + "46" * 32 + "\n") == signing_key

    @pytest.mark.parametrize("secret", [
        bytes(32),
        SECP256K1_N.to_bytes(32, "big"),
        b"\xff" * 32,
        bytes(31),
    ])
    def test_out_of_range(self, secret):
        with pytest.raises(InvalidPrivateKeyError):
            PrivateKey(secret)

    def test_invalid_hex(self):
        with pytest.raises(InvalidPrivateKeyError):
            PrivateKey.from_hex("not hex")

    def test_repr_redacted(self, signing_key):
        assert "46" not in repr(signing_key)
        assert "46" not in str(signing_key)


class TestPublicKey:
    """Public key encodings."""

    def test_serialize_uncompressed(self, signing_key):
        public = signing_key.public_key()
        assert len(public.data) == 64
        assert public.serialize() == b"\x04" + public.data

    def test_deserialize_both_forms(self, signing_key):
        public = signing_key.public_key()
        assert PublicKey.deserialize(public.serialize()) == public
        assert PublicKey.deserialize(public.data) == public

    def test_to_address(self, signing_key):
        assert signing_key.public_key().to_address() == signing_key.address()


class TestSignRecover:
    """Recoverable signatures."""

    DIGEST = keccak256(b"ethrecords").data

    def test_signature_shape(self, signing_key):
        signature = sign(signing_key, self.DIGEST)
        assert len(signature) == 65
        assert signature[64] in (0, 1)

    def test_deterministic(self, signing_key):
        assert signing_key.sign(self.DIGEST) == signing_key.sign(self.DIGEST)

    def test_low_s(self, signing_key, other_key):
        for key in (signing_key, other_key):
            for i in range(8):
                signature = key.sign(keccak256(bytes([i])).data)
                assert int.from_bytes(signature[32:64], "big") <= SECP256K1_HALF_N

    def test_recover(self, signing_key):
        signature = signing_key.sign(self.DIGEST)
        assert recover_public_key(self.DIGEST, signature) == signing_key.public_key()

    def test_recover_other_digest(self, signing_key):
        signature = signing_key.sign(self.DIGEST)
        other = keccak256(b"other").data
        assert recover_public_key(other, signature) != signing_key.public_key()

    def test_flipped_recovery_id(self, signing_key):
        signature = bytearray(signing_key.sign(self.DIGEST))
        signature[64] ^= 1
        assert recover_public_key(self.DIGEST, signature) != signing_key.public_key()

    def test_bad_recovery_id(self, signing_key):
        signature = bytearray(signing_key.sign(self.DIGEST))
        signature[64] = 2
        with pytest.raises(InvalidSignatureError):
            recover_public_key(self.DIGEST, signature)

    def test_zero_r(self, signing_key):
        signature = bytes(32) + signing_key.sign(self.DIGEST)[32:]
        with pytest.raises(InvalidSignatureError):
            recover_public_key(self.DIGEST, signature)

    def test_s_at_order(self, signing_key):
        signature = signing_key.sign(self.DIGEST)
        signature = signature[:32] + SECP256K1_N.to_bytes(32, "big") + signature[64:]
        with pytest.raises(InvalidSignatureError):
            recover_public_key(self.DIGEST, signature)

    def test_signature_length(self):
        with pytest.raises(InvalidSignatureLengthError):
            recover_public_key(self.DIGEST, bytes(64))

    def test_digest_length(self, signing_key):
        with pytest.raises(InvalidParameterError):
            signing_key.sign(b"short")
