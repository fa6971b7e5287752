"""
ethrecords Signer Tests
"""

from dataclasses import replace

import pytest

from ethrecords.constants import SECP256K1_N
from ethrecords.core.serialization import encode
from ethrecords.core.transaction import Transaction
from ethrecords.crypto.hash import keccak256
from ethrecords.errors import (
    ErrorCode,
    InvalidChainIdError,
    InvalidSignatureError,
    InvalidSignatureLengthError,
    MissingSignatureError,
)
from ethrecords.protocol.signer import (
    Signer,
    SignerKind,
    signing_digest,
    with_signature,
    recover_sender,
    sign_transaction,
)


class TestSignerSelection:
    """Signer construction."""

    def test_for_chain(self):
        assert Signer.for_chain(None).kind is SignerKind.LEGACY
        signer = Signer.for_chain(5)
        assert signer.kind is SignerKind.REPLAY_PROTECTED
        assert signer.chain_id == 5

    @pytest.mark.parametrize("chain_id", [0, -1, True, "1"])
    def test_invalid_chain_id(self, chain_id):
        with pytest.raises(InvalidChainIdError):
            Signer.for_chain(chain_id)

    def test_legacy_with_chain_id(self):
        with pytest.raises(InvalidChainIdError):
            Signer(SignerKind.LEGACY, 1)

    def test_chain_id_error_is_signature_error(self):
        with pytest.raises(InvalidSignatureError) as exc:
            Signer.for_chain(0)
        assert exc.value.code == ErrorCode.INVALID_CHAIN_ID


class TestSigningDigest:
    """Digests for both schemes."""

    def test_legacy_digest(self, sample_transaction):
        tx = sample_transaction
        expected = keccak256(encode([tx.nonce, tx.gas_price, tx.gas, tx.to.data, tx.value, tx.data]))
        assert signing_digest(tx, None) == expected

    def test_eip155_digest(self, sample_transaction):
        assert signing_digest(sample_transaction, 1).hex() == (
            "0xdaf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
        )

    def test_digest_depends_on_chain(self, sample_transaction):
        assert signing_digest(sample_transaction, 1) != signing_digest(sample_transaction, 2)
        assert signing_digest(sample_transaction, 1) != signing_digest(sample_transaction, None)

    def test_digest_ignores_signature(self, sample_transaction, signed_transaction):
        assert signing_digest(signed_transaction, 1) == signing_digest(sample_transaction, 1)

    def test_transaction_shortcut_defaults_to_legacy(self, sample_transaction):
        assert sample_transaction.sig_hash() == signing_digest(sample_transaction, None)
        assert sample_transaction.sig_hash(1) == signing_digest(sample_transaction, 1)


class TestWithSignature:
    """Attaching signatures."""

    SIGNATURE = bytes([0x11] * 32 + [0x22] * 32 + [1])

    def test_legacy_v(self, sample_transaction):
        tx = with_signature(sample_transaction, self.SIGNATURE, None)
        assert tx.v == 28
        assert tx.r == int.from_bytes(bytes([0x11] * 32), "big")
        assert tx.s == int.from_bytes(bytes([0x22] * 32), "big")

    def test_eip155_v(self, sample_transaction):
        assert with_signature(sample_transaction, self.SIGNATURE, 1).v == 38
        assert with_signature(sample_transaction, self.SIGNATURE, 1337).v == 1 + 35 + 2 * 1337

    def test_returns_new_transaction(self, sample_transaction):
        signed = sample_transaction.with_signature(self.SIGNATURE, 1)
        assert signed is not sample_transaction
        assert sample_transaction.v == 0
        assert signed.nonce == sample_transaction.nonce

    @pytest.mark.parametrize("length", [0, 64, 66])
    def test_wrong_length(self, sample_transaction, length):
        with pytest.raises(InvalidSignatureLengthError):
            with_signature(sample_transaction, bytes(length), 1)


class TestRecoverSender:
    """Sender recovery and its failure modes."""

    def test_roundtrip_protected(self, sample_transaction, signing_key):
        signed = sign_transaction(sample_transaction, signing_key, 1)
        assert recover_sender(signed, 1) == signing_key.address()

    def test_roundtrip_legacy(self, sample_transaction, signing_key):
        signed = sign_transaction(sample_transaction, signing_key, None)
        assert signed.v in (27, 28)
        assert recover_sender(signed, None) == signing_key.address()
        assert signed.sender() == signing_key.address()

    def test_unprotected_under_replay_protected_signer(self, sample_transaction, signing_key):
        """A pre-EIP-155 transaction stays valid on every chain."""
        signed = sign_transaction(sample_transaction, signing_key, None)
        assert recover_sender(signed, 1) == signing_key.address()
        assert recover_sender(signed, 61) == signing_key.address()

    def test_wrong_chain(self, sample_transaction, signing_key):
        signed = sign_transaction(sample_transaction, signing_key, 1)
        with pytest.raises(InvalidChainIdError) as exc:
            recover_sender(signed, 2)
        assert exc.value.details == {"chain_id": 1, "expected": 2}

    def test_protected_under_legacy_signer(self, signed_transaction):
        with pytest.raises(InvalidSignatureError):
            recover_sender(signed_transaction, None)

    def test_unsigned(self, sample_transaction):
        with pytest.raises(MissingSignatureError):
            recover_sender(sample_transaction, 1)
        with pytest.raises(MissingSignatureError):
            sample_transaction.sender()

    def test_high_s_rejected(self, signed_transaction):
        """Homestead rule: s must not exceed n/2."""
        flipped = replace(signed_transaction, s=SECP256K1_N - signed_transaction.s)
        with pytest.raises(InvalidSignatureError):
            recover_sender(flipped, 1)

    def test_s_out_of_range(self, signed_transaction):
        with pytest.raises(InvalidSignatureError):
            recover_sender(replace(signed_transaction, s=0), 1)

    def test_r_out_of_range(self, signed_transaction):
        with pytest.raises(InvalidSignatureError):
            recover_sender(replace(signed_transaction, r=SECP256K1_N), 1)

    def test_bad_legacy_v(self, signed_transaction):
        with pytest.raises(InvalidSignatureError):
            recover_sender(replace(signed_transaction, v=29), None)

    def test_tampered_field_changes_sender(self, signed_transaction, signing_key):
        tampered = replace(signed_transaction, value=signed_transaction.value + 1)
        try:
            sender = recover_sender(tampered, 1)
        except InvalidSignatureError:
            return
        assert sender != signing_key.address()

    def test_signer_object(self, sample_transaction, signing_key):
        signer = Signer.for_chain(3)
        signature = signing_key.sign(signer.digest(sample_transaction))
        signed = signer.with_signature(sample_transaction, signature)
        assert signed.chain_id() == 3
        assert signer.sender(signed) == signing_key.address()

    def test_contract_creation(self, signing_key):
        tx = Transaction.create(nonce=0, to=None, value=0, gas=100000, gas_price=1, data=b"\x60\x00")
        signed = sign_transaction(tx, signing_key, 1)
        decoded = Transaction.decode_rlp(signed.encode_rlp())
        assert decoded.to is None
        assert recover_sender(decoded, 1) == signing_key.address()
