"""
ethrecords Transaction Signer

Two signing schemes for legacy transactions:

LEGACY (Homestead):
    digest = keccak(rlp([nonce, gasPrice, gas, to, value, data]))
    v      = recid + 27

REPLAY_PROTECTED (EIP-155):
    digest = keccak(rlp([nonce, gasPrice, gas, to, value, data, chainId, 0, 0]))
    v      = recid + 35 + 2 * chainId

Both schemes require the Homestead low-s rule on recovery.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from ethrecords.constants import (
    BIG_ENDIAN,
    SIGNATURE_SIZE,
    SECP256K1_N,
    SECP256K1_HALF_N,
    LEGACY_V_OFFSET,
    EIP155_V_OFFSET,
)
from ethrecords.core.serialization import RLPItem
from ethrecords.core.transaction import Transaction
from ethrecords.core.types import Address, BytesLike, Hash, copy_bytes
from ethrecords.crypto.hash import rlp_hash
from ethrecords.crypto.secp256k1 import PrivateKey, recover_public_key
from ethrecords.errors import (
    InvalidChainIdError,
    InvalidSignatureError,
    InvalidSignatureLengthError,
    MissingSignatureError,
)


class SignerKind(Enum):
    LEGACY = "legacy"
    REPLAY_PROTECTED = "replay_protected"


@dataclass(frozen=True, slots=True)
class Signer:
    """
    Signing scheme, selected by chain id.

    chain_id is None exactly when kind is LEGACY.
    """
    kind: SignerKind
    chain_id: Optional[int] = None

    def __post_init__(self):
        if self.kind is SignerKind.LEGACY:
            if self.chain_id is not None:
                raise InvalidChainIdError(self.chain_id)
        else:
            check_chain_id(self.chain_id)

    @classmethod
    def for_chain(cls, chain_id: Optional[int]) -> Signer:
        """Replay-protected signer for chain_id, or the legacy signer for None."""
        if chain_id is None:
            return cls(SignerKind.LEGACY)
        return cls(SignerKind.REPLAY_PROTECTED, chain_id)

    @classmethod
    def legacy(cls) -> Signer:
        return cls(SignerKind.LEGACY)

    # ==========================================================================
    # Digest
    # ==========================================================================

    def digest(self, tx: Transaction) -> Hash:
        """Signing digest of tx. Signature values never take part."""
        item: List[RLPItem] = tx.to_rlp_item()[:6]
        if self.kind is SignerKind.REPLAY_PROTECTED:
            item += [self.chain_id, 0, 0]
        return rlp_hash(item)

    # ==========================================================================
    # Signature values
    # ==========================================================================

    def signature_values(self, signature: BytesLike) -> Tuple[int, int, int]:
        """Map a 65-byte r || s || recid signature to (v, r, s)."""
        signature = copy_bytes(signature, "signature")
        if len(signature) != SIGNATURE_SIZE:
            raise InvalidSignatureLengthError(len(signature), SIGNATURE_SIZE)
        r = int.from_bytes(signature[:32], BIG_ENDIAN)
        s = int.from_bytes(signature[32:64], BIG_ENDIAN)
        recid = signature[64]
        if self.kind is SignerKind.REPLAY_PROTECTED:
            v = recid + EIP155_V_OFFSET + 2 * self.chain_id
        else:
            v = recid + LEGACY_V_OFFSET
        return v, r, s

    def with_signature(self, tx: Transaction, signature: BytesLike) -> Transaction:
        v, r, s = self.signature_values(signature)
        return replace(tx, v=v, r=r, s=s)

    # ==========================================================================
    # Recovery
    # ==========================================================================

    def sender(self, tx: Transaction) -> Address:
        """
        Recover the address that signed tx.

        Raises:
            MissingSignatureError: v, r and s are all zero
            InvalidChainIdError: tx is protected for another chain
            InvalidSignatureError: malformed or unrecoverable signature
        """
        if not tx.has_signature():
            raise MissingSignatureError()

        if self.kind is SignerKind.REPLAY_PROTECTED and tx.is_protected():
            tx_chain_id = tx.chain_id()
            if tx_chain_id != self.chain_id:
                raise InvalidChainIdError(tx_chain_id, self.chain_id)
            recid = tx.v - EIP155_V_OFFSET - 2 * self.chain_id
            digest = self.digest(tx)
        elif tx.is_protected():
            # Legacy signer on a protected transaction
            raise InvalidChainIdError(tx.chain_id(), None)
        else:
            recid = tx.v - LEGACY_V_OFFSET
            digest = Signer.legacy().digest(tx)

        return _recover_address(digest, tx.r, tx.s, recid)


def _recover_address(digest: Hash, r: int, s: int, recid: int) -> Address:
    if recid not in (0, 1):
        raise InvalidSignatureError(f"recovery id {recid} is not 0 or 1")
    if not (0 < r < SECP256K1_N) or not (0 < s < SECP256K1_N):
        raise InvalidSignatureError("r or s out of range")
    if s > SECP256K1_HALF_N:
        raise InvalidSignatureError("s exceeds n/2 (Homestead rule)")
    signature = r.to_bytes(32, BIG_ENDIAN) + s.to_bytes(32, BIG_ENDIAN) + bytes([recid])
    return recover_public_key(digest, signature).to_address()


def check_chain_id(chain_id) -> int:
    """Chain ids are positive integers."""
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 1:
        raise InvalidChainIdError(chain_id)
    return chain_id


# ==============================================================================
# Module-level API
# ==============================================================================

def signing_digest(tx: Transaction, chain_id: Optional[int]) -> Hash:
    """Signing digest of tx; chain_id None selects the legacy scheme."""
    return Signer.for_chain(chain_id).digest(tx)


def with_signature(tx: Transaction, signature: BytesLike, chain_id: Optional[int]) -> Transaction:
    """Return a copy of tx carrying signature."""
    return Signer.for_chain(chain_id).with_signature(tx, signature)


def recover_sender(tx: Transaction, chain_id: Optional[int]) -> Address:
    """Recover the sender of tx under the scheme chain_id selects."""
    return Signer.for_chain(chain_id).sender(tx)


def sign_transaction(tx: Transaction, private_key: PrivateKey, chain_id: Optional[int]) -> Transaction:
    """Sign tx with private_key and return the signed copy."""
    signer = Signer.for_chain(chain_id)
    signature = private_key.sign(signer.digest(tx))
    return signer.with_signature(tx, signature)
