"""
ethrecords Transaction Signing
"""

from ethrecords.protocol.signer import (
    Signer,
    SignerKind,
    signing_digest,
    with_signature,
    recover_sender,
    sign_transaction,
)

__all__ = [
    "Signer",
    "SignerKind",
    "signing_digest",
    "with_signature",
    "recover_sender",
    "sign_transaction",
]
