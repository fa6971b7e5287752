"""
ethrecords
Ethereum record codecs and transaction signing

Immutable block headers, blocks, legacy transactions, receipts and logs
with canonical RLP and RPC-style JSON encodings, secp256k1 signing with
EIP-155 replay protection, and the whisper messaging records.
"""

__version__ = "0.3.0"
__author__ = "ethrecords"

from ethrecords.core.types import Hash, Address, Nonce, Bloom
from ethrecords.core.header import Header
from ethrecords.core.transaction import Transaction
from ethrecords.core.block import Block
from ethrecords.core.receipt import Log, Receipt
from ethrecords.core.collections import Headers, Transactions, Logs, Messages
from ethrecords.core.record import encode_record as encode, decode_record as decode
from ethrecords.crypto.hash import keccak256
from ethrecords.crypto.secp256k1 import PrivateKey, PublicKey
from ethrecords.protocol.signer import (
    Signer,
    SignerKind,
    signing_digest,
    with_signature,
    recover_sender,
    sign_transaction,
)
from ethrecords.network.messages import TopicType, NewMessage, Message, Criteria

__all__ = [
    # Values
    "Hash",
    "Address",
    "Nonce",
    "Bloom",
    # Records
    "Header",
    "Transaction",
    "Block",
    "Log",
    "Receipt",
    "encode",
    "decode",
    # Collections
    "Headers",
    "Transactions",
    "Logs",
    "Messages",
    # Crypto
    "keccak256",
    "PrivateKey",
    "PublicKey",
    # Signer
    "Signer",
    "SignerKind",
    "signing_digest",
    "with_signature",
    "recover_sender",
    "sign_transaction",
    # Whisper
    "TopicType",
    "NewMessage",
    "Message",
    "Criteria",
    "__version__",
]
