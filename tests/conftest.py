"""
ethrecords Test Fixtures
"""

import pytest

from ethrecords.core.types import Hash, Address, Bloom, Nonce
from ethrecords.core.header import Header
from ethrecords.core.transaction import Transaction
from ethrecords.core.block import Block
from ethrecords.core.receipt import Log, Receipt
from ethrecords.crypto.secp256k1 import PrivateKey


# Private key from the EIP-155 example
EIP155_KEY_HEX = "46" * 32


@pytest.fixture
def signing_key() -> PrivateKey:
    """Deterministic private key for signing tests."""
    return PrivateKey(bytes.fromhex(EIP155_KEY_HEX))


@pytest.fixture
def other_key() -> PrivateKey:
    """A second deterministic private key."""
    return PrivateKey(bytes([(i + 1) % 256 for i in range(32)]))


@pytest.fixture
def sample_header() -> Header:
    """Header with every field set to a distinct value."""
    return Header(
        parent_hash=Hash(bytes([i % 256 for i in range(32)])),
        coinbase=Address(bytes([0xCC] * 20)),
        root=Hash(bytes([(i + 50) % 256 for i in range(32)])),
        bloom=Bloom(bytes([0x01] + [0] * 255)),
        difficulty=131072,
        number=4_370_000,
        gas_limit=8_000_000,
        gas_used=21000,
        time=1_508_131_331,
        extra=b"geth",
        mix_digest=Hash(bytes([0x77] * 32)),
        nonce=Nonce.from_int(0x0102030405060708),
    )


@pytest.fixture
def sample_transaction() -> Transaction:
    """Unsigned value transfer from the EIP-155 example."""
    return Transaction.create(
        nonce=9,
        to=Address(bytes([0x35] * 20)),
        value=10**18,
        gas=21000,
        gas_price=20 * 10**9,
    )


@pytest.fixture
def signed_transaction(sample_transaction, signing_key) -> Transaction:
    """The sample transaction signed for chain id 1."""
    from ethrecords.protocol.signer import sign_transaction
    return sign_transaction(sample_transaction, signing_key, 1)


@pytest.fixture
def sample_log() -> Log:
    return Log(
        address=Address(bytes([0x11] * 20)),
        topics=(Hash(bytes([0x22] * 32)), Hash(bytes([0x33] * 32))),
        data=b"\x00\x01\x02",
    )


@pytest.fixture
def sample_receipt(sample_log) -> Receipt:
    return Receipt(
        status=1,
        cumulative_gas_used=42000,
        logs=(sample_log,),
        tx_hash=Hash(bytes([0x44] * 32)),
        gas_used=21000,
    )


@pytest.fixture
def sample_block(sample_header, signed_transaction) -> Block:
    uncle = Header(number=4_369_999, extra=b"uncle")
    return Block(
        header=sample_header,
        transactions=(signed_transaction,),
        uncles=(uncle,),
    )
