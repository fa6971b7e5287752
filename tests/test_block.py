"""
ethrecords Block Tests
"""

import json

import pytest

from ethrecords.core.block import Block
from ethrecords.core.collections import Headers, Transactions
from ethrecords.core.header import Header
from ethrecords.core.serialization import decode, encode
from ethrecords.core.types import Hash
from ethrecords.errors import (
    IndexOutOfBoundsError,
    InvalidParameterError,
    MalformedEncodingError,
)


class TestBlockAccessors:
    """Delegation to the owned header."""

    def test_hash_is_header_hash(self, sample_block):
        assert sample_block.hash() == sample_block.header.hash()
        assert sample_block.hash() == sample_block.hash()

    def test_header_fields(self, sample_block, sample_header):
        assert sample_block.number == sample_header.number
        assert sample_block.gas_limit == sample_header.gas_limit
        assert sample_block.coinbase == sample_header.coinbase
        assert sample_block.extra == b"geth"
        assert sample_block.time == sample_header.time

    def test_nonce_is_int(self, sample_block):
        assert sample_block.nonce == 0x0102030405060708

    def test_transaction_lookup(self, sample_block, signed_transaction):
        assert sample_block.transaction(signed_transaction.hash()) == signed_transaction
        assert sample_block.transaction(Hash.zero()) is None

    def test_collections(self, sample_block, signed_transaction):
        txs = sample_block.get_transactions()
        assert isinstance(txs, Transactions)
        assert txs.size() == 1
        assert txs.get(0) == signed_transaction
        uncles = sample_block.get_uncles()
        assert isinstance(uncles, Headers)
        assert uncles.get(0).extra == b"uncle"
        with pytest.raises(IndexOutOfBoundsError):
            uncles.get(1)

    def test_lists_frozen(self, sample_header, signed_transaction):
        txs = [signed_transaction]
        block = Block(header=sample_header, transactions=txs)
        txs.append(signed_transaction)
        assert len(block.transactions) == 1
        assert isinstance(block.transactions, tuple)

    def test_rejects_wrong_element_type(self, sample_header):
        with pytest.raises(InvalidParameterError):
            Block(header=sample_header, uncles=[b"not a header"])


class TestBlockCodec:
    """RLP and JSON forms."""

    def test_rlp_layout(self, sample_block):
        header, txs, uncles = decode(sample_block.encode_rlp())
        assert len(header) == 15
        assert len(txs) == 1 and len(txs[0]) == 9
        assert len(uncles) == 1

    def test_rlp_roundtrip(self, sample_block):
        encoded = sample_block.encode_rlp()
        decoded = Block.decode_rlp(encoded)
        assert decoded == sample_block
        assert decoded.encode_rlp() == encoded

    def test_empty_block(self):
        block = Block(header=Header(number=1))
        decoded = Block.decode_rlp(block.encode_rlp())
        assert decoded.transactions == ()
        assert decoded.uncles == ()

    def test_json_roundtrip(self, sample_block):
        text = sample_block.encode_json()
        decoded = Block.decode_json(text)
        assert decoded == sample_block
        assert decoded.encode_json() == text

    def test_json_shape(self, sample_block, signed_transaction):
        obj = json.loads(sample_block.encode_json())
        assert obj["hash"] == sample_block.hash().hex()
        assert obj["transactions"][0]["hash"] == signed_transaction.hash().hex()
        assert obj["uncles"][0]["extraData"] == "0x" + b"uncle".hex()

    def test_json_transactions_required(self, sample_block):
        obj = sample_block.to_json_dict()
        del obj["transactions"]
        with pytest.raises(MalformedEncodingError):
            Block.from_json_dict(obj)

    def test_wrong_field_count(self, sample_block):
        header, txs, uncles = decode(sample_block.encode_rlp())
        with pytest.raises(MalformedEncodingError):
            Block.decode_rlp(encode([header, txs]))

    def test_string_instead_of_list(self, sample_block):
        header, txs, uncles = decode(sample_block.encode_rlp())
        with pytest.raises(MalformedEncodingError):
            Block.decode_rlp(encode([header, b"", uncles]))

    def test_truncated(self, sample_block):
        with pytest.raises(MalformedEncodingError):
            Block.decode_rlp(sample_block.encode_rlp()[:-1])
