"""
ethrecords Block Header

The 15-field pre-London header in go-ethereum's consensus layout:

    [parentHash, uncleHash, coinbase, root, txHash, receiptHash, bloom,
     difficulty, number, gasLimit, gasUsed, time, extra, mixDigest, nonce]
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

from ethrecords.constants import (
    HASH_SIZE,
    ADDRESS_SIZE,
    BLOOM_SIZE,
    NONCE_SIZE,
    MAX_UINT64,
    HEADER_FIELD_COUNT,
    EMPTY_UNCLE_HASH,
    EMPTY_ROOT_HASH,
)
from ethrecords.core import hexutil
from ethrecords.core.record import Record
from ethrecords.core.serialization import (
    RLPItem,
    expect_list,
    expect_bytes,
    deserialize_fixed_bytes,
    deserialize_uint,
    deserialize_u64,
)
from ethrecords.core.types import (
    Hash,
    Address,
    Bloom,
    Nonce,
    coerce_fixed,
    check_uint,
    copy_bytes,
)
from ethrecords.crypto.hash import keccak256


@dataclass(frozen=True, slots=True)
class Header(Record):
    """
    Block header.

    hash() is keccak256 of the RLP encoding and is recomputed on each call.
    """
    parent_hash: Hash = field(default_factory=Hash.zero)
    uncle_hash: Hash = field(default_factory=lambda: Hash(EMPTY_UNCLE_HASH))
    coinbase: Address = field(default_factory=Address.zero)
    root: Hash = field(default_factory=Hash.zero)           # State root
    tx_hash: Hash = field(default_factory=lambda: Hash(EMPTY_ROOT_HASH))
    receipt_hash: Hash = field(default_factory=lambda: Hash(EMPTY_ROOT_HASH))
    bloom: Bloom = field(default_factory=Bloom.zero)
    difficulty: int = 0                                     # u256
    number: int = 0                                         # u64
    gas_limit: int = 0                                      # u64
    gas_used: int = 0                                       # u64
    time: int = 0                                           # u64 - Unix seconds
    extra: bytes = b""
    mix_digest: Hash = field(default_factory=Hash.zero)
    nonce: Nonce = field(default_factory=Nonce.zero)

    def __post_init__(self):
        for name in ("parent_hash", "uncle_hash", "root", "tx_hash", "receipt_hash", "mix_digest"):
            object.__setattr__(self, name, coerce_fixed(getattr(self, name), Hash, name))
        object.__setattr__(self, "coinbase", coerce_fixed(self.coinbase, Address, "coinbase"))
        object.__setattr__(self, "bloom", coerce_fixed(self.bloom, Bloom, "bloom"))
        object.__setattr__(self, "nonce", coerce_fixed(self.nonce, Nonce, "nonce"))
        object.__setattr__(self, "extra", copy_bytes(self.extra, "extra"))
        check_uint(self.difficulty, "difficulty")
        check_uint(self.number, "number", MAX_UINT64)
        check_uint(self.gas_limit, "gas_limit", MAX_UINT64)
        check_uint(self.gas_used, "gas_used", MAX_UINT64)
        check_uint(self.time, "time", MAX_UINT64)

    def hash(self) -> Hash:
        """Compute the header hash from the current field values."""
        return keccak256(self.encode_rlp())

    # ==========================================================================
    # RLP
    # ==========================================================================

    def to_rlp_item(self) -> RLPItem:
        return [
            self.parent_hash.data,
            self.uncle_hash.data,
            self.coinbase.data,
            self.root.data,
            self.tx_hash.data,
            self.receipt_hash.data,
            self.bloom.data,
            self.difficulty,
            self.number,
            self.gas_limit,
            self.gas_used,
            self.time,
            self.extra,
            self.mix_digest.data,
            self.nonce.data,
        ]

    @classmethod
    def from_rlp_item(cls, item: RLPItem) -> "Header":
        fields = expect_list(item, "Header", HEADER_FIELD_COUNT)
        return cls(
            parent_hash=Hash(deserialize_fixed_bytes(fields[0], HASH_SIZE, "parentHash")),
            uncle_hash=Hash(deserialize_fixed_bytes(fields[1], HASH_SIZE, "uncleHash")),
            coinbase=Address(deserialize_fixed_bytes(fields[2], ADDRESS_SIZE, "coinbase")),
            root=Hash(deserialize_fixed_bytes(fields[3], HASH_SIZE, "root")),
            tx_hash=Hash(deserialize_fixed_bytes(fields[4], HASH_SIZE, "txHash")),
            receipt_hash=Hash(deserialize_fixed_bytes(fields[5], HASH_SIZE, "receiptHash")),
            bloom=Bloom(deserialize_fixed_bytes(fields[6], BLOOM_SIZE, "bloom")),
            difficulty=deserialize_uint(fields[7], "difficulty"),
            number=deserialize_u64(fields[8], "number"),
            gas_limit=deserialize_u64(fields[9], "gasLimit"),
            gas_used=deserialize_u64(fields[10], "gasUsed"),
            time=deserialize_u64(fields[11], "time"),
            extra=expect_bytes(fields[12], "extra"),
            mix_digest=Hash(deserialize_fixed_bytes(fields[13], HASH_SIZE, "mixDigest")),
            nonce=Nonce(deserialize_fixed_bytes(fields[14], NONCE_SIZE, "nonce")),
        )

    # ==========================================================================
    # JSON
    # ==========================================================================

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "parentHash": self.parent_hash.hex(),
            "sha3Uncles": self.uncle_hash.hex(),
            "miner": self.coinbase.hex(),
            "stateRoot": self.root.hex(),
            "transactionsRoot": self.tx_hash.hex(),
            "receiptsRoot": self.receipt_hash.hex(),
            "logsBloom": self.bloom.hex(),
            "difficulty": hexutil.encode_quantity(self.difficulty),
            "number": hexutil.encode_quantity(self.number),
            "gasLimit": hexutil.encode_quantity(self.gas_limit),
            "gasUsed": hexutil.encode_quantity(self.gas_used),
            "timestamp": hexutil.encode_quantity(self.time),
            "extraData": hexutil.encode_bytes(self.extra),
            "mixHash": self.mix_digest.hex(),
            "nonce": self.nonce.hex(),
            "hash": self.hash().hex(),
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> "Header":
        obj = hexutil.expect_object(obj, "Header")

        def req(key: str) -> Any:
            return hexutil.require(obj, key, "Header")

        mix_digest = obj.get("mixHash")
        nonce = obj.get("nonce")
        return cls(
            parent_hash=Hash(hexutil.decode_fixed_bytes(req("parentHash"), HASH_SIZE, "parentHash")),
            uncle_hash=Hash(hexutil.decode_fixed_bytes(req("sha3Uncles"), HASH_SIZE, "sha3Uncles")),
            coinbase=Address(hexutil.decode_fixed_bytes(req("miner"), ADDRESS_SIZE, "miner")),
            root=Hash(hexutil.decode_fixed_bytes(req("stateRoot"), HASH_SIZE, "stateRoot")),
            tx_hash=Hash(hexutil.decode_fixed_bytes(req("transactionsRoot"), HASH_SIZE, "transactionsRoot")),
            receipt_hash=Hash(hexutil.decode_fixed_bytes(req("receiptsRoot"), HASH_SIZE, "receiptsRoot")),
            bloom=Bloom(hexutil.decode_fixed_bytes(req("logsBloom"), BLOOM_SIZE, "logsBloom")),
            difficulty=hexutil.decode_quantity(req("difficulty"), "difficulty"),
            number=hexutil.decode_u64(req("number"), "number"),
            gas_limit=hexutil.decode_u64(req("gasLimit"), "gasLimit"),
            gas_used=hexutil.decode_u64(req("gasUsed"), "gasUsed"),
            time=hexutil.decode_u64(req("timestamp"), "timestamp"),
            extra=hexutil.decode_bytes(req("extraData"), "extraData"),
            mix_digest=(
                Hash(hexutil.decode_fixed_bytes(mix_digest, HASH_SIZE, "mixHash"))
                if mix_digest is not None else Hash.zero()
            ),
            nonce=(
                Nonce(hexutil.decode_fixed_bytes(nonce, NONCE_SIZE, "nonce"))
                if nonce is not None else Nonce.zero()
            ),
        )

    def __repr__(self) -> str:
        return (
            f"Header(number={self.number}, "
            f"hash={self.hash().hex()[:18]}..., "
            f"gas_used={self.gas_used}/{self.gas_limit})"
        )
