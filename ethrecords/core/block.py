"""
ethrecords Block

A block owns one header, an ordered list of transactions and an ordered
list of uncle headers:

    [header, [tx, ...], [uncle, ...]]

Header accessors delegate to the owned header, and the block hash is
the header hash.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ethrecords.constants import BLOCK_FIELD_COUNT
from ethrecords.core import hexutil
from ethrecords.core.collections import Headers, Transactions
from ethrecords.core.header import Header
from ethrecords.core.record import Record
from ethrecords.core.serialization import RLPItem, expect_list, deserialize_list
from ethrecords.core.transaction import Transaction
from ethrecords.core.types import Address, Bloom, Hash, coerce_fixed
from ethrecords.errors import InvalidParameterError


def _freeze(items, cls, name: str) -> tuple:
    if not isinstance(items, (list, tuple)) or not all(isinstance(x, cls) for x in items):
        raise InvalidParameterError(name, f"expected a sequence of {cls.__name__}")
    return tuple(items)


@dataclass(frozen=True, slots=True)
class Block(Record):
    """Full block: header, transactions, uncles."""
    header: Header = field(default_factory=Header)
    transactions: Tuple[Transaction, ...] = ()
    uncles: Tuple[Header, ...] = ()

    def __post_init__(self):
        if not isinstance(self.header, Header):
            raise InvalidParameterError("header", "expected Header")
        object.__setattr__(self, "transactions", _freeze(self.transactions, Transaction, "transactions"))
        object.__setattr__(self, "uncles", _freeze(self.uncles, Header, "uncles"))

    def hash(self) -> Hash:
        """Block hash, identical to the header hash."""
        return self.header.hash()

    def transaction(self, tx_hash: Hash) -> Optional[Transaction]:
        """Find an owned transaction by hash."""
        tx_hash = coerce_fixed(tx_hash, Hash, "tx_hash")
        for tx in self.transactions:
            if tx.hash() == tx_hash:
                return tx
        return None

    def get_transactions(self) -> Transactions:
        return Transactions(self.transactions)

    def get_uncles(self) -> Headers:
        return Headers(self.uncles)

    # ==========================================================================
    # Header accessors
    # ==========================================================================

    @property
    def parent_hash(self) -> Hash:
        return self.header.parent_hash

    @property
    def uncle_hash(self) -> Hash:
        return self.header.uncle_hash

    @property
    def coinbase(self) -> Address:
        return self.header.coinbase

    @property
    def root(self) -> Hash:
        return self.header.root

    @property
    def tx_hash(self) -> Hash:
        return self.header.tx_hash

    @property
    def receipt_hash(self) -> Hash:
        return self.header.receipt_hash

    @property
    def bloom(self) -> Bloom:
        return self.header.bloom

    @property
    def difficulty(self) -> int:
        return self.header.difficulty

    @property
    def number(self) -> int:
        return self.header.number

    @property
    def gas_limit(self) -> int:
        return self.header.gas_limit

    @property
    def gas_used(self) -> int:
        return self.header.gas_used

    @property
    def time(self) -> int:
        return self.header.time

    @property
    def extra(self) -> bytes:
        return self.header.extra

    @property
    def mix_digest(self) -> Hash:
        return self.header.mix_digest

    @property
    def nonce(self) -> int:
        """Header nonce as a big-endian integer."""
        return int(self.header.nonce)

    # ==========================================================================
    # RLP
    # ==========================================================================

    def to_rlp_item(self) -> RLPItem:
        return [
            self.header.to_rlp_item(),
            [tx.to_rlp_item() for tx in self.transactions],
            [uncle.to_rlp_item() for uncle in self.uncles],
        ]

    @classmethod
    def from_rlp_item(cls, item: RLPItem) -> Block:
        fields = expect_list(item, "Block", BLOCK_FIELD_COUNT)
        return cls(
            header=Header.from_rlp_item(fields[0]),
            transactions=deserialize_list(fields[1], "transactions", Transaction.from_rlp_item),
            uncles=deserialize_list(fields[2], "uncles", Header.from_rlp_item),
        )

    # ==========================================================================
    # JSON
    # ==========================================================================

    def to_json_dict(self) -> Dict[str, Any]:
        result = self.header.to_json_dict()
        result["transactions"] = [tx.to_json_dict() for tx in self.transactions]
        result["uncles"] = [uncle.to_json_dict() for uncle in self.uncles]
        return result

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Block:
        obj = hexutil.expect_object(obj, "Block")
        transactions = hexutil.expect_array(hexutil.require(obj, "transactions", "Block"), "transactions")
        uncles = hexutil.expect_array(obj.get("uncles", []), "uncles")
        return cls(
            header=Header.from_json_dict(obj),
            transactions=tuple(Transaction.from_json_dict(tx) for tx in transactions),
            uncles=tuple(Header.from_json_dict(uncle) for uncle in uncles),
        )

    def __repr__(self) -> str:
        return (
            f"Block(number={self.number}, "
            f"hash={self.hash().hex()[:18]}..., "
            f"txs={len(self.transactions)}, uncles={len(self.uncles)})"
        )
