"""
ethrecords Transaction

Legacy (pre-EIP-2718) transaction:

    [nonce, gasPrice, gas, to, value, data, v, r, s]

`to` is None for contract creation and encodes as the empty string.
v, r and s are all zero on an unsigned transaction.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ethrecords.constants import (
    ADDRESS_SIZE,
    MAX_UINT64,
    TRANSACTION_FIELD_COUNT,
    LEGACY_V_OFFSET,
    EIP155_V_OFFSET,
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
    BytesLike,
    Hash,
    Address,
    coerce_fixed,
    check_uint,
    copy_bytes,
)
from ethrecords.crypto.hash import keccak256


@dataclass(frozen=True, slots=True)
class Transaction(Record):
    """
    Legacy Ethereum transaction.

    Signature values are replaced as a whole by with_signature(), which
    returns a new instance.
    """
    nonce: int = 0                      # u64
    gas_price: int = 0                  # u256
    gas: int = 0                        # u64
    to: Optional[Address] = None        # None = contract creation
    value: int = 0                      # u256
    data: bytes = b""
    v: int = 0
    r: int = 0
    s: int = 0

    def __post_init__(self):
        check_uint(self.nonce, "nonce", MAX_UINT64)
        check_uint(self.gas_price, "gas_price")
        check_uint(self.gas, "gas", MAX_UINT64)
        check_uint(self.value, "value")
        check_uint(self.v, "v")
        check_uint(self.r, "r")
        check_uint(self.s, "s")
        if self.to is not None:
            object.__setattr__(self, "to", coerce_fixed(self.to, Address, "to"))
        object.__setattr__(self, "data", copy_bytes(self.data, "data"))

    @classmethod
    def create(
        cls,
        nonce: int,
        to: Optional[Address],
        value: int,
        gas: int,
        gas_price: int,
        data: BytesLike = b"",
    ) -> Transaction:
        """Create an unsigned transaction."""
        return cls(
            nonce=nonce,
            gas_price=gas_price,
            gas=gas,
            to=to,
            value=value,
            data=data,
        )

    @classmethod
    def create_contract(
        cls,
        nonce: int,
        value: int,
        gas: int,
        gas_price: int,
        data: BytesLike,
    ) -> Transaction:
        """Create an unsigned contract creation transaction."""
        return cls.create(nonce, None, value, gas, gas_price, data)

    # ==========================================================================
    # Derived values
    # ==========================================================================

    def hash(self) -> Hash:
        """Digest of the full encoding, signature values included."""
        return keccak256(self.encode_rlp())

    def cost(self) -> int:
        """Maximum amount the sender can spend: value + gas * gas_price."""
        return self.value + self.gas * self.gas_price

    def has_signature(self) -> bool:
        return not (self.v == 0 and self.r == 0 and self.s == 0)

    def is_protected(self) -> bool:
        """True when v carries an EIP-155 chain id."""
        return self.v not in (0, 1, LEGACY_V_OFFSET, LEGACY_V_OFFSET + 1)

    def chain_id(self) -> Optional[int]:
        """Chain id encoded in v, or None when v carries none."""
        if not self.is_protected() or self.v < EIP155_V_OFFSET:
            return None
        return (self.v - EIP155_V_OFFSET) // 2

    def is_contract_creation(self) -> bool:
        return self.to is None

    def unsigned(self) -> Transaction:
        """Copy with the signature values cleared."""
        return replace(self, v=0, r=0, s=0)

    # ==========================================================================
    # Signing shortcuts
    # ==========================================================================

    def sig_hash(self, chain_id: Optional[int] = None) -> Hash:
        """
        Signing digest. Without a chain id this is the legacy (Homestead)
        digest.
        """
        from ethrecords.protocol.signer import signing_digest
        return signing_digest(self, chain_id)

    def with_signature(self, signature: BytesLike, chain_id: Optional[int] = None) -> Transaction:
        from ethrecords.protocol.signer import with_signature
        return with_signature(self, signature, chain_id)

    def sender(self, chain_id: Optional[int] = None) -> Address:
        """
        Recover the sender address.

        The chain id must be the one the transaction was signed for;
        None selects the legacy signer.
        """
        from ethrecords.protocol.signer import recover_sender
        return recover_sender(self, chain_id)

    # ==========================================================================
    # RLP
    # ==========================================================================

    def to_rlp_item(self) -> RLPItem:
        return [
            self.nonce,
            self.gas_price,
            self.gas,
            self.to.data if self.to is not None else b"",
            self.value,
            self.data,
            self.v,
            self.r,
            self.s,
        ]

    @classmethod
    def from_rlp_item(cls, item: RLPItem) -> Transaction:
        fields = expect_list(item, "Transaction", TRANSACTION_FIELD_COUNT)
        to_raw = expect_bytes(fields[3], "to")
        return cls(
            nonce=deserialize_u64(fields[0], "nonce"),
            gas_price=deserialize_uint(fields[1], "gasPrice"),
            gas=deserialize_u64(fields[2], "gas"),
            to=Address(deserialize_fixed_bytes(to_raw, ADDRESS_SIZE, "to")) if to_raw else None,
            value=deserialize_uint(fields[4], "value"),
            data=expect_bytes(fields[5], "data"),
            v=deserialize_uint(fields[6], "v"),
            r=deserialize_uint(fields[7], "r"),
            s=deserialize_uint(fields[8], "s"),
        )

    # ==========================================================================
    # JSON
    # ==========================================================================

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "nonce": hexutil.encode_quantity(self.nonce),
            "gasPrice": hexutil.encode_quantity(self.gas_price),
            "gas": hexutil.encode_quantity(self.gas),
            "to": self.to.hex() if self.to is not None else None,
            "value": hexutil.encode_quantity(self.value),
            "input": hexutil.encode_bytes(self.data),
            "v": hexutil.encode_quantity(self.v),
            "r": hexutil.encode_quantity(self.r),
            "s": hexutil.encode_quantity(self.s),
            "hash": self.hash().hex(),
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Transaction:
        obj = hexutil.expect_object(obj, "Transaction")

        def req(key: str) -> Any:
            return hexutil.require(obj, key, "Transaction")

        to = obj.get("to")
        return cls(
            nonce=hexutil.decode_u64(req("nonce"), "nonce"),
            gas_price=hexutil.decode_quantity(req("gasPrice"), "gasPrice"),
            gas=hexutil.decode_u64(req("gas"), "gas"),
            to=Address(hexutil.decode_fixed_bytes(to, ADDRESS_SIZE, "to")) if to is not None else None,
            value=hexutil.decode_quantity(req("value"), "value"),
            data=hexutil.decode_bytes(req("input"), "input"),
            v=hexutil.decode_quantity(req("v"), "v"),
            r=hexutil.decode_quantity(req("r"), "r"),
            s=hexutil.decode_quantity(req("s"), "s"),
        )

    def __repr__(self) -> str:
        to = self.to.hex()[:12] + "..." if self.to is not None else "<create>"
        return (
            f"Transaction(nonce={self.nonce}, to={to}, "
            f"value={self.value}, signed={self.has_signature()})"
        )
