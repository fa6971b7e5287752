"""
ethrecords Receipts and Logs

Consensus encodings:

    Log:     [address, [topic, ...], data]
    Receipt: [status | postState, cumulativeGasUsed, bloom, [log, ...]]

The first receipt field is the empty string (failed), 0x01 (successful),
or a 32-byte pre-Byzantium state root. Metadata derived by a node
(transaction hash, contract address, gas used, log positions) only
travels in JSON and is ignored by equality.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ethrecords.constants import (
    HASH_SIZE,
    ADDRESS_SIZE,
    BLOOM_SIZE,
    MAX_UINT64,
    LOG_FIELD_COUNT,
    RECEIPT_FIELD_COUNT,
    RECEIPT_STATUS_FAILED,
    RECEIPT_STATUS_SUCCESSFUL,
    RECEIPT_STATUS_FAILED_RLP,
    RECEIPT_STATUS_SUCCESSFUL_RLP,
)
from ethrecords.core import hexutil
from ethrecords.core.collections import Logs
from ethrecords.core.record import Record
from ethrecords.core.serialization import (
    RLPItem,
    expect_list,
    expect_bytes,
    deserialize_fixed_bytes,
    deserialize_list,
    deserialize_u64,
)
from ethrecords.core.types import (
    Hash,
    Address,
    Bloom,
    coerce_fixed,
    check_uint,
    copy_bytes,
)
from ethrecords.errors import InvalidParameterError, MalformedEncodingError


# ==============================================================================
# Log
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Log(Record):
    """Contract event log."""
    address: Address = field(default_factory=Address.zero)
    topics: Tuple[Hash, ...] = ()
    data: bytes = b""

    # Derived by the node, JSON only
    block_number: int = field(default=0, compare=False)
    tx_hash: Hash = field(default_factory=Hash.zero, compare=False)
    tx_index: int = field(default=0, compare=False)
    block_hash: Hash = field(default_factory=Hash.zero, compare=False)
    index: int = field(default=0, compare=False)
    removed: bool = field(default=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "address", coerce_fixed(self.address, Address, "address"))
        if not isinstance(self.topics, (list, tuple)):
            raise InvalidParameterError("topics", "expected a sequence of hashes")
        object.__setattr__(
            self, "topics", tuple(coerce_fixed(t, Hash, "topics") for t in self.topics)
        )
        object.__setattr__(self, "data", copy_bytes(self.data, "data"))
        object.__setattr__(self, "tx_hash", coerce_fixed(self.tx_hash, Hash, "tx_hash"))
        object.__setattr__(self, "block_hash", coerce_fixed(self.block_hash, Hash, "block_hash"))
        check_uint(self.block_number, "block_number", MAX_UINT64)
        check_uint(self.tx_index, "tx_index", MAX_UINT64)
        check_uint(self.index, "index", MAX_UINT64)
        if not isinstance(self.removed, bool):
            raise InvalidParameterError("removed", "expected bool")

    def to_rlp_item(self) -> RLPItem:
        return [self.address.data, [t.data for t in self.topics], self.data]

    @classmethod
    def from_rlp_item(cls, item: RLPItem) -> Log:
        fields = expect_list(item, "Log", LOG_FIELD_COUNT)
        return cls(
            address=Address(deserialize_fixed_bytes(fields[0], ADDRESS_SIZE, "address")),
            topics=deserialize_list(
                fields[1], "topics",
                lambda t: Hash(deserialize_fixed_bytes(t, HASH_SIZE, "topics")),
            ),
            data=expect_bytes(fields[2], "data"),
        )

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address.hex(),
            "topics": [t.hex() for t in self.topics],
            "data": hexutil.encode_bytes(self.data),
            "blockNumber": hexutil.encode_quantity(self.block_number),
            "transactionHash": self.tx_hash.hex(),
            "transactionIndex": hexutil.encode_quantity(self.tx_index),
            "blockHash": self.block_hash.hex(),
            "logIndex": hexutil.encode_quantity(self.index),
            "removed": self.removed,
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Log:
        obj = hexutil.expect_object(obj, "Log")
        topics = hexutil.expect_array(hexutil.require(obj, "topics", "Log"), "topics")
        removed = obj.get("removed", False)
        if not isinstance(removed, bool):
            raise MalformedEncodingError("expected bool", "json", "removed")

        def opt_hash(key: str) -> Hash:
            value = obj.get(key)
            if value is None:
                return Hash.zero()
            return Hash(hexutil.decode_fixed_bytes(value, HASH_SIZE, key))

        def opt_u64(key: str) -> int:
            value = obj.get(key)
            return 0 if value is None else hexutil.decode_u64(value, key)

        return cls(
            address=Address(hexutil.decode_fixed_bytes(
                hexutil.require(obj, "address", "Log"), ADDRESS_SIZE, "address")),
            topics=tuple(Hash(hexutil.decode_fixed_bytes(t, HASH_SIZE, "topics")) for t in topics),
            data=hexutil.decode_bytes(hexutil.require(obj, "data", "Log"), "data"),
            block_number=opt_u64("blockNumber"),
            tx_hash=opt_hash("transactionHash"),
            tx_index=opt_u64("transactionIndex"),
            block_hash=opt_hash("blockHash"),
            index=opt_u64("logIndex"),
            removed=removed,
        )


# ==============================================================================
# Receipt
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Receipt(Record):
    """
    Transaction receipt.

    post_state is empty after Byzantium. When set it replaces status in
    the consensus encoding, and status must be 0.
    """
    status: int = RECEIPT_STATUS_SUCCESSFUL
    post_state: bytes = b""
    cumulative_gas_used: int = 0        # u64
    bloom: Bloom = field(default_factory=Bloom.zero)
    logs: Tuple[Log, ...] = ()

    # Derived by the node, JSON only
    tx_hash: Hash = field(default_factory=Hash.zero, compare=False)
    contract_address: Optional[Address] = field(default=None, compare=False)
    gas_used: int = field(default=0, compare=False)

    def __post_init__(self):
        check_uint(self.status, "status", RECEIPT_STATUS_SUCCESSFUL)
        post_state = copy_bytes(self.post_state, "post_state")
        if len(post_state) not in (0, HASH_SIZE):
            raise InvalidParameterError("post_state", f"must be empty or {HASH_SIZE} bytes")
        # The state root takes the place of the status byte
        if post_state and self.status != RECEIPT_STATUS_FAILED:
            raise InvalidParameterError("status", "must be 0 when post_state is set")
        object.__setattr__(self, "post_state", post_state)
        check_uint(self.cumulative_gas_used, "cumulative_gas_used", MAX_UINT64)
        check_uint(self.gas_used, "gas_used", MAX_UINT64)
        object.__setattr__(self, "bloom", coerce_fixed(self.bloom, Bloom, "bloom"))
        if not isinstance(self.logs, (list, tuple)) or not all(isinstance(entry, Log) for entry in self.logs):
            raise InvalidParameterError("logs", "expected a sequence of Log")
        object.__setattr__(self, "logs", tuple(self.logs))
        object.__setattr__(self, "tx_hash", coerce_fixed(self.tx_hash, Hash, "tx_hash"))
        if self.contract_address is not None:
            object.__setattr__(
                self, "contract_address",
                coerce_fixed(self.contract_address, Address, "contract_address"),
            )

    def successful(self) -> bool:
        return self.status == RECEIPT_STATUS_SUCCESSFUL

    def get_logs(self) -> Logs:
        return Logs(self.logs)

    def _status_field(self) -> bytes:
        if self.post_state:
            return self.post_state
        if self.status == RECEIPT_STATUS_SUCCESSFUL:
            return RECEIPT_STATUS_SUCCESSFUL_RLP
        return RECEIPT_STATUS_FAILED_RLP

    # ==========================================================================
    # RLP
    # ==========================================================================

    def to_rlp_item(self) -> RLPItem:
        return [
            self._status_field(),
            self.cumulative_gas_used,
            self.bloom.data,
            [log.to_rlp_item() for log in self.logs],
        ]

    @classmethod
    def from_rlp_item(cls, item: RLPItem) -> Receipt:
        fields = expect_list(item, "Receipt", RECEIPT_FIELD_COUNT)
        first = expect_bytes(fields[0], "status")
        if first == RECEIPT_STATUS_FAILED_RLP:
            status, post_state = RECEIPT_STATUS_FAILED, b""
        elif first == RECEIPT_STATUS_SUCCESSFUL_RLP:
            status, post_state = RECEIPT_STATUS_SUCCESSFUL, b""
        elif len(first) == HASH_SIZE:
            status, post_state = RECEIPT_STATUS_FAILED, first
        else:
            raise MalformedEncodingError(
                f"invalid receipt status value {first.hex() or 'empty'}", field="status"
            )
        return cls(
            status=status,
            post_state=post_state,
            cumulative_gas_used=deserialize_u64(fields[1], "cumulativeGasUsed"),
            bloom=Bloom(deserialize_fixed_bytes(fields[2], BLOOM_SIZE, "bloom")),
            logs=deserialize_list(fields[3], "logs", Log.from_rlp_item),
        )

    # ==========================================================================
    # JSON
    # ==========================================================================

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "root": hexutil.encode_bytes(self.post_state),
            "status": hexutil.encode_quantity(self.status),
            "cumulativeGasUsed": hexutil.encode_quantity(self.cumulative_gas_used),
            "logsBloom": self.bloom.hex(),
            "logs": [log.to_json_dict() for log in self.logs],
            "transactionHash": self.tx_hash.hex(),
            "contractAddress": (
                self.contract_address.hex() if self.contract_address is not None else None
            ),
            "gasUsed": hexutil.encode_quantity(self.gas_used),
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Receipt:
        obj = hexutil.expect_object(obj, "Receipt")

        def req(key: str) -> Any:
            return hexutil.require(obj, key, "Receipt")

        root = obj.get("root")
        post_state = hexutil.decode_bytes(root, "root") if root is not None else b""
        if len(post_state) not in (0, HASH_SIZE):
            raise MalformedEncodingError(
                f"expected empty or {HASH_SIZE} bytes, got {len(post_state)}", "json", "root"
            )
        status = obj.get("status")
        if status is None:
            status = RECEIPT_STATUS_FAILED if post_state else RECEIPT_STATUS_SUCCESSFUL
        else:
            status = hexutil.decode_quantity(status, "status")
            if status not in (RECEIPT_STATUS_FAILED, RECEIPT_STATUS_SUCCESSFUL):
                raise MalformedEncodingError(f"must be 0 or 1, got {status}", "json", "status")
        contract_address = obj.get("contractAddress")

        return cls(
            status=status,
            post_state=post_state,
            cumulative_gas_used=hexutil.decode_u64(req("cumulativeGasUsed"), "cumulativeGasUsed"),
            bloom=Bloom(hexutil.decode_fixed_bytes(req("logsBloom"), BLOOM_SIZE, "logsBloom")),
            logs=tuple(
                Log.from_json_dict(entry)
                for entry in hexutil.expect_array(req("logs"), "logs")
            ),
            tx_hash=Hash(hexutil.decode_fixed_bytes(req("transactionHash"), HASH_SIZE, "transactionHash")),
            contract_address=(
                Address(hexutil.decode_fixed_bytes(contract_address, ADDRESS_SIZE, "contractAddress"))
                if contract_address is not None else None
            ),
            gas_used=hexutil.decode_u64(req("gasUsed"), "gasUsed"),
        )
