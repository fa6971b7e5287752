"""
ethrecords Record Codec

Shared binary/JSON entry points for the wire records.

A record class implements to_rlp_item()/from_rlp_item() and
to_json_dict()/from_json_dict(); the base classes turn them into
encode_rlp/decode_rlp/encode_json/decode_json with uniform error mapping:
a decode either returns a complete record or raises MalformedEncodingError.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar

from ethrecords.core import hexutil
from ethrecords.core.serialization import RLPItem, encode, decode
from ethrecords.core.types import BytesLike
from ethrecords.errors import InvalidParameterError, MalformedEncodingError

J = TypeVar("J", bound="JsonRecord")
R = TypeVar("R", bound="Record")


class JsonRecord(ABC):
    """Abstract base for records with an RPC-style JSON form."""

    __slots__ = ()

    @abstractmethod
    def to_json_dict(self) -> Dict[str, Any]:
        """Return the JSON object form."""
        pass

    @classmethod
    @abstractmethod
    def from_json_dict(cls: Type[J], obj: Dict[str, Any]) -> J:
        """Build a record from a parsed JSON object."""
        pass

    def encode_json(self, indent: Optional[int] = None, sort_keys: bool = False) -> str:
        """Encode to JSON text."""
        return hexutil.dumps(self.to_json_dict(), indent, sort_keys)

    @classmethod
    def decode_json(cls: Type[J], text: str) -> J:
        """Decode from JSON text."""
        obj = hexutil.loads(text, cls.__name__)
        try:
            return cls.from_json_dict(obj)
        except InvalidParameterError as e:
            raise MalformedEncodingError(e.message, "json", cls.__name__) from e


class Record(JsonRecord):
    """Abstract base for records with a canonical RLP form and a JSON form."""

    __slots__ = ()

    @abstractmethod
    def to_rlp_item(self) -> RLPItem:
        """Return the item tree that encodes to the consensus form."""
        pass

    @classmethod
    @abstractmethod
    def from_rlp_item(cls: Type[R], item: RLPItem) -> R:
        """Build a record from a decoded item tree."""
        pass

    def encode_rlp(self) -> bytes:
        """Encode to canonical RLP bytes."""
        return encode(self.to_rlp_item())

    @classmethod
    def decode_rlp(cls: Type[R], data: BytesLike) -> R:
        """Decode from RLP bytes. The input buffer is copied, never retained."""
        item = decode(data)
        try:
            return cls.from_rlp_item(item)
        except InvalidParameterError as e:
            raise MalformedEncodingError(e.message, "rlp", cls.__name__) from e

    def size(self) -> int:
        """Return encoded size in bytes."""
        return len(self.encode_rlp())


def encode_record(record: Record) -> bytes:
    return record.encode_rlp()


def decode_record(cls: Type[R], data: BytesLike) -> R:
    return cls.decode_rlp(data)


def encode_record_json(record: JsonRecord, indent: Optional[int] = None) -> str:
    return record.encode_json(indent)


def decode_record_json(cls: Type[J], text: str) -> J:
    return cls.decode_json(text)
