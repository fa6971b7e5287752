"""
ethrecords Canonical Binary Serialization

Recursive Length Prefix (RLP) encoding.

An item is either a byte string or a list of items. Every item has exactly
one encoding; decoding rejects every alternative spelling:

- a single byte below 0x80 wrapped in a string prefix
- a long-form length that would fit the short form
- a length with leading zero bytes
- truncated payloads and trailing bytes

Integers are big-endian without leading zeros; zero is the empty string.
"""

from __future__ import annotations
from typing import List, Tuple, Union

from ethrecords.constants import (
    BIG_ENDIAN,
    MAX_UINT64,
    MAX_UINT256,
    RLP_SHORT_STRING_OFFSET,
    RLP_LONG_STRING_OFFSET,
    RLP_SHORT_LIST_OFFSET,
    RLP_LONG_LIST_OFFSET,
    RLP_SHORT_PAYLOAD_MAX,
    RLP_MAX_DEPTH,
)
from ethrecords.errors import MalformedEncodingError

RLPItem = Union[bytes, List["RLPItem"]]


# ==============================================================================
# Encoding
# ==============================================================================

def encode(item) -> bytes:
    """
    Encode an item to its canonical RLP form.

    Accepts bytes-like values, non-negative ints (encoded as minimal
    big-endian strings) and sequences of those.
    """
    if isinstance(item, (bytes, bytearray, memoryview)):
        return _encode_string(bytes(item))
    if isinstance(item, bool):
        raise TypeError("RLP cannot encode bool")
    if isinstance(item, int):
        return _encode_string(serialize_uint(item))
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(x) for x in item)
        return _length_prefix(len(payload), RLP_SHORT_LIST_OFFSET) + payload
    raise TypeError(f"RLP cannot encode {type(item).__name__}")


def _encode_string(data: bytes) -> bytes:
    if len(data) == 1 and data[0] < RLP_SHORT_STRING_OFFSET:
        return data
    return _length_prefix(len(data), RLP_SHORT_STRING_OFFSET) + data


def _length_prefix(length: int, offset: int) -> bytes:
    if length <= RLP_SHORT_PAYLOAD_MAX:
        return bytes([offset + length])
    length_bytes = serialize_uint(length)
    return bytes([offset + RLP_SHORT_PAYLOAD_MAX + len(length_bytes)]) + length_bytes


def serialize_uint(value: int) -> bytes:
    """Serialize a non-negative integer as minimal big-endian bytes."""
    if value < 0:
        raise ValueError(f"RLP integers cannot be negative: {value}")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, BIG_ENDIAN)


# ==============================================================================
# Decoding
# ==============================================================================

def decode(data: Union[bytes, bytearray, memoryview]) -> RLPItem:
    """
    Decode exactly one RLP item spanning all of data.

    The input is copied first, so the result never shares memory with
    the caller's buffer.
    """
    data = bytes(data)
    if not data:
        raise MalformedEncodingError("empty input")
    item, consumed = deserialize_item(data)
    if consumed != len(data):
        raise MalformedEncodingError(
            f"{len(data) - consumed} trailing bytes after top-level item"
        )
    return item


def deserialize_item(
    data: bytes, offset: int = 0, limit: int = -1, depth: int = 0
) -> Tuple[RLPItem, int]:
    """
    Deserialize one item starting at offset, reading no further than limit.
    Returns (item, bytes_consumed).

    Lists nested deeper than RLP_MAX_DEPTH are rejected.
    """
    if limit < 0:
        limit = len(data)
    is_list, payload_start, payload_length = _read_prefix(data, offset, limit)
    end = payload_start + payload_length
    if end > limit:
        raise MalformedEncodingError(
            f"payload of {payload_length} bytes exceeds input at offset {offset}"
        )

    if not is_list:
        return data[payload_start:end], end - offset
    if depth >= RLP_MAX_DEPTH:
        raise MalformedEncodingError(f"lists nested deeper than {RLP_MAX_DEPTH} levels")

    items: List[RLPItem] = []
    position = payload_start
    while position < end:
        item, consumed = deserialize_item(data, position, end, depth + 1)
        items.append(item)
        position += consumed
    return items, end - offset


def _read_prefix(data: bytes, offset: int, limit: int) -> Tuple[bool, int, int]:
    """Returns (is_list, payload_start, payload_length)."""
    if offset >= limit:
        raise MalformedEncodingError("unexpected end of input")
    prefix = data[offset]

    if prefix < RLP_SHORT_STRING_OFFSET:
        return False, offset, 1

    if prefix <= RLP_LONG_STRING_OFFSET:
        length = prefix - RLP_SHORT_STRING_OFFSET
        if length == 1 and offset + 1 < limit and data[offset + 1] < RLP_SHORT_STRING_OFFSET:
            raise MalformedEncodingError("non-canonical single byte string")
        return False, offset + 1, length

    if prefix < RLP_SHORT_LIST_OFFSET:
        length_size = prefix - RLP_LONG_STRING_OFFSET
        return False, offset + 1 + length_size, _read_long_length(data, offset + 1, length_size, limit)

    if prefix <= RLP_LONG_LIST_OFFSET:
        return True, offset + 1, prefix - RLP_SHORT_LIST_OFFSET

    length_size = prefix - RLP_LONG_LIST_OFFSET
    return True, offset + 1 + length_size, _read_long_length(data, offset + 1, length_size, limit)


def _read_long_length(data: bytes, offset: int, length_size: int, limit: int) -> int:
    if offset + length_size > limit:
        raise MalformedEncodingError("truncated length prefix")
    raw = data[offset:offset + length_size]
    if raw[0] == 0:
        raise MalformedEncodingError("length prefix has leading zero bytes")
    length = int.from_bytes(raw, BIG_ENDIAN)
    if length <= RLP_SHORT_PAYLOAD_MAX:
        raise MalformedEncodingError("long-form length used for a short payload")
    return length


# ==============================================================================
# Field Helpers (decode side)
# ==============================================================================

def expect_list(item: RLPItem, field: str, count: int = -1) -> List[RLPItem]:
    """Require item to be a list, optionally of an exact length."""
    if not isinstance(item, list):
        raise MalformedEncodingError("expected list, got string", field=field)
    if count >= 0 and len(item) != count:
        raise MalformedEncodingError(
            f"expected {count} elements, got {len(item)}", field=field
        )
    return item


def expect_bytes(item: RLPItem, field: str) -> bytes:
    """Require item to be a byte string."""
    if not isinstance(item, bytes):
        raise MalformedEncodingError("expected string, got list", field=field)
    return item


def deserialize_fixed_bytes(item: RLPItem, size: int, field: str) -> bytes:
    """Require a byte string of exactly size bytes."""
    data = expect_bytes(item, field)
    if len(data) != size:
        raise MalformedEncodingError(
            f"expected {size} bytes, got {len(data)}", field=field
        )
    return data


def deserialize_uint(item: RLPItem, field: str, max_value: int = MAX_UINT256) -> int:
    """Decode a canonical big-endian integer."""
    data = expect_bytes(item, field)
    if data and data[0] == 0:
        raise MalformedEncodingError("integer has leading zero bytes", field=field)
    value = int.from_bytes(data, BIG_ENDIAN)
    if value > max_value:
        raise MalformedEncodingError(f"integer overflows {max_value.bit_length()} bits", field=field)
    return value


def deserialize_u64(item: RLPItem, field: str) -> int:
    return deserialize_uint(item, field, MAX_UINT64)


def deserialize_list(item: RLPItem, field: str, decode_element) -> Tuple:
    """Decode every element of a list item with decode_element."""
    return tuple(decode_element(x) for x in expect_list(item, field))
