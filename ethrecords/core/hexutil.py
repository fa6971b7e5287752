"""
ethrecords JSON Hex Conventions

Quantities are 0x-prefixed hex without leading zeros ("0x0" for zero).
Byte strings are 0x-prefixed hex of even length.
Decoding raises MalformedEncodingError(fmt="json") on every violation.
"""

from __future__ import annotations
import json
from typing import Any, Dict, Optional

from ethrecords.constants import MAX_UINT64, MAX_UINT256
from ethrecords.errors import MalformedEncodingError


def encode_quantity(value: int) -> str:
    """Encode a non-negative integer as a hex quantity."""
    if value < 0:
        raise ValueError(f"quantity cannot be negative: {value}")
    return hex(value)


def encode_bytes(data: bytes) -> str:
    """Encode bytes as 0x-prefixed hex."""
    return "0x" + bytes(data).hex()


def _require_prefix(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise MalformedEncodingError(
            f"expected hex string, got {type(value).__name__}", "json", field
        )
    if value[:2] not in ("0x", "0X"):
        raise MalformedEncodingError("hex string without 0x prefix", "json", field)
    return value[2:]


def decode_quantity(value: Any, field: str, max_value: int = MAX_UINT256) -> int:
    """
    Decode a hex quantity.

    Native JSON integers are accepted as well, since they carry no
    precision loss in Python.
    """
    if isinstance(value, bool):
        raise MalformedEncodingError("expected quantity, got bool", "json", field)
    if isinstance(value, int):
        result = value
    else:
        digits = _require_prefix(value, field)
        if not digits:
            raise MalformedEncodingError("empty hex quantity", "json", field)
        if len(digits) > 1 and digits[0] == "0":
            raise MalformedEncodingError("hex quantity with leading zero digits", "json", field)
        try:
            result = int(digits, 16)
        except ValueError as e:
            raise MalformedEncodingError(f"invalid hex quantity: {e}", "json", field) from e
    if result < 0 or result > max_value:
        raise MalformedEncodingError(
            f"quantity out of range (max {max_value.bit_length()} bits)", "json", field
        )
    return result


def decode_u64(value: Any, field: str) -> int:
    return decode_quantity(value, field, MAX_UINT64)


def decode_bytes(value: Any, field: str) -> bytes:
    """Decode 0x-prefixed hex bytes."""
    digits = _require_prefix(value, field)
    if len(digits) % 2:
        raise MalformedEncodingError("hex string of odd length", "json", field)
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise MalformedEncodingError(f"invalid hex: {e}", "json", field) from e


def decode_fixed_bytes(value: Any, size: int, field: str) -> bytes:
    """Decode 0x-prefixed hex of exactly size bytes."""
    data = decode_bytes(value, field)
    if len(data) != size:
        raise MalformedEncodingError(
            f"expected {size} bytes, got {len(data)}", "json", field
        )
    return data


# ==============================================================================
# Object Helpers
# ==============================================================================

def require(obj: Dict[str, Any], key: str, record: str) -> Any:
    """Fetch a required field from a JSON object."""
    if key not in obj or obj[key] is None:
        raise MalformedEncodingError(f"missing required field '{key}'", "json", record)
    return obj[key]


def expect_object(value: Any, record: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedEncodingError(
            f"expected JSON object, got {type(value).__name__}", "json", record
        )
    return value


def expect_array(value: Any, field: str) -> list:
    if not isinstance(value, list):
        raise MalformedEncodingError(
            f"expected JSON array, got {type(value).__name__}", "json", field
        )
    return value


def parse(text: str, record: str) -> Any:
    """Parse JSON text, mapping parse failures to MalformedEncodingError."""
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedEncodingError(f"invalid JSON: {e}", "json", record) from e
    except RecursionError as e:
        raise MalformedEncodingError("JSON nested too deeply", "json", record) from e


def loads(text: str, record: str) -> Dict[str, Any]:
    """Parse JSON text into an object."""
    return expect_object(parse(text, record), record)


def dumps(obj: Dict[str, Any], indent: Optional[int] = None, sort_keys: bool = False) -> str:
    """Serialize a JSON object; compact separators unless indenting."""
    if indent is None:
        return json.dumps(obj, separators=(",", ":"), sort_keys=sort_keys)
    return json.dumps(obj, indent=indent, sort_keys=sort_keys)
