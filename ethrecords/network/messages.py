"""
ethrecords Whisper Messages

Wire-level records exchanged with a whisper node:

- NewMessage: outbound message, built up field by field before posting
- Message:    inbound message, read-only
- Criteria:   subscription filter for inbound messages

Only the records are modeled here; posting, filtering and transport
belong to the node. JSON uses native numbers for ttl, timestamp,
powTime, powTarget, pow and minPow.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Tuple

from ethrecords.constants import (
    TOPIC_SIZE,
    MAX_UINT32,
    WHISPER_DEFAULT_TTL,
    WHISPER_DEFAULT_POW_TIME,
    WHISPER_DEFAULT_POW_TARGET,
)
from ethrecords.core import hexutil
from ethrecords.core.collections import Messages
from ethrecords.core.record import JsonRecord
from ethrecords.core.types import BytesLike, FixedBytes, check_uint, copy_bytes
from ethrecords.errors import InvalidParameterError, MalformedEncodingError


class TopicType(FixedBytes):
    """
    Whisper topic.

    SIZE: 4 bytes
    """
    __slots__ = ()
    SIZE: ClassVar[int] = TOPIC_SIZE

    @classmethod
    def from_bytes(cls, raw: BytesLike) -> TopicType:
        """Keep the first four bytes of raw, zero padding on the right."""
        raw = copy_bytes(raw, "topic")[:TOPIC_SIZE]
        return cls(raw.ljust(TOPIC_SIZE, b"\x00"))


def _coerce_topic(value, name: str) -> TopicType:
    if isinstance(value, TopicType):
        return value
    return TopicType.from_bytes(copy_bytes(value, name))


def _check_str(value, name: str) -> str:
    if not isinstance(value, str):
        raise InvalidParameterError(name, f"expected str, got {type(value).__name__}")
    return value


def _check_float(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameterError(name, f"expected number, got {type(value).__name__}")
    if value < 0:
        raise InvalidParameterError(name, f"cannot be negative: {value}")
    return float(value)


# ==============================================================================
# JSON field helpers
# ==============================================================================

def _json_uint32(obj: Dict[str, Any], key: str, default: int = 0) -> int:
    value = obj.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedEncodingError(f"expected integer, got {type(value).__name__}", "json", key)
    if value < 0 or value > MAX_UINT32:
        raise MalformedEncodingError(f"out of uint32 range: {value}", "json", key)
    return value


def _json_float(obj: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = obj.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedEncodingError(f"expected number, got {type(value).__name__}", "json", key)
    return float(value)


def _json_str(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedEncodingError(f"expected string, got {type(value).__name__}", "json", key)
    return value


def _json_bytes(obj: Dict[str, Any], key: str) -> bytes:
    value = obj.get(key)
    if value is None:
        return b""
    return hexutil.decode_bytes(value, key)


def _json_topic(value: Any, key: str) -> TopicType:
    return TopicType(hexutil.decode_fixed_bytes(value, TOPIC_SIZE, key))


# ==============================================================================
# NewMessage
# ==============================================================================

@dataclass
class NewMessage(JsonRecord):
    """
    Outbound whisper message.

    Fields are set independently and carry no cross-field invariants;
    bytes are copied, topics are normalized to four bytes and the 32-bit
    fields are range checked on every assignment.
    """
    sym_key_id: str = ""
    public_key: bytes = b""
    sig: str = ""                       # Key id of the signing identity
    ttl: int = WHISPER_DEFAULT_TTL      # Seconds
    topic: TopicType = field(default_factory=TopicType.zero)
    payload: bytes = b""
    padding: bytes = b""
    pow_time: int = WHISPER_DEFAULT_POW_TIME
    pow_target: float = WHISPER_DEFAULT_POW_TARGET
    target_peer: str = ""

    _STR_FIELDS: ClassVar[Tuple[str, ...]] = ("sym_key_id", "sig", "target_peer")
    _BYTES_FIELDS: ClassVar[Tuple[str, ...]] = ("public_key", "payload", "padding")
    _UINT32_FIELDS: ClassVar[Tuple[str, ...]] = ("ttl", "pow_time")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._STR_FIELDS:
            value = _check_str(value, name)
        elif name in self._BYTES_FIELDS:
            value = copy_bytes(value, name)
        elif name in self._UINT32_FIELDS:
            value = check_uint(value, name, MAX_UINT32)
        elif name == "topic":
            value = _coerce_topic(value, name)
        elif name == "pow_target":
            value = _check_float(value, name)
        object.__setattr__(self, name, value)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "symKeyID": self.sym_key_id,
            "pubKey": hexutil.encode_bytes(self.public_key),
            "sig": self.sig,
            "ttl": self.ttl,
            "topic": self.topic.hex(),
            "payload": hexutil.encode_bytes(self.payload),
            "padding": hexutil.encode_bytes(self.padding),
            "powTime": self.pow_time,
            "powTarget": self.pow_target,
            "targetPeer": self.target_peer,
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> NewMessage:
        obj = hexutil.expect_object(obj, "NewMessage")
        topic = obj.get("topic")
        return cls(
            sym_key_id=_json_str(obj, "symKeyID"),
            public_key=_json_bytes(obj, "pubKey"),
            sig=_json_str(obj, "sig"),
            ttl=_json_uint32(obj, "ttl", WHISPER_DEFAULT_TTL),
            topic=_json_topic(topic, "topic") if topic is not None else TopicType.zero(),
            payload=_json_bytes(obj, "payload"),
            padding=_json_bytes(obj, "padding"),
            pow_time=_json_uint32(obj, "powTime", WHISPER_DEFAULT_POW_TIME),
            pow_target=_json_float(obj, "powTarget", WHISPER_DEFAULT_POW_TARGET),
            target_peer=_json_str(obj, "targetPeer"),
        )


# ==============================================================================
# Message
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Message(JsonRecord):
    """Inbound whisper message, already validated by the node."""
    sig: bytes = b""                    # Sender public key, empty if unsigned
    ttl: int = 0
    timestamp: int = 0                  # Unix seconds
    topic: TopicType = field(default_factory=TopicType.zero)
    payload: bytes = b""
    padding: bytes = b""
    pow: float = 0.0
    hash: bytes = b""
    dst: bytes = b""                    # Recipient public key, empty if symmetric

    def __post_init__(self):
        for name in ("sig", "payload", "padding", "hash", "dst"):
            object.__setattr__(self, name, copy_bytes(getattr(self, name), name))
        check_uint(self.ttl, "ttl", MAX_UINT32)
        check_uint(self.timestamp, "timestamp", MAX_UINT32)
        object.__setattr__(self, "topic", _coerce_topic(self.topic, "topic"))
        object.__setattr__(self, "pow", _check_float(self.pow, "pow"))

    def to_json_dict(self) -> Dict[str, Any]:
        result = {
            "ttl": self.ttl,
            "timestamp": self.timestamp,
            "topic": self.topic.hex(),
            "payload": hexutil.encode_bytes(self.payload),
            "padding": hexutil.encode_bytes(self.padding),
            "pow": self.pow,
            "hash": hexutil.encode_bytes(self.hash),
        }
        if self.sig:
            result["sig"] = hexutil.encode_bytes(self.sig)
        if self.dst:
            result["recipientPublicKey"] = hexutil.encode_bytes(self.dst)
        return result

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Message:
        obj = hexutil.expect_object(obj, "Message")
        return cls(
            sig=_json_bytes(obj, "sig"),
            ttl=_json_uint32(obj, "ttl"),
            timestamp=_json_uint32(obj, "timestamp"),
            topic=_json_topic(hexutil.require(obj, "topic", "Message"), "topic"),
            payload=_json_bytes(obj, "payload"),
            padding=_json_bytes(obj, "padding"),
            pow=_json_float(obj, "pow"),
            hash=_json_bytes(obj, "hash"),
            dst=_json_bytes(obj, "recipientPublicKey"),
        )


def decode_messages_json(text: str) -> Messages:
    """Decode a JSON array of inbound messages into a Messages view."""
    entries = hexutil.expect_array(hexutil.parse(text, "Messages"), "Messages")
    try:
        return Messages(Message.from_json_dict(entry) for entry in entries)
    except InvalidParameterError as e:
        raise MalformedEncodingError(e.message, "json", "Messages") from e


# ==============================================================================
# Criteria
# ==============================================================================

@dataclass
class Criteria(JsonRecord):
    """Filter for inbound messages."""
    sym_key_id: str = ""
    private_key_id: str = ""
    sig: bytes = b""                    # Only accept messages signed by this key
    min_pow: float = 0.0
    topics: Tuple[TopicType, ...] = ()
    allow_p2p: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("sym_key_id", "private_key_id"):
            value = _check_str(value, name)
        elif name == "sig":
            value = copy_bytes(value, name)
        elif name == "min_pow":
            value = _check_float(value, name)
        elif name == "topics":
            if not isinstance(value, (list, tuple)):
                raise InvalidParameterError(name, "expected a sequence of topics")
            value = tuple(_coerce_topic(t, name) for t in value)
        elif name == "allow_p2p":
            if not isinstance(value, bool):
                raise InvalidParameterError(name, "expected bool")
        object.__setattr__(self, name, value)

    @classmethod
    def for_topic(cls, raw: BytesLike) -> Criteria:
        """Single-topic filter; raw is normalized with TopicType.from_bytes."""
        return cls(topics=(TopicType.from_bytes(raw),))

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "symKeyID": self.sym_key_id,
            "privateKeyID": self.private_key_id,
            "sig": hexutil.encode_bytes(self.sig),
            "minPow": self.min_pow,
            "topics": [t.hex() for t in self.topics],
            "allowP2P": self.allow_p2p,
        }

    @classmethod
    def from_json_dict(cls, obj: Dict[str, Any]) -> Criteria:
        obj = hexutil.expect_object(obj, "Criteria")
        topics: List[TopicType] = [
            _json_topic(t, "topics")
            for t in hexutil.expect_array(obj.get("topics", []), "topics")
        ]
        allow_p2p = obj.get("allowP2P", False)
        if not isinstance(allow_p2p, bool):
            raise MalformedEncodingError("expected bool", "json", "allowP2P")
        return cls(
            sym_key_id=_json_str(obj, "symKeyID"),
            private_key_id=_json_str(obj, "privateKeyID"),
            sig=_json_bytes(obj, "sig"),
            min_pow=_json_float(obj, "minPow"),
            topics=tuple(topics),
            allow_p2p=allow_p2p,
        )
