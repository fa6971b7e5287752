"""
ethrecords Whisper Message Tests
"""

import json

import pytest

from ethrecords.core.collections import Messages
from ethrecords.errors import InvalidParameterError, MalformedEncodingError
from ethrecords.network.messages import (
    Criteria,
    Message,
    NewMessage,
    TopicType,
    decode_messages_json,
)


class TestTopicType:
    """Four-byte topics."""

    def test_truncates(self):
        assert TopicType.from_bytes(b"\x01\x02\x03\x04\x05\x06").data == b"\x01\x02\x03\x04"

    def test_pads_right(self):
        assert TopicType.from_bytes(b"\xab").data == b"\xab\x00\x00\x00"
        assert TopicType.from_bytes(b"").data == bytes(4)

    def test_exact_width_constructor(self):
        with pytest.raises(InvalidParameterError):
            TopicType(b"\x01\x02")

    def test_hex(self):
        assert TopicType(b"\xde\xad\xbe\xef").hex() == "0xdeadbeef"


class TestNewMessage:
    """Outbound message fields."""

    def test_defaults(self):
        message = NewMessage()
        assert message.ttl == 50
        assert message.pow_time == 5
        assert message.pow_target == 0.2
        assert message.topic == TopicType.zero()

    def test_bytes_copied_on_assignment(self):
        payload = bytearray(b"hello")
        message = NewMessage()
        message.payload = payload
        payload[0] = 0
        assert message.payload == b"hello"

    def test_topic_normalized(self):
        message = NewMessage(topic=b"\x01\x02")
        assert message.topic == TopicType(b"\x01\x02\x00\x00")
        message.topic = b"\x01\x02\x03\x04\x05"
        assert message.topic == TopicType(b"\x01\x02\x03\x04")

    @pytest.mark.parametrize("name,value", [
        ("ttl", -1),
        ("ttl", 2**32),
        ("pow_time", "5"),
        ("pow_target", -0.5),
        ("sym_key_id", 7),
        ("payload", "text"),
    ])
    def test_rejects_invalid_assignment(self, name, value):
        message = NewMessage()
        with pytest.raises(InvalidParameterError):
            setattr(message, name, value)

    def test_json_keys(self):
        message = NewMessage(sym_key_id="abc", ttl=60, payload=b"\x01", target_peer="enode://x")
        obj = json.loads(message.encode_json())
        assert obj["symKeyID"] == "abc"
        assert obj["ttl"] == 60
        assert obj["payload"] == "0x01"
        assert obj["powTarget"] == 0.2
        assert obj["targetPeer"] == "enode://x"
        assert obj["topic"] == "0x00000000"

    def test_json_roundtrip(self):
        message = NewMessage(public_key=bytes([4] * 65), sig="id", topic=b"\xca\xfe\xba\xbe", padding=b"\x00" * 8)
        assert NewMessage.decode_json(message.encode_json()) == message

    def test_json_defaults(self):
        message = NewMessage.decode_json("{}")
        assert message == NewMessage()

    def test_json_rejects_string_ttl(self):
        with pytest.raises(MalformedEncodingError):
            NewMessage.decode_json('{"ttl": "0x32"}')


class TestMessage:
    """Inbound messages."""

    def test_json_roundtrip(self):
        message = Message(
            sig=bytes([4] * 65),
            ttl=50,
            timestamp=1_500_000_000,
            topic=b"\x01\x02\x03\x04",
            payload=b"hi",
            pow=1.5,
            hash=bytes([9] * 32),
        )
        decoded = Message.decode_json(message.encode_json())
        assert decoded == message

    def test_optional_keys_omitted(self):
        obj = json.loads(Message(topic=b"\x00\x00\x00\x01").encode_json())
        assert "sig" not in obj
        assert "recipientPublicKey" not in obj

    def test_recipient(self):
        message = Message(dst=bytes([7] * 65))
        obj = json.loads(message.encode_json())
        assert obj["recipientPublicKey"] == "0x" + "07" * 65
        assert Message.from_json_dict(obj).dst == bytes([7] * 65)

    def test_topic_required(self):
        with pytest.raises(MalformedEncodingError):
            Message.decode_json('{"ttl": 1}')

    def test_negative_pow(self):
        with pytest.raises(MalformedEncodingError):
            Message.decode_json('{"topic": "0x00000000", "pow": -1}')

    def test_decode_batch(self):
        text = json.dumps([
            Message(topic=b"\x00\x00\x00\x01", payload=b"a").to_json_dict(),
            Message(topic=b"\x00\x00\x00\x02", payload=b"b").to_json_dict(),
        ])
        messages = decode_messages_json(text)
        assert isinstance(messages, Messages)
        assert messages.size() == 2
        assert messages.get(1).payload == b"b"

    @pytest.mark.parametrize("text", [
        "{}",
        "not json",
        '[{"ttl": 1}]',
        "[" * 100_000 + "]" * 100_000,
    ])
    def test_decode_batch_errors(self, text):
        with pytest.raises(MalformedEncodingError):
            decode_messages_json(text)


class TestCriteria:
    """Subscription filters."""

    def test_for_topic(self):
        criteria = Criteria.for_topic(b"\x01\x02\x03\x04\x05")
        assert criteria.topics == (TopicType(b"\x01\x02\x03\x04"),)
        assert not criteria.allow_p2p

    def test_topics_normalized(self):
        criteria = Criteria()
        criteria.topics = [b"\x01", TopicType(b"\x02\x02\x02\x02")]
        assert criteria.topics == (TopicType(b"\x01\x00\x00\x00"), TopicType(b"\x02\x02\x02\x02"))

    def test_rejects_invalid_assignment(self):
        criteria = Criteria()
        with pytest.raises(InvalidParameterError):
            criteria.allow_p2p = 1
        with pytest.raises(InvalidParameterError):
            criteria.min_pow = -1.0
        with pytest.raises(InvalidParameterError):
            criteria.topics = b"\x01\x02\x03\x04"

    def test_json_roundtrip(self):
        criteria = Criteria(
            sym_key_id="k1",
            sig=bytes([4] * 65),
            min_pow=0.5,
            topics=(b"\xaa\xbb\xcc\xdd",),
            allow_p2p=True,
        )
        obj = json.loads(criteria.encode_json())
        assert obj["symKeyID"] == "k1"
        assert obj["topics"] == ["0xaabbccdd"]
        assert obj["allowP2P"] is True
        assert Criteria.from_json_dict(obj) == criteria

    def test_json_topic_width(self):
        with pytest.raises(MalformedEncodingError):
            Criteria.decode_json('{"topics": ["0x0102"]}')
