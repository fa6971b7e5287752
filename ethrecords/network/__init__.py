"""
ethrecords Whisper Messaging Records
"""

from ethrecords.network.messages import (
    TopicType,
    NewMessage,
    Message,
    Criteria,
    decode_messages_json,
)

__all__ = [
    "TopicType",
    "NewMessage",
    "Message",
    "Criteria",
    "decode_messages_json",
]
