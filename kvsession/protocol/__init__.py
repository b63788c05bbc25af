"""Protocol module for KV-Session."""

from .commands import Command, CommandType, Response, ResponseStatus
from .framing import decode_frame, encode_frame, read_frame
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandType",
    "Response",
    "ResponseStatus",
    "ProtocolParser",
    "decode_frame",
    "encode_frame",
    "read_frame",
]
