"""
Frame encoding for the KV-Session wire protocol.

Every message in either direction is a 2-byte unsigned big-endian length
followed by that many bytes of UTF-8 text.
"""

import struct
from asyncio import StreamReader

from ..config.settings import settings
from ..exceptions import FrameError

HEADER = struct.Struct(">H")


def encode_frame(text: str) -> bytes:
    """
    Encode text into a length-prefixed frame.

    Raises:
        FrameError: If the encoded text does not fit the length prefix
    """
    payload = text.encode("utf-8")
    if len(payload) > settings.MAX_FRAME_LENGTH:
        raise FrameError(
            f"Frame of {len(payload)} bytes exceeds {settings.MAX_FRAME_LENGTH}"
        )
    return HEADER.pack(len(payload)) + payload


def decode_frame(payload: bytes) -> str:
    """
    Decode a frame payload (without its header).

    Raises:
        FrameError: If the payload is not valid UTF-8
    """
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FrameError("Error: Invalid encoding") from exc


async def read_frame(reader: StreamReader) -> str:
    """
    Read one frame from the stream.

    Blocks until a whole frame has arrived. The payload is consumed even
    when it fails to decode, so the stream stays aligned on frame
    boundaries.

    Raises:
        asyncio.IncompleteReadError: If the stream ends mid-frame or
            before a frame starts
        FrameError: If the payload is not valid UTF-8
    """
    header = await reader.readexactly(HEADER.size)
    (length,) = HEADER.unpack(header)
    payload = await reader.readexactly(length) if length else b""
    return decode_frame(payload)
