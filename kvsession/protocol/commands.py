"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses,
along with the fixed reply texts clients see.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class CommandType(Enum):
    """Enumeration of supported command types, valued by their wire verb."""
    QUIT = "QUIT"
    KEYS = "KEYS"
    PUT = "PUT"
    DELETE = "DELETE"
    GET = "GET"
    SELECTED = "SELECTED"
    UNKNOWN = ""


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command
        parts: Whitespace-separated tokens, verb first
        raw: The original raw command string
    """
    type: CommandType
    parts: List[str] = field(default_factory=list)
    raw: str = ""

    @property
    def key(self) -> str:
        """Second token (key, or session id for SELECTED), empty if absent."""
        return self.parts[1] if len(self.parts) > 1 else ""

    @property
    def value(self) -> str:
        """Third token, empty if absent. Tokens past the third are ignored."""
        return self.parts[2] if len(self.parts) > 2 else ""


@dataclass
class Response:
    """
    Represents a protocol response.

    The wire carries only the message; status is kept for logging and
    for tests.

    Attributes:
        status: OK or ERROR
        message: Reply text sent to the client
    """
    status: ResponseStatus
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message)

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message)

    @classmethod
    def stored(cls) -> "Response":
        """Create the reply for a successful PUT."""
        return cls.ok(message="Value stored successfully")

    @classmethod
    def deleted(cls) -> "Response":
        """Create the reply for a successful single-key DELETE."""
        return cls.ok(message="Key deleted successfully")

    @classmethod
    def deleted_all(cls) -> "Response":
        """Create the reply for DELETE *."""
        return cls.ok(message="All values were deleted")

    @classmethod
    def value_response(cls, value: str) -> "Response":
        """Create a GET response with a value."""
        return cls.ok(message=value)

    @classmethod
    def keys_response(cls, keys: List[str]) -> "Response":
        """Create a KEYS response."""
        return cls.ok(message=", ".join(keys))

    @classmethod
    def selected(cls) -> "Response":
        """Create the acknowledgement for SELECTED."""
        return cls.ok(message="Selected client disconnected other clients")

    @classmethod
    def closed(cls) -> "Response":
        """Create the reply for QUIT."""
        return cls.ok(message="Connection closed")

    @classmethod
    def invalid_command(cls) -> "Response":
        """Create the reply for an unknown verb."""
        return cls.error(message="Invalid command")
