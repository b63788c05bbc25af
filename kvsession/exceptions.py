"""
Error taxonomy for the KV-Session server.

Client-facing errors carry the exact reply text sent back over the wire,
so the session loop can reply with ``str(exc)`` and keep going.
"""


class KVSessionError(Exception):
    """Base class for all server errors."""


class ProtocolError(KVSessionError):
    """A command had the wrong number of tokens."""


class FrameError(ProtocolError):
    """A frame could not be encoded or decoded."""


class ValidationError(KVSessionError):
    """A command argument failed validation."""


class KeyTooLongError(ValidationError):
    def __init__(self, key: str, max_length: int):
        super().__init__(
            f"Error: Key is too long. Maximum length is {max_length} characters"
        )
        self.key = key
        self.max_length = max_length


class NotFoundError(KVSessionError):
    """A lookup found nothing."""


class KeyNotFoundError(NotFoundError):
    def __init__(self, key: str):
        super().__init__(f"Error: The key {key} does not exist")
        self.key = key


class BindError(KVSessionError):
    """The listener could not be set up. Fatal for the whole server."""
