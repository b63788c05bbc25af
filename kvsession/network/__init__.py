"""Network module for KV-Session."""

from .registry import SessionRegistry
from .session import ClientSession
from .tcp_server import KVServer

__all__ = ["ClientSession", "KVServer", "SessionRegistry"]
