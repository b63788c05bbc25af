"""Cache module for KV-Session."""

from .store import KVStore

__all__ = ["KVStore"]
