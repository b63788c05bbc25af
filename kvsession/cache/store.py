"""
Key-Value Store Module

This module implements the shared key-value storage used by every client
session. All public operations are atomic with respect to each other.
"""

import threading
from typing import Any, Dict, List, Optional

from ..config.settings import settings
from ..exceptions import KeyTooLongError


class KVStore:
    """
    Thread-safe in-memory key-value store.

    A single instance is shared by all sessions of a server. Every public
    method holds the store lock for its whole duration, so concurrent
    writers can never corrupt the mapping or lose an update.

    Operations:
    - put: Insert or update a key-value pair
    - get: Retrieve a value by key
    - delete: Remove a key, or every key with the wildcard
    - list_keys: Snapshot of the current keys

    Attributes:
        max_key_length: Longest key accepted by put/get
        wildcard: Key that makes delete() clear the whole store
    """

    def __init__(self, max_key_length: int = None, wildcard: str = None):
        """
        Initialize the KV store.

        Args:
            max_key_length: Maximum key length (default from settings)
            wildcard: Wildcard key for delete (default from settings)
        """
        self.max_key_length = (
            max_key_length if max_key_length is not None else settings.MAX_KEY_LENGTH
        )
        self.wildcard = wildcard if wildcard is not None else settings.WILDCARD_KEY

        self._store: Dict[str, str] = {}
        self._lock = threading.Lock()

    def validate_key(self, key: str) -> None:
        """
        Check a key against the length limit.

        Raises:
            KeyTooLongError: If the key is longer than max_key_length
        """
        if len(key) > self.max_key_length:
            raise KeyTooLongError(key, self.max_key_length)

    def put(self, key: str, value: str) -> bool:
        """
        Insert or update a key-value pair.

        Args:
            key: The key to store
            value: The value to associate with the key

        Returns:
            True on success

        Raises:
            KeyTooLongError: If the key is too long; the store is unchanged
        """
        self.validate_key(key)
        with self._lock:
            self._store[key] = value
        return True

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value for a given key.

        Returns:
            The value if found, None otherwise

        Raises:
            KeyTooLongError: If the key is too long
        """
        self.validate_key(key)
        with self._lock:
            return self._store.get(key)

    def delete(self, key: str) -> bool:
        """
        Delete a key-value pair, or every pair when key is the wildcard.

        Args:
            key: The key to delete, or the wildcard

        Returns:
            True if something was removed (always True for the wildcard),
            False if the key didn't exist
        """
        with self._lock:
            if key == self.wildcard:
                self._store.clear()
                return True
            return self._store.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        """Check if a key exists."""
        with self._lock:
            return key in self._store

    def list_keys(self) -> List[str]:
        """
        Get a snapshot of the current keys.

        Order is unspecified but stable within one call.
        """
        with self._lock:
            return list(self._store)

    def size(self) -> int:
        """Get the current number of keys in the store."""
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Remove all keys from the store."""
        with self._lock:
            self._store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Total keys in store
            - max_key_length: Longest key accepted
        """
        return {
            "total_keys": self.size(),
            "max_key_length": self.max_key_length,
        }
