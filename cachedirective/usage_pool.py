"""A reference-counted shared pool and the cleanup of stale entries."""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

STORED_PROVIDERS_KEY = "STORED_PROVIDERS_KEY"
COALESCING_KEY = "COALESCING"
SURROGATE_KEY = "SURROGATE"

_RESERVED_KEYS = frozenset({STORED_PROVIDERS_KEY, COALESCING_KEY, SURROGATE_KEY})

_logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    references: int


class UsagePool:
    """A thread-safe mapping whose entries live while they are referenced."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}
        self._lock = threading.Lock()

    def load_or_store(self, key: Hashable, value: Any) -> tuple[Any, bool]:
        """Return the stored value and True, or store ``value`` and return False.

        Either way the entry gains one reference.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.references += 1
                return entry.value, True
            self._entries[key] = _Entry(value, 1)
            return value, False

    def delete(self, key: Hashable) -> bool:
        """Drop one reference; return True when the entry was removed."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.references -= 1
            if entry.references > 0:
                return False
            del self._entries[key]
        destruct = getattr(entry.value, "destruct", None)
        if callable(destruct):
            destruct()
        return True

    def keys(self) -> list[Hashable]:
        """A snapshot of the keys currently held."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class StorageProviders:
    """The set of storage keys registered by the running configuration."""

    def __init__(self) -> None:
        self._keys: set[Hashable] = set()
        self._lock = threading.Lock()

    def add(self, key: Hashable) -> None:
        """Register a storage key."""
        with self._lock:
            self._keys.add(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys


def cleanup(pool: UsagePool) -> list[Hashable]:
    """Release every pool entry that no storage provider registered.

    The reserved providers, coalescing and surrogate entries are kept.
    Returns the keys that were released.
    """
    _logger.debug("Cleanup...")
    providers, _ = pool.load_or_store(STORED_PROVIDERS_KEY, StorageProviders())
    stale = [
        key
        for key in pool.keys()
        if key not in _RESERVED_KEYS and key not in providers
    ]
    for key in stale:
        _logger.debug("Cleaning %s", key)
        pool.delete(key)
    return stale