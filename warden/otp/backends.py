"""
Key/value backends for pending verification sessions.

Pending sessions are disposable: losing one only forces the user to restart
setup, so a volatile store is acceptable.
"""
import copy
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from warden.models.versioned_model import default_datetime


class SessionBackend(ABC):
    """Abstract key/value store with per-key time to live."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Returns the value stored under ``key``, None if missing or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int):
        """Stores ``value`` under ``key`` for ``ttl_seconds``."""
        pass

    @abstractmethod
    def delete(self, *keys: str):
        """Removes ``keys``; missing keys are ignored."""
        pass

    def purge_expired(self) -> int:
        """Drops expired entries and returns how many were removed."""
        return 0


class MemorySessionBackend(SessionBackend):
    """Process-local backend. Values are copied in and out."""

    def __init__(self, clock: Callable[[], datetime] = default_datetime):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, datetime]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl_seconds: int):
        with self._lock:
            expires_at = self._clock() + timedelta(seconds=ttl_seconds)
            self._entries[key] = (copy.deepcopy(value), expires_at)

    def delete(self, *keys: str):
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._entries)
