"""Key-value persistence used for the profile and ledger partitions."""

import threading
from dataclasses import dataclass, field
from typing import Protocol


class KeyValueStore(Protocol):
    """Persistence interface for opaque byte values."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: bytes) -> None:
        """Store a value, replacing any previous one."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def clear(self) -> None:
        """Remove every key."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for local runs and tests."""

    values: dict[str, bytes] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self.values.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self.values[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self.values.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self.values.clear()
