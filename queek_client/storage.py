"""Token storage adapters for the Queek client SDK."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Key/value store used to persist the session token pair.

    Implementations can keep values anywhere (memory, disk, a platform
    keychain) as long as they provide these three operations.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value for key, or None."""

    def set(self, key: str, value: str) -> None:
        """Store value under key."""

    def remove(self, key: str) -> None:
        """Delete key if present."""


class InMemoryStorageAdapter:
    """Process-local storage. Values are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values
