"""Key-value persistence medium used by the history store."""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..errors import StorageQuotaExceededError, StorageUnavailableError


@runtime_checkable
class KeyValueStorage(Protocol):
    """A simple string key-value store, in the manner of browser local storage."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...

    async def keys(self) -> List[str]:
        ...


class InMemoryStorage:
    """
    Process-local KeyValueStorage.

    Optionally enforces a quota on the total size of keys plus values, and
    can be switched unavailable to emulate storage that refuses every call.
    """

    def __init__(self, quota_bytes: Optional[int] = None, available: bool = True) -> None:
        """
        Initialize the storage.

        Args:
            quota_bytes: Maximum total characters of keys and values (None = unlimited)
            available: Whether operations succeed at all
        """
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.available = available

    async def get(self, key: str) -> Optional[str]:
        self._check_available(key)
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._check_available(key)
        if self.quota_bytes is not None:
            used = self.usage() - self._size(key, self._data.get(key))
            if used + self._size(key, value) > self.quota_bytes:
                raise StorageQuotaExceededError("Storage quota exceeded", key=key)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._check_available(key)
        self._data.pop(key, None)

    async def keys(self) -> List[str]:
        self._check_available()
        return list(self._data)

    def usage(self) -> int:
        """Total characters of stored keys and values."""
        return sum(self._size(k, v) for k, v in self._data.items())

    def _check_available(self, key: str = "") -> None:
        if not self.available:
            raise StorageUnavailableError("Storage is unavailable", key=key)

    @staticmethod
    def _size(key: str, value: Optional[str]) -> int:
        if value is None:
            return 0
        return len(key) + len(value)
