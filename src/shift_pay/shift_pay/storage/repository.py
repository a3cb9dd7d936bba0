from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol


class KeyValueStore(Protocol):
    """Raw durable key-value persistence (JSON-compatible values)."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def set_many(self, items: Mapping[str, Any]) -> None:
        """Write every pair or none of them."""
        raise NotImplementedError

    def remove_many(self, keys: Iterable[str]) -> None:
        raise NotImplementedError
