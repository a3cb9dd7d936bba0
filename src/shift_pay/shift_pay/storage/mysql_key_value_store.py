from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, execute, query_one
from .repository import KeyValueStore

_UPSERT = """
    INSERT INTO app_kv (kv_key, kv_value)
    VALUES (%s, %s)
    ON DUPLICATE KEY UPDATE kv_value=VALUES(kv_value)
"""


class MySQLKeyValueStore(KeyValueStore):
    """Values are stored as JSON text in ``app_kv``."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[Any]:
        r = query_one(self._conn_factory, "SELECT kv_value FROM app_kv WHERE kv_key=%s", (key,))
        if not r:
            return None
        try:
            return json.loads(r["kv_value"])
        except (TypeError, ValueError) as e:
            raise StorageError(f"Stored value for {key!r} is not valid JSON: {e}") from e

    def set(self, key: str, value: Any) -> None:
        execute(self._conn_factory, _UPSERT, (key, json.dumps(value)))

    def remove(self, key: str) -> None:
        execute(self._conn_factory, "DELETE FROM app_kv WHERE kv_key=%s", (key,))

    def set_many(self, items: Mapping[str, Any]) -> None:
        # Every value is encoded before the first write.
        rows = [(key, json.dumps(value)) for key, value in items.items()]
        with db_cursor(self._conn_factory) as cur:
            for row in rows:
                cur.execute(_UPSERT, row)

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        placeholders = ", ".join(["%s"] * len(keys))
        execute(self._conn_factory, f"DELETE FROM app_kv WHERE kv_key IN ({placeholders})", keys)
