"""Key-value storage backends shared by the cache store.

Every backend implements the same small synchronous contract: ``get``,
``set``, ``remove`` and ``iterate``. Values are strings; callers own the
serialization.
"""

import logging
import threading
from pathlib import Path
from typing import Iterator, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import duckdb
import httpx

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The backend could not complete an operation."""


class StorageFullError(StorageError):
    """The backend rejected a write because it has no room left."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]: ...


class InMemoryKeyValueStore:
    """Process-local dict store with an optional capacity limit.

    Args:
        max_entries: Reject writes of new keys once this many keys exist
        max_bytes: Reject writes that would push total value size past this
    """

    def __init__(self, max_entries: Optional[int] = None, max_bytes: Optional[int] = None):
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            is_new = key not in self._data
            if is_new and self.max_entries is not None and len(self._data) >= self.max_entries:
                raise StorageFullError(f"Store is full ({self.max_entries} entries)")
            if self.max_bytes is not None:
                current = sum(len(v) for k, v in self._data.items() if k != key)
                if current + len(value) > self.max_bytes:
                    raise StorageFullError(f"Store is full ({self.max_bytes} bytes)")
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]:
        # Snapshot so callers can remove while iterating
        with self._lock:
            items = [(k, v) for k, v in self._data.items() if k.startswith(prefix)]
        return iter(items)

    def __len__(self) -> int:
        return len(self._data)


class DuckDBKeyValueStore:
    """File-backed store in a single DuckDB table.

    Opens a short-lived connection per operation so several stores (or
    processes taking turns) can share one file. Last writer wins.
    """

    TABLE = "kv_store"

    def __init__(self, database_path: str, max_entries: Optional[int] = None):
        """Initialize the store, creating the database file and table if needed.

        Args:
            database_path: Path to the .duckdb file
            max_entries: Optional cap on stored keys; writes past it raise StorageFullError
        """
        self._db_path = Path(database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.max_entries = max_entries
        self._lock = threading.Lock()
        with duckdb.connect(str(self._db_path)) as conn:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {self.TABLE} (key VARCHAR PRIMARY KEY, value VARCHAR NOT NULL)"
            )
        logger.info(f"DuckDBKeyValueStore: Using {self._db_path}")

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self._db_path))

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock, self._connect() as conn:
                row = conn.execute(f"SELECT value FROM {self.TABLE} WHERE key = ?", [key]).fetchone()
        except duckdb.Error as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock, self._connect() as conn:
                if self.max_entries is not None:
                    exists = conn.execute(
                        f"SELECT 1 FROM {self.TABLE} WHERE key = ?", [key]
                    ).fetchone()
                    (count,) = conn.execute(f"SELECT COUNT(*) FROM {self.TABLE}").fetchone()
                    if not exists and count >= self.max_entries:
                        raise StorageFullError(f"Store is full ({self.max_entries} entries)")
                conn.execute(f"INSERT OR REPLACE INTO {self.TABLE} VALUES (?, ?)", [key, value])
        except duckdb.Error as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self._lock, self._connect() as conn:
                conn.execute(f"DELETE FROM {self.TABLE} WHERE key = ?", [key])
        except duckdb.Error as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]:
        try:
            with self._lock, self._connect() as conn:
                rows = conn.execute(
                    f"SELECT key, value FROM {self.TABLE} WHERE starts_with(key, ?) ORDER BY key",
                    [prefix],
                ).fetchall()
        except duckdb.Error as e:
            raise StorageError(f"Failed to scan {prefix!r}: {e}") from e
        return iter([(k, v) for k, v in rows])


class UpstashKeyValueStore:
    """Remote store over the Upstash Redis REST API.

    Uses a synchronous httpx client; the cache store is synchronous.
    """

    SCAN_COUNT = 100

    def __init__(self, url: str, token: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self.url = url.rstrip("/")
        self.token = token
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _command(self, *parts: str, content: Optional[str] = None) -> object:
        path = "/".join(quote(str(p), safe="") for p in parts)
        try:
            response = self._client.post(
                f"{self.url}/{path}",
                headers={"Authorization": f"Bearer {self.token}"},
                content=content,
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"Upstash request failed: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            error = str(data["error"])
            if "OOM" in error or "max" in error.lower():
                raise StorageFullError(error)
            raise StorageError(error)
        if response.status_code >= 400:
            raise StorageError(f"Upstash returned HTTP {response.status_code}")
        return data.get("result") if isinstance(data, dict) else None

    def get(self, key: str) -> Optional[str]:
        result = self._command("get", key)
        return result if isinstance(result, str) else None

    def set(self, key: str, value: str) -> None:
        self._command("set", key, content=value)

    def remove(self, key: str) -> None:
        self._command("del", key)

    def iterate(self, prefix: str = "") -> Iterator[tuple[str, str]]:
        keys: list[str] = []
        cursor = "0"
        while True:
            result = self._command("scan", cursor, "match", f"{prefix}*", "count", str(self.SCAN_COUNT))
            if not isinstance(result, list) or len(result) != 2:
                raise StorageError(f"Unexpected SCAN result: {result!r}")
            cursor, batch = str(result[0]), result[1]
            keys.extend(batch)
            if cursor == "0":
                break

        items = []
        for key in keys:
            value = self.get(key)
            if value is not None:
                items.append((key, value))
        return iter(items)
