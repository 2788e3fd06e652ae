"""Cache entry model."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload with the metadata needed to validate it.

    Serialized as ``{"timestamp", "version", "data", "ttl"}``. Entries are never
    updated in place; a new value is written as a new entry.
    """

    key: str
    namespace: str
    version: str
    timestamp: int  # Epoch milliseconds at write time
    ttl: int  # Milliseconds
    data: Any

    def age(self, now: int) -> int:
        return now - self.timestamp

    def is_expired(self, now: int, ttl: int | None = None) -> bool:
        return self.age(now) >= (ttl if ttl is not None else self.ttl)

    def serialize(self) -> str:
        return json.dumps(
            {
                "timestamp": self.timestamp,
                "version": self.version,
                "data": self.data,
                "ttl": self.ttl,
            }
        )

    @classmethod
    def deserialize(cls, raw: str, key: str, namespace: str, default_ttl: int) -> "CacheEntry":
        """Parse a stored entry.

        Raises:
            ValueError: If the payload is not a well-formed entry
        """
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError(f"Expected object, got {type(payload).__name__}")
        try:
            timestamp = int(payload["timestamp"])
            version = str(payload["version"])
            data = payload["data"]
            ttl = payload.get("ttl")
            ttl = default_ttl if ttl is None else int(ttl)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed cache entry: {e}") from e
        return cls(
            key=key,
            namespace=namespace,
            version=version,
            timestamp=timestamp,
            ttl=ttl,
            data=data,
        )
