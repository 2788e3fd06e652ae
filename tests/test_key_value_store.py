"""Tests for key-value storage backends."""

import json
from urllib.parse import unquote

import httpx
import pytest

from draft_oracle.repositories.key_value_store import (
    DuckDBKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    StorageError,
    StorageFullError,
    UpstashKeyValueStore,
)


@pytest.fixture(params=["memory", "duckdb"])
def kv(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore(max_entries=3)
    return DuckDBKeyValueStore(str(tmp_path / "cache.duckdb"), max_entries=3)


def test_satisfies_protocol(kv):
    assert isinstance(kv, KeyValueStore)


def test_get_set_remove(kv):
    assert kv.get("a") is None
    kv.set("a", "1")
    kv.set("a", "2")
    assert kv.get("a") == "2"
    kv.remove("a")
    kv.remove("a")
    assert kv.get("a") is None


def test_iterate_by_prefix(kv):
    kv.set("cache:x:1", "one")
    kv.set("cache:y:1", "two")
    kv.set("other", "three")
    assert sorted(kv.iterate("cache:")) == [("cache:x:1", "one"), ("cache:y:1", "two")]


def test_remove_while_iterating(kv):
    kv.set("p:1", "a")
    kv.set("p:2", "b")
    for key, _ in kv.iterate("p:"):
        kv.remove(key)
    assert list(kv.iterate("p:")) == []


def test_full(kv):
    for key in ("a", "b", "c"):
        kv.set(key, key)
    kv.set("a", "overwrite is allowed")
    with pytest.raises(StorageFullError):
        kv.set("d", "d")


def test_duckdb_persists_across_instances(tmp_path):
    path = str(tmp_path / "cache.duckdb")
    DuckDBKeyValueStore(path).set("k", "v")
    assert DuckDBKeyValueStore(path).get("k") == "v"


class TestUpstash:
    @pytest.fixture
    def redis(self):
        return {}

    @pytest.fixture
    def store(self, redis):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer token"
            command, *args = [unquote(p) for p in request.url.raw_path.decode().lstrip("/").split("/")]
            if command == "get":
                return httpx.Response(200, json={"result": redis.get(args[0])})
            if command == "set":
                if args[0] == "full":
                    return httpx.Response(400, json={"error": "OOM command not allowed when used memory > 'maxmemory'"})
                redis[args[0]] = request.content.decode()
                return httpx.Response(200, json={"result": "OK"})
            if command == "del":
                redis.pop(args[0], None)
                return httpx.Response(200, json={"result": 1})
            if command == "scan":
                prefix = args[2].rstrip("*")
                return httpx.Response(200, json={"result": ["0", [k for k in redis if k.startswith(prefix)]]})
            return httpx.Response(400, json={"error": f"unknown command {command}"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return UpstashKeyValueStore("https://redis.example", "token", client=client)

    def test_round_trip(self, store, redis):
        payload = json.dumps({"data": "a/b c"})
        store.set("cache:ns:k", payload)
        assert redis["cache:ns:k"] == payload
        assert store.get("cache:ns:k") == payload
        assert list(store.iterate("cache:")) == [("cache:ns:k", payload)]
        store.remove("cache:ns:k")
        assert store.get("cache:ns:k") is None

    def test_out_of_memory_is_full(self, store):
        with pytest.raises(StorageFullError):
            store.set("full", "v")

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("down")

        store = UpstashKeyValueStore(
            "https://redis.example", "token",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        with pytest.raises(StorageError):
            store.get("k")
