from __future__ import annotations

import json

from storefront.auth.token_store import FileStorage, MemoryStorage, TokenStore


def test_memory_token_store_set_get_clear() -> None:
    store = TokenStore(MemoryStorage())
    assert store.get() is None
    assert not store.has_token

    store.set("abc")
    assert store.get() == "abc"
    assert store.has_token

    store.clear()
    assert store.get() is None


def test_token_store_loads_existing_token() -> None:
    storage = MemoryStorage({"accessToken": "persisted"})
    assert TokenStore(storage).get() == "persisted"


def test_file_storage_persists_between_instances(tmp_path) -> None:
    path = tmp_path / "state" / "storage.json"

    TokenStore(FileStorage(path)).set("tok-1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"accessToken": "tok-1"}

    restored = TokenStore(FileStorage(path))
    assert restored.get() == "tok-1"

    restored.clear()
    assert TokenStore(FileStorage(path)).get() is None


def test_file_storage_keeps_other_keys(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    store = TokenStore(FileStorage(path), key="token")
    store.set("xyz")
    store.clear()

    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}


def test_file_storage_tolerates_corrupt_file(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    storage = FileStorage(path)
    assert storage.get_item("accessToken") is None
    storage.set_item("accessToken", "fresh")
    assert storage.get_item("accessToken") == "fresh"
