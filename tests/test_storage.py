import json
import os
import stat

from storefront_server.auth import AuthManager
from storefront_server.storage import JsonFileStore, MemoryStore


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "storage.json"))
        assert store.get("cart") is None

    def test_set_persists_with_private_permissions(self, tmp_path):
        path = tmp_path / "storage.json"
        store = JsonFileStore(str(path))
        store.set("token", "abc")

        assert json.loads(path.read_text()) == {"token": "abc"}
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
        assert JsonFileStore(str(path)).get("token") == "abc"

    def test_remove(self, tmp_path):
        path = tmp_path / "storage.json"
        store = JsonFileStore(str(path))
        store.set("token", "abc")
        store.remove("token")
        store.remove("never-set")
        assert JsonFileStore(str(path)).get("token") is None

    def test_corrupted_file_starts_fresh(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        assert JsonFileStore(str(path)).get("cart") is None

    def test_non_string_values_are_kept_as_json(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"cart": [{"label": "Widget"}]}))
        assert json.loads(JsonFileStore(str(path)).get("cart")) == [{"label": "Widget"}]


def test_memory_store_round_trip():
    store = MemoryStore()
    store.set("cart", "[]")
    assert store.get("cart") == "[]"
    store.remove("cart")
    assert store.get("cart") is None


class TestAuthManager:
    def test_reads_token_from_store(self):
        auth = AuthManager(MemoryStore({"token": "stored"}))
        assert auth.get_token() == "stored"
        assert auth.is_authenticated()

    def test_environment_token_overrides_store(self):
        store = MemoryStore({"token": "stored"})
        auth = AuthManager(store, env_token="from-env")
        assert auth.get_token() == "from-env"
        assert store.get("token") == "stored"

    def test_environment_token_is_never_written_to_disk(self, tmp_path):
        path = tmp_path / "storage.json"
        auth = AuthManager(JsonFileStore(str(path)), env_token="from-env")
        assert auth.get_token() == "from-env"
        assert not path.exists()
        assert AuthManager(JsonFileStore(str(path))).get_token() is None

    def test_empty_token_counts_as_missing(self):
        auth = AuthManager(MemoryStore({"token": ""}))
        assert auth.get_token() is None
        assert not auth.is_authenticated()
