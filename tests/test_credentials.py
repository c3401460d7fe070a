"""Tests for the API key store."""

import json

from mermaid_editor.config import API_KEY_STORAGE_KEY
from mermaid_editor.credentials import (
    CredentialStore,
    apply_settings_input,
    mask_secret,
)


class TestCredentialStore:
    def test_empty_by_default(self, store):
        assert store.get() == ""
        assert not store.is_set()

    def test_set_persists(self, store, storage_dir):
        store.set("sk-abc")
        assert store.get() == "sk-abc"
        data = json.loads((storage_dir / "storage.json").read_text())
        assert data[API_KEY_STORAGE_KEY] == "sk-abc"

    def test_loaded_by_new_instance(self, store, storage_dir):
        store.set("sk-abc")
        assert CredentialStore(storage_dir=storage_dir).get() == "sk-abc"

    def test_set_then_clear(self, store):
        store.set("abc")
        store.clear()
        assert store.get() == ""
        assert API_KEY_STORAGE_KEY not in store.stored_keys()

    def test_set_empty_clears(self, store):
        store.set("abc")
        store.set("")
        assert store.get() == ""
        assert store.stored_keys() == []

    def test_other_keys_untouched(self, store, storage_dir):
        storage_dir.mkdir(parents=True)
        (storage_dir / "storage.json").write_text(json.dumps({"theme": "dark"}))
        store.set("abc")
        store.clear()
        assert store.stored_keys() == ["theme"]

    def test_corrupt_storage_reads_empty(self, storage_dir):
        storage_dir.mkdir(parents=True)
        (storage_dir / "storage.json").write_text("{not json")
        assert CredentialStore(storage_dir=storage_dir).get() == ""

    def test_write_failure_keeps_memory_value(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = CredentialStore(storage_dir=blocker / "nested")
        store.set("sk-abc")
        assert store.get() == "sk-abc"

    def test_masked(self, store):
        store.set("sk-12345")
        assert store.masked() == "••••••••"


class TestSettingsInput:
    def test_mask_secret(self):
        assert mask_secret("") == ""
        assert mask_secret("abc") == "•••"

    def test_new_value_saved(self, store):
        assert apply_settings_input(store, "sk-new") == "saved"
        assert store.get() == "sk-new"

    def test_masked_value_unchanged(self, store):
        store.set("sk-old")
        assert apply_settings_input(store, store.masked()) == "unchanged"
        assert store.get() == "sk-old"

    def test_empty_clears(self, store):
        store.set("sk-old")
        assert apply_settings_input(store, "") == "cleared"
        assert store.get() == ""
